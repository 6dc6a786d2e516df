"""
Kubernetes engine for running pipeline steps in pods.
"""
