"""
Step execution: specs, descriptors, platform access and engines.
"""
