"""
Step execution engines.
"""

from kube_engine.execution.engines.base import Engine
from kube_engine.execution.engines.kubernetes import KubernetesEngine

__all__ = ["Engine", "KubernetesEngine"]
