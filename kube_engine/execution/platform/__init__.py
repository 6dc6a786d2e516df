"""
Orchestration platform capabilities used by the step engine.
"""

from kube_engine.execution.platform.interface import (
    PlatformInterface,
    PodList,
    PodSnapshot,
    WatchEvent,
)
from kube_engine.execution.platform.kubernetes import KubernetesPlatform
from kube_engine.execution.platform.factory import get_platform, reset_platform

__all__ = [
    "PlatformInterface",
    "PodList",
    "PodSnapshot",
    "WatchEvent",
    "KubernetesPlatform",
    "get_platform",
    "reset_platform",
]
