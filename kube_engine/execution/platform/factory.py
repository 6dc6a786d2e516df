from typing import Optional

from kubernetes.config import ConfigException

from kube_engine.core.config import settings
from kube_engine.core.telemetry import get_logger

from .interface import PlatformInterface
from .kubernetes import KubernetesPlatform

logger = get_logger(__name__)

# Global instance
_platform: Optional[PlatformInterface] = None


def get_platform() -> PlatformInterface:
    """
    Get the configured platform.

    Uses in-cluster config when running inside a pod, and falls back to the
    kubeconfig file otherwise. ``settings.in_cluster`` forces one mode.

    Returns:
        PlatformInterface: The platform instance
    """
    global _platform

    if _platform is None:
        if settings.in_cluster is True:
            _platform = KubernetesPlatform.in_cluster()
            logger.info("Initialized in-cluster Kubernetes platform")
        elif settings.in_cluster is False or settings.kubeconfig_path:
            _platform = KubernetesPlatform.from_kubeconfig(settings.kubeconfig_path)
            logger.info("Initialized Kubernetes platform from kubeconfig")
        else:
            try:
                _platform = KubernetesPlatform.in_cluster()
                logger.info("Initialized in-cluster Kubernetes platform")
            except ConfigException:
                _platform = KubernetesPlatform.from_kubeconfig()
                logger.info("Not in cluster, initialized platform from kubeconfig")

    return _platform


def reset_platform() -> None:
    """Drop the cached platform instance."""
    global _platform
    _platform = None
