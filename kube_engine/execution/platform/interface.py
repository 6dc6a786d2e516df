from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.constants import PodPhase, WatchEventType
from kube_engine.execution.output import LineWriter


class PodSnapshot(BaseModel):
    """Observed state of a pod at one resource version."""

    name: str
    namespace: str
    phase: PodPhase = PodPhase.PENDING
    resource_version: Optional[str] = None


class PodList(BaseModel):
    """Result of a filtered list call."""

    items: List[PodSnapshot] = Field(default_factory=list)
    resource_version: Optional[str] = None

    def get(self, name: str) -> Optional[PodSnapshot]:
        for pod in self.items:
            if pod.name == name:
                return pod
        return None


class WatchEvent(BaseModel):
    """One change notification from a watch stream."""

    type: WatchEventType
    pod: Optional[PodSnapshot] = None

    # Populated for ERROR events
    code: Optional[int] = None
    message: Optional[str] = None


class PlatformInterface(ABC):
    """Capabilities the engine consumes from the orchestration platform."""

    @abstractmethod
    def create_secret(self, namespace: str, body: Dict[str, Any]) -> None:
        """
        Create a secret.

        Raises:
            ObjectExistsError: a secret with the same name exists
            PlatformError: the request was rejected or failed
        """
        pass

    @abstractmethod
    def create_pod(self, namespace: str, body: Dict[str, Any]) -> None:
        """Create a pod. Raises like create_secret."""
        pass

    @abstractmethod
    def delete_secret(self, namespace: str, name: str) -> None:
        """
        Delete a secret.

        Raises:
            ObjectNotFoundError: the secret does not exist
            PlatformError: the request was rejected or failed
        """
        pass

    @abstractmethod
    def delete_config_map(self, namespace: str, name: str) -> None:
        """Delete a config map. Raises like delete_secret."""
        pass

    @abstractmethod
    def delete_pod(
        self, namespace: str, name: str, grace_period_seconds: Optional[int] = None
    ) -> None:
        """
        Delete a pod.

        Args:
            grace_period_seconds: 0 for immediate termination, None for the
                platform default
        """
        pass

    @abstractmethod
    def list_pods(self, namespace: str, label_selector: str) -> PodList:
        """List pods matching a label selector."""
        pass

    @abstractmethod
    def watch_pods(
        self,
        namespace: str,
        label_selector: str,
        resource_version: Optional[str],
        timeout_seconds: int,
    ) -> Iterator[WatchEvent]:
        """
        Watch pods matching a label selector, starting after resource_version.

        The iterator ends once timeout_seconds elapse; callers resume from the
        last resource version they observed.
        """
        pass

    @abstractmethod
    def exec_in_pod(
        self,
        namespace: str,
        pod_name: str,
        container: str,
        command: List[str],
        stdout: LineWriter,
        stderr: LineWriter,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Run command in a container, forwarding output until the process exits.

        Raises:
            ExitCodeError: the process exited with a non-zero status
            ExecError: attach or stream failure
            CancellationError: the token fired while streaming
        """
        pass
