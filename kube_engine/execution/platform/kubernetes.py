"""
Kubernetes platform for step execution.

Talks to the cluster using the Kubernetes Python client:
- CoreV1Api for secrets, config maps and pods
- kubernetes.watch for pod change notifications
- kubernetes.stream for the exec subresource
"""

from typing import Any, Dict, Iterator, List, Optional

import yaml
from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream
from kubernetes.stream.ws_client import ERROR_CHANNEL
from websocket import WebSocketException

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.config import settings
from kube_engine.core.constants import (
    EXEC_CAUSE_EXIT_CODE,
    EXEC_REASON_NON_ZERO_EXIT,
    EXEC_STATUS_SUCCESS,
    PodPhase,
    WatchEventType,
)
from kube_engine.core.exceptions import (
    ExecError,
    ExitCodeError,
    ObjectExistsError,
    ObjectNotFoundError,
    PlatformError,
)
from kube_engine.core.telemetry import get_logger
from kube_engine.execution.output import LineWriter
from kube_engine.execution.platform.interface import (
    PlatformInterface,
    PodList,
    PodSnapshot,
    WatchEvent,
)

logger = get_logger(__name__)


def translate_api_exception(e: ApiException, action: str) -> PlatformError:
    """Map a client ApiException onto the engine's error types."""
    message = f"Failed to {action}: {e.status} {e.reason}"
    if e.status == 404:
        return ObjectNotFoundError(message, status=e.status)
    if e.status == 409:
        return ObjectExistsError(message, status=e.status)
    return PlatformError(message, status=e.status)


def raise_for_exec_status(raw: Optional[str]) -> None:
    """
    Interpret the status document sent on the exec error channel.

    Returns on success, raises ExitCodeError for a non-zero exit and
    ExecError for anything else.
    """
    if not raw:
        raise ExecError("exec stream closed without reporting a status")

    status = yaml.safe_load(raw)
    if not isinstance(status, dict):
        raise ExecError(f"unexpected exec status: {raw!r}")

    if status.get("status") == EXEC_STATUS_SUCCESS:
        return

    if status.get("reason") == EXEC_REASON_NON_ZERO_EXIT:
        causes = (status.get("details") or {}).get("causes") or []
        for cause in causes:
            if cause.get("reason") == EXEC_CAUSE_EXIT_CODE:
                raise ExitCodeError(int(cause["message"]), status.get("message"))

    raise ExecError(status.get("message") or f"exec failed: {raw}")


def to_pod_snapshot(pod: Any) -> PodSnapshot:
    phase = getattr(pod.status, "phase", None) if pod.status else None
    try:
        pod_phase = PodPhase(phase) if phase else PodPhase.PENDING
    except ValueError:
        pod_phase = PodPhase.UNKNOWN
    return PodSnapshot(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        phase=pod_phase,
        resource_version=pod.metadata.resource_version,
    )


class KubernetesPlatform(PlatformInterface):
    """PlatformInterface backed by a Kubernetes cluster."""

    def __init__(self, api_client: Optional[client.ApiClient] = None):
        self.core_v1 = client.CoreV1Api(api_client)

    @classmethod
    def in_cluster(cls) -> "KubernetesPlatform":
        """Platform using the service account mounted into the pod."""
        configuration = client.Configuration()
        config.load_incluster_config(client_configuration=configuration)
        return cls(client.ApiClient(configuration))

    @classmethod
    def from_kubeconfig(cls, path: Optional[str] = None) -> "KubernetesPlatform":
        """Platform using a kubeconfig file (default ~/.kube/config)."""
        return cls(config.new_client_from_config(config_file=path))

    def create_secret(self, namespace: str, body: Dict[str, Any]) -> None:
        name = body["metadata"]["name"]
        try:
            self.core_v1.create_namespaced_secret(namespace=namespace, body=body)
        except ApiException as e:
            raise translate_api_exception(e, f"create secret {name}") from e
        logger.info(f"Created secret {name} in namespace {namespace}")

    def create_pod(self, namespace: str, body: Dict[str, Any]) -> None:
        name = body["metadata"]["name"]
        try:
            self.core_v1.create_namespaced_pod(namespace=namespace, body=body)
        except ApiException as e:
            raise translate_api_exception(e, f"create pod {name}") from e
        logger.info(f"Created pod {name} in namespace {namespace}")

    def delete_secret(self, namespace: str, name: str) -> None:
        try:
            self.core_v1.delete_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            raise translate_api_exception(e, f"delete secret {name}") from e

    def delete_config_map(self, namespace: str, name: str) -> None:
        try:
            self.core_v1.delete_namespaced_config_map(name=name, namespace=namespace)
        except ApiException as e:
            raise translate_api_exception(e, f"delete config map {name}") from e

    def delete_pod(
        self, namespace: str, name: str, grace_period_seconds: Optional[int] = None
    ) -> None:
        kwargs = {}
        if grace_period_seconds is not None:
            kwargs["grace_period_seconds"] = grace_period_seconds
        try:
            self.core_v1.delete_namespaced_pod(name=name, namespace=namespace, **kwargs)
        except ApiException as e:
            raise translate_api_exception(e, f"delete pod {name}") from e

    def list_pods(self, namespace: str, label_selector: str) -> PodList:
        try:
            pods = self.core_v1.list_namespaced_pod(
                namespace=namespace, label_selector=label_selector
            )
        except ApiException as e:
            raise translate_api_exception(e, f"list pods ({label_selector})") from e

        return PodList(
            items=[to_pod_snapshot(pod) for pod in pods.items],
            resource_version=pods.metadata.resource_version,
        )

    def watch_pods(
        self,
        namespace: str,
        label_selector: str,
        resource_version: Optional[str],
        timeout_seconds: int,
    ) -> Iterator[WatchEvent]:
        w = watch.Watch()
        kwargs = {
            "namespace": namespace,
            "label_selector": label_selector,
            "timeout_seconds": timeout_seconds,
            # Client-side guard in case the server never closes the window
            "_request_timeout": timeout_seconds + 5,
        }
        if resource_version:
            kwargs["resource_version"] = resource_version

        try:
            for event in w.stream(self.core_v1.list_namespaced_pod, **kwargs):
                try:
                    event_type = WatchEventType(event["type"])
                except ValueError:
                    logger.debug(f"Ignoring unknown watch event type {event['type']}")
                    continue
                if event_type == WatchEventType.BOOKMARK:
                    continue
                yield WatchEvent(type=event_type, pod=to_pod_snapshot(event["object"]))
        except ApiException as e:
            # The watch helper raises ERROR events as ApiException
            yield WatchEvent(type=WatchEventType.ERROR, code=e.status, message=e.reason)
        finally:
            w.stop()

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
        target = f"{namespace}/{pod_name}[{container}]"
        try:
            resp = stream(
                self.core_v1.connect_get_namespaced_pod_exec,
                pod_name,
                namespace,
                container=container,
                command=command,
                stderr=True,
                stdin=False,
                stdout=True,
                tty=False,
                _preload_content=False,
            )
        except ApiException as e:
            raise ExecError(f"Failed to attach to {target}: {e.reason}") from e

        try:
            while resp.is_open():
                if token is not None:
                    token.raise_if_cancelled()
                resp.update(timeout=settings.exec_poll_seconds)
                self._forward(resp, stdout, stderr)
            # Frames buffered before the socket closed
            self._forward(resp, stdout, stderr)
            status = resp.read_channel(ERROR_CHANNEL)
        except (WebSocketException, OSError) as e:
            raise ExecError(f"Exec stream to {target} failed: {e}") from e
        finally:
            resp.close()

        raise_for_exec_status(status)

    @staticmethod
    def _forward(resp: Any, stdout: LineWriter, stderr: LineWriter) -> None:
        if resp.peek_stdout():
            stdout.write(resp.read_stdout())
        if resp.peek_stderr():
            stderr.write(resp.read_stderr())
