"""
Kubernetes engine for pipeline step execution.

Runs each pipeline in one pod with a container per step:
- setup() creates the pull secret, environment secret and pod
- run() waits for the pod to be Running, then execs the step script
- destroy() deletes everything, collecting failures instead of stopping
"""

import math
from functools import partial
from typing import Callable, List, Optional, TextIO, Tuple

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.config import settings
from kube_engine.core.constants import WATCH_GONE_STATUS, PodPhase, WatchEventType
from kube_engine.core.exceptions import (
    ExitCodeError,
    ObjectNotFoundError,
    PodTerminatedError,
    TeardownError,
    WatchError,
)
from kube_engine.core.telemetry import get_logger, set_span_attributes, trace_span
from kube_engine.execution.engines.base import Engine
from kube_engine.execution.manifests import to_docker_config_secret, to_pod, to_secret
from kube_engine.execution.output import LineWriter
from kube_engine.execution.platform import PlatformInterface, PodList, WatchEvent
from kube_engine.execution.platform.factory import get_platform
from kube_engine.execution.spec import Spec, State, Step

logger = get_logger(__name__)

Condition = Callable[[WatchEvent], bool]


class KubernetesEngine(Engine):
    """Engine for Kubernetes-based step execution."""

    def __init__(self, platform: Optional[PlatformInterface] = None):
        self.platform = platform or get_platform()

    @trace_span
    def setup(self, spec: Spec, token: Optional[CancellationToken] = None) -> None:
        """Create the pull secret (if any), environment secret and pod, in order."""
        namespace = spec.namespace
        set_span_attributes(namespace=namespace, pod=spec.name)

        if spec.pull_secret is not None:
            self.platform.create_secret(namespace, to_docker_config_secret(spec))

        self.platform.create_secret(namespace, to_secret(spec))
        self.platform.create_pod(namespace, to_pod(spec))

        logger.info(f"Set up pod {spec.name} in namespace {namespace}")

    @trace_span
    def destroy(self, spec: Spec, token: Optional[CancellationToken] = None) -> None:
        """
        Delete the step's resources.

        Every deletion is attempted even if an earlier one fails, and
        cancellation is not honored here. Objects that are already gone count
        as deleted.
        """
        namespace = spec.namespace
        set_span_attributes(namespace=namespace, pod=spec.name)

        platform = self.platform
        name = spec.name
        deletions: List[Tuple[str, Callable[[], None]]] = []
        if spec.pull_secret is not None:
            pull_name = spec.pull_secret.name
            deletions.append(
                (
                    f"secret {pull_name}",
                    partial(platform.delete_secret, namespace, pull_name),
                )
            )
        deletions += [
            (f"secret {name}", partial(platform.delete_secret, namespace, name)),
            (
                f"config map {name}",
                partial(platform.delete_config_map, namespace, name),
            ),
            (
                f"pod {name}",
                partial(platform.delete_pod, namespace, name, grace_period_seconds=0),
            ),
        ]

        errors: List[Exception] = []
        for description, delete in deletions:
            try:
                delete()
            except ObjectNotFoundError:
                logger.info(f"{description} already deleted or not found")
            except Exception as e:
                logger.warning(f"Failed to delete {description}: {e}")
                errors.append(e)

        if errors:
            raise TeardownError(
                f"failed to destroy pod {spec.name} in namespace {namespace}", errors
            )

        logger.info(f"Destroyed pod {spec.name} in namespace {namespace}")

    @trace_span
    def run(
        self,
        spec: Spec,
        step: Step,
        output: TextIO,
        error_output: Optional[TextIO] = None,
        token: Optional[CancellationToken] = None,
    ) -> State:
        set_span_attributes(namespace=spec.namespace, pod=spec.name, step=step.id)
        # The container must be declared in the pod
        spec.get_step(step.id)

        self.wait_for_ready(spec, step, token)
        return self.start(spec, step, output, error_output, token)

    def wait_for(
        self,
        spec: Spec,
        condition: Condition,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Block until condition accepts a pod event, or the token fires.

        Lists the pods labelled with the spec name first; if the pod is not
        there the wait is treated as already satisfied. Listed pods are fed to
        the condition as ADDED events, then a watch resumes from the list's
        resource version.

        Raises:
            CancellationError: the token was cancelled or its deadline expired
            WatchError: the watch stream reported an error
        """
        token = token or CancellationToken()
        namespace, name = spec.namespace, spec.name
        label_selector = f"{settings.name_label}={name}"

        snapshot = self.platform.list_pods(namespace, label_selector)
        if snapshot.get(name) is None:
            logger.warning(f"Pod {name} not found in {namespace}, not waiting")
            return

        if self._replay(snapshot, condition):
            return
        resource_version = snapshot.resource_version

        while True:
            token.raise_if_cancelled()
            events = self.platform.watch_pods(
                namespace,
                label_selector,
                resource_version,
                self._watch_window(token),
            )
            for event in events:
                token.raise_if_cancelled()

                if event.type == WatchEventType.ERROR:
                    if event.code != WATCH_GONE_STATUS:
                        raise WatchError(
                            f"watch on pod {name} failed: {event.message}",
                            code=event.code,
                        )
                    logger.info(f"Watch on pod {name} expired, relisting")
                    snapshot = self.platform.list_pods(namespace, label_selector)
                    if self._replay(snapshot, condition):
                        return
                    resource_version = snapshot.resource_version
                    break

                if event.pod is not None and event.pod.resource_version:
                    resource_version = event.pod.resource_version
                if condition(event):
                    return

    def wait_for_ready(
        self,
        spec: Spec,
        step: Step,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """Block until the pod reaches the Running phase."""

        def is_running(event: WatchEvent) -> bool:
            if event.type not in (WatchEventType.ADDED, WatchEventType.MODIFIED):
                return False
            pod = event.pod
            if pod is None or pod.name != spec.name:
                return False
            if pod.phase == PodPhase.RUNNING:
                return True
            if settings.readiness_fail_on_terminal_phase and pod.phase.is_terminal:
                raise PodTerminatedError(pod.name, pod.phase.value)
            return False

        logger.info(f"Waiting for pod {spec.name} to run step {step.id}")
        self.wait_for(spec, is_running, token)

    def start(
        self,
        spec: Spec,
        step: Step,
        output: TextIO,
        error_output: Optional[TextIO] = None,
        token: Optional[CancellationToken] = None,
    ) -> State:
        """Exec the step script in its container and report how it exited."""
        stdout = LineWriter(output)
        stderr = LineWriter(error_output if error_output is not None else output)

        exit_code = 0
        try:
            self.platform.exec_in_pod(
                spec.namespace,
                spec.name,
                step.id,
                settings.exec_command,
                stdout,
                stderr,
                token,
            )
        except ExitCodeError as e:
            exit_code = e.exit_status
        finally:
            stdout.flush()
            stderr.flush()

        logger.info(
            f"Step {step.id} in pod {spec.name} exited with code {exit_code} "
            f"after {stdout.lines + stderr.lines} lines of output"
        )
        return State(exited=True, exit_code=exit_code, oom_killed=False)

    @staticmethod
    def _replay(snapshot: PodList, condition: Condition) -> bool:
        return any(
            condition(WatchEvent(type=WatchEventType.ADDED, pod=pod))
            for pod in snapshot.items
        )

    @staticmethod
    def _watch_window(token: CancellationToken) -> int:
        window = settings.watch_window_seconds
        remaining = token.remaining()
        if remaining is not None:
            window = max(1, min(window, math.ceil(remaining)))
        return window
