"""
Base engine interface.

Defines the lifecycle a pipeline runner drives for each step.
"""

from abc import ABC, abstractmethod
from typing import Optional, TextIO

from kube_engine.core.cancellation import CancellationToken
from kube_engine.execution.spec import Spec, State, Step


class Engine(ABC):
    """Abstract base class for step execution engines."""

    @abstractmethod
    def setup(self, spec: Spec, token: Optional[CancellationToken] = None) -> None:
        """
        Provision the resources needed to run the spec's steps.

        Args:
            spec: Pod descriptor and secret material

        Raises:
            PlatformError: the first creation that failed; nothing is rolled back
        """
        pass

    @abstractmethod
    def run(
        self,
        spec: Spec,
        step: Step,
        output: TextIO,
        error_output: Optional[TextIO] = None,
        token: Optional[CancellationToken] = None,
    ) -> State:
        """
        Wait for the pod to run, then execute the step's script in it.

        Args:
            spec: Spec passed to setup()
            step: Step whose container runs the script
            output: Sink for stdout lines (and stderr unless error_output is set)
            error_output: Optional separate sink for stderr lines
            token: Cancellation for the readiness wait and the exec stream

        Returns:
            State of the finished process; a non-zero exit is not an error
        """
        pass

    @abstractmethod
    def destroy(self, spec: Spec, token: Optional[CancellationToken] = None) -> None:
        """
        Delete every resource setup() may have created.

        Raises:
            TeardownError: one or more deletions failed, after all were attempted
        """
        pass
