"""
Full lifecycle of one step: setup, run, destroy.
"""

from typing import Optional, TextIO

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.exceptions import TeardownError
from kube_engine.core.telemetry import get_logger, trace_span
from kube_engine.execution.engines.base import Engine
from kube_engine.execution.spec import Spec, State

logger = get_logger(__name__)


@trace_span
def execute_step(
    engine: Engine,
    spec: Spec,
    step_id: str,
    output: TextIO,
    error_output: Optional[TextIO] = None,
    token: Optional[CancellationToken] = None,
) -> State:
    """
    Provision the pod, run one step in it and tear everything down.

    destroy() runs however setup or run ended. A teardown failure is logged
    when an earlier error is already propagating, and raised otherwise.
    """
    step = spec.get_step(step_id)
    token = token or CancellationToken()

    try:
        engine.setup(spec, token)
        state = engine.run(spec, step, output, error_output, token)
    except BaseException:
        try:
            engine.destroy(spec, token)
        except TeardownError as e:
            logger.error(f"Teardown after failed step {step_id} also failed: {e}")
        raise

    engine.destroy(spec, token)
    return state
