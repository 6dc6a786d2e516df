import io

import pytest

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.constants import PodPhase
from kube_engine.core.exceptions import (
    DeadlineExceededError,
    ExecError,
    ExitCodeError,
    PlatformError,
    TeardownError,
)
from kube_engine.execution.lifecycle import execute_step


class TestExecuteStep:
    """Tests for the setup -> run -> destroy sequence."""

    def test_full_lifecycle(self, engine, fake_platform, spec):
        """Test a successful step leaves no resources behind."""
        fake_platform.phases["build-abc123"] = PodPhase.RUNNING
        fake_platform.exec_output = [("stdout", "ok\n")]
        output = io.StringIO()

        state = execute_step(engine, spec, "step0", output)

        assert state.exit_code == 0
        assert output.getvalue() == "ok\n"
        assert fake_platform.objects == {}

    def test_non_zero_exit_still_destroys(self, engine, fake_platform, spec):
        fake_platform.phases["build-abc123"] = PodPhase.RUNNING
        fake_platform.exec_error = ExitCodeError(2)

        state = execute_step(engine, spec, "step0", io.StringIO())

        assert state.exit_code == 2
        assert fake_platform.objects == {}

    def test_exec_failure_destroys_and_raises(self, engine, fake_platform, spec):
        fake_platform.phases["build-abc123"] = PodPhase.RUNNING
        fake_platform.exec_error = ExecError("stream reset")

        with pytest.raises(ExecError):
            execute_step(engine, spec, "step0", io.StringIO())

        assert fake_platform.objects == {}

    def test_setup_failure_destroys_and_raises(self, engine, fake_platform, spec):
        fake_platform.fail("create_pod", "build-abc123", PlatformError("quota"))

        with pytest.raises(PlatformError):
            execute_step(engine, spec, "step0", io.StringIO())

        assert fake_platform.objects == {}

    def test_teardown_failure_after_success_raises(self, engine, fake_platform, spec):
        fake_platform.phases["build-abc123"] = PodPhase.RUNNING
        fake_platform.fail("delete_pod", "build-abc123", PlatformError("rejected"))

        with pytest.raises(TeardownError):
            execute_step(engine, spec, "step0", io.StringIO())

    def test_original_error_wins_over_teardown_failure(
        self, engine, fake_platform, spec
    ):
        """Test the run error propagates when teardown also fails."""
        fake_platform.phases["build-abc123"] = PodPhase.RUNNING
        fake_platform.exec_error = ExecError("stream reset")
        fake_platform.fail("delete_pod", "build-abc123", PlatformError("rejected"))

        with pytest.raises(ExecError):
            execute_step(engine, spec, "step0", io.StringIO())

    def test_cancelled_wait_destroys(self, engine, fake_platform, spec):
        with pytest.raises(DeadlineExceededError):
            execute_step(
                engine,
                spec,
                "step0",
                io.StringIO(),
                token=CancellationToken(timeout=0.1),
            )

        assert fake_platform.objects == {}
