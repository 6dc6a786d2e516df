from typing import Optional, Sequence


class AppException(Exception):
    """Base application exception."""

    pass


class ValidationError(AppException):
    """Validation error exception."""

    pass


class PlatformError(AppException):
    """A call to the orchestration platform was rejected or failed in transport."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ObjectNotFoundError(PlatformError):
    """The object does not exist on the platform."""

    pass


class ObjectExistsError(PlatformError):
    """The object already exists on the platform."""

    pass


class WatchError(AppException):
    """The watch stream reported an error event."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class PodTerminatedError(AppException):
    """The pod reached a terminal phase while waiting for it to run."""

    def __init__(self, pod_name: str, phase: str):
        super().__init__(f"pod {pod_name} reached terminal phase {phase}")
        self.pod_name = pod_name
        self.phase = phase


class ExecError(AppException):
    """Attaching to or streaming from a container failed."""

    pass


class ExitCodeError(ExecError):
    """The remote process exited with a non-zero status."""

    def __init__(self, exit_status: int, message: Optional[str] = None):
        super().__init__(message or f"command terminated with exit code {exit_status}")
        self.exit_status = exit_status


class CancellationError(AppException):
    """The operation was cancelled by the caller."""

    pass


class DeadlineExceededError(CancellationError):
    """The caller's deadline expired."""

    pass


class TeardownError(ExceptionGroup):
    """One or more deletions failed while destroying a step's resources.

    Each underlying failure is available in ``exceptions``.
    """

    def __new__(cls, message: str, errors: Sequence[Exception]):
        return super().__new__(cls, message, list(errors))

    def derive(self, excs):
        return TeardownError(self.message, excs)

    def __str__(self) -> str:
        lines = [f"{len(self.exceptions)} error(s) occurred:"]
        lines.extend(f"\t* {error}" for error in self.exceptions)
        return "\n".join(lines)
