from enum import Enum


class PodPhase(str, Enum):
    """Pod lifecycle phases reported by the cluster."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (PodPhase.SUCCEEDED, PodPhase.FAILED)


class WatchEventType(str, Enum):
    """Watch stream event types."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


# Exec status document reasons (error channel of the exec subresource)
EXEC_STATUS_SUCCESS = "Success"
EXEC_REASON_NON_ZERO_EXIT = "NonZeroExitCode"
EXEC_CAUSE_EXIT_CODE = "ExitCode"

# HTTP status returned in a watch ERROR event when the resource version is too old
WATCH_GONE_STATUS = 410
