"""
Cancellation token scoped to one step lifecycle.

Long-running waits (the readiness watch and the exec stream) poll the token
between remote reads so a caller can stop them from another thread or by
deadline.
"""

import threading
import time
from typing import Optional

from kube_engine.core.exceptions import CancellationError, DeadlineExceededError


class CancellationToken:
    """Cancellation signal with an optional deadline."""

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError("operation cancelled")
        if self.expired:
            raise DeadlineExceededError("deadline exceeded")
