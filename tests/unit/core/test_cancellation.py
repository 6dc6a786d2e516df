import time

import pytest

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.exceptions import CancellationError, DeadlineExceededError


class TestCancellationToken:
    """Tests for the step lifecycle cancellation token."""

    def test_not_cancelled_by_default(self):
        token = CancellationToken()

        assert token.remaining() is None
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()

        token.cancel()

        with pytest.raises(CancellationError) as exc_info:
            token.raise_if_cancelled()
        assert not isinstance(exc_info.value, DeadlineExceededError)

    def test_deadline(self):
        token = CancellationToken(timeout=0.05)
        time.sleep(0.1)

        assert token.expired is True
        assert token.remaining() == 0.0
        with pytest.raises(DeadlineExceededError):
            token.raise_if_cancelled()

