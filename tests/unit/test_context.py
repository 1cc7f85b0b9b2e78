# SPDX-License-Identifier: MIT
"""Unit tests for OperationContext."""

import threading

import pytest

from spoolstore.context import OperationContext
from spoolstore.exceptions import DeadlineExceededError, OperationCancelledError


@pytest.mark.unit
class TestOperationContext:
    """Cancellation, deadlines and parent propagation."""

    def test_background_is_never_cancelled(self):
        ctx = OperationContext.background()

        assert ctx.cancelled is False
        assert ctx.error() is None
        assert ctx.remaining() is None
        ctx.raise_if_cancelled()

    def test_cancel_reports_reason(self):
        ctx = OperationContext()
        ctx.cancel("shutting down")

        assert ctx.cancelled is True
        with pytest.raises(OperationCancelledError, match="shutting down"):
            ctx.raise_if_cancelled()

    def test_first_cancel_reason_wins(self):
        ctx = OperationContext()
        ctx.cancel("first")
        ctx.cancel("second")

        assert str(ctx.error()) == "first"

    def test_cancel_without_reason(self):
        ctx = OperationContext()
        ctx.cancel()

        assert str(ctx.error()) == "context cancelled"

    def test_expired_timeout_is_deadline_exceeded(self):
        ctx = OperationContext.with_timeout(0)

        err = ctx.error()
        assert isinstance(err, DeadlineExceededError)
        assert isinstance(err, OperationCancelledError)
        assert ctx.remaining() == 0.0

    def test_future_timeout_is_live(self):
        ctx = OperationContext.with_timeout(60)

        assert ctx.cancelled is False
        assert 0 < ctx.remaining() <= 60

    def test_parent_cancellation_propagates(self):
        parent = OperationContext()
        child = OperationContext.with_timeout(60, parent=parent)

        assert child.cancelled is False
        parent.cancel("parent stopped")

        with pytest.raises(OperationCancelledError, match="parent stopped"):
            child.raise_if_cancelled()

    def test_child_cancellation_does_not_affect_parent(self):
        parent = OperationContext()
        child = OperationContext(parent=parent)

        child.cancel()

        assert parent.cancelled is False

    def test_cancel_from_another_thread(self):
        ctx = OperationContext()
        thread = threading.Thread(target=ctx.cancel, args=("from thread",))
        thread.start()
        thread.join()

        assert ctx.cancelled is True
        assert str(ctx.error()) == "from thread"
