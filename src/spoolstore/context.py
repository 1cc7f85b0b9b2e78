# SPDX-License-Identifier: MIT
"""Caller-supplied cancellation signal for storage operations.

Storage backends check the context once, before touching disk. The context
is safe to cancel from any thread or task.

Usage::

    from spoolstore.context import OperationContext

    ctx = OperationContext.with_timeout(5.0)
    size = await backend.store_data(ctx, "msg-123", payload)

    # elsewhere, e.g. on shutdown
    ctx.cancel("shutting down")
"""

from __future__ import annotations

import threading
import time

from .exceptions import DeadlineExceededError, OperationCancelledError


class OperationContext:
    """Cancellation flag with an optional deadline and parent.

    A context counts as cancelled when :meth:`cancel` was called on it, when
    its deadline (a :func:`time.monotonic` timestamp) has passed, or when its
    parent is cancelled.
    """

    def __init__(self, parent: OperationContext | None = None, deadline: float | None = None) -> None:
        self._parent = parent
        self._deadline = deadline
        self._event = threading.Event()
        self._reason: str | None = None
        self._lock = threading.Lock()

    @classmethod
    def background(cls) -> OperationContext:
        """Return a context that is never cancelled unless asked to."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float, parent: OperationContext | None = None) -> OperationContext:
        """Return a context whose deadline is *seconds* from now."""
        return cls(parent=parent, deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: str | None = None) -> None:
        """Cancel the context. Repeated calls keep the first reason."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self.error() is not None

    def error(self) -> OperationCancelledError | None:
        """Return the cancellation error, or ``None`` while the context is live."""
        if self._event.is_set():
            return OperationCancelledError(self._reason or "context cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError("context deadline exceeded")
        if self._parent is not None:
            return self._parent.error()
        return None

    def raise_if_cancelled(self) -> None:
        err = self.error()
        if err is not None:
            raise err
