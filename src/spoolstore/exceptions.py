# SPDX-License-Identifier: MIT
"""Exception hierarchy for spoolstore.

Every error raised by a storage backend derives from :class:`SpoolStoreError`
so callers can catch the whole family, while the subclasses let the retry
pipeline branch on "missing" vs "broken" vs "try again later".
"""

from __future__ import annotations

import pathlib


class SpoolStoreError(Exception):
    """Base class for all spoolstore errors."""


class InvalidMessageIDError(SpoolStoreError, ValueError):
    """Message identifier is empty, too long, or could escape the base directory."""


class BackendClosedError(SpoolStoreError):
    """Operation attempted on a backend after it was closed."""

    def __init__(self, message: str = "backend is closed") -> None:
        super().__init__(message)


class OperationCancelledError(SpoolStoreError):
    """The caller's context was cancelled before the operation started."""


class DeadlineExceededError(OperationCancelledError):
    """The caller's context deadline passed before the operation started."""


class DataNotFoundError(SpoolStoreError, FileNotFoundError):
    """No blob is stored for the requested message identifier."""

    def __init__(self, message_id: str) -> None:
        super().__init__(f"message data not found: {message_id}")
        self.message_id = message_id


class StorageIOError(SpoolStoreError):
    """Wrapped OS-level failure.

    Attributes:
        operation: What the backend was doing, e.g. ``"create data file"``.
        path: The filesystem path involved.

    The underlying :class:`OSError` is available as ``__cause__``.
    """

    def __init__(self, operation: str, path: str | pathlib.Path, cause: BaseException) -> None:
        super().__init__(f"{operation} failed for {path}: {cause}")
        self.operation = operation
        self.path = pathlib.Path(path)
