# SPDX-License-Identifier: MIT
"""spoolstore: message-data storage backends for retry pipelines."""

from .context import OperationContext
from .exceptions import (
    BackendClosedError,
    DataNotFoundError,
    DeadlineExceededError,
    InvalidMessageIDError,
    OperationCancelledError,
    SpoolStoreError,
    StorageIOError,
)
from .storage import FilesystemBackend, FilesystemFactory, get_storage

__all__ = [
    "BackendClosedError",
    "DataNotFoundError",
    "DeadlineExceededError",
    "FilesystemBackend",
    "FilesystemFactory",
    "InvalidMessageIDError",
    "OperationCancelledError",
    "OperationContext",
    "SpoolStoreError",
    "StorageIOError",
    "get_storage",
]
