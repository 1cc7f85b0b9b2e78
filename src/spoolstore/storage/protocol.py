# SPDX-License-Identifier: MIT
"""Data storage protocol and shared types.

Defines the interface that message-data backends must implement. The retry
pipeline parks message payloads here between delivery attempts.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable
from typing import Protocol, TypeAlias, runtime_checkable

from ..context import OperationContext


@runtime_checkable
class SyncReadable(Protocol):
    def read(self, size: int = -1, /) -> bytes: ...


@runtime_checkable
class AsyncReadable(Protocol):
    async def read(self, size: int = -1, /) -> bytes: ...


DataSource: TypeAlias = (
    bytes | bytearray | memoryview | SyncReadable | AsyncReadable | Iterable[bytes] | AsyncIterable[bytes]
)
"""Anything :meth:`DataBackend.store_data` can copy from."""


@runtime_checkable
class DataReader(Protocol):
    """Readable handle on a stored blob. The caller must close it."""

    async def read(self, size: int = -1) -> bytes: ...

    async def close(self) -> None: ...


@runtime_checkable
class DataWriter(Protocol):
    """Writable handle on a blob. Closing it finalizes the blob."""

    async def write(self, data: bytes) -> int: ...

    async def close(self) -> None: ...


@runtime_checkable
class DataBackend(Protocol):
    """Protocol for message-data storage backends.

    Every operation validates the message ID first, then checks *ctx* for
    cancellation, then checks that the backend is still open.

    Raises (all operations):
        InvalidMessageIDError: Malformed message ID.
        OperationCancelledError: *ctx* was already cancelled.
        BackendClosedError: The backend has been closed.
        StorageIOError: Underlying storage failure.
    """

    async def store_data(self, ctx: OperationContext | None, message_id: str, data: DataSource) -> int:
        """Replace the blob for *message_id* with the contents of *data*.

        Returns:
            The number of bytes written.
        """
        ...

    async def get_data_reader(self, ctx: OperationContext | None, message_id: str) -> DataReader:
        """Open the blob for *message_id* for reading.

        Raises:
            DataNotFoundError: No blob is stored for *message_id*.
        """
        ...

    async def get_data_writer(self, ctx: OperationContext | None, message_id: str) -> DataWriter:
        """Open the blob for *message_id* for writing, truncating it."""
        ...

    async def delete_data(self, ctx: OperationContext | None, message_id: str) -> None:
        """Remove the blob for *message_id*. Missing blobs are not an error."""
        ...

    async def aclose(self) -> None:
        """Close the backend. Later operations raise ``BackendClosedError``."""
        ...


@runtime_checkable
class BackendFactory(Protocol):
    """Builds configured :class:`DataBackend` instances."""

    @property
    def name(self) -> str: ...

    def create(self) -> DataBackend: ...
