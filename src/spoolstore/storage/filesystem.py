# SPDX-License-Identifier: MIT
"""Filesystem message-data backend.

Blobs live under a base directory, sharded by the first two bytes (UTF-8) of
the message ID so no single directory grows without bound::

    <base>/
      ab/abcdef.data      # IDs of two or more bytes
      misc/x.data         # shorter IDs

The layout is shared with existing spool directories and must not change.
"""

from __future__ import annotations

import inspect
import logging
import os
import pathlib
from collections.abc import AsyncIterable, AsyncIterator, Iterable

import aiofiles
import aiofiles.os
import anyio

from ..context import OperationContext
from ..exceptions import BackendClosedError, DataNotFoundError, InvalidMessageIDError, StorageIOError
from .locks import ReadWriteLock
from .protocol import DataReader, DataSource, DataWriter

logger = logging.getLogger("spoolstore")

DATA_EXTENSION = "data"
MISC_SHARD = "misc"
MAX_MESSAGE_ID_LENGTH = 255
DIR_MODE = 0o755
DEFAULT_CHUNK_SIZE = 64 * 1024


def _encoded(message_id: str) -> bytes:
    """Return the on-disk bytes of *message_id* (filesystem encoding)."""
    try:
        return os.fsencode(message_id)
    except UnicodeEncodeError as e:
        raise InvalidMessageIDError(f"messageID is not encodable as a filename: {e}") from e


def validate_message_id(message_id: str) -> None:
    """Reject IDs that are empty, too long, or could escape the base directory.

    The length limit counts encoded bytes, not characters, so existing spool
    directories keep the same accepted key space. An ID near the limit can
    still fail at file creation with ``StorageIOError`` (ENAMETOOLONG): the
    ``.data`` suffix pushes names of 251-255 bytes past ``NAME_MAX`` on most
    filesystems.

    Raises:
        InvalidMessageIDError: If *message_id* is not usable as a blob name.
    """
    if not message_id:
        raise InvalidMessageIDError("messageID cannot be empty")
    if ".." in message_id:
        raise InvalidMessageIDError("messageID cannot contain '..'")
    if "/" in message_id or "\\" in message_id:
        raise InvalidMessageIDError("messageID cannot contain path separators")
    if len(_encoded(message_id)) > MAX_MESSAGE_ID_LENGTH:
        raise InvalidMessageIDError(f"messageID too long (max {MAX_MESSAGE_ID_LENGTH} bytes)")
    if "\x00" in message_id:
        raise InvalidMessageIDError("messageID cannot contain NUL characters")


def shard_name(message_id: str) -> str:
    """Shard directory for *message_id*: its first two encoded bytes, or ``misc``.

    A prefix that splits a multi-byte character decodes to surrogate escapes,
    which encode back to the same two bytes on disk.
    """
    raw = _encoded(message_id)
    if len(raw) >= 2:
        return os.fsdecode(raw[:2])
    return MISC_SHARD


def iter_chunks(data: DataSource, chunk_size: int) -> AsyncIterator[bytes]:
    """Return an iterator yielding *data* as byte chunks.

    The source shape is checked here, before anything is read.

    Raises:
        TypeError: If *data* is not a supported source.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return _iter_buffer(memoryview(data).cast("B"), chunk_size)

    read = getattr(data, "read", None)
    if callable(read):
        return _iter_reader(read, chunk_size)

    if isinstance(data, AsyncIterable):
        return _iter_async(data)

    if isinstance(data, Iterable) and not isinstance(data, str):
        return _iter_sync(data)

    raise TypeError(f"Unsupported data source: {type(data).__name__}")


async def _iter_buffer(view: memoryview, chunk_size: int) -> AsyncIterator[bytes]:
    for start in range(0, len(view), chunk_size):
        yield bytes(view[start : start + chunk_size])


async def _iter_reader(read, chunk_size: int) -> AsyncIterator[bytes]:
    while True:
        if inspect.iscoroutinefunction(read):
            chunk = await read(chunk_size)
        else:
            # Blocking readers (open files, sockets) stay off the event loop
            chunk = await anyio.to_thread.run_sync(read, chunk_size)
            if inspect.isawaitable(chunk):
                chunk = await chunk
        if not chunk:
            return
        yield bytes(chunk)


async def _iter_async(data: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
    async for chunk in data:
        yield bytes(chunk)


async def _iter_sync(data: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in data:
        yield bytes(chunk)


class FilesystemBackend:
    """Message-data storage on the local filesystem.

    All mutating operations (store, writer acquisition, delete, close) take
    the backend lock exclusively; readers share it. The lock is coarse: two
    stores of unrelated IDs still run one after the other.

    A reader opened while a store of the same ID is in flight may see a
    partially written blob.

    Args:
        base_path: Root directory; created with mode ``0o755`` if missing.
        chunk_size: Copy buffer size for :meth:`store_data`.

    Raises:
        StorageIOError: If the base directory cannot be created.
    """

    def __init__(self, base_path: str | os.PathLike[str], *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._base = pathlib.Path(base_path)
        self._chunk_size = chunk_size
        self._lock = ReadWriteLock()
        self._closed = False

        try:
            self._base.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("create base directory", self._base, e) from e
        logger.info("Filesystem data backend ready at %s", self._base)

    @property
    def base_path(self) -> pathlib.Path:
        return self._base

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Mark the backend closed. Safe to call more than once."""
        async with self._lock.write():
            if not self._closed:
                self._closed = True
                logger.debug("Filesystem data backend at %s closed", self._base)

    async def __aenter__(self) -> FilesystemBackend:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Path helpers
    # ------------------------------------------------------------------

    def data_path(self, message_id: str) -> pathlib.Path:
        """Return where the blob for *message_id* lives."""
        validate_message_id(message_id)
        return self._base / shard_name(message_id) / f"{message_id}.{DATA_EXTENSION}"

    def _prepare(self, ctx: OperationContext | None, message_id: str) -> pathlib.Path:
        path = self.data_path(message_id)
        if ctx is not None:
            ctx.raise_if_cancelled()
        return path

    def _check_open(self) -> None:
        if self._closed:
            raise BackendClosedError()

    async def _make_dir(self, directory: pathlib.Path) -> None:
        try:
            await aiofiles.os.makedirs(directory, mode=DIR_MODE, exist_ok=True)
        except OSError as e:
            raise StorageIOError("create data directory", directory, e) from e

    async def _create_blob(self, path: pathlib.Path) -> DataWriter:
        """Create or truncate *path*, making its shard directory first.

        Another backend over the same base path may reclaim the shard
        between the two steps; one retry covers that.
        """
        await self._make_dir(path.parent)
        try:
            return await aiofiles.open(path, "wb")
        except FileNotFoundError:
            logger.debug("Shard %s vanished before file creation, retrying", path.parent)
            await self._make_dir(path.parent)
        except OSError as e:
            raise StorageIOError("create data file", path, e) from e
        try:
            return await aiofiles.open(path, "wb")
        except OSError as e:
            raise StorageIOError("create data file", path, e) from e

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    async def store_data(self, ctx: OperationContext | None, message_id: str, data: DataSource) -> int:
        path = self._prepare(ctx, message_id)
        chunks = iter_chunks(data, self._chunk_size)

        async with self._lock.write():
            self._check_open()
            f = await self._create_blob(path)
            size = 0
            try:
                try:
                    async for chunk in chunks:
                        await f.write(chunk)
                        size += len(chunk)
                finally:
                    # Buffered write errors (ENOSPC, EIO) often surface here
                    await f.close()
            except OSError as e:
                raise StorageIOError("write data", path, e) from e

        logger.debug("Stored %d bytes for %s", size, message_id)
        return size

    async def get_data_reader(self, ctx: OperationContext | None, message_id: str) -> DataReader:
        path = self._prepare(ctx, message_id)

        async with self._lock.read():
            self._check_open()
            try:
                return await aiofiles.open(path, "rb")
            except FileNotFoundError as e:
                raise DataNotFoundError(message_id) from e
            except OSError as e:
                raise StorageIOError("open data file", path, e) from e

    async def get_data_writer(self, ctx: OperationContext | None, message_id: str) -> DataWriter:
        path = self._prepare(ctx, message_id)

        async with self._lock.write():
            self._check_open()
            return await self._create_blob(path)

    async def delete_data(self, ctx: OperationContext | None, message_id: str) -> None:
        path = self._prepare(ctx, message_id)

        async with self._lock.write():
            self._check_open()
            try:
                await aiofiles.os.remove(path)
                logger.debug("Deleted data for %s", message_id)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageIOError("delete data file", path, e) from e

            await self._cleanup_empty_dirs(path.parent)

    # ------------------------------------------------------------------
    # Directory reclamation
    # ------------------------------------------------------------------

    async def _cleanup_empty_dirs(self, directory: pathlib.Path) -> None:
        """Remove *directory* and its ancestors while they are empty.

        Stops below the base directory and on the first failure; failures are
        never reported to the caller.
        """
        while directory != self._base and self._base in directory.parents:
            try:
                if await aiofiles.os.listdir(directory):
                    return
                await aiofiles.os.rmdir(directory)
            except OSError as e:
                logger.debug("Stopped directory cleanup at %s: %s", directory, e)
                return
            logger.debug("Removed empty directory %s", directory)
            directory = directory.parent
