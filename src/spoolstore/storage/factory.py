# SPDX-License-Identifier: MIT
"""Storage backend factories.

:func:`get_storage` reads ``SPOOLSTORE_BACKEND`` (default ``"filesystem"``)
and returns the appropriate singleton backend instance.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from ..config import StorageSettings, get_settings
from .filesystem import DEFAULT_CHUNK_SIZE, FilesystemBackend
from .protocol import BackendFactory, DataBackend

logger = logging.getLogger("spoolstore")


class FilesystemFactory:
    """Builds :class:`FilesystemBackend` instances rooted at *base_path*."""

    name = "filesystem-data"

    def __init__(self, base_path: str | os.PathLike[str], *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.base_path = base_path
        self.chunk_size = chunk_size

    def create(self) -> FilesystemBackend:
        return FilesystemBackend(self.base_path, chunk_size=self.chunk_size)


def get_factory(settings: StorageSettings | None = None) -> BackendFactory:
    """Return the factory for the configured backend type.

    Raises:
        RuntimeError: If the backend type is unknown.
    """
    settings = settings or get_settings()

    if settings.backend == "filesystem":
        return FilesystemFactory(settings.data_path, chunk_size=settings.chunk_size)

    raise RuntimeError(f"Unknown SPOOLSTORE_BACKEND: {settings.backend!r}. Use 'filesystem'.")


@lru_cache(maxsize=1)
def get_storage() -> DataBackend:
    """Return the configured :class:`DataBackend` (cached singleton)."""
    factory = get_factory()
    backend = factory.create()
    logger.info("Using %s storage backend", factory.name)
    return backend
