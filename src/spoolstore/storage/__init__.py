# SPDX-License-Identifier: MIT
"""Pluggable message-data storage for spoolstore.

The storage layer parks message payloads between delivery attempts of the
retry pipeline. The filesystem backend is the default implementation.

Usage::

    from spoolstore.storage import get_storage

    storage = get_storage()
    size = await storage.store_data(None, "msg-123", payload)
    reader = await storage.get_data_reader(None, "msg-123")
    try:
        data = await reader.read()
    finally:
        await reader.close()
    await storage.delete_data(None, "msg-123")
"""

from .factory import FilesystemFactory, get_factory, get_storage
from .filesystem import FilesystemBackend, validate_message_id
from .protocol import BackendFactory, DataBackend, DataReader, DataSource, DataWriter

__all__ = [
    "BackendFactory",
    "DataBackend",
    "DataReader",
    "DataSource",
    "DataWriter",
    "FilesystemBackend",
    "FilesystemFactory",
    "get_factory",
    "get_storage",
    "validate_message_id",
]
