# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for spoolstore tests."""

import pathlib

import pytest

from spoolstore.storage.filesystem import FilesystemBackend


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def base_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Location for a backend's base directory (not created yet)."""
    return tmp_path / "spool"


@pytest.fixture
def backend(base_path: pathlib.Path) -> FilesystemBackend:
    """A fresh filesystem backend rooted at ``base_path``."""
    return FilesystemBackend(base_path)
