# SPDX-License-Identifier: MIT
"""Unit tests for storage factories."""

import pathlib

import pytest

from spoolstore.config import StorageSettings, get_settings
from spoolstore.storage import get_storage
from spoolstore.storage.factory import FilesystemFactory, get_factory
from spoolstore.storage.filesystem import FilesystemBackend
from spoolstore.storage.protocol import BackendFactory, DataBackend


@pytest.fixture
def clear_caches():
    get_settings.cache_clear()
    get_storage.cache_clear()
    yield
    get_settings.cache_clear()
    get_storage.cache_clear()


@pytest.mark.unit
def test_filesystem_factory_is_backend_factory(tmp_path):
    factory = FilesystemFactory(tmp_path / "spool")

    assert isinstance(factory, BackendFactory)
    assert factory.name == "filesystem-data"


@pytest.mark.unit
def test_filesystem_factory_creates_backend(tmp_path):
    base = tmp_path / "spool"
    factory = FilesystemFactory(base, chunk_size=512)

    backend = factory.create()

    assert isinstance(backend, FilesystemBackend)
    assert isinstance(backend, DataBackend)
    assert backend.base_path == base
    assert base.is_dir()


@pytest.mark.unit
def test_filesystem_factory_creates_independent_backends(tmp_path):
    factory = FilesystemFactory(tmp_path / "spool")

    assert factory.create() is not factory.create()


@pytest.mark.unit
def test_get_factory_from_settings(tmp_path):
    settings = StorageSettings(data_path=tmp_path / "spool", chunk_size=1024)

    factory = get_factory(settings)

    assert isinstance(factory, FilesystemFactory)
    assert factory.base_path == tmp_path / "spool"
    assert factory.chunk_size == 1024


@pytest.mark.unit
def test_get_factory_unknown_backend(tmp_path):
    settings = StorageSettings.model_construct(backend="s3", data_path=tmp_path, chunk_size=1)

    with pytest.raises(RuntimeError, match="Unknown SPOOLSTORE_BACKEND"):
        get_factory(settings)


@pytest.mark.unit
def test_get_storage_uses_environment(monkeypatch, tmp_path, clear_caches):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SPOOLSTORE_BACKEND", "filesystem")
    monkeypatch.setenv("SPOOLSTORE_DATA_PATH", str(tmp_path / "env-spool"))
    monkeypatch.delenv("SPOOLSTORE_CHUNK_SIZE", raising=False)

    storage = get_storage()

    assert isinstance(storage, FilesystemBackend)
    assert storage.base_path == pathlib.Path(tmp_path / "env-spool")
    assert get_storage() is storage
