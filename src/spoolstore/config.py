# SPDX-License-Identifier: MIT
"""Configuration management for spoolstore.

This module handles:
- Logging setup
- Environment variable loading (including ``.env`` files)
- Validation of storage settings
"""

import logging
import os
import pathlib
import sys
from functools import lru_cache
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# ---------- Logging configuration ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("spoolstore")


DEFAULT_DATA_PATH = "./spool-data"
DEFAULT_CHUNK_SIZE = 64 * 1024

BackendName = Literal["filesystem"]


class StorageSettings(BaseModel, frozen=True):
    """Validated storage configuration."""

    backend: BackendName = "filesystem"
    data_path: pathlib.Path = pathlib.Path(DEFAULT_DATA_PATH)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)

    @field_validator("data_path", mode="before")
    @classmethod
    def _validate_data_path(cls, v: object) -> object:
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("data path cannot be blank")
            return v.strip()
        return v


# Mapping from settings field to the env var that feeds it
_ENV_VARS: dict[str, str] = {
    "backend": "SPOOLSTORE_BACKEND",
    "data_path": "SPOOLSTORE_DATA_PATH",
    "chunk_size": "SPOOLSTORE_CHUNK_SIZE",
}


@lru_cache(maxsize=1)
def get_settings() -> StorageSettings:
    """Load storage settings from the environment (cached).

    Reads a ``.env`` file from the working directory first, without
    overriding variables that are already set.

    Configuration
    -------------
    ``SPOOLSTORE_BACKEND``
        ``"filesystem"`` (default).
    ``SPOOLSTORE_DATA_PATH``
        Base directory for stored message data (default ``./spool-data``).
    ``SPOOLSTORE_CHUNK_SIZE``
        Copy buffer size in bytes (default 65536).

    Raises:
        RuntimeError: If any variable holds an invalid value.
    """
    load_dotenv(find_dotenv(usecwd=True))

    raw: dict[str, str] = {}
    for field, env_var in _ENV_VARS.items():
        value = os.getenv(env_var)
        if value is not None and value.strip():
            raw[field] = value.strip().lower() if field == "backend" else value

    try:
        settings = StorageSettings(**raw)
    except ValidationError as e:
        names = sorted({_ENV_VARS[str(err["loc"][0])] for err in e.errors() if err["loc"]})
        raise RuntimeError(f"Invalid storage configuration ({', '.join(names)}): {e}") from e

    logger.debug("Loaded storage settings: %s", settings)
    return settings
