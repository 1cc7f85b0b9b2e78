# SPDX-License-Identifier: MIT
"""Async reader/writer lock built on anyio primitives."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a store or delete. The underlying :class:`anyio.Condition` is
    created on first use, which lets owners build the lock outside a running
    event loop.
    """

    def __init__(self) -> None:
        self._condition: anyio.Condition | None = None
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def _cond(self) -> anyio.Condition:
        if self._condition is None:
            self._condition = anyio.Condition()
        return self._condition

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        cond = self._cond
        async with cond:
            while self._writer or self._waiting_writers:
                await cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with anyio.CancelScope(shield=True):
                async with cond:
                    self._readers -= 1
                    if not self._readers:
                        cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        cond = self._cond
        async with cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    await cond.wait()
            finally:
                self._waiting_writers -= 1
                # Readers parked behind this writer must re-check if it gave up.
                cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            with anyio.CancelScope(shield=True):
                async with cond:
                    self._writer = False
                    cond.notify_all()
