"""Mutual exclusion over local cache date scopes."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger


class DateScopeGuard:
    """Serializes local-cache mutations per date.

    Two holders of the same date never overlap; different dates run
    side by side. ``everything()`` waits for every date holder to finish and
    keeps new ones out until it is released.
    """

    def __init__(self):
        self._cond = asyncio.Condition()
        self._active: set[str] = set()
        self._exclusive = False

    @asynccontextmanager
    async def date(self, date: str) -> AsyncIterator[None]:
        async with self._cond:
            if date in self._active or self._exclusive:
                logger.debug("Waiting for sync scope {}", date)
            await self._cond.wait_for(lambda: not self._exclusive and date not in self._active)
            self._active.add(date)
        try:
            yield
        finally:
            async with self._cond:
                self._active.discard(date)
                self._cond.notify_all()

    @asynccontextmanager
    async def everything(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._exclusive and not self._active)
            self._exclusive = True
        try:
            yield
        finally:
            async with self._cond:
                self._exclusive = False
                self._cond.notify_all()

    def busy(self, date: str) -> bool:
        return self._exclusive or date in self._active
