"""
Background cache sweeping.

Expired entries are already ignored on read; this only bounds memory for
keys that are written once and never read again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from core.cache import TTLCache

logger = logging.getLogger(__name__)


class CacheSweeper:
    def __init__(self, cache: TTLCache[Any], *, interval_seconds: float) -> None:
        self._cache = cache
        self._interval = float(interval_seconds)
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        # Non-positive interval disables sweeping entirely.
        if self._interval <= 0 or self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def run_once(self) -> int:
        removed = self._cache.cleanup()
        if removed:
            logger.debug("swept %d expired cache entries", removed)
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
