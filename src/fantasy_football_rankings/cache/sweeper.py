from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fantasy_football_rankings.cache.store import UnifiedCache

logger = logging.getLogger(__name__)

DEFAULT_PRUNE_INTERVAL_SECONDS = 300.0


class CacheSweeper:
    """Background task that prunes expired cache entries on an interval."""

    def __init__(self, cache: UnifiedCache, interval: float = DEFAULT_PRUNE_INTERVAL_SECONDS) -> None:
        self._cache = cache
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-sweeper")
        logger.debug("Cache sweeper started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug("Cache sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._cache.prune()
            except Exception:
                logger.exception("Cache prune failed")
