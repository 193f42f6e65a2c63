import asyncio
import logging

import pytest

from fantasy_football_rankings.cache.store import UnifiedCache
from fantasy_football_rankings.cache.sweeper import CacheSweeper
from tests.fakes.sources import FakeClock


class _FlakyCache:
    def __init__(self) -> None:
        self.prunes = 0

    def prune(self) -> int:
        self.prunes += 1
        if self.prunes == 1:
            raise RuntimeError("prune exploded")
        return 0


class TestCacheSweeper:
    @pytest.mark.asyncio
    async def test_prunes_on_interval(self) -> None:
        clock = FakeClock()
        cache = UnifiedCache(default_ttl=10, clock=clock)
        cache.set("k", 1)
        clock.advance(20)

        sweeper = CacheSweeper(cache, interval=0.01)
        sweeper.start()
        await asyncio.sleep(0.05)
        await sweeper.stop()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_cancels(self) -> None:
        sweeper = CacheSweeper(UnifiedCache(), interval=60)
        sweeper.start()
        sweeper.start()
        assert sweeper.running
        await sweeper.stop()
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        await CacheSweeper(UnifiedCache()).stop()

    @pytest.mark.asyncio
    async def test_failed_prune_is_logged_and_loop_continues(self, caplog: pytest.LogCaptureFixture) -> None:
        cache = _FlakyCache()
        sweeper = CacheSweeper(cache, interval=0.01)  # type: ignore[arg-type]

        with caplog.at_level(logging.ERROR, logger="fantasy_football_rankings.cache.sweeper"):
            sweeper.start()
            await asyncio.sleep(0.1)
            assert sweeper.running
            await sweeper.stop()

        assert cache.prunes >= 2
        assert "Cache prune failed" in caplog.text
