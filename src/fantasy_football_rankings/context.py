"""Explicit pipeline state: settings plus the resources built from them.

There are no module-level singletons. Entry points build one PipelineContext,
initialize it, use its orchestrator, and close it:

    async with PipelineContext(load_settings()) as ctx:
        result = await ctx.orchestrator.fetch_category(Category.QB, ScoringFormat.PPR)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Self

from fantasy_football_rankings.cache.store import UnifiedCache
from fantasy_football_rankings.cache.sweeper import CacheSweeper
from fantasy_football_rankings.domain.fetch_result import SourceTag
from fantasy_football_rankings.orchestrator import Orchestrator
from fantasy_football_rankings.persistence.sqlite_sink import SqliteSnapshotSink
from fantasy_football_rankings.sources._http import create_http_client
from fantasy_football_rankings.sources.registry import DEFAULT_SOURCE_ORDER, create_default_registry

if TYPE_CHECKING:
    from types import TracebackType

    import httpx

    from fantasy_football_rankings.persistence.protocol import SnapshotSink
    from fantasy_football_rankings.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one pipeline.

    Attributes:
        api_key: FantasyPros API key for the primary source.
        username: FantasyPros account for the authenticated session source.
        password: Password for ``username``.
        season: Season year requested from the API.
        timeout: Default per-source timeout in seconds.
        source_order: Fallback chain order.
        cache_ttl: Cache entry lifetime in seconds.
        cache_max_entries: Cache capacity before LRU eviction.
        prune_interval: Seconds between background prune sweeps.
        snapshots_enabled: Whether successful fetches are written to SQLite.
        snapshot_db_path: SQLite database for snapshots.
    """

    api_key: str = field(default="", repr=False)
    username: str = ""
    password: str = field(default="", repr=False)
    season: int = 2025
    timeout: float = 10.0
    source_order: tuple[SourceTag, ...] = DEFAULT_SOURCE_ORDER
    cache_ttl: float = 900.0
    cache_max_entries: int = 1000
    prune_interval: float = 300.0
    snapshots_enabled: bool = False
    snapshot_db_path: Path = field(default_factory=lambda: Path("~/.config/ffr/snapshots.db").expanduser())


class PipelineContext:
    """Owns the cache, HTTP client, sources, sweeper, sink and orchestrator.

    Resources passed in are borrowed and left open on ``close``; resources
    the context creates itself are closed by it.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        cache: UnifiedCache | None = None,
        registry: SourceRegistry | None = None,
        sink: SnapshotSink | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.cache = cache or UnifiedCache(default_ttl=settings.cache_ttl, max_entries=settings.cache_max_entries)
        self._registry = registry
        self._sink = sink
        self._client = client
        self._owns_client = client is None
        self._sweeper = CacheSweeper(self.cache, settings.prune_interval)
        self._orchestrator: Orchestrator | None = None

    @property
    def orchestrator(self) -> Orchestrator:
        if self._orchestrator is None:
            raise RuntimeError("PipelineContext not initialized. Call await ctx.init() first.")
        return self._orchestrator

    @property
    def initialized(self) -> bool:
        return self._orchestrator is not None

    async def init(self) -> None:
        if self.initialized:
            return
        registry = self._registry
        if registry is None:
            if self._client is None:
                self._client = create_http_client()
            registry = create_default_registry(self._client, self.settings)
        sink = self._sink
        if sink is None and self.settings.snapshots_enabled:
            sink = SqliteSnapshotSink(self.settings.snapshot_db_path)
        self._orchestrator = Orchestrator(
            registry,
            self.cache,
            sink=sink,
            default_timeout=self.settings.timeout,
        )
        self._sweeper.start()
        logger.debug("Pipeline initialized (sources=%s)", ", ".join(registry.list_sources()))

    async def close(self) -> None:
        await self._sweeper.stop()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        self._orchestrator = None
        logger.debug("Pipeline closed")

    async def __aenter__(self) -> Self:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
