"""Ranking source registry and fallback-chain ordering."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fantasy_football_rankings.domain.fetch_result import SourceTag
from fantasy_football_rankings.sources.fantasypros_api import FantasyProsApiSource
from fantasy_football_rankings.sources.fantasypros_public import FantasyProsPublicSource
from fantasy_football_rankings.sources.fantasypros_session import FantasyProsSessionSource

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from fantasy_football_rankings.context import Settings
    from fantasy_football_rankings.sources.protocol import RankingSource

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_ORDER: tuple[SourceTag, ...] = (
    SourceTag.PRIMARY_API,
    SourceTag.AUTHENTICATED_SESSION,
    SourceTag.PUBLIC_ACCESS,
)


class SourceRegistry:
    """Holds the live sources by tag and builds the fallback chain."""

    def __init__(self, order: Sequence[SourceTag] = DEFAULT_SOURCE_ORDER) -> None:
        self._sources: dict[SourceTag, RankingSource] = {}
        self._order = tuple(order)

    def register(self, source: RankingSource) -> None:
        self._sources[source.tag] = source

    def get(self, tag: SourceTag) -> RankingSource:
        """Get a source by tag.

        Raises:
            KeyError: If no source is registered under ``tag``.
        """
        if tag not in self._sources:
            available = ", ".join(sorted(self._sources))
            raise KeyError(f"Unknown ranking source: {tag!r}. Available: {available}")
        return self._sources[tag]

    def list_sources(self) -> tuple[SourceTag, ...]:
        return tuple(self._sources)

    def chain(self, preferred: SourceTag | None = None) -> list[RankingSource]:
        """Sources in priority order, ``preferred`` first when registered.

        Registered sources missing from the configured order follow it in
        registration order.
        """
        tags = [t for t in self._order if t in self._sources]
        tags += [t for t in self._sources if t not in tags]
        if preferred is not None:
            if preferred in tags:
                tags.remove(preferred)
                tags.insert(0, preferred)
            else:
                logger.warning("Preferred source %s is not registered; using default order", preferred)
        return [self._sources[t] for t in tags]


def create_default_registry(client: httpx.AsyncClient, settings: Settings) -> SourceRegistry:
    """Registry wired with the three FantasyPros sources."""
    registry = SourceRegistry(settings.source_order)
    registry.register(FantasyProsApiSource(client, settings.api_key, settings.season))
    registry.register(FantasyProsSessionSource(client, settings.username, settings.password))
    registry.register(FantasyProsPublicSource(client))
    return registry
