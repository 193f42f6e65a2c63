"""Ranking source protocol for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from fantasy_football_rankings.domain.fetch_result import SourceTag
    from fantasy_football_rankings.domain.player import Category, Player, ScoringFormat


class RankingSource(Protocol):
    """Protocol for ranking sources.

    Any object with a ``tag`` and an async ``fetch`` satisfies this protocol,
    which keeps the orchestrator testable with plain fakes.
    """

    @property
    def tag(self) -> SourceTag: ...

    async def fetch(self, category: Category, scoring_format: ScoringFormat) -> list[Player]:
        """Fetch one category's rankings.

        Returns:
            At least one player.

        Raises:
            SourceError: On any failure, including an empty payload.
        """
        ...
