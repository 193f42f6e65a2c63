from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_rankings.domain.fetch_result import FetchMetadata, SourceTag
    from fantasy_football_rankings.domain.player import Category, Player, ScoringFormat


class SnapshotSink(Protocol):
    """Write-only destination for successful fetches. Never read back by the pipeline."""

    def store(
        self,
        category: Category,
        scoring_format: ScoringFormat,
        players: Sequence[Player],
        metadata: FetchMetadata,
        source: SourceTag,
    ) -> None: ...
