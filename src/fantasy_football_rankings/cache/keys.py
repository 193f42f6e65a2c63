"""Cache key construction: ``domain:category:format[:variant]``, lower-case."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fantasy_football_rankings.domain.player import Category, ScoringFormat

PLAYERS = "players"


def player_key(category: Category, scoring_format: ScoringFormat) -> str:
    return f"{PLAYERS}:{category.lower()}:{scoring_format.value}"


def overall_key(scoring_format: ScoringFormat) -> str:
    return f"{PLAYERS}:overall:{scoring_format.value}:normalized"


def key_segments(key: str) -> list[str]:
    return key.split(":")
