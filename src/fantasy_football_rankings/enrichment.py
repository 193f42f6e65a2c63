"""Derived player metadata: bye week and expert consensus level."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fantasy_football_rankings.domain.player import Player

BYE_WEEKS: dict[str, int] = {
    "ARI": 11, "ATL": 12, "BAL": 14, "BUF": 12, "CAR": 11, "CHI": 7,
    "CIN": 12, "CLE": 10, "DAL": 7, "DEN": 14, "DET": 9, "GB": 10,
    "HOU": 14, "IND": 14, "JAX": 12, "KC": 10, "LV": 10, "LAC": 5,
    "LAR": 6, "MIA": 6, "MIN": 6, "NE": 14, "NO": 12, "NYG": 11,
    "NYJ": 12, "PHI": 5, "PIT": 9, "SF": 9, "SEA": 10, "TB": 11,
    "TEN": 5, "WAS": 14,
}  # fmt: skip

HIGH_CONSENSUS_RANGE = 10
MEDIUM_CONSENSUS_RANGE = 25
MIN_EXPERTS_FOR_CONSENSUS = 3


def bye_week(team: str) -> int | None:
    return BYE_WEEKS.get(team.upper())


def consensus_level(expert_ranks: tuple[int, ...]) -> str:
    """``high``/``medium``/``low`` by the spread of expert ranks."""
    if len(expert_ranks) < MIN_EXPERTS_FOR_CONSENSUS:
        return "low"
    spread = max(expert_ranks) - min(expert_ranks)
    if spread <= HIGH_CONSENSUS_RANGE:
        return "high"
    if spread <= MEDIUM_CONSENSUS_RANGE:
        return "medium"
    return "low"


def enrich_player(player: Player) -> Player:
    """Fill in missing bye week and consensus level; existing values win."""
    metadata = player.metadata
    metadata = replace(
        metadata,
        bye_week=metadata.bye_week if metadata.bye_week is not None else bye_week(player.team),
        consensus_level=metadata.consensus_level or consensus_level(player.expert_ranks),
    )
    return replace(player, metadata=metadata)


def enrich_players(players: Iterable[Player]) -> list[Player]:
    return [enrich_player(p) for p in players]
