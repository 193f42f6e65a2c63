"""Bundled offline rankings used when every live source has failed."""

from __future__ import annotations

import csv
import logging
from dataclasses import replace
from functools import lru_cache
from pathlib import Path

from fantasy_football_rankings.domain.player import (
    CONCRETE_CATEGORIES,
    FLEX_ELIGIBLE,
    Category,
    Player,
    ScoringFormat,
)
from fantasy_football_rankings.sources.ecr import spread_expert_ranks

logger = logging.getLogger(__name__)

SAMPLE_PATH = Path(__file__).with_name("sample_rankings.csv")

_POINTS_COLUMN: dict[ScoringFormat, str] = {
    ScoringFormat.STANDARD: "standard",
    ScoringFormat.HALF_PPR: "half ppr",
    ScoringFormat.PPR: "ppr",
}


@lru_cache(maxsize=1)
def _load_rows(path: Path = SAMPLE_PATH) -> tuple[dict[str, str], ...]:
    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return ()
        header_map = {name: name.strip().lower() for name in reader.fieldnames}
        return tuple({header_map[k]: (v or "").strip() for k, v in row.items() if k in header_map} for row in reader)


def _row_to_player(row: dict[str, str], scoring_format: ScoringFormat) -> Player:
    category = Category.parse(row["category"])
    rank = float(row["rank"])
    std = float(row["std dev"])
    return Player(
        id=f"sample-{category.lower()}-{int(rank)}",
        name=row["player"],
        team=row["team"],
        category=category,
        average_rank=rank,
        standard_deviation=std,
        projected_points=float(row[_POINTS_COLUMN[scoring_format]]),
        tier=int(row["tier"]),
        expert_ranks=spread_expert_ranks(rank, std),
        min_rank=max(1.0, rank - 2 * std),
        max_rank=rank + 2 * std,
    )


def _concrete(category: Category, scoring_format: ScoringFormat) -> list[Player]:
    players = [
        _row_to_player(row, scoring_format) for row in _load_rows() if Category.parse(row["category"]) is category
    ]
    players.sort(key=lambda p: p.average_rank)
    return players


def load_sample_players(category: Category, scoring_format: ScoringFormat) -> list[Player]:
    """Sample players for any category, never empty.

    FLEX is the RB/WR/TE pool re-ranked by projected points. OVERALL is every
    concrete category with its own positional ranks, ready for normalization.
    """
    if category.is_concrete:
        return _concrete(category, scoring_format)

    if category is Category.FLEX:
        pool = [p for c in CONCRETE_CATEGORIES if c in FLEX_ELIGIBLE for p in _concrete(c, scoring_format)]
        pool.sort(key=lambda p: p.projected_points, reverse=True)
        return [replace(p, average_rank=float(i + 1)) for i, p in enumerate(pool)]

    return [p for c in CONCRETE_CATEGORIES for p in _concrete(c, scoring_format)]
