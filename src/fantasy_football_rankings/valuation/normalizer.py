"""Cross-category value normalization.

Each player's value is ``projected_points x category_weight x
format_multiplier x scarcity_multiplier``, and the merged pool is ranked by
that value. Kickers and defenses carry small weights so they sink below every
skill position with comparable points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from fantasy_football_rankings.domain.player import Category, ScoringFormat
from fantasy_football_rankings.domain.valuation import OverallValueCalculation

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_rankings.domain.player import Player

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS: dict[Category, float] = {
    Category.QB: 1.0,
    Category.RB: 1.35,
    Category.WR: 1.25,
    Category.TE: 1.1,
    Category.K: 0.12,
    Category.DST: 0.18,
    Category.FLEX: 1.25,
    Category.OVERALL: 1.0,
}

FORMAT_MULTIPLIERS: dict[ScoringFormat, dict[Category, float]] = {
    ScoringFormat.PPR: {
        Category.QB: 1.0,
        Category.RB: 1.15,
        Category.WR: 1.3,
        Category.TE: 1.2,
        Category.K: 1.0,
        Category.DST: 1.0,
        Category.FLEX: 1.25,
    },
    ScoringFormat.HALF_PPR: {
        Category.QB: 1.0,
        Category.RB: 1.25,
        Category.WR: 1.2,
        Category.TE: 1.15,
        Category.K: 1.0,
        Category.DST: 1.0,
        Category.FLEX: 1.2,
    },
    ScoringFormat.STANDARD: {
        Category.QB: 1.0,
        Category.RB: 1.4,
        Category.WR: 1.1,
        Category.TE: 1.05,
        Category.K: 1.0,
        Category.DST: 1.0,
        Category.FLEX: 1.2,
    },
}


@dataclass(frozen=True)
class ScarcityThreshold:
    starter: int
    relevant: int


SCARCITY_THRESHOLDS: dict[Category, ScarcityThreshold] = {
    Category.QB: ScarcityThreshold(starter=20, relevant=32),
    Category.RB: ScarcityThreshold(starter=30, relevant=60),
    Category.WR: ScarcityThreshold(starter=36, relevant=72),
    Category.TE: ScarcityThreshold(starter=15, relevant=24),
    Category.K: ScarcityThreshold(starter=15, relevant=20),
    Category.DST: ScarcityThreshold(starter=15, relevant=20),
}

ELITE_FRACTION = 0.4
ELITE_MULTIPLIER = 1.3
STARTER_MULTIPLIER = 1.15
RELEVANT_MULTIPLIER = 1.05
DEPTH_MULTIPLIER = 0.85

# Overall rank below which a kicker or defense is implausible.
MIN_PLAUSIBLE_OVERALL_RANK: dict[Category, int] = {Category.K: 190, Category.DST: 165}

TOP_TIER_SIZE = 50
TOP_TIER_EXPECTED_COUNTS: dict[Category, tuple[int, int]] = {
    Category.QB: (2, 8),
    Category.RB: (15, 25),
    Category.WR: (15, 25),
    Category.TE: (2, 6),
}


def category_weight(category: Category) -> float:
    return CATEGORY_WEIGHTS.get(category, 1.0)


def format_multiplier(category: Category, scoring_format: ScoringFormat) -> float:
    return FORMAT_MULTIPLIERS[scoring_format].get(category, 1.0)


def scarcity_multiplier(category: Category, rank: float) -> float:
    threshold = SCARCITY_THRESHOLDS.get(category)
    if threshold is None:
        return 1.0
    if rank <= threshold.starter * ELITE_FRACTION:
        return ELITE_MULTIPLIER
    if rank <= threshold.starter:
        return STARTER_MULTIPLIER
    if rank <= threshold.relevant:
        return RELEVANT_MULTIPLIER
    return DEPTH_MULTIPLIER


def calculate_overall_value(player: Player, scoring_format: ScoringFormat) -> float:
    value = (
        player.projected_points
        * category_weight(player.category)
        * format_multiplier(player.category, scoring_format)
        * scarcity_multiplier(player.category, player.average_rank)
    )
    return max(0.0, value)


def calculate_overall_rankings(
    players: Sequence[Player], scoring_format: ScoringFormat
) -> list[OverallValueCalculation]:
    """Value every player and rank the pool 1..N by descending value.

    The sort is stable, so equal values keep their input order.
    """
    valued = [(p, calculate_overall_value(p, scoring_format)) for p in players]
    valued.sort(key=lambda pair: pair[1], reverse=True)
    return [
        OverallValueCalculation(
            player=player,
            overall_value=value,
            overall_rank=index + 1,
            category_weight=category_weight(player.category),
            format_multiplier=format_multiplier(player.category, scoring_format),
            scarcity_multiplier=scarcity_multiplier(player.category, player.average_rank),
            original_rank=player.average_rank,
        )
        for index, (player, value) in enumerate(valued)
    ]


def overall_ranked_players(calculations: Sequence[OverallValueCalculation]) -> list[Player]:
    """Players in overall order with ``average_rank`` set to the overall rank.

    The positional rank stays available as ``OverallValueCalculation.original_rank``.
    """
    return [replace(calc.player, average_rank=float(calc.overall_rank)) for calc in calculations]


def create_overall_ranked_players(players: Sequence[Player], scoring_format: ScoringFormat) -> list[Player]:
    return overall_ranked_players(calculate_overall_rankings(players, scoring_format))


def validate_overall_rankings(calculations: Sequence[OverallValueCalculation]) -> list[str]:
    """Plausibility warnings for an overall ranking. Never alters the ranking."""
    warnings: list[str] = []

    for calc in calculations:
        category = calc.player.category
        floor = MIN_PLAUSIBLE_OVERALL_RANK.get(category)
        if floor is not None and calc.overall_rank < floor:
            warnings.append(f"{category} {calc.player.name} ranked unusually high at #{calc.overall_rank}")

    top = [c for c in calculations if c.overall_rank <= TOP_TIER_SIZE]
    for calc in top:
        if calc.player.category in (Category.K, Category.DST):
            warnings.append(
                f"{calc.player.category} {calc.player.name} in top {TOP_TIER_SIZE} at #{calc.overall_rank}"
            )

    if len(calculations) >= TOP_TIER_SIZE:
        for category, (low, high) in TOP_TIER_EXPECTED_COUNTS.items():
            count = sum(1 for c in top if c.player.category is category)
            if not low <= count <= high:
                warnings.append(
                    f"{count} {category} players in top {TOP_TIER_SIZE} (expected {low}-{high})"
                )

    for message in warnings:
        logger.warning("Overall ranking: %s", message)
    return warnings
