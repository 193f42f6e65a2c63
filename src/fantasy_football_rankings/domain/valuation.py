from dataclasses import dataclass

from fantasy_football_rankings.domain.player import Player


@dataclass(frozen=True)
class OverallValueCalculation:
    player: Player
    overall_value: float
    overall_rank: int
    category_weight: float
    format_multiplier: float
    scarcity_multiplier: float
    original_rank: float
