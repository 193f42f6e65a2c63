from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from fantasy_football_rankings.domain.player import Category, Player, ScoringFormat
from fantasy_football_rankings.domain.validation import ValidationResult
from fantasy_football_rankings.domain.valuation import OverallValueCalculation


class SourceTag(StrEnum):
    PRIMARY_API = "primary-api"
    AUTHENTICATED_SESSION = "authenticated-session"
    PUBLIC_ACCESS = "public-access"
    SAMPLE_FALLBACK = "sample-fallback"


@dataclass(frozen=True)
class FetchMetadata:
    timestamp: datetime
    category: Category
    scoring_format: ScoringFormat
    count: int


@dataclass(frozen=True)
class FetchResult:
    players: tuple[Player, ...]
    source: SourceTag
    success: bool
    metadata: FetchMetadata
    error: str | None = None
    validation: ValidationResult | None = None
    # Populated only for the normalized overall view, aligned with players.
    rankings: tuple[OverallValueCalculation, ...] = ()
