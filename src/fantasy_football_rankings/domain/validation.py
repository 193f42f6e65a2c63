import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class WarningKind(StrEnum):
    SUSPICIOUS_RANK = "suspicious_rank"
    MISSING_DATA = "missing_data"
    DUPLICATE_PLAYER = "duplicate_player"
    INCONSISTENT_DATA = "inconsistent_data"
    STALE_DATA = "stale_data"


class ErrorKind(StrEnum):
    INVALID_FORMAT = "invalid_format"
    MISSING_REQUIRED = "missing_required"
    DATA_CORRUPTION = "data_corruption"
    CONSTRAINT_VIOLATION = "constraint_violation"


@dataclass(frozen=True)
class ValidationIssue:
    kind: WarningKind | ErrorKind
    message: str
    player_id: str | None = None
    player_name: str | None = None
    field: str | None = None
    details: dict[str, Any] = dataclasses.field(default_factory=dict)


@dataclass(frozen=True)
class QualityMetrics:
    completeness: float
    consistency: float
    accuracy: float
    freshness: float
    uniqueness: float


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    score: int
    warnings: tuple[ValidationIssue, ...]
    errors: tuple[ValidationIssue, ...]
    players_validated: int
    valid_players: int
    invalid_players: int
    metrics: QualityMetrics
    timestamp: datetime


@dataclass(frozen=True)
class QuickValidationResult:
    is_valid: bool
    critical_issues: int
    quality_score: int
