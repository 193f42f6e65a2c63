"""Quality scoring for fetched player batches.

The validator never rejects data. It produces a 0-100 score from five quality
metrics minus capped penalties for warnings and errors, and flags the batch
as valid only when it has no errors and scores at least QUALITY_THRESHOLD.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fantasy_football_rankings.domain.player import Category
from fantasy_football_rankings.domain.validation import (
    ErrorKind,
    QualityMetrics,
    QuickValidationResult,
    ValidationIssue,
    ValidationResult,
    WarningKind,
)
from fantasy_football_rankings.name_utils import player_key
from fantasy_football_rankings.validation.expectations import CATEGORY_EXPECTATIONS, VALID_TEAMS

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from fantasy_football_rankings.domain.player import Player

logger = logging.getLogger(__name__)

QUALITY_THRESHOLD = 60
QUICK_QUALITY_THRESHOLD = 80

METRIC_WEIGHTS = {
    "completeness": 0.25,
    "consistency": 0.20,
    "accuracy": 0.25,
    "freshness": 0.15,
    "uniqueness": 0.15,
}
WARNING_PENALTY = 2
MAX_WARNING_PENALTY = 20
ERROR_PENALTY = 5
MAX_ERROR_PENALTY = 30

RANK_GAP_THRESHOLD = 10
RANK_GAP_CEILING = 50
MIN_RANKS_FOR_GAP_CHECK = 5


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _valid_rank(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or value <= 0:
        return None
    return float(value)


def _has_required(player: Player) -> bool:
    return bool(player.name and player.name.strip()) and isinstance(player.category, Category)


class DataValidator:
    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    def validate(
        self,
        players: Sequence[Player],
        expected_category: Category,
        source: str | None = None,
    ) -> ValidationResult:
        """Score a batch of players fetched for ``expected_category``."""
        warnings: list[ValidationIssue] = []
        errors: list[ValidationIssue] = []
        valid_players = 0

        for player in players:
            player_warnings, player_errors = self._validate_player(player, expected_category)
            warnings.extend(player_warnings)
            errors.extend(player_errors)
            if not player_errors:
                valid_players += 1

        warnings.extend(self._validate_collection(players, expected_category))

        metrics = self._quality_metrics(players, expected_category)
        score = self._score(metrics, len(warnings), len(errors))
        result = ValidationResult(
            is_valid=not errors and score >= QUALITY_THRESHOLD,
            score=score,
            warnings=tuple(warnings),
            errors=tuple(errors),
            players_validated=len(players),
            valid_players=valid_players,
            invalid_players=len(players) - valid_players,
            metrics=metrics,
            timestamp=self._clock(),
        )

        logger.info(
            "Validated %d %s players from %s: score=%d warnings=%d errors=%d",
            len(players),
            expected_category,
            source or "unknown",
            score,
            len(warnings),
            len(errors),
        )
        return result

    def quick_validate(self, players: Sequence[Player], category: Category) -> QuickValidationResult:
        """Cheap structural check: required fields and positive ranks only."""
        if not players:
            return QuickValidationResult(is_valid=False, critical_issues=1, quality_score=0)

        critical = 0
        complete = 0
        for player in players:
            has_required = _has_required(player)
            rank = _valid_rank(player.average_rank)
            if not has_required:
                critical += 1
            if rank is None:
                critical += 1
            if has_required and rank is not None:
                complete += 1

        quality = round(complete / len(players) * 100)
        logger.debug("Quick validation of %d %s players: quality=%d", len(players), category, quality)
        return QuickValidationResult(
            is_valid=critical == 0 and quality >= QUICK_QUALITY_THRESHOLD,
            critical_issues=critical,
            quality_score=quality,
        )

    def _validate_player(
        self, player: Player, expected: Category
    ) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
        warnings: list[ValidationIssue] = []
        errors: list[ValidationIssue] = []
        expectation = CATEGORY_EXPECTATIONS[expected]
        name = player.name if player.name else None

        if not player.name or not player.name.strip():
            errors.append(
                ValidationIssue(ErrorKind.MISSING_REQUIRED, "Player name is required", player_id=player.id, field="name")
            )

        if not isinstance(player.category, Category):
            errors.append(
                ValidationIssue(
                    ErrorKind.MISSING_REQUIRED,
                    "Player category is required",
                    player_id=player.id,
                    player_name=name,
                    field="category",
                )
            )
        elif expected.is_concrete and player.category is not expected:
            errors.append(
                ValidationIssue(
                    ErrorKind.CONSTRAINT_VIOLATION,
                    f"Category mismatch: expected {expected}, got {player.category}",
                    player_id=player.id,
                    player_name=name,
                    field="category",
                )
            )

        if player.team and player.team not in VALID_TEAMS:
            warnings.append(
                ValidationIssue(
                    WarningKind.SUSPICIOUS_RANK,
                    f"Unknown team abbreviation: {player.team}",
                    player_id=player.id,
                    player_name=name,
                    field="team",
                    details={"team": player.team},
                )
            )

        rank = _valid_rank(player.average_rank)
        if rank is None:
            errors.append(
                ValidationIssue(
                    ErrorKind.INVALID_FORMAT,
                    "Invalid average rank value",
                    player_id=player.id,
                    player_name=name,
                    field="average_rank",
                    details={"value": player.average_rank},
                )
            )
        elif rank > expectation.max_rank * 2:
            warnings.append(
                ValidationIssue(
                    WarningKind.SUSPICIOUS_RANK,
                    f"Unusually high rank for {expected}: {rank}",
                    player_id=player.id,
                    player_name=name,
                    field="average_rank",
                    details={"rank": rank, "expected_max": expectation.max_rank},
                )
            )

        if any(r <= 0 for r in player.expert_ranks):
            warnings.append(
                ValidationIssue(
                    WarningKind.INCONSISTENT_DATA,
                    "Expert ranks contain invalid values",
                    player_id=player.id,
                    player_name=name,
                    field="expert_ranks",
                    details={"expert_ranks": list(player.expert_ranks)},
                )
            )

        points = player.projected_points
        if points is not None and not expectation.min_points <= points <= expectation.max_points:
            warnings.append(
                ValidationIssue(
                    WarningKind.SUSPICIOUS_RANK,
                    f"Projected points outside expected range for {expected}: {points}",
                    player_id=player.id,
                    player_name=name,
                    field="projected_points",
                    details={
                        "points": points,
                        "min_expected": expectation.min_points,
                        "max_expected": expectation.max_points,
                    },
                )
            )

        return warnings, errors

    def _validate_collection(self, players: Sequence[Player], expected: Category) -> list[ValidationIssue]:
        warnings: list[ValidationIssue] = []
        expectation = CATEGORY_EXPECTATIONS[expected]

        groups: dict[str, list[Player]] = defaultdict(list)
        for player in players:
            groups[player_key(player.name or "", player.team or "")].append(player)
        for group in groups.values():
            if len(group) > 1:
                warnings.append(
                    ValidationIssue(
                        WarningKind.DUPLICATE_PLAYER,
                        f"Duplicate player found: {group[0].name}",
                        player_name=group[0].name,
                        details={"duplicate_count": len(group), "players": [p.id for p in group]},
                    )
                )

        if len(players) < expectation.typical_count * 0.5:
            warnings.append(
                ValidationIssue(
                    WarningKind.MISSING_DATA,
                    f"Fewer players than expected for {expected}: {len(players)} "
                    f"(expected ~{expectation.typical_count})",
                    details={"actual_count": len(players), "expected_count": expectation.typical_count},
                )
            )

        ranks = sorted(r for r in (_valid_rank(p.average_rank) for p in players) if r is not None)
        if len(ranks) > MIN_RANKS_FOR_GAP_CHECK:
            for before, after in zip(ranks, ranks[1:]):
                if after - before > RANK_GAP_THRESHOLD and before < RANK_GAP_CEILING:
                    warnings.append(
                        ValidationIssue(
                            WarningKind.MISSING_DATA,
                            f"Large ranking gap detected: {before} to {after}",
                            details={"gap": after - before, "rank_before": before, "rank_after": after},
                        )
                    )

        return warnings

    def _quality_metrics(self, players: Sequence[Player], expected: Category) -> QualityMetrics:
        if not players:
            return QualityMetrics(completeness=0.0, consistency=0.0, accuracy=0.0, freshness=100.0, uniqueness=0.0)

        count = len(players)
        max_rank = CATEGORY_EXPECTATIONS[expected].max_rank

        filled = 0
        for p in players:
            filled += sum(
                (
                    bool(p.name),
                    isinstance(p.category, Category),
                    _valid_rank(p.average_rank) is not None,
                    p.team is not None,
                    p.projected_points is not None,
                    p.tier is not None,
                )
            )
        completeness = filled / (count * 6) * 100

        has_team = sum(1 for p in players if p.team) / count
        has_points = sum(1 for p in players if p.projected_points) / count
        has_experts = sum(1 for p in players if p.expert_ranks) / count
        consistency = (has_team + has_points + has_experts) / 3 * 100

        in_range = 0
        for p in players:
            rank = _valid_rank(p.average_rank)
            if rank is not None and 1 <= rank <= max_rank * 1.5:
                in_range += 1
        accuracy = in_range / count * 100

        unique = len({player_key(p.name or "", p.team or "") for p in players})
        uniqueness = unique / count * 100

        return QualityMetrics(
            completeness=completeness,
            consistency=consistency,
            accuracy=accuracy,
            freshness=100.0,
            uniqueness=uniqueness,
        )

    @staticmethod
    def _score(metrics: QualityMetrics, warning_count: int, error_count: int) -> int:
        base = sum(getattr(metrics, name) * weight for name, weight in METRIC_WEIGHTS.items())
        penalty = min(warning_count * WARNING_PENALTY, MAX_WARNING_PENALTY) + min(
            error_count * ERROR_PENALTY, MAX_ERROR_PENALTY
        )
        return max(0, round(base - penalty))
