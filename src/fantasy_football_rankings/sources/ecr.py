"""Parsing of FantasyPros expert-consensus (ECR) payloads into players.

Both the JSON API and the rendered ranking pages carry the same row shape::

    {"player_id": 17240, "player_name": "Josh Allen", "player_team_id": "BUF",
     "player_position_id": "QB", "rank_ecr": 1, "rank_ave": "1.4",
     "rank_std": "0.8", "rank_min": "1", "rank_max": "4", "tier": 1}

The pages embed it as ``var ecrData = {...};`` inside a script tag.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import replace
from statistics import NormalDist
from typing import TYPE_CHECKING, Any

from fantasy_football_rankings.domain.player import FLEX_ELIGIBLE, Category, Player
from fantasy_football_rankings.sources.errors import SourceParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

_ECR_DATA_PATTERN = re.compile(r"var\s+ecrData\s*=\s*(\{.*?\});", re.DOTALL)

_BASE_POINTS: dict[Category, float] = {
    Category.QB: 380.0,
    Category.RB: 300.0,
    Category.WR: 260.0,
    Category.TE: 180.0,
    Category.K: 130.0,
    Category.DST: 135.0,
}
_DEFAULT_BASE_POINTS = 200.0
_POINTS_DECAY = 0.03
_EXPERT_COUNT = 10


def extract_ecr_rows(html: str) -> list[dict[str, Any]]:
    """Pull the ``ecrData.players`` rows out of a rendered ranking page."""
    match = _ECR_DATA_PATTERN.search(html)
    if match is None:
        raise SourceParseError("No ecrData block found in page")
    try:
        payload = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise SourceParseError("ecrData block is not valid JSON", cause=e) from e
    rows = payload.get("players") if isinstance(payload, dict) else None
    if not isinstance(rows, list):
        raise SourceParseError("ecrData block has no players list")
    return rows


def estimate_projected_points(category: Category, rank: float) -> float:
    """Season projection estimate from rank, decaying exponentially."""
    base = _BASE_POINTS.get(category, _DEFAULT_BASE_POINTS)
    return float(round(base * math.exp(-rank * _POINTS_DECAY)))


def spread_expert_ranks(
    average: float,
    std: float,
    low: float | None = None,
    high: float | None = None,
) -> tuple[int, ...]:
    """Ten expert ranks spread over the normal quantiles of (average, std)."""
    if std <= 0:
        return tuple(max(1, round(average)) for _ in range(_EXPERT_COUNT))
    dist = NormalDist(average, std)
    lower = low if low is not None else max(1.0, average - 2 * std)
    upper = high if high is not None else average + 2 * std
    ranks: list[int] = []
    for i in range(_EXPERT_COUNT):
        value = dist.inv_cdf((i + 0.5) / _EXPERT_COUNT)
        value = min(max(value, lower), upper)
        ranks.append(max(1, round(value)))
    return tuple(ranks)


def _to_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _row_category(row: Mapping[str, Any], requested: Category) -> Category | None:
    if requested.is_concrete:
        return requested
    raw = str(row.get("player_position_id") or row.get("position") or "")
    try:
        category = Category.parse(raw)
    except ValueError:
        return None
    return category if category.is_concrete else None


def parse_ecr_row(row: Mapping[str, Any], requested: Category, index: int) -> Player | None:
    """Parse one ECR row, or None to skip it."""
    name = str(row.get("player_name") or row.get("name") or "").strip()
    if not name:
        logger.warning("Skipping ECR row %d with no player name", index + 1)
        return None

    category = _row_category(row, requested)
    if category is None:
        logger.warning("Skipping %s: unrecognised position %r", name, row.get("player_position_id"))
        return None
    if requested is Category.FLEX and category not in FLEX_ELIGIBLE:
        return None

    rank = _to_float(row.get("rank_ave")) or _to_float(row.get("rank_ecr")) or _to_float(row.get("pos_rank"))
    if rank is None:
        rank = float(index + 1)
    if rank <= 0:
        logger.warning("Skipping %s: non-positive rank %s", name, rank)
        return None

    std = _to_float(row.get("rank_std"))
    if std is None:
        std = max(0.5, rank * 0.1)
    min_rank = _to_float(row.get("rank_min"))
    max_rank = _to_float(row.get("rank_max"))
    tier = _to_float(row.get("tier"))

    return Player(
        id=str(row.get("player_id") or f"fp-{requested.lower()}-{index + 1}"),
        name=name,
        team=str(row.get("player_team_id") or row.get("team") or "FA").upper(),
        category=category,
        average_rank=rank,
        standard_deviation=std,
        projected_points=estimate_projected_points(category, _to_float(row.get("rank_ecr")) or rank),
        tier=int(tier) if tier is not None else None,
        expert_ranks=spread_expert_ranks(rank, std, min_rank, max_rank),
        min_rank=min_rank,
        max_rank=max_rank,
    )


def parse_ecr_rows(rows: Iterable[Mapping[str, Any]], category: Category) -> list[Player]:
    """Parse every usable row; an empty outcome is a parse failure.

    FLEX pools are re-ranked 1..N in source order because the rows carry
    overall ranks.
    """
    players: list[Player] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            continue
        player = parse_ecr_row(row, category, index)
        if player is not None:
            players.append(player)

    if not players:
        raise SourceParseError(f"No usable {category} players in payload")

    if category is Category.FLEX:
        players.sort(key=lambda p: p.average_rank)
        players = [_rerank(p, i + 1) for i, p in enumerate(players)]
    return players


def _rerank(player: Player, rank: int) -> Player:
    return replace(player, average_rank=float(rank))
