"""Fetch orchestration across the ranking source fallback chain.

For one category the orchestrator walks a priority-ordered list of sources:

    check cache -> hit: return
                -> miss: try source[i] -> ok: validate, cache, snapshot, return
                                       -> failed: i += 1
                -> exhausted: return the bundled sample, success=False

It is the single error boundary of the pipeline. No exception from a source,
the validator, the normalizer or the snapshot sink escapes a public method;
health is reported through ``FetchResult.success`` and ``FetchResult.error``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fantasy_football_rankings.cache.keys import overall_key, player_key
from fantasy_football_rankings.domain.fetch_result import FetchMetadata, FetchResult, SourceTag
from fantasy_football_rankings.domain.player import CONCRETE_CATEGORIES, Category
from fantasy_football_rankings.enrichment import enrich_players
from fantasy_football_rankings.result import Err, Ok
from fantasy_football_rankings.sources.errors import SourceError, SourceParseError, SourceTimeoutError
from fantasy_football_rankings.sources.sample import load_sample_players
from fantasy_football_rankings.validation.validator import DataValidator
from fantasy_football_rankings.valuation.normalizer import (
    calculate_overall_rankings,
    overall_ranked_players,
    validate_overall_rankings,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from fantasy_football_rankings.cache.store import CacheStats, UnifiedCache
    from fantasy_football_rankings.domain.player import Player, ScoringFormat
    from fantasy_football_rankings.domain.validation import ValidationResult
    from fantasy_football_rankings.persistence.protocol import SnapshotSink
    from fantasy_football_rankings.result import Result
    from fantasy_football_rankings.sources.protocol import RankingSource
    from fantasy_football_rankings.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class FetchOptions:
    """Per-call fetch options. ``timeout`` of None uses the orchestrator default."""

    force_refresh: bool = False
    timeout: float | None = None
    preferred_source: SourceTag | None = None


async def attempt_source(
    source: RankingSource,
    category: Category,
    scoring_format: ScoringFormat,
    timeout: float,
) -> Result[list[Player], SourceError]:
    """Run one source fetch against the timeout and fold the outcome into a Result."""
    try:
        players = await asyncio.wait_for(source.fetch(category, scoring_format), timeout)
    except SourceError as e:
        return Err(e)
    except TimeoutError as e:
        return Err(SourceTimeoutError(f"{source.tag} timed out after {timeout}s", cause=e))
    except Exception as e:
        return Err(SourceError(f"{source.tag} failed unexpectedly", cause=e))

    if not players:
        return Err(SourceParseError(f"{source.tag} returned no players"))
    return Ok(list(players))


class Orchestrator:
    def __init__(
        self,
        registry: SourceRegistry,
        cache: UnifiedCache,
        *,
        validator: DataValidator | None = None,
        sink: SnapshotSink | None = None,
        default_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._cache = cache
        self._validator = validator or DataValidator(clock=clock)
        self._sink = sink
        self._default_timeout = default_timeout
        self._clock = clock

    async def fetch_category(
        self,
        category: Category,
        scoring_format: ScoringFormat,
        options: FetchOptions | None = None,
    ) -> FetchResult:
        options = options or FetchOptions()
        key = player_key(category, scoring_format)

        if not options.force_refresh:
            lookup = self._cache.get(key)
            if lookup.hit:
                return lookup.data

        timeout = options.timeout if options.timeout is not None else self._default_timeout
        last_error: SourceError | None = None

        for source in self._registry.chain(options.preferred_source):
            logger.info("Fetching %s (%s) from %s", category, scoring_format, source.tag)
            match await attempt_source(source, category, scoring_format, timeout):
                case Ok(players):
                    return self._accept(key, category, scoring_format, source.tag, players)
                case Err(error):
                    last_error = error
                    logger.warning("Source %s failed for %s (%s): %s", source.tag, category, scoring_format, error)

        logger.error("All sources exhausted for %s (%s); serving sample data", category, scoring_format)
        reason = f"All sources failed; last error: {last_error}" if last_error else "No ranking sources configured"
        return self._sample_result(category, scoring_format, reason)

    async def fetch_all_categories(
        self,
        scoring_format: ScoringFormat,
        options: FetchOptions | None = None,
    ) -> dict[Category, FetchResult]:
        """Fetch every concrete category concurrently. One failure never aborts the others."""
        outcomes = await asyncio.gather(
            *(self.fetch_category(category, scoring_format, options) for category in CONCRETE_CATEGORIES),
            return_exceptions=True,
        )

        results: dict[Category, FetchResult] = {}
        for category, outcome in zip(CONCRETE_CATEGORIES, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error("Fetch task for %s raised: %s", category, outcome)
                results[category] = self._sample_result(category, scoring_format, f"Fetch failed: {outcome}")
            else:
                results[category] = outcome
        return results

    async def fetch_overall(
        self,
        scoring_format: ScoringFormat,
        options: FetchOptions | None = None,
    ) -> FetchResult:
        """Merge every successful category and rank the pool by normalized value."""
        options = options or FetchOptions()
        key = overall_key(scoring_format)

        if not options.force_refresh:
            lookup = self._cache.get(key)
            if lookup.hit:
                return lookup.data

        by_category = await self.fetch_all_categories(scoring_format, options)
        succeeded = [result for result in by_category.values() if result.success]
        for category, result in by_category.items():
            if not result.success:
                logger.warning("Overall view degraded: %s unavailable (%s)", category, result.error)

        if not succeeded:
            return self._overall_sample(scoring_format, "All categories failed")

        pool = [player for result in succeeded for player in result.players]
        try:
            calculations = calculate_overall_rankings(pool, scoring_format)
            validate_overall_rankings(calculations)
        except Exception as e:
            logger.error("Normalization failed: %s", e)
            return self._overall_sample(scoring_format, f"Normalization failed: {e}")

        players = tuple(overall_ranked_players(calculations))
        source = succeeded[0].source
        result = FetchResult(
            players=players,
            source=source,
            success=True,
            metadata=self._metadata(Category.OVERALL, scoring_format, len(players)),
            validation=self._validate(players, Category.OVERALL, source),
            rankings=tuple(calculations),
        )
        self._cache.set(key, result, source=source.value)
        return result

    async def fetch_enhanced_category(
        self,
        category: Category,
        scoring_format: ScoringFormat,
        options: FetchOptions | None = None,
    ) -> FetchResult:
        """``fetch_category`` with bye week and consensus level filled in."""
        result = await self.fetch_category(category, scoring_format, options)
        return replace(result, players=tuple(enrich_players(result.players)))

    def clear_cache(self, category: Category | None = None, scoring_format: ScoringFormat | None = None) -> int:
        """Drop cached results; returns the number of entries removed."""
        if category is not None and scoring_format is not None:
            return int(self._cache.delete(player_key(category, scoring_format)))
        if category is not None:
            return self._cache.invalidate_by_category(category)
        if scoring_format is not None:
            return self._cache.invalidate_by_format(scoring_format)
        removed = len(self._cache)
        self._cache.clear()
        return removed

    def get_cache_stats(self) -> CacheStats:
        return self._cache.get_stats()

    def _accept(
        self,
        key: str,
        category: Category,
        scoring_format: ScoringFormat,
        source: SourceTag,
        players: Sequence[Player],
    ) -> FetchResult:
        logger.info("Fetched %d %s players (%s) from %s", len(players), category, scoring_format, source)
        result = FetchResult(
            players=tuple(players),
            source=source,
            success=True,
            metadata=self._metadata(category, scoring_format, len(players)),
            validation=self._validate(players, category, source),
        )
        self._cache.set(key, result, source=source.value)
        self._store_snapshot(result)
        return result

    def _validate(self, players: Sequence[Player], category: Category, source: SourceTag) -> ValidationResult | None:
        try:
            validation = self._validator.validate(players, category, source.value)
        except Exception as e:
            logger.error("Validation of %s from %s raised: %s", category, source, e)
            return None
        if not validation.is_valid:
            logger.warning(
                "Low-quality %s data from %s: score=%d errors=%d",
                category,
                source,
                validation.score,
                len(validation.errors),
            )
        return validation

    def _store_snapshot(self, result: FetchResult) -> None:
        if self._sink is None:
            return
        try:
            self._sink.store(
                result.metadata.category,
                result.metadata.scoring_format,
                result.players,
                result.metadata,
                result.source,
            )
        except Exception as e:
            logger.warning("Snapshot sink failed for %s: %s", result.metadata.category, e)

    def _metadata(self, category: Category, scoring_format: ScoringFormat, count: int) -> FetchMetadata:
        return FetchMetadata(timestamp=self._clock(), category=category, scoring_format=scoring_format, count=count)

    def _sample_result(self, category: Category, scoring_format: ScoringFormat, error: str) -> FetchResult:
        players = tuple(load_sample_players(category, scoring_format))
        return FetchResult(
            players=players,
            source=SourceTag.SAMPLE_FALLBACK,
            success=False,
            metadata=self._metadata(category, scoring_format, len(players)),
            error=error,
        )

    def _overall_sample(self, scoring_format: ScoringFormat, error: str) -> FetchResult:
        logger.error("Overall view unavailable (%s); serving normalized sample data", error)
        calculations = calculate_overall_rankings(load_sample_players(Category.OVERALL, scoring_format), scoring_format)
        players = tuple(overall_ranked_players(calculations))
        return FetchResult(
            players=players,
            source=SourceTag.SAMPLE_FALLBACK,
            success=False,
            metadata=self._metadata(Category.OVERALL, scoring_format, len(players)),
            error=error,
            rankings=tuple(calculations),
        )
