"""In-memory TTL cache with LRU eviction and freshness classes.

Entries age through three classes: FRESH for the first 80% of their TTL,
STALE for the remainder, EXPIRED afterwards. Expired entries are evicted
lazily by ``get`` and in bulk by ``prune``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any

from fantasy_football_rankings.cache.keys import key_segments

if TYPE_CHECKING:
    from collections.abc import Callable

    from fantasy_football_rankings.domain.player import Category, ScoringFormat

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 900.0
DEFAULT_MAX_ENTRIES = 1000
STALE_FRACTION = 0.8


class Freshness(StrEnum):
    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"


@dataclass
class CacheEntry[T]:
    data: T
    created_at: float
    expires_at: float
    source: str
    hit_count: int = 0
    last_accessed_at: float = 0.0

    def age(self, now: float) -> float:
        return now - self.created_at

    def freshness(self, now: float) -> Freshness:
        ttl = self.expires_at - self.created_at
        age = self.age(now)
        if age >= ttl:
            return Freshness.EXPIRED
        if age >= ttl * STALE_FRACTION:
            return Freshness.STALE
        return Freshness.FRESH


@dataclass(frozen=True)
class CacheLookup[T]:
    """Outcome of a cache read. ``hit`` is False for absent or evicted keys."""

    hit: bool
    data: T | None = None
    freshness: Freshness | None = None
    source: str | None = None
    age: float = 0.0

    @property
    def is_stale(self) -> bool:
        return self.freshness is Freshness.STALE

    @property
    def is_expired(self) -> bool:
        return self.freshness is Freshness.EXPIRED


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    hits: int
    misses: int
    sets: int
    deletes: int
    evictions: int
    hit_rate: float
    oldest_entry: str | None
    most_accessed: str | None


class UnifiedCache:
    """Single-process key/value cache shared by every fetch path."""

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str, allow_stale: bool = False) -> CacheLookup[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            logger.debug("Cache miss: %s", key)
            return CacheLookup(hit=False)

        now = self._clock()
        freshness = entry.freshness(now)
        if freshness is Freshness.EXPIRED and not allow_stale:
            del self._entries[key]
            self._deletes += 1
            self._misses += 1
            logger.debug("Cache entry expired: %s", key)
            return CacheLookup(hit=False, freshness=Freshness.EXPIRED, source=entry.source, age=entry.age(now))

        entry.hit_count += 1
        entry.last_accessed_at = now
        self._hits += 1
        logger.debug("Cache hit: %s (%s)", key, freshness)
        return CacheLookup(hit=True, data=entry.data, freshness=freshness, source=entry.source, age=entry.age(now))

    def set(self, key: str, data: Any, ttl: float | None = None, source: str = "unknown") -> None:
        ttl = self._default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        if key not in self._entries and len(self._entries) >= self._max_entries:
            self._evict_lru()

        now = self._clock()
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(
            data=data,
            created_at=now,
            expires_at=now + ttl,
            source=source,
            last_accessed_at=now,
        )
        self._sets += 1
        logger.debug("Cache set: %s (ttl=%ss, source=%s)", key, ttl, source)

    def has(self, key: str, allow_stale: bool = False) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        return allow_stale or entry.freshness(self._clock()) is not Freshness.EXPIRED

    def inspect(self, key: str) -> CacheEntry[Any] | None:
        return self._entries.get(key)

    def delete(self, key: str) -> bool:
        if self._entries.pop(key, None) is None:
            return False
        self._deletes += 1
        return True

    def clear(self) -> None:
        """Remove every entry and reset the counters."""
        self._entries.clear()
        self._reset_counters()

    def keys(self, pattern: str | None = None) -> list[str]:
        if pattern is None:
            return list(self._entries)
        return [k for k in self._entries if fnmatchcase(k, pattern)]

    def prune(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.freshness(now) is Freshness.EXPIRED]
        for key in expired:
            del self._entries[key]
        self._deletes += len(expired)
        if expired:
            logger.info("Pruned %d expired cache entries", len(expired))
        return len(expired)

    def invalidate_by_category(self, category: Category) -> int:
        return self._invalidate_where(lambda segments: len(segments) > 1 and segments[1] == category.lower())

    def invalidate_by_format(self, scoring_format: ScoringFormat) -> int:
        return self._invalidate_where(lambda segments: len(segments) > 2 and segments[2] == scoring_format.value)

    def _invalidate_where(self, predicate: Callable[[list[str]], bool]) -> int:
        doomed = [k for k in self._entries if predicate(key_segments(k))]
        for key in doomed:
            del self._entries[key]
        self._deletes += len(doomed)
        logger.debug("Invalidated %d cache entries", len(doomed))
        return len(doomed)

    def _evict_lru(self) -> None:
        # min() keeps the first of equal timestamps, i.e. the earliest inserted.
        victim = min(self._entries, key=lambda k: self._entries[k].last_accessed_at)
        del self._entries[victim]
        self._evictions += 1
        logger.debug("Cache evicted LRU entry: %s", victim)

    def get_stats(self) -> CacheStats:
        lookups = self._hits + self._misses
        oldest = min(self._entries.values(), key=lambda e: e.created_at, default=None)
        most_accessed = max(self._entries, key=lambda k: self._entries[k].hit_count, default=None)
        return CacheStats(
            total_entries=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            sets=self._sets,
            deletes=self._deletes,
            evictions=self._evictions,
            hit_rate=round(self._hits / lookups * 100, 2) if lookups else 0.0,
            oldest_entry=datetime.fromtimestamp(oldest.created_at, tz=UTC).isoformat() if oldest else None,
            most_accessed=most_accessed,
        )
