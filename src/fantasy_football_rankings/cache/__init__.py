from fantasy_football_rankings.cache.store import CacheEntry, CacheLookup, CacheStats, Freshness, UnifiedCache
from fantasy_football_rankings.cache.sweeper import CacheSweeper

__all__ = ["CacheEntry", "CacheLookup", "CacheStats", "CacheSweeper", "Freshness", "UnifiedCache"]
