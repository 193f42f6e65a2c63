"""Ranking sources: FantasyPros adapters plus the bundled sample fallback."""

from fantasy_football_rankings.sources.errors import (
    SourceAuthenticationError,
    SourceConfigurationError,
    SourceError,
    SourceNetworkError,
    SourceParseError,
    SourceTimeoutError,
)
from fantasy_football_rankings.sources.fantasypros_api import FantasyProsApiSource
from fantasy_football_rankings.sources.fantasypros_public import FantasyProsPublicSource
from fantasy_football_rankings.sources.fantasypros_session import FantasyProsSessionSource
from fantasy_football_rankings.sources.protocol import RankingSource
from fantasy_football_rankings.sources.registry import DEFAULT_SOURCE_ORDER, SourceRegistry, create_default_registry
from fantasy_football_rankings.sources.sample import load_sample_players

__all__ = [
    "DEFAULT_SOURCE_ORDER",
    "FantasyProsApiSource",
    "FantasyProsPublicSource",
    "FantasyProsSessionSource",
    "RankingSource",
    "SourceAuthenticationError",
    "SourceConfigurationError",
    "SourceError",
    "SourceNetworkError",
    "SourceParseError",
    "SourceRegistry",
    "SourceTimeoutError",
    "create_default_registry",
    "load_sample_players",
]
