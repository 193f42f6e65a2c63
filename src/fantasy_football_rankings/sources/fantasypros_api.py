"""FantasyPros consensus-rankings JSON API source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fantasy_football_rankings.domain.fetch_result import SourceTag
from fantasy_football_rankings.domain.player import Category, ScoringFormat
from fantasy_football_rankings.sources._http import get_checked
from fantasy_football_rankings.sources.ecr import parse_ecr_rows
from fantasy_football_rankings.sources.errors import SourceConfigurationError, SourceNetworkError, SourceParseError

if TYPE_CHECKING:
    import httpx

    from fantasy_football_rankings.domain.player import Player

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.fantasypros.com/public/v2/json/nfl"

_API_SCORING: dict[ScoringFormat, str] = {
    ScoringFormat.STANDARD: "STD",
    ScoringFormat.PPR: "PPR",
    ScoringFormat.HALF_PPR: "HALF",
}


class FantasyProsApiSource:
    """Keyed access to the FantasyPros public JSON API.

    Fails fast with SourceConfigurationError when no API key is configured,
    before any request is made.
    """

    tag = SourceTag.PRIMARY_API

    def __init__(self, client: httpx.AsyncClient, api_key: str, season: int, base_url: str = API_BASE_URL) -> None:
        self._client = client
        self._api_key = api_key
        self._season = season
        self._base_url = base_url

    async def fetch(self, category: Category, scoring_format: ScoringFormat) -> list[Player]:
        if not self._api_key:
            raise SourceConfigurationError("FantasyPros API key not configured")

        url = f"{self._base_url}/{self._season}/consensus-rankings"
        params = {"scoring": _API_SCORING[scoring_format]}
        if category is not Category.OVERALL:
            params["position"] = category.value
        headers = {"x-api-key": self._api_key, "Accept": "application/json"}

        try:
            response = await get_checked(self._client, url, label="FantasyPros API", params=params, headers=headers)
        except SourceNetworkError as e:
            rejection = _rejection(e)
            if rejection is None:
                raise
            raise rejection from e

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise SourceParseError("FantasyPros API returned invalid JSON", cause=e) from e

        rows = payload.get("players") if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise SourceParseError("FantasyPros API response has no players list")

        players = parse_ecr_rows(rows, category)
        logger.info("FantasyPros API returned %d %s players (%s)", len(players), category, scoring_format)
        return players


def _rejection(error: SourceNetworkError) -> SourceNetworkError | None:
    status = getattr(getattr(error.cause, "response", None), "status_code", None)
    if status == 401:
        return SourceNetworkError("Invalid FantasyPros API key", cause=error.cause)
    if status == 429:
        return SourceNetworkError("FantasyPros API rate limit exceeded", cause=error.cause)
    return None
