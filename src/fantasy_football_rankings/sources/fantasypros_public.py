"""Anonymous access to the public FantasyPros ranking pages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fantasy_football_rankings.domain.fetch_result import SourceTag
from fantasy_football_rankings.domain.player import Category, ScoringFormat
from fantasy_football_rankings.sources._http import get_checked
from fantasy_football_rankings.sources.ecr import extract_ecr_rows, parse_ecr_rows

if TYPE_CHECKING:
    import httpx

    from fantasy_football_rankings.domain.player import Player

logger = logging.getLogger(__name__)

PUBLIC_BASE_URL = "https://www.fantasypros.com/nfl/rankings"

_FORMAT_PREFIX: dict[ScoringFormat, str] = {
    ScoringFormat.STANDARD: "",
    ScoringFormat.HALF_PPR: "half-point-ppr-",
    ScoringFormat.PPR: "ppr-",
}


def public_rankings_url(category: Category, scoring_format: ScoringFormat, base_url: str = PUBLIC_BASE_URL) -> str:
    prefix = _FORMAT_PREFIX[scoring_format]
    if category is Category.OVERALL:
        page = "consensus-cheatsheets.php" if scoring_format is ScoringFormat.STANDARD else f"{prefix}cheatsheets.php"
    elif category is Category.FLEX:
        page = f"{prefix}flex.php"
    elif category in (Category.QB, Category.K, Category.DST):
        # Reception scoring does not change these boards.
        page = f"{category.lower()}.php"
    else:
        page = f"{prefix}{category.lower()}.php"
    return f"{base_url}/{page}"


class FantasyProsPublicSource:
    """Scrapes the ``ecrData`` block that the public pages embed."""

    tag = SourceTag.PUBLIC_ACCESS

    def __init__(self, client: httpx.AsyncClient, base_url: str = PUBLIC_BASE_URL) -> None:
        self._client = client
        self._base_url = base_url

    async def fetch(self, category: Category, scoring_format: ScoringFormat) -> list[Player]:
        url = public_rankings_url(category, scoring_format, self._base_url)
        response = await get_checked(self._client, url, label="FantasyPros public page")
        players = parse_ecr_rows(extract_ecr_rows(response.text), category)
        logger.info("FantasyPros public page returned %d %s players (%s)", len(players), category, scoring_format)
        return players
