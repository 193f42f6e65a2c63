"""Authenticated FantasyPros session that scrapes the members' cheat sheets."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

import httpx

from fantasy_football_rankings.domain.fetch_result import SourceTag
from fantasy_football_rankings.domain.player import Category, ScoringFormat
from fantasy_football_rankings.sources._http import get_checked
from fantasy_football_rankings.sources.ecr import extract_ecr_rows, parse_ecr_rows
from fantasy_football_rankings.sources.errors import (
    SourceAuthenticationError,
    SourceConfigurationError,
    SourceNetworkError,
    SourceParseError,
)

if TYPE_CHECKING:
    from fantasy_football_rankings.domain.player import Player

logger = logging.getLogger(__name__)

LOGIN_URL = "https://secure.fantasypros.com/accounts/login/"
RANKINGS_BASE_URL = "https://www.fantasypros.com/nfl/rankings"

_CSRF_PATTERNS = (
    re.compile(r'name=["\']csrfmiddlewaretoken["\']\s+value=["\']([^"\']+)["\']'),
    re.compile(r'value=["\']([^"\']+)["\']\s+name=["\']csrfmiddlewaretoken["\']'),
)

_FORMAT_PREFIX: dict[ScoringFormat, str] = {
    ScoringFormat.STANDARD: "",
    ScoringFormat.HALF_PPR: "half-point-ppr-",
    ScoringFormat.PPR: "ppr-",
}


def cheatsheet_url(category: Category, scoring_format: ScoringFormat, base_url: str = RANKINGS_BASE_URL) -> str:
    """Members' cheat-sheet page for a category; FLEX reads the overall sheet."""
    prefix = _FORMAT_PREFIX[scoring_format]
    if category in (Category.OVERALL, Category.FLEX):
        page = "consensus-cheatsheets.php" if scoring_format is ScoringFormat.STANDARD else f"{prefix}cheatsheets.php"
    elif category in (Category.QB, Category.K, Category.DST):
        page = f"{category.lower()}-cheatsheets.php"
    else:
        page = f"{prefix}{category.lower()}-cheatsheets.php"
    return f"{base_url}/{page}"


def extract_csrf_token(html: str) -> str | None:
    for pattern in _CSRF_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


class FantasyProsSessionSource:
    """Logs in once per process and reuses the session cookies.

    Missing credentials raise SourceConfigurationError before any request.
    """

    tag = SourceTag.AUTHENTICATED_SESSION

    def __init__(
        self,
        client: httpx.AsyncClient,
        username: str,
        password: str,
        login_url: str = LOGIN_URL,
        base_url: str = RANKINGS_BASE_URL,
    ) -> None:
        self._client = client
        self._username = username
        self._password = password
        self._login_url = login_url
        self._base_url = base_url
        self._authenticated = False
        self._login_lock = asyncio.Lock()

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    async def fetch(self, category: Category, scoring_format: ScoringFormat) -> list[Player]:
        if not self._username or not self._password:
            raise SourceConfigurationError("FantasyPros username/password not configured")

        await self._ensure_logged_in()

        url = cheatsheet_url(category, scoring_format, self._base_url)
        response = await get_checked(self._client, url, label="FantasyPros cheat sheet")
        players = parse_ecr_rows(extract_ecr_rows(response.text), category)
        logger.info("FantasyPros session returned %d %s players (%s)", len(players), category, scoring_format)
        return players

    async def _ensure_logged_in(self) -> None:
        async with self._login_lock:
            if self._authenticated:
                return
            await self._login()
            self._authenticated = True

    async def _login(self) -> None:
        login_page = await get_checked(self._client, self._login_url, label="FantasyPros login page")
        token = extract_csrf_token(login_page.text)
        if token is None:
            raise SourceParseError("CSRF token not found on FantasyPros login page")

        form = {
            "csrfmiddlewaretoken": token,
            "username": self._username,
            "password": self._password,
            "next": "/",
        }
        try:
            response = await self._client.post(
                self._login_url,
                data=form,
                headers={"Referer": self._login_url},
                follow_redirects=False,
            )
        except httpx.TransportError as e:
            raise SourceNetworkError("FantasyPros login request failed", cause=e) from e

        if response.is_redirect:
            location = response.headers.get("location", "")
            if "login" not in location:
                logger.info("Logged in to FantasyPros as %s", self._username)
                return
        elif response.is_success and "csrfmiddlewaretoken" not in response.text:
            logger.info("Logged in to FantasyPros as %s", self._username)
            return
        elif response.status_code >= 500:
            raise SourceNetworkError(f"FantasyPros login returned HTTP {response.status_code}")

        raise SourceAuthenticationError("FantasyPros rejected the supplied credentials")
