import logging
from collections.abc import Mapping

import httpx

from fantasy_football_rankings.sources.errors import SourceNetworkError

logger = logging.getLogger(__name__)

BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def create_http_client(timeout: float = 30.0) -> httpx.AsyncClient:
    """Shared async client for every HTTP-backed source."""
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0), headers=BROWSER_HEADERS)


async def get_checked(
    client: httpx.AsyncClient,
    url: str,
    *,
    label: str,
    params: Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """GET ``url`` and map transport or status failures to SourceNetworkError."""
    logger.debug("GET %s params=%s", url, dict(params or {}))
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SourceNetworkError(f"{label} returned HTTP {e.response.status_code}", cause=e) from e
    except httpx.TransportError as e:
        raise SourceNetworkError(f"{label} request failed", cause=e) from e
    return response
