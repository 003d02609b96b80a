"""
Link Resolver

Generated records carry URLs that are sometimes invented or dead. Before a
record's link is opened it is checked here; a link that is malformed or
unreachable is replaced by a search-engine query for the record's title.
"""

import re
from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)

URL_PATTERN = re.compile(r"^(https?://[^\s/$.?#].[^\s]*)$", re.IGNORECASE)
DEFAULT_SEARCH_URL = "https://www.google.com/search"

# Servers that refuse HEAD still prove the page exists
_REACHABLE_STATUSES = frozenset({401, 403, 405})


class LinkResolution(BaseModel):
    """Where to send the user for a record link."""

    url: str
    valid: bool
    message: Optional[str] = None


def search_url(title: str, base_url: str = DEFAULT_SEARCH_URL) -> str:
    return f"{base_url}?{urlencode({'q': title})}"


async def validate_url(
    url: Optional[str],
    http_client: httpx.AsyncClient,
    timeout: float = 5.0,
) -> bool:
    """True if the URL is well-formed and answers a HEAD request."""
    if not url or not URL_PATTERN.match(url):
        return False

    try:
        response = await http_client.head(url, follow_redirects=True, timeout=timeout)
    except httpx.HTTPError as e:
        logger.debug("URL validation failed", url=url, error=str(e))
        return False

    return response.status_code < 400 or response.status_code in _REACHABLE_STATUSES


async def resolve_link(
    url: Optional[str],
    title: str,
    http_client: httpx.AsyncClient,
    search_base_url: str = DEFAULT_SEARCH_URL,
) -> LinkResolution:
    """
    Decide which URL to open for a record.

    Args:
        url: The record's URL (may be missing or invented)
        title: The record's title, used for the search fallback
        http_client: Client used for the HEAD probe
        search_base_url: Search engine used as the fallback

    Returns:
        LinkResolution with the original URL when valid, otherwise a search
        URL and a user-facing message
    """
    if await validate_url(url, http_client):
        return LinkResolution(url=url or "", valid=True)

    logger.warning("Record link unreachable, falling back to search", url=url, title=title)
    return LinkResolution(
        url=search_url(title, search_base_url),
        valid=False,
        message=(
            f'The link for "{title}" appears to be invalid or unreachable. '
            "Try searching for it instead."
        ),
    )
