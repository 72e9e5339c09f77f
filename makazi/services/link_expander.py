"""
Expand shortened map links (maps.app.goo.gl/..., goo.gl/maps/...) by following redirects.

Short links carry no coordinates; the expanded URL usually has an @lat,lng or /place/ segment.
"""
from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from makazi.config import EXPAND_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10


class LinkExpandError(RuntimeError):
    """Raised when the short link cannot be followed to its destination."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def is_http_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def expand_link(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float = EXPAND_TIMEOUT_SECONDS,
) -> str:
    """
    Return the final URL after redirects.
    Raises ValueError for non-http(s) input, LinkExpandError on transport failure.
    """
    url = (url or "").strip()
    if not is_http_url(url):
        raise ValueError("url must be an absolute http(s) URL")

    try:
        r = await client.get(url, follow_redirects=True, timeout=timeout)
    except httpx.TooManyRedirects as e:
        raise LinkExpandError(f"Too many redirects expanding {url}") from e
    except httpx.HTTPError as e:
        raise LinkExpandError(f"Expand failed: {e!r}") from e

    full_url = str(r.url)
    logger.info("link_expanded status=%s hops=%d", r.status_code, len(r.history))
    return full_url
