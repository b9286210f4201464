from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Optional, Union

import httpx

from .exceptions import FetchError

logger = logging.getLogger(__name__)

# Some outlets reject default client identifiers.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# fetch(url, headers, *, timeout, raw=False) -> str, or bytes when raw
DocumentFetcher = Callable[..., Awaitable[Union[str, bytes]]]


async def fetch_document(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    *,
    timeout: float = 10.0,
    client: Optional[httpx.AsyncClient] = None,
    raw: bool = False,
) -> Union[str, bytes]:
    """
    GET `url` and return the decoded body, or the undecoded bytes when `raw`.

    Raises FetchError on transport failure or a non-2xx status.
    """
    merged = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        merged.update(headers)

    try:
        if client is not None:
            resp = await client.get(url, headers=merged, timeout=timeout, follow_redirects=True)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as own:
                resp = await own.get(url, headers=merged, timeout=timeout)
    except httpx.TimeoutException as e:
        raise FetchError(f"timed out fetching {url}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"request failed for {url} ({e})") from e

    if not resp.is_success:
        raise FetchError(f"HTTP {resp.status_code} for {url}")

    logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
    return resp.content if raw else resp.text
