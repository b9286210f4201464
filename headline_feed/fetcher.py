from __future__ import annotations

import io
import logging
from typing import List, Optional, Union

import feedparser
from bs4 import BeautifulSoup

from .exceptions import ExtractionError, FetchError
from .models import FeedDescriptor, HtmlFeed, RawCandidate, RssFeed
from .parser import candidate_from_element, candidate_from_entry
from .transport import DEFAULT_USER_AGENT, DocumentFetcher, fetch_document

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 10


def parse_rss_candidates(
    document: Union[str, bytes], source_name: str, *, limit: int = MAX_CANDIDATES
) -> List[RawCandidate]:
    """
    Parse an RSS/Atom document and return the first `limit` items as candidates.

    Bytes are handed to feedparser as-is so the XML prolog decides the encoding.
    Raises ExtractionError when the document yields no usable item.
    """
    if isinstance(document, bytes):
        feed = feedparser.parse(io.BytesIO(document))
    else:
        # Already decoded text: the utf-8 header overrides a stale XML encoding declaration
        feed = feedparser.parse(
            io.BytesIO(document.encode("utf-8")),
            response_headers={"content-type": "application/xml; charset=utf-8"},
        )
    entries = getattr(feed, "entries", None) or []

    if not entries:
        msg = "feed has no items"
        exc = getattr(feed, "bozo_exception", None)
        if getattr(feed, "bozo", 0) and exc:
            msg = f"invalid feed ({exc})"
        raise ExtractionError(msg, source_name)

    out: List[RawCandidate] = []
    for entry in entries[: max(0, limit)]:
        cand = candidate_from_entry(entry)
        if cand.title and cand.link:
            out.append(cand)
    if not out:
        raise ExtractionError("no item carried both title and link", source_name)
    return out


def parse_html_candidates(
    html: str, selector: str, source_name: str, *, limit: int = MAX_CANDIDATES
) -> List[RawCandidate]:
    """
    Select headline links from an HTML page.

    Only the first `limit` matched elements are considered; elements without text
    or href are skipped. Raises ExtractionError when nothing usable remains.
    """
    soup = BeautifulSoup(html, "html.parser")
    try:
        elements = soup.select(selector)
    except ValueError as e:
        # soupsieve raises SelectorSyntaxError, a ValueError subclass
        raise ExtractionError(f"bad selector {selector!r} ({e})", source_name) from e

    out: List[RawCandidate] = []
    for el in elements[: max(0, limit)]:
        cand = candidate_from_element(el)
        if cand is not None:
            out.append(cand)
    if not out:
        raise ExtractionError(f"selector {selector!r} matched no headline links", source_name)
    return out


async def fetch_candidates(
    descriptor: FeedDescriptor,
    *,
    fetch: Optional[DocumentFetcher] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 10.0,
    limit: int = MAX_CANDIDATES,
) -> List[RawCandidate]:
    """
    Retrieve one source and extract its raw headline candidates.

    Raises FetchError (or its subclass ExtractionError) on any failure.
    """
    fetch = fetch or fetch_document
    headers = {"User-Agent": user_agent}

    try:
        if isinstance(descriptor, RssFeed):
            body = await fetch(descriptor.url, headers, timeout=timeout, raw=True)
        else:
            body = await fetch(descriptor.url, headers, timeout=timeout)
    except FetchError as e:
        if not e.source_name:
            raise type(e)(e.reason, descriptor.source_name) from e
        raise

    if isinstance(descriptor, RssFeed):
        candidates = parse_rss_candidates(body, descriptor.source_name, limit=limit)
    elif isinstance(descriptor, HtmlFeed):
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        candidates = parse_html_candidates(body, descriptor.selector, descriptor.source_name, limit=limit)
    else:
        raise TypeError(f"Unsupported feed descriptor: {descriptor!r}")

    logger.info("OK %s - %d candidates", descriptor.source_name, len(candidates))
    return candidates
