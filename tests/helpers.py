from datetime import datetime, timezone
from typing import Dict, List, Optional

from headline_feed.exceptions import FetchError
from headline_feed.models import Headline

NOW = datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)
NOW_ISO = "2026-10-19T09:00:00.000Z"


def make_headline(title, source="X", category="tech", timestamp=NOW_ISO, id=None, url=None):
    return Headline(
        id=id or f"{category}-{source}-{title}",
        title=title,
        url=url or f"https://example.com/{source}/{abs(hash(title))}",
        source=source,
        category=category,
        timestamp=timestamp,
    )


def rss_document(items) -> str:
    """items: iterable of (title, link, pubDate or None)."""
    parts = ['<?xml version="1.0" encoding="UTF-8"?>', '<rss version="2.0"><channel><title>Feed</title>']
    for title, link, pub in items:
        parts.append("<item>")
        parts.append(f"<title>{title}</title><link>{link}</link>")
        if pub is not None:
            parts.append(f"<pubDate>{pub}</pubDate>")
        parts.append("</item>")
    parts.append("</channel></rss>")
    return "".join(parts)


class FakeFetch:
    """Stands in for transport.fetch_document; maps URL -> body text or exception."""

    def __init__(self, pages: Dict[str, object]) -> None:
        self.pages = pages
        self.calls: List[str] = []
        self.headers: List[Optional[Dict[str, str]]] = []
        self.raw: List[bool] = []

    async def __call__(self, url, headers=None, *, timeout=10.0, raw=False):
        self.calls.append(url)
        self.headers.append(headers)
        self.raw.append(raw)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(f"HTTP 404 for {url}")
        if isinstance(page, BaseException):
            raise page
        if callable(page):
            return await page()
        return page
