from __future__ import annotations

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

import feedparser

from .exceptions import ParseError
from .models import RawCandidate


def to_iso(dt: datetime) -> str:
    """Format as UTC ISO-8601 with millisecond precision and a `Z` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def as_aware(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def parse_timestamp_strict(raw: Any) -> datetime:
    """
    Parse a feed-native timestamp into an aware datetime.

    Tries ISO-8601, then RFC 822 (RSS pubDate), then feedparser's date handlers.
    Raises ParseError when nothing matches.
    """
    if isinstance(raw, datetime):
        return as_aware(raw)
    s = str(raw or "").strip()
    if not s:
        raise ParseError("empty timestamp")

    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        return as_aware(datetime.fromisoformat(iso))
    except ValueError:
        pass

    try:
        return as_aware(parsedate_to_datetime(s))
    except (TypeError, ValueError, IndexError):
        pass

    # feedparser knows many regional formats; the helper is private but stable
    try:
        parsed = feedparser._parse_date(s)  # type: ignore[attr-defined]
    except Exception as e:
        raise ParseError(f"unparseable timestamp: {s!r}") from e
    if isinstance(parsed, time.struct_time):
        return datetime(*parsed[:6], tzinfo=timezone.utc)
    raise ParseError(f"unparseable timestamp: {s!r}")


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Lenient variant of `parse_timestamp_strict`: returns None instead of raising."""
    try:
        return parse_timestamp_strict(raw)
    except ParseError:
        return None


def candidate_from_entry(entry: Dict[str, Any]) -> RawCandidate:
    """
    Map a feedparser entry to a RawCandidate.

    The published value is passed through untouched; a missing date is not an error here.
    """
    title = (entry.get("title") or "").strip()
    link = (entry.get("link") or entry.get("feedburner_origlink") or "").strip()
    if not link:
        # Some feeds only carry the URL in <guid isPermaLink="true">
        guid = entry.get("id")
        if isinstance(guid, str) and guid.startswith(("http://", "https://")):
            link = guid.strip()

    published = None
    for key in ("published", "updated", "created"):
        val = entry.get(key)
        if isinstance(val, str) and val.strip():
            published = val.strip()
            break

    return RawCandidate(title=title, link=link, published_at=published)


def candidate_from_element(el: Any) -> Optional[RawCandidate]:
    """
    Map a BeautifulSoup element matched by a feed selector to a RawCandidate.

    Returns None when the element has no text or no href (itself or a descendant link).
    """
    title = " ".join(el.get_text(" ", strip=True).split())
    href = el.get("href")
    if not href:
        inner = el.select_one("a[href]")
        href = inner.get("href") if inner is not None else None
    if isinstance(href, list):
        href = href[0] if href else None
    href = (href or "").strip()
    if not title or not href:
        return None
    return RawCandidate(title=title, link=href, published_at=None)


def resolve_link(link: str, base_url: str) -> Optional[str]:
    """Resolve `link` against `base_url`; None unless the result is an absolute http(s) URL."""
    try:
        absolute = urljoin(base_url, link.strip())
    except ValueError:
        return None
    if not absolute.startswith(("http://", "https://")):
        return None
    if not urlparse(absolute).netloc:
        return None
    return absolute
