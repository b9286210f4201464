from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from .transport import DocumentFetcher, fetch_document

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 100
MAX_CONTENT_CHARS = 4000

ARTICLE_SELECTORS = (
    ".article-body__content",
    '[data-component="text-block"]',
    ".article-body",
    ".article__body",
    ".content__body",
    ".article-content",
    ".post-content",
    ".entry-content",
)

GENERAL_SELECTORS = (
    "article",
    '[role="article"]',
    "#content",
    ".content",
    ".news-content",
    "#article",
    ".article",
    ".rich_media_content",
    "#js_content",
)

Strategy = Tuple[str, Callable[[BeautifulSoup], Optional[str]]]


@dataclass(frozen=True)
class ExtractedContent:
    content: str
    selector_used: str
    title: str
    meta_description: str
    original_length: int

    def to_dict(self):
        return {
            "content": self.content,
            "selectorUsed": self.selector_used,
            "title": self.title,
            "metaDescription": self.meta_description,
            "originalLength": self.original_length,
            "cleanedLength": len(self.content),
        }


def _squash(text: str) -> str:
    return " ".join(text.split())


def _meta(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    return (tag.get("content") or "").strip() if tag else ""


def _longest_match(selectors: Sequence[str]) -> Callable[[BeautifulSoup], Optional[str]]:
    def run(soup: BeautifulSoup) -> Optional[str]:
        best = ""
        for sel in selectors:
            text = _squash(" ".join(n.get_text(" ") for n in soup.select(sel)))
            logger.debug("selector %s -> %d chars", sel, len(text))
            if len(text) > len(best):
                best = text
        return best or None
    return run


def _body(soup: BeautifulSoup) -> Optional[str]:
    body = soup.body
    return _squash(body.get_text(" ")) if body else None


def _meta_description(soup: BeautifulSoup) -> Optional[str]:
    return _meta(soup, name="description") or _meta(soup, property="og:description") or None


def _paragraphs(soup: BeautifulSoup) -> Optional[str]:
    return _squash(" ".join(p.get_text(" ", strip=True) for p in soup.find_all("p"))) or None


DEFAULT_STRATEGIES: List[Strategy] = [
    ("article", _longest_match(ARTICLE_SELECTORS)),
    ("general", _longest_match(GENERAL_SELECTORS)),
    ("body", _body),
    ("meta:description", _meta_description),
    ("paragraphs", _paragraphs),
]


def extract_content(
    html: str,
    *,
    strategies: Optional[Sequence[Strategy]] = None,
    min_chars: int = MIN_CONTENT_CHARS,
    max_chars: int = MAX_CONTENT_CHARS,
) -> ExtractedContent:
    """
    Run extraction strategies in order and stop at the first one whose text reaches
    `min_chars`. When none does, the longest text seen wins.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title = _meta(soup, property="og:title") or (soup.title.get_text(strip=True) if soup.title else "")
    description = _meta(soup, name="description") or _meta(soup, property="og:description")

    best, used = "", ""
    for name, strategy in strategies or DEFAULT_STRATEGIES:
        text = strategy(soup) or ""
        if len(text) >= min_chars:
            best, used = text, name
            break
        if len(text) > len(best):
            best, used = text, name

    logger.debug("extraction used %s (%d chars)", used or "none", len(best))
    return ExtractedContent(
        content=best[:max_chars],
        selector_used=used,
        title=title,
        meta_description=description,
        original_length=len(html or ""),
    )


async def fetch_content(url: str, *, fetch: Optional[DocumentFetcher] = None, timeout: float = 10.0) -> ExtractedContent:
    """Fetch an article page and extract its readable text. FetchError propagates."""
    fetch = fetch or fetch_document
    html = await fetch(url, None, timeout=timeout)
    return extract_content(html)
