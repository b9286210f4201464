from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union


@dataclass(frozen=True)
class RssFeed:
    """An RSS/Atom feed source."""
    source_name: str
    url: str


@dataclass(frozen=True)
class HtmlFeed:
    """A web page whose headline links are found with a CSS selector."""
    source_name: str
    url: str
    selector: str


FeedDescriptor = Union[RssFeed, HtmlFeed]


@dataclass(frozen=True)
class RawCandidate:
    title: str
    link: str
    published_at: Optional[str] = None


@dataclass(frozen=True)
class Headline:
    """
    Canonical headline record produced by the normalizer.

    WARNING: the keys of `to_dict` are the public output contract.
    """
    id: str
    title: str
    url: str
    source: str
    category: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "category": self.category,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class NormalizedHeadline:
    """
    One story after deduplication, merged from every headline sharing its normalized title.

    `id`, `title`, `url`, `source` and `category` come from the first member of the group.
    """
    id: str
    title: str
    url: str
    source: str
    category: str
    timestamp: str
    sources: FrozenSet[str]

    @property
    def source_count(self) -> int:
        return len(self.sources)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "category": self.category,
            "timestamp": self.timestamp,
            "sources": sorted(self.sources),
            "sourceCount": self.source_count,
        }


Card = Union[Headline, NormalizedHeadline]


@dataclass(frozen=True)
class Column:
    key: str
    category: str
    cards: Tuple[Card, ...] = ()
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "category": self.category,
            "cards": [c.to_dict() for c in self.cards],
        }
        if self.fallback:
            out["fallback"] = True
        return out


@dataclass(frozen=True)
class Board:
    """Result of one pipeline run: `{date, columns[]}`."""
    date: str
    columns: Tuple[Column, ...]
    generated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "date": self.date,
            "columns": [c.to_dict() for c in self.columns],
        }
        if self.generated_at:
            out["generatedAt"] = self.generated_at
        return out


@dataclass(frozen=True)
class Trend:
    id: str
    title: str
    summary: str
    description: str
    category: str
    headlines: Tuple[Card, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "description": self.description,
            "category": self.category,
            "headlines": [h.to_dict() for h in self.headlines],
        }


@dataclass(frozen=True)
class Newsletter:
    id: str
    title: str
    subtitle: str
    date: str
    trends: List[Trend] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "date": self.date,
            "trends": [t.to_dict() for t in self.trends],
        }
