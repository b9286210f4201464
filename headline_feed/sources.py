from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .models import FeedDescriptor, HtmlFeed, RssFeed


@dataclass(frozen=True)
class CategorySources:
    """One registry entry: a category id, its display label and its feeds in priority order."""
    key: str
    label: str
    feeds: Tuple[FeedDescriptor, ...]


class SourceRegistry:
    """
    Ordered mapping of category -> feed descriptors.

    Iteration yields categories in declaration order; that order is the column order
    of every board built from this registry.
    """

    def __init__(self, categories: Sequence[CategorySources]) -> None:
        seen = set()
        for c in categories:
            if c.key in seen:
                raise ValueError(f"Duplicate category in registry: {c.key}")
            seen.add(c.key)
            # Headline ids are {category}-{source}-{ordinal}; a repeated name would repeat ids
            names = [f.source_name for f in c.feeds]
            dupes = sorted({n for n in names if names.count(n) > 1})
            if dupes:
                raise ValueError(f"Duplicate source names in category {c.key}: {', '.join(dupes)}")
        self._categories: Tuple[CategorySources, ...] = tuple(categories)

    def __iter__(self) -> Iterator[CategorySources]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def keys(self) -> List[str]:
        return [c.key for c in self._categories]

    def get(self, key: str) -> Optional[CategorySources]:
        for c in self._categories:
            if c.key == key:
                return c
        return None


def feed_from_dict(raw: Dict[str, Any]) -> FeedDescriptor:
    name = (raw.get("name") or "").strip()
    url = (raw.get("url") or "").strip()
    if not name or not url:
        raise ValueError(f"Feed needs both name and url: {raw!r}")

    kind = (raw.get("kind") or ("rss" if raw.get("rss") else "html")).strip().lower()
    if kind == "rss":
        return RssFeed(source_name=name, url=url)
    if kind == "html":
        selector = (raw.get("selector") or "").strip()
        if not selector:
            raise ValueError(f"HTML feed {name!r} requires a selector")
        return HtmlFeed(source_name=name, url=url, selector=selector)
    raise ValueError(f"Unknown feed kind {kind!r} for {name!r}")


def registry_from_dict(data: Dict[str, Any]) -> SourceRegistry:
    categories: List[CategorySources] = []
    for raw in data.get("categories") or []:
        key = (raw.get("id") or "").strip()
        if not key:
            raise ValueError(f"Category without id: {raw!r}")
        label = (raw.get("label") or key).strip()
        feeds = tuple(feed_from_dict(f) for f in raw.get("feeds") or [])
        categories.append(CategorySources(key=key, label=label, feeds=feeds))
    return SourceRegistry(categories)


def load_registry(path: Union[str, Path]) -> SourceRegistry:
    """Load a registry from a JSON file (see `registry_from_dict` for the format)."""
    text = Path(path).read_text(encoding="utf-8")
    return registry_from_dict(json.loads(text))


DEFAULT_REGISTRY = SourceRegistry([
    CategorySources(
        key="society",
        label="社会",
        feeds=(RssFeed("BBC 中文网 社会", "https://feeds.bbci.co.uk/zhongwen/simp/rss.xml"),),
    ),
    CategorySources(
        key="tech",
        label="科技",
        feeds=(RssFeed("钛媒体", "https://www.tmtpost.com/feed"),),
    ),
    CategorySources(
        key="economy",
        label="经济",
        feeds=(RssFeed("中国新闻网 财经频道", "https://www.chinanews.com.cn/rss/finance.xml"),),
    ),
])
