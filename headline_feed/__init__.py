"""
headline_feed

Builds per-category headline columns from RSS feeds and HTML pages.

Core ideas:
- Input: a source registry (category -> RSS or HTML+selector feeds)
- Process: fetch → normalize → recency filter → deduplicate → rank (per category)
- Output: Board {date, columns[]}, always one column per configured category

Example
-------
import asyncio
from headline_feed import ColumnBuilder, DEFAULT_REGISTRY

board = asyncio.run(ColumnBuilder(DEFAULT_REGISTRY).build_board())
for column in board.columns:
    print(column.category)
    for card in column.cards:
        print("  ", card.timestamp, card.source, card.title)
"""
from .models import (
    Board,
    Column,
    Headline,
    HtmlFeed,
    NormalizedHeadline,
    RawCandidate,
    RssFeed,
)
from .config import AggregationMode, Settings
from .core import ColumnBuilder, HeadlineService, build_columns
from .sources import DEFAULT_REGISTRY, SourceRegistry, load_registry

__all__ = [
    "AggregationMode",
    "Board",
    "Column",
    "ColumnBuilder",
    "DEFAULT_REGISTRY",
    "Headline",
    "HeadlineService",
    "HtmlFeed",
    "NormalizedHeadline",
    "RawCandidate",
    "RssFeed",
    "Settings",
    "SourceRegistry",
    "build_columns",
    "load_registry",
]
