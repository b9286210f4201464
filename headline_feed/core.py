from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .cache import MemoryCache, ResultCache, date_key
from .config import AggregationMode, Settings
from .dedup import dedupe
from .exceptions import AllSourcesFailedError, FetchError
from .fetcher import fetch_candidates
from .models import Board, Column, FeedDescriptor, Headline, RawCandidate
from .normalizer import normalize
from .parser import as_aware, to_iso
from .ranker import rank
from .recency import filter_recent
from .sources import DEFAULT_REGISTRY, CategorySources, SourceRegistry, load_registry
from .transport import DocumentFetcher

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "Fallback Data"


class CategoryState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    FILTERING = "filtering"
    DEDUPING = "deduping"
    RANKING = "ranking"
    DONE = "done"
    FAILED = "failed"


def fallback_column(category: CategorySources, now: datetime) -> Column:
    """Single placeholder card used when a category produced nothing at all."""
    card = Headline(
        id=f"{category.key}-fallback",
        title=f"Fallback headline for {category.key}",
        url=f"https://example.com/{category.key}-fallback",
        source=FALLBACK_SOURCE,
        category=category.key,
        timestamp=to_iso(now),
    )
    return Column(key=category.key, category=category.label, cards=(card,), fallback=True)


class ColumnBuilder:
    """
    Pipeline orchestrator: fetch -> normalize -> filter -> dedupe -> rank, per category.

    Sources of one category are fetched concurrently but processed in registry
    order once all of them have settled; categories run concurrently and come back
    in registry order. A failing source is skipped; a category whose sources all
    failed gets a single fallback card.
    """

    def __init__(
        self,
        registry: Optional[SourceRegistry] = None,
        *,
        settings: Optional[Settings] = None,
        fetch: Optional[DocumentFetcher] = None,
        aggregation: Optional[AggregationMode] = None,
    ) -> None:
        self.settings = settings or Settings()
        if registry is None:
            registry = load_registry(self.settings.sources_file) if self.settings.sources_file else DEFAULT_REGISTRY
        self.registry = registry
        self.aggregation = AggregationMode(aggregation or self.settings.aggregation)
        self._fetch = fetch
        # State map of the most recently started run; each run writes only to its own dict
        self.states: Dict[str, CategoryState] = {}

    def _advance(self, states: Dict[str, CategoryState], key: str, state: CategoryState) -> None:
        states[key] = state
        logger.debug("[%s] -> %s", key, state.value)

    def _feeds_for(self, category: CategorySources) -> Sequence[FeedDescriptor]:
        if self.aggregation is AggregationMode.FIRST_SOURCE:
            return category.feeds[:1]
        return category.feeds

    async def _fetch_source(self, feed: FeedDescriptor) -> Tuple[Optional[List[RawCandidate]], Optional[Exception]]:
        try:
            cands = await asyncio.wait_for(
                fetch_candidates(
                    feed,
                    fetch=self._fetch,
                    user_agent=self.settings.user_agent,
                    timeout=self.settings.source_timeout,
                    limit=self.settings.candidates_per_source,
                ),
                timeout=self.settings.source_timeout,
            )
            return cands, None
        except asyncio.TimeoutError:
            err = FetchError(f"timed out after {self.settings.source_timeout}s", feed.source_name)
            logger.warning("FAIL %s", err)
            return None, err
        except FetchError as e:
            logger.warning("FAIL %s", e)
            return None, e
        except Exception as e:
            logger.exception("Unexpected error from source %s", feed.source_name)
            return None, e

    async def _build_category(
        self, category: CategorySources, now: datetime, states: Dict[str, CategoryState]
    ) -> Column:
        key = category.key
        feeds = self._feeds_for(category)
        logger.info("Processing category: %s (%d sources)", key, len(feeds))

        self._advance(states, key, CategoryState.FETCHING)
        results = await asyncio.gather(*(self._fetch_source(f) for f in feeds))
        errors = [err for _, err in results if err is not None]
        if len(errors) == len(feeds):
            raise AllSourcesFailedError(key, errors)

        self._advance(states, key, CategoryState.NORMALIZING)
        headlines: List[Headline] = []
        for feed, (cands, _) in zip(feeds, results):
            if cands is None:
                continue
            headlines.extend(normalize(cands, key, feed.source_name, base_url=feed.url, now=now))

        self._advance(states, key, CategoryState.FILTERING)
        window = timedelta(hours=self.settings.recency_hours)
        recent = filter_recent(headlines, window, now)

        self._advance(states, key, CategoryState.DEDUPING)
        merged = dedupe(recent)

        self._advance(states, key, CategoryState.RANKING)
        cards = rank(merged, self.settings.per_category)

        self._advance(states, key, CategoryState.DONE)
        logger.info(
            "Category %s: %d headlines, %d recent, %d stories, %d cards",
            key, len(headlines), len(recent), len(merged), len(cards),
        )
        return Column(key=key, category=category.label, cards=tuple(cards))

    async def _column_or_fallback(
        self, category: CategorySources, now: datetime, states: Dict[str, CategoryState]
    ) -> Column:
        self._advance(states, category.key, CategoryState.PENDING)
        try:
            return await self._build_category(category, now, states)
        except AllSourcesFailedError as e:
            logger.warning("%s; using fallback card", e)
        except Exception:
            logger.exception("Category %s failed; using fallback card", category.key)
        self._advance(states, category.key, CategoryState.FAILED)
        return fallback_column(category, now)

    async def build_columns(self, now: Optional[datetime] = None) -> List[Column]:
        """One column per registry category, in registry order."""
        now = as_aware(now) if now is not None else datetime.now(timezone.utc)
        categories = list(self.registry)
        states: Dict[str, CategoryState] = {}
        self.states = states
        tasks = [asyncio.ensure_future(self._column_or_fallback(c, now, states)) for c in categories]
        if not tasks:
            return []

        _, pending = await asyncio.wait(tasks, timeout=self.settings.deadline)
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        columns: List[Column] = []
        for category, task in zip(categories, tasks):
            if task in pending:
                logger.warning("Deadline reached before %s finished; using fallback card", category.key)
                self._advance(states, category.key, CategoryState.FAILED)
                columns.append(fallback_column(category, now))
            else:
                columns.append(task.result())
        return columns

    async def build_board(self, now: Optional[datetime] = None) -> Board:
        now = as_aware(now) if now is not None else datetime.now(timezone.utc)
        t0 = time.monotonic()
        columns = await self.build_columns(now)
        logger.info("Built %d columns in %.0fms", len(columns), (time.monotonic() - t0) * 1000)
        return Board(date=date_key(now), columns=tuple(columns), generated_at=to_iso(now))


async def build_columns(
    registry: SourceRegistry,
    now: Optional[datetime] = None,
    **kwargs,
) -> List[Column]:
    """Functional shortcut for `ColumnBuilder(registry, **kwargs).build_columns(now)`."""
    return await ColumnBuilder(registry, **kwargs).build_columns(now)


class HeadlineService:
    """Caches boards under the current date key."""

    def __init__(
        self,
        builder: ColumnBuilder,
        cache: Optional[ResultCache] = None,
        *,
        ttl: Optional[float] = None,
    ) -> None:
        self.builder = builder
        self.cache: ResultCache = cache if cache is not None else MemoryCache()
        self.ttl = builder.settings.cache_ttl if ttl is None else ttl

    async def get_board(self, *, force: bool = False, now: Optional[datetime] = None) -> Board:
        now = as_aware(now) if now is not None else datetime.now(timezone.utc)
        key = date_key(now)
        if not force:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Returning cached headlines for %s", key)
                return cached
        logger.info("Building fresh headlines for %s", key)
        board = await self.builder.build_board(now)
        self.cache.set(key, board, self.ttl)
        return board
