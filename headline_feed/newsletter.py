from __future__ import annotations

import asyncio
import concurrent.futures as _fut
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .cache import MemoryCache, ResultCache, half_day_key
from .core import ColumnBuilder
from .models import Board, Card, Column, Newsletter, Trend
from .parser import as_aware
from .summarizers import Summarizer

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "变动中的世界，视角决定答案"
DEFAULT_SUBTITLE = "今日焦点：社会变革、芯片竞赛、全球货币新秩序"

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Pull the first JSON object out of an LLM answer, tolerating code fences and chatter."""
    if not text:
        return None
    cleaned = _FENCE_RE.sub("", text).strip()
    if not cleaned.startswith("{"):
        m = _OBJECT_RE.search(cleaned)
        if not m:
            return None
        cleaned = m.group(0)
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def category_prompt(label: str, titles: Sequence[str]) -> str:
    joined = "\n".join(titles)
    return (
        f"以下是{label}领域最新头条：\n{joined}\n"
        "请提炼：1. 20字以内的简体中文标题；2. 40字以内的概要；3. 100字左右的 Markdown 说明。\n"
        '只返回JSON：{"title": "标题", "summary": "概要", "description": "详细说明"}'
    )


def overall_prompt(trends: Sequence[Trend]) -> str:
    lines = "\n".join(f"{t.category}：{t.title}" for t in trends)
    return (
        f"基于以下类别的趋势，生成简体中文整体标题和副标题：\n{lines}\n"
        "title 20字以内，subtitle 40-60字。\n"
        '只返回JSON：{"title": "整体标题", "subtitle": "整体副标题"}'
    )


def fallback_trend_text(label: str, cards: Sequence[Card]) -> Tuple[str, str, str]:
    """Title, summary and description synthesized from the headlines themselves."""
    top = cards[0].title if cards else f"{label}今日焦点"
    title = top[:20]
    summary = f"{label}领域热点：{top}"[:40]
    bullets = "\n".join(f"- {c.title}" for c in cards[:3])
    return title, summary, f"今日主要动态：\n{bullets}"


def _ask(summarizer: Summarizer, prompt: str, label: str) -> str:
    try:
        return summarizer.summarize(prompt, 300) or ""
    except Exception as e:
        logger.warning("Summarizer failed for %s (%s); using fallback text", label, e)
        return ""


def build_trend(column: Column, summarizer: Summarizer, *, max_headlines: int = 5) -> Trend:
    cards = tuple(column.cards[:max_headlines])
    answer = _ask(summarizer, category_prompt(column.category, [c.title for c in cards]), column.key)
    parsed = extract_json_object(answer)

    if parsed and parsed.get("title"):
        title = str(parsed.get("title") or "")
        summary = str(parsed.get("summary") or "")
        description = str(parsed.get("description") or "")
    else:
        logger.warning("Using fallback summary for %s", column.key)
        title, summary, description = fallback_trend_text(column.category, cards)

    return Trend(
        id=column.key,
        title=title,
        summary=summary,
        description=description,
        category=column.category,
        headlines=cards,
    )


def build_newsletter(
    board: Board,
    summarizer: Summarizer,
    *,
    key: Optional[str] = None,
    max_workers: int = 4,
) -> Newsletter:
    """
    Enrich a built board with one LLM trend summary per column plus an overall title.

    Any summarizer failure degrades to synthesized text; this never raises for LLM errors.
    """
    columns = list(board.columns)
    key = key or board.date

    workers = max(1, min(int(max_workers or 1), len(columns) or 1))
    if workers == 1:
        trends: List[Trend] = [build_trend(c, summarizer) for c in columns]
    else:
        with _fut.ThreadPoolExecutor(max_workers=workers) as ex:
            trends = list(ex.map(lambda c: build_trend(c, summarizer), columns))

    parsed = extract_json_object(_ask(summarizer, overall_prompt(trends), "overall title")) if trends else None
    title = str((parsed or {}).get("title") or DEFAULT_TITLE)
    subtitle = str((parsed or {}).get("subtitle") or DEFAULT_SUBTITLE)

    for t in trends:
        logger.info("  %s: %d headlines", t.category, len(t.headlines))

    return Newsletter(id=f"daily-{key}", title=title, subtitle=subtitle, date=key, trends=trends)


class NewsletterService:
    """Builds the newsletter at most once per AM/PM window."""

    def __init__(
        self,
        builder: ColumnBuilder,
        summarizer: Summarizer,
        cache: Optional[ResultCache] = None,
        *,
        ttl: float = 12 * 60 * 60,
    ) -> None:
        self.builder = builder
        self.summarizer = summarizer
        self.cache: ResultCache = cache if cache is not None else MemoryCache()
        self.ttl = ttl

    async def get_newsletter(self, *, force: bool = False, now: Optional[datetime] = None) -> Newsletter:
        now = as_aware(now) if now is not None else datetime.now(timezone.utc)
        key = half_day_key(now)
        if not force:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("[NEWSLETTER] cache hit %s", key)
                return cached

        board = await self.builder.build_board(now)
        newsletter = await asyncio.to_thread(build_newsletter, board, self.summarizer, key=key)
        self.cache.set(key, newsletter, self.ttl)
        logger.info("[NEWSLETTER] built & cached %s", key)
        return newsletter
