from __future__ import annotations

import unicodedata
from collections import OrderedDict
from datetime import datetime
from typing import Iterable, List, Optional

from .models import Headline, NormalizedHeadline
from .parser import parse_timestamp


def normalize_title(title: str) -> str:
    """
    Comparison key for a headline title.

    Case-folds, keeps only letters and digits (CJK ideographs included) and drops
    whitespace entirely, so "A国新规出台" and "A 国 新规 出台！" share a key.
    """
    folded = unicodedata.normalize("NFKC", title or "").casefold()
    return "".join(ch for ch in folded if ch.isalnum())


def _latest(group: List[Headline]) -> str:
    best: Optional[datetime] = None
    best_raw = group[0].timestamp
    for h in group:
        ts = parse_timestamp(h.timestamp)
        if ts is not None and (best is None or ts > best):
            best, best_raw = ts, h.timestamp
    return best_raw


def dedupe(headlines: Iterable[Headline]) -> List[NormalizedHeadline]:
    """
    Merge headlines that share a normalized title.

    The first headline of each group supplies id/title/url/source/category; the
    group contributes its distinct sources and its most recent timestamp. Groups
    are returned in order of first appearance.
    """
    groups: "OrderedDict[str, List[Headline]]" = OrderedDict()
    for h in headlines:
        key = normalize_title(h.title)
        if not key:
            # Titles made only of punctuation never merge with anything
            key = f"raw::{h.id}::{len(groups)}"
        groups.setdefault(key, []).append(h)

    out: List[NormalizedHeadline] = []
    for group in groups.values():
        base = group[0]
        out.append(
            NormalizedHeadline(
                id=base.id,
                title=base.title,
                url=base.url,
                source=base.source,
                category=base.category,
                timestamp=_latest(group),
                sources=frozenset(h.source for h in group),
            )
        )
    return out
