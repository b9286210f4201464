from __future__ import annotations

from typing import Dict, Iterable, List

from .models import NormalizedHeadline
from .parser import parse_timestamp

DEFAULT_PER_CATEGORY = 5


def _rank_key(item: NormalizedHeadline):
    ts = parse_timestamp(item.timestamp)
    # Unparseable timestamps rank after every dated story with the same source count
    recency = ts.timestamp() if ts is not None else float("-inf")
    return (-item.source_count, -recency)


def rank(normalized: Iterable[NormalizedHeadline], per_category_cap: int = DEFAULT_PER_CATEGORY) -> List[NormalizedHeadline]:
    """
    Order by source count (desc) then timestamp (desc), keeping at most
    `per_category_cap` stories per category.

    The sort is stable, so fully tied stories keep their input order. Capping is
    applied within each category independently.
    """
    ordered = sorted(normalized, key=_rank_key)
    if per_category_cap < 0:
        return ordered

    taken: Dict[str, int] = {}
    out: List[NormalizedHeadline] = []
    for item in ordered:
        n = taken.get(item.category, 0)
        if n < per_category_cap:
            out.append(item)
            taken[item.category] = n + 1
    return out
