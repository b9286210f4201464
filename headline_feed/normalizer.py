from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .models import Headline, RawCandidate
from .parser import as_aware, parse_timestamp, resolve_link, to_iso

logger = logging.getLogger(__name__)


def make_headline_id(category: str, source_name: str, ordinal: int) -> str:
    return f"{category}-{source_name}-{ordinal}"


def normalize(
    candidates: Iterable[RawCandidate],
    category: str,
    source_name: str,
    index_offset: int = 0,
    *,
    base_url: str = "",
    now: Optional[datetime] = None,
) -> List[Headline]:
    """
    Convert one source's raw candidates into Headline records.

    - candidates without title or link are discarded
    - relative links are resolved against `base_url`; unresolvable ones are dropped
    - a missing or unparseable published time becomes `now`
    - ids are `{category}-{source_name}-{ordinal}`, ordinal being the position in the batch
    """
    run_at = as_aware(now) if now is not None else datetime.now(timezone.utc)
    run_iso = to_iso(run_at)
    out: List[Headline] = []

    for pos, cand in enumerate(candidates):
        title = (cand.title or "").strip()
        link = (cand.link or "").strip()
        if not title or not link:
            continue

        url = resolve_link(link, base_url)
        if not url:
            logger.warning("Dropping %s candidate with unresolvable link: %r", source_name, link)
            continue

        published = parse_timestamp(cand.published_at) if cand.published_at else None
        if cand.published_at and published is None:
            logger.debug("Unparseable timestamp from %s: %r", source_name, cand.published_at)

        out.append(
            Headline(
                id=make_headline_id(category, source_name, index_offset + pos),
                title=title,
                url=url,
                source=source_name,
                category=category,
                timestamp=to_iso(published) if published else run_iso,
            )
        )
    return out
