from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Union

from .models import Headline
from .parser import as_aware, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


def _as_timedelta(window: Union[timedelta, int, float]) -> timedelta:
    if isinstance(window, timedelta):
        return window
    return timedelta(milliseconds=window)


def filter_recent(
    headlines: Iterable[Headline],
    window: Union[timedelta, int, float] = DEFAULT_WINDOW,
    now: Optional[datetime] = None,
) -> List[Headline]:
    """
    Keep headlines no older than `window` (a timedelta, or milliseconds).

    A headline whose timestamp cannot be parsed is kept: showing a story with a
    broken date beats hiding it.
    """
    limit = _as_timedelta(window)
    ref = as_aware(now) if now is not None else datetime.now(timezone.utc)
    out: List[Headline] = []
    for h in headlines:
        ts = parse_timestamp(h.timestamp)
        if ts is None:
            logger.debug("Keeping %s with unparseable timestamp %r", h.id, h.timestamp)
            out.append(h)
            continue
        if ref - ts <= limit:
            out.append(h)
    return out
