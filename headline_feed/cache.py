from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Tuple


class ResultCache(Protocol):
    def get(self, key: str) -> Optional[Any]:  # pragma: no cover - interface
        ...

    def set(self, key: str, value: Any, ttl: float) -> None:  # pragma: no cover - interface
        ...


class MemoryCache:
    """
    Process-local TTL map.

    Expiry is checked on read; nothing is swept in the background. Writes replace
    the whole value, so two concurrent builds simply leave the later result.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        hit = self._data.get(key)
        if hit is None:
            return None
        expires_at, value = hit
        if self._clock() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._data[key] = (self._clock() + ttl, value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


def date_key(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%d")


def half_day_key(now: Optional[datetime] = None) -> str:
    """`YYYY-MM-DD-AM` before noon, `YYYY-MM-DD-PM` after."""
    now = now or datetime.now(timezone.utc)
    return f"{date_key(now)}-{'AM' if now.hour < 12 else 'PM'}"
