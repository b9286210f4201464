from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from .transport import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class AggregationMode(str, Enum):
    """How many of a category's configured sources feed its column."""
    ALL_SOURCES = "all"
    FIRST_SOURCE = "first"


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; falling back to %s", name, raw, default)
        return default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; falling back to %s", name, raw, default)
        return default


@dataclass
class Settings:
    sources_file: Optional[str] = None
    aggregation: AggregationMode = AggregationMode.ALL_SOURCES
    source_timeout: float = 10.0
    deadline: Optional[float] = 12.0
    recency_hours: float = 24.0
    per_category: int = 5
    candidates_per_source: int = 10
    cache_ttl: float = 3600.0
    user_agent: str = DEFAULT_USER_AGENT

    llm_provider: str = "openai"
    llm_model: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_timeout: float = 15.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from `env` (default: os.environ). Call load_dotenv() first to honor .env."""
        env = os.environ if env is None else env

        raw_mode = (env.get("HEADLINE_AGGREGATION") or "").strip().lower()
        try:
            mode = AggregationMode(raw_mode) if raw_mode else AggregationMode.ALL_SOURCES
        except ValueError:
            logger.warning("Invalid HEADLINE_AGGREGATION=%r; using 'all'", raw_mode)
            mode = AggregationMode.ALL_SOURCES

        deadline = _env_float(env, "HEADLINE_DEADLINE", 12.0)
        provider = (env.get("LLM_PROVIDER") or "openai").strip().lower()
        if provider in {"gemini", "google", "googleai"}:
            model = env.get("GEMINI_MODEL") or None
        else:
            model = env.get("OPENAI_MODEL") or None

        return cls(
            sources_file=(env.get("HEADLINE_SOURCES_FILE") or "").strip() or None,
            aggregation=mode,
            source_timeout=_env_float(env, "HEADLINE_SOURCE_TIMEOUT", 10.0),
            deadline=deadline if deadline > 0 else None,
            recency_hours=_env_float(env, "HEADLINE_RECENCY_HOURS", 24.0),
            per_category=_env_int(env, "HEADLINE_PER_CATEGORY", 5),
            candidates_per_source=_env_int(env, "HEADLINE_CANDIDATES_PER_SOURCE", 10),
            cache_ttl=_env_float(env, "HEADLINE_CACHE_TTL", 3600.0),
            user_agent=(env.get("HEADLINE_USER_AGENT") or "").strip() or DEFAULT_USER_AGENT,
            llm_provider=provider,
            llm_model=model,
            llm_base_url=(env.get("OPENAI_BASE_URL") or "").strip() or None,
            llm_timeout=_env_float(env, "LLM_TIMEOUT", 15.0),
        )
