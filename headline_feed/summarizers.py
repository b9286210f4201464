from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from .config import Settings

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    def summarize(self, prompt: str, max_tokens: int = 300) -> str:  # pragma: no cover - interface
        ...


class NullSummarizer:
    """Always answers with an empty string, which callers treat as a failed call."""

    def summarize(self, prompt: str, max_tokens: int = 300) -> str:
        return ""


class OpenAISummarizer:
    """Chat Completions client; works with any OpenAI-compatible endpoint (DeepSeek included)."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: Optional[str],
        timeout_sec: float,
        base_url: Optional[str] = None,
    ) -> None:
        try:
            from openai import OpenAI  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise RuntimeError("openai package is required for OpenAI summarization. Install with `pip install openai`.") from e
        key = api_key or os.getenv("OPENAI_API_KEY") or os.getenv("DEEPSEEK_API")
        if not key:
            raise RuntimeError("OPENAI_API_KEY (or DEEPSEEK_API) not set.")
        self._client = OpenAI(api_key=key, base_url=base_url or os.getenv("OPENAI_BASE_URL") or None)
        self._model = model or os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self._timeout = timeout_sec

    def summarize(self, prompt: str, max_tokens: int = 300) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=0.7,
                top_p=0.9,
                timeout=self._timeout,
            )
            content = resp.choices[0].message.content if resp and resp.choices else None
            return content.strip() if content else ""
        except Exception as e:
            logger.warning("OpenAI summarization failed: %s", e)
            return ""


class GeminiSummarizer:
    def __init__(self, *, api_key: Optional[str], model: Optional[str], timeout_sec: float) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise RuntimeError("google-generativeai package is required for Gemini summarization. Install with `pip install google-generativeai`.") from e
        key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not key:
            raise RuntimeError("GOOGLE_API_KEY (or GEMINI_API_KEY) not set.")
        genai.configure(api_key=key)
        self._model_name = model or os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self._timeout = timeout_sec
        self._genai = genai

    def summarize(self, prompt: str, max_tokens: int = 300) -> str:
        try:
            model = self._genai.GenerativeModel(self._model_name)
            resp = model.generate_content(
                prompt,
                generation_config={"max_output_tokens": max_tokens},
                request_options={"timeout": self._timeout},
            )
            text = getattr(resp, "text", None)
            return str(text).strip() if text else ""
        except Exception as e:
            logger.warning("Gemini summarization failed: %s", e)
            return ""


def build_summarizer(settings: Optional[Settings] = None) -> Summarizer:
    """
    Pick a provider from settings. Missing packages or keys degrade to NullSummarizer
    so newsletter building falls back to synthesized text.
    """
    settings = settings or Settings()
    provider = (settings.llm_provider or "").lower()
    try:
        if provider == "openai":
            return OpenAISummarizer(
                api_key=None,
                model=settings.llm_model,
                timeout_sec=settings.llm_timeout,
                base_url=settings.llm_base_url,
            )
        if provider in {"gemini", "google", "googleai"}:
            return GeminiSummarizer(api_key=None, model=settings.llm_model, timeout_sec=settings.llm_timeout)
    except RuntimeError as e:
        logger.warning("Summarizer unavailable (%s); using fallback text", e)
        return NullSummarizer()
    logger.warning("Unknown LLM provider %r; using fallback text", provider)
    return NullSummarizer()
