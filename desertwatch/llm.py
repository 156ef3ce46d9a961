"""
Centralized LLM Factory — single place to configure and instantiate language models.

Every agent uses this factory instead of creating its own ChatOpenAI instance.
Two flavours are exposed:

    get_llm()         plain chat completions (structured JSON agents)
    get_search_llm()  Responses API with the hosted web_search tool bound, so the
                      answer comes back with url_citation annotations (grounding)

Rate-limit handling:
    A workflow issues up to five calls back to back. On a free tier that can trip
    the RPM limit, so a global throttle spaces calls by LLM_MIN_GAP_SECONDS.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, Optional

from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from desertwatch.config import LLM_MIN_GAP_SECONDS, OPENAI_API_KEY, OPENAI_MODEL, SEARCH_MODEL

logger = logging.getLogger(__name__)

# ── Global rate-limit throttle ───────────────────────────────────────────────

_lock = threading.Lock()
_last_call_time: float = 0.0


def _throttle() -> None:
    """Block until enough time has passed since the last LLM call."""
    global _last_call_time
    if LLM_MIN_GAP_SECONDS <= 0:
        return
    with _lock:
        now = time.time()
        elapsed = now - _last_call_time
        if elapsed < LLM_MIN_GAP_SECONDS:
            wait = LLM_MIN_GAP_SECONDS - elapsed
            logger.debug(f"Rate-limit throttle: waiting {wait:.1f}s")
            time.sleep(wait)
        _last_call_time = time.time()


class ThrottledChatOpenAI(ChatOpenAI):
    """ChatOpenAI subclass that applies a global rate-limit throttle before each call."""

    def _generate(self, *args, **kwargs):
        _throttle()
        return super()._generate(*args, **kwargs)


def get_llm(*, temperature: float = 0.0, model: str | None = None) -> ChatOpenAI:
    """
    Return a configured ChatOpenAI instance with rate-limit resilience.

    Args:
        temperature: Sampling temperature (0.0 = deterministic, higher = creative).
        model: Override the default model for this call. If None, uses OPENAI_MODEL.
    """
    return ThrottledChatOpenAI(
        model=model or OPENAI_MODEL,
        api_key=OPENAI_API_KEY,
        temperature=temperature,
        max_retries=3,
    )


def get_search_llm(
    *,
    temperature: float = 0.2,
    user_location: Optional[Dict[str, Any]] = None,
) -> Runnable:
    """
    Return a chat model bound to the hosted web_search tool.

    Args:
        temperature: Sampling temperature.
        user_location: Optional approximate location for the search tool, e.g.
            {"type": "approximate", "country": "GH", "city": "Tamale"}.
    """
    tool: Dict[str, Any] = {"type": "web_search_preview"}
    if user_location:
        tool["user_location"] = user_location

    llm = ThrottledChatOpenAI(
        model=SEARCH_MODEL,
        api_key=OPENAI_API_KEY,
        temperature=temperature,
        max_retries=3,
        use_responses_api=True,
    )
    return llm.bind_tools([tool])
