"""
Direct Query Agent

Answers an NGO planner's free-form question over the local reports,
with web search for anything the reports do not cover.
"""

from __future__ import annotations

import json
import logging
from typing import Sequence

from desertwatch.agents.base import TextResult, extract_grounding, message_text, timed_invoke
from desertwatch.llm import get_search_llm
from desertwatch.models import HospitalReport

logger = logging.getLogger(__name__)

QUERY_PROMPT = """QUERY_ENGINE: Answer this NGO planner query using the provided dataset and web search.
Answer in markdown ("## " title, "### " sections, "- " bullets, **bold** for key numbers and names).
Query: "{query}"
Local Data: {data}"""


def run_query_agent(query: str, data_context: Sequence[HospitalReport]) -> TextResult:
    """Answer `query` against `data_context` (usually the current reports)."""
    data = json.dumps([r.model_dump(by_alias=True) for r in data_context])
    llm = get_search_llm()
    prompt = QUERY_PROMPT.format(query=query, data=data)

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    text = message_text(reply)
    grounding = extract_grounding(reply)

    logger.info(f"Query: {len(text)} chars, {len(grounding)} grounding links")
    return TextResult(text=text, grounding=grounding, metrics=metrics)
