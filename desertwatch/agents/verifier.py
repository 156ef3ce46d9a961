"""
Stage 3: Verifier Agent

Cross-references parsed capabilities against the raw text and
public sources (web search grounded). Returns prose, not JSON.
"""

from __future__ import annotations

import logging

from desertwatch.agents.base import TextResult, extract_grounding, message_text, timed_invoke
from desertwatch.llm import get_search_llm
from desertwatch.models import ParsedCapabilities

logger = logging.getLogger(__name__)

VERIFIER_PROMPT = """VERIFIER_AGENT: Cross-reference the extracted data with the raw text.
Focus on verifying equipment availability like X-ray machines, MRI scanners, and surgical equipment.
Use web search to verify the facility "{facility_name}" and its reported capabilities.

Data: {data}
Raw: {raw}"""


def run_verifier_agent(structured: ParsedCapabilities, raw_text: str) -> TextResult:
    """Check the parser's claims against the source text and the public web."""
    llm = get_search_llm()
    prompt = VERIFIER_PROMPT.format(
        facility_name=structured.facility_name,
        data=structured.model_dump_json(by_alias=True),
        raw=raw_text,
    )

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    text = message_text(reply)
    grounding = extract_grounding(reply)

    logger.info(f"Verifier: {len(text)} chars, {len(grounding)} grounding links")
    return TextResult(text=text, grounding=grounding, metrics=metrics)
