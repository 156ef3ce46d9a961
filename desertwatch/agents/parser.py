"""
Stage 2: Parser Agent (IDP)

Turns free-text facility reports into structured capabilities.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter

from desertwatch.agents.base import (
    ParseResult,
    message_text,
    parse_json_reply,
    schema_instruction,
    timed_invoke,
)
from desertwatch.llm import get_llm
from desertwatch.models import ParsedCapabilities

logger = logging.getLogger(__name__)

_PARSED = TypeAdapter(ParsedCapabilities)

PARSER_PROMPT = """EXTRACTOR_AGENT: Parse this hospital report into structured medical capabilities. Extract specific equipment list with their operational status if mentioned.

Equipment status must be one of: Operational, Limited, Offline.
Confidence is your 0-1 confidence in the extraction.

Report: {text}"""


def run_parser_agent(text: str) -> ParseResult:
    """Extract beds, specialties, equipment (with status) and gaps from raw report text."""
    llm = get_llm().bind(response_format={"type": "json_object"})
    prompt = PARSER_PROMPT.format(text=text) + schema_instruction(_PARSED)

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    parsed = parse_json_reply(message_text(reply), _PARSED)

    logger.info(
        f"Parser: facility={parsed.facility_name or '?'}, "
        f"{len(parsed.equipment_list)} equipment items, {len(parsed.gaps)} gaps"
    )
    return ParseResult(data=parsed, metrics=metrics)
