"""
Intervention: Matcher Agent

Suggests where to place doctors, nurses and specialists.
"""

from __future__ import annotations

import json
import logging
from typing import List, Sequence

from pydantic import TypeAdapter

from desertwatch.agents.base import (
    MatchResult,
    message_text,
    parse_json_reply,
    schema_instruction,
    timed_invoke,
)
from desertwatch.llm import get_llm
from desertwatch.models import CamelModel, HospitalReport, PlacementRecommendation

logger = logging.getLogger(__name__)


class MatcherOutput(CamelModel):
    recommendations: List[PlacementRecommendation]


_OUTPUT = TypeAdapter(MatcherOutput)

MATCHER_PROMPT = """MATCHER_AGENT: Based on these hospital reports and their extracted gaps, suggest optimal placements for medical professionals (Doctors, Nurses, Specialists).
Identify which hospital needs which specialty most urgently. Priority is one of: Critical, High, Medium, Low.
Reports: {reports}"""


def run_matcher_agent(reports: Sequence[HospitalReport]) -> MatchResult:
    """Rank specialist placements for the given reports."""
    payload = json.dumps([r.model_dump(by_alias=True) for r in reports])
    llm = get_llm().bind(response_format={"type": "json_object"})
    prompt = MATCHER_PROMPT.format(reports=payload) + schema_instruction(_OUTPUT)

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    output = parse_json_reply(message_text(reply), _OUTPUT)

    logger.info(f"Matcher: {len(output.recommendations)} placement recommendations")
    return MatchResult(recommendations=output.recommendations, metrics=metrics)
