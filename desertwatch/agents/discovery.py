"""
Stage 1: Discovery Agent

Searches the live web for recent facility reports.

Web search grounded; the reply is a JSON array of HospitalReport records plus the
url_citation links the search tool attached.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List

from pydantic import TypeAdapter

from desertwatch.agents.base import (
    DiscoveryResult,
    extract_grounding,
    message_text,
    parse_json_reply,
    schema_instruction,
    strip_code_fences,
    timed_invoke,
)
from desertwatch.llm import get_search_llm
from desertwatch.models import HospitalReport

logger = logging.getLogger(__name__)

_REPORTS = TypeAdapter(List[HospitalReport])

DISCOVERY_PROMPT = """DISCOVERY_AGENT: Search the internet for real, recent reports (2024-2025) concerning health facility capabilities, equipment status (oxygen plants, dialysis, MRI, etc.), and staffing shortages in {region}.
Provide a list of at least 5 real hospitals or health centers with specific, currently reported challenges.

For each facility include:
- facilityName, region, reportDate
- unstructuredText: a detailed summary of the findings from the web search
- coordinates: [latitude, longitude]
- extractedData: beds, specialties, equipmentList (name + status: Operational | Limited | Offline), gaps, verified, confidence (0-1)

The response MUST be a JSON array matching our schema."""


def _unwrap(text: str) -> str:
    """Some replies nest the array under {"reports": [...]}; hand back the array text."""
    cleaned = strip_code_fences(text)
    if not cleaned.startswith("{"):
        return cleaned
    try:
        payload: Any = json.loads(cleaned)
    except json.JSONDecodeError:
        return cleaned
    if isinstance(payload, dict) and isinstance(payload.get("reports"), list):
        return json.dumps(payload["reports"])
    return cleaned


def run_discovery_agent(region: str = "Ghana") -> DiscoveryResult:
    """
    Search the web for real facility reports about `region`.

    Returns the discovered reports (possibly empty), grounding links and metrics.
    Raises AgentResponseError when the reply is not a JSON array of reports.
    """
    llm = get_search_llm()
    prompt = DISCOVERY_PROMPT.format(region=region) + schema_instruction(_REPORTS)

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    text = message_text(reply) or "[]"
    reports = parse_json_reply(_unwrap(text), _REPORTS)
    grounding = extract_grounding(reply)

    logger.info(f"Discovery: {len(reports)} reports, {len(grounding)} grounding links")
    return DiscoveryResult(reports=reports, grounding=grounding, metrics=metrics)
