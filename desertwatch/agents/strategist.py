"""
Stage 5: Strategist Agent

Synthesizes the regional resource-allocation plan.

Web search grounded. When the operator's location is known it goes into the prompt
only, so distance reasoning ("nearest hub from here") is anchored to it wherever
the operator is.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from desertwatch.agents.base import TextResult, extract_grounding, message_text, timed_invoke
from desertwatch.llm import get_search_llm
from desertwatch.models import GeoPoint, HospitalReport

logger = logging.getLogger(__name__)

STRATEGIST_PROMPT = """STRATEGIST_AGENT: Analyze regional medical deserts in Ghana.
Find actual distances to nearest hubs for these facilities: {facilities}.
Synthesize a 12-month resource allocation plan based on infrastructure gaps and distances.
{location_line}
Format the plan in markdown: use "## " for the title, "### " for sections, "- " for bullets and **bold** for key numbers and facility names."""


def run_strategist_agent(
    reports: Sequence[HospitalReport],
    location: Optional[GeoPoint] = None,
) -> TextResult:
    """Produce the 12-month plan for the given reports, optionally anchored to `location`."""
    facilities = ", ".join(r.facility_name for r in reports)
    location_line = ""
    if location is not None:
        location_line = (
            f"The planner is located at latitude {location.lat:.4f}, longitude {location.lng:.4f}; "
            "include travel distances from there where relevant."
        )

    llm = get_search_llm()
    prompt = STRATEGIST_PROMPT.format(facilities=facilities, location_line=location_line)

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    text = message_text(reply)
    grounding = extract_grounding(reply)

    logger.info(
        f"Strategist: plan {len(text)} chars for {len(reports)} facilities, "
        f"{len(grounding)} grounding links"
    )
    return TextResult(text=text, grounding=grounding, metrics=metrics)
