"""
Stage 4: Predictor Agent

Forecasts future infrastructure needs and medical desert evolution.
"""

from __future__ import annotations

import json
import logging
from typing import List, Sequence

from pydantic import TypeAdapter

from desertwatch.agents.base import (
    PredictionResult,
    message_text,
    parse_json_reply,
    schema_instruction,
    timed_invoke,
)
from desertwatch.llm import get_llm
from desertwatch.models import CamelModel, Forecast, HospitalReport

logger = logging.getLogger(__name__)


class PredictorOutput(CamelModel):
    forecasts: List[Forecast]


_OUTPUT = TypeAdapter(PredictorOutput)

PREDICTOR_PROMPT = """PREDICTOR_AGENT: Forecast future infrastructure needs and medical desert evolution based on these hospital reports and current trends.
For each forecast give the region, the futureGap, a probability between 0 and 1 and a timeframe (e.g. "6-12 months").
Reports: {reports}"""


def run_predictor_agent(reports: Sequence[HospitalReport]) -> PredictionResult:
    """Forecast where gaps will widen next."""
    payload = json.dumps([r.model_dump(by_alias=True) for r in reports])
    llm = get_llm(temperature=0.2).bind(response_format={"type": "json_object"})
    prompt = PREDICTOR_PROMPT.format(reports=payload) + schema_instruction(_OUTPUT)

    reply, metrics = timed_invoke(llm, [{"role": "user", "content": prompt}])
    output = parse_json_reply(message_text(reply), _OUTPUT)

    logger.info(f"Predictor: {len(output.forecasts)} forecasts")
    return PredictionResult(forecasts=output.forecasts, metrics=metrics)
