"""
Agents — one templated model call per pipeline stage.

    discovery   web-grounded search for recent facility reports   (JSON array)
    parser      free text → structured capabilities               (JSON object)
    verifier    cross-check claims against text + web             (prose)
    predictor   forecast where gaps widen next                    (JSON object)
    strategist  12-month regional allocation plan                 (prose, markdown)
    matcher     specialist placement recommendations              (JSON object)
    query       free-form planner question                        (prose, markdown)
"""

from desertwatch.agents.base import AgentResponseError
from desertwatch.agents.discovery import run_discovery_agent
from desertwatch.agents.matcher import run_matcher_agent
from desertwatch.agents.parser import run_parser_agent
from desertwatch.agents.predictor import run_predictor_agent
from desertwatch.agents.query import run_query_agent
from desertwatch.agents.strategist import run_strategist_agent
from desertwatch.agents.verifier import run_verifier_agent

__all__ = [
    "AgentResponseError",
    "run_discovery_agent",
    "run_matcher_agent",
    "run_parser_agent",
    "run_predictor_agent",
    "run_query_agent",
    "run_strategist_agent",
    "run_verifier_agent",
]
