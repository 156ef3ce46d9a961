"""
Agentic workflow coordinator.

Pipeline Architecture (LangGraph, strictly sequential):
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        START
          ↓
    ┌───────────────┐
    │  discover     │  web search → reports (replace session reports if any)
    └──────┬────────┘
           ↓
    ┌───────────────┐
    │  parse        │  joined report text → structured capabilities
    └──────┬────────┘
           ↓
    ┌───────────────┐
    │  verify       │  parsed data + raw text → verification notes
    └──────┬────────┘
           ↓
    ┌───────────────┐
    │  predict      │  reports → gap forecasts
    └──────┬────────┘
           ↓
    ┌───────────────┐
    │  strategize   │  reports + location → 12-month plan
    └──────┬────────┘
           ↓
          END
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Each node appends an "active" AgentStep to the session before its model call and
marks it completed afterwards. Any exception aborts the rest of the graph; the
coordinator then appends a single error step. Steps that already completed keep
their status.

Usage:
    from desertwatch.session import DashboardSession
    from desertwatch.workflow import run_agentic_workflow

    session = DashboardSession()
    run_agentic_workflow(session)
    print(session.plan)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, TypedDict

from langgraph.graph import END, START, StateGraph

from desertwatch.agents import (
    run_discovery_agent,
    run_matcher_agent,
    run_parser_agent,
    run_predictor_agent,
    run_query_agent,
    run_strategist_agent,
    run_verifier_agent,
)
from desertwatch.config import DISCOVERY_TOPIC
from desertwatch.models import Forecast, HospitalReport, ParsedCapabilities
from desertwatch.session import DashboardSession

logger = logging.getLogger(__name__)


class WorkflowState(TypedDict, total=False):
    """
    active_reports   Reports the later stages work on (discovered, or the existing set)
    raw_text         unstructured_text of active_reports joined by newline
    parsed           Parser output
    verification     Verifier prose
    forecasts        Predictor output
    plan             Strategist plan (markdown)
    """

    active_reports: List[HospitalReport]
    raw_text: str
    parsed: ParsedCapabilities
    verification: str
    forecasts: List[Forecast]
    plan: str


# ── Graph ───────────────────────────────────────────────────────────────────


def build_workflow_graph(session: DashboardSession, topic: str = DISCOVERY_TOPIC):
    """Compile the discovery → parse → verify → predict → strategize graph bound to `session`."""

    def discover(state: WorkflowState) -> Dict[str, Any]:
        session.add_step(
            "Parser",
            "Internet Discovery",
            description="Querying global nodes for real-world hospital reports (2024-2025)...",
        )
        discovery = run_discovery_agent(topic)

        if discovery.reports:
            session.reports = discovery.reports
            session.grounding_links.extend(discovery.grounding)
            session.update_last_step(
                status="completed",
                description=(
                    f"Discovered {len(discovery.reports)} live infrastructure nodes "
                    "via web search grounding."
                ),
                metrics=discovery.metrics,
            )
            return {"active_reports": discovery.reports}

        logger.warning("Discovery returned no reports; keeping the existing knowledge buffer")
        session.update_last_step(
            status="error",
            description="No real-world reports found in recent index. Falling back to knowledge buffers.",
        )
        return {"active_reports": list(session.reports)}

    def parse(state: WorkflowState) -> Dict[str, Any]:
        session.add_step(
            "Parser",
            "IDP Feature Extraction",
            description="Decomposing clinical reports into vector components.",
        )
        raw_text = "\n".join(r.unstructured_text for r in state["active_reports"])
        parsed = run_parser_agent(raw_text)
        session.update_last_step(
            status="completed",
            metrics=parsed.metrics,
            intermediate_output=parsed.data.model_dump(by_alias=True),
        )
        return {"raw_text": raw_text, "parsed": parsed.data}

    def verify(state: WorkflowState) -> Dict[str, Any]:
        session.add_step(
            "Verifier",
            "Semantic Verification",
            description="Cross-checking reported capabilities with public registry.",
        )
        verification = run_verifier_agent(state["parsed"], state["raw_text"])
        session.update_last_step(
            status="completed",
            metrics=verification.metrics,
            intermediate_output=verification.text,
        )
        return {"verification": verification.text}

    def predict(state: WorkflowState) -> Dict[str, Any]:
        session.add_step(
            "Predictor",
            "Gap Forecasting",
            description="Analyzing risk vectors for medical desert expansion.",
        )
        prediction = run_predictor_agent(state["active_reports"])
        session.update_last_step(
            status="completed",
            metrics=prediction.metrics,
            intermediate_output=[f.model_dump(by_alias=True) for f in prediction.forecasts],
        )
        return {"forecasts": prediction.forecasts}

    def strategize(state: WorkflowState) -> Dict[str, Any]:
        session.add_step(
            "Strategist",
            "Strategic RAG Synthesis",
            description="Synthesizing final regional resource model.",
        )
        strategy = run_strategist_agent(state["active_reports"], session.user_location)
        session.update_last_step(status="completed", metrics=strategy.metrics)

        session.plan = strategy.text
        session.grounding_links.extend(strategy.grounding)
        return {"plan": strategy.text}

    graph = StateGraph(WorkflowState)
    graph.add_node("discover", discover)
    graph.add_node("parse", parse)
    graph.add_node("verify", verify)
    graph.add_node("predict", predict)
    graph.add_node("strategize", strategize)

    graph.add_edge(START, "discover")
    graph.add_edge("discover", "parse")
    graph.add_edge("parse", "verify")
    graph.add_edge("verify", "predict")
    graph.add_edge("predict", "strategize")
    graph.add_edge("strategize", END)

    return graph.compile()


# ── Public interface ────────────────────────────────────────────────────────


def run_agentic_workflow(session: DashboardSession, topic: str = DISCOVERY_TOPIC) -> bool:
    """
    Run the full discovery → synthesis workflow on `session`.

    Clears the previous trace, plan and grounding links first. Returns True when
    every stage ran; False when a stage raised (one error step is appended and the
    remaining stages are skipped). Raises WorkflowBusyError if a run is in flight.
    """
    session.begin_run()
    logger.info(f"[workflow] Starting agentic workflow | topic={topic[:60]}")
    start = time.time()

    try:
        build_workflow_graph(session, topic).invoke({"active_reports": list(session.reports)})
        logger.info(
            f"[workflow] Completed in {time.time() - start:.2f}s | "
            f"{len(session.steps)} steps, {len(session.grounding_links)} grounding links"
        )
        return True
    except Exception as e:
        session.last_error = e
        logger.error(f"[workflow] Agent workflow failed after {time.time() - start:.2f}s: {e}", exc_info=True)
        session.add_step(
            "Strategist",
            "Error Handling",
            status="error",
            description="Inference core connection failed.",
        )
        return False
    finally:
        session.finish_run()


def intervention_prompt(report: HospitalReport) -> str:
    gaps = ", ".join(report.extracted_data.gaps) if report.extracted_data else ""
    return (
        f"Create a detailed tactical intervention plan for {report.facility_name} "
        f"addressing these specific gaps: {gaps}. "
        "Include estimated costs and specialist sourcing."
    )


def run_intervention_protocol(session: DashboardSession, report: HospitalReport) -> bool:
    """
    Matcher → Strategist intervention plan for a single facility.

    On failure the in-flight step is marked as errored and the run stops; the
    grounding links are replaced (not accumulated) on success.
    """
    session.begin_run(clear_grounding=False)
    session.selected_report_id = None
    logger.info(f"[intervention] Starting for {report.facility_name}")

    try:
        session.add_step(
            "Matcher",
            "Tactical Deployment",
            description=f"Initializing intervention protocol for {report.facility_name}...",
        )
        matching = run_matcher_agent([report])
        session.update_last_step(
            status="completed",
            description=f"Calculated specialist allocation matrix for {report.facility_name}.",
            metrics=matching.metrics,
            intermediate_output=[r.model_dump(by_alias=True) for r in matching.recommendations],
        )

        session.add_step(
            "Strategist",
            "Intervention Synthesis",
            description="Generating final deployment orders.",
        )
        res = run_query_agent(intervention_prompt(report), [report])
        session.update_last_step(status="completed", metrics=res.metrics)

        session.plan = res.text
        session.grounding_links = list(res.grounding)
        return True
    except Exception as e:
        session.last_error = e
        logger.error(f"[intervention] Failed for {report.facility_name}: {e}", exc_info=True)
        session.update_last_step(status="error")
        return False
    finally:
        session.finish_run()


def run_query(session: DashboardSession, question: str) -> Optional[bool]:
    """
    Answer a free-form planner question over the current reports.

    Blank questions are ignored (returns None). The trace is left alone; the plan
    and grounding links are replaced by the answer.
    """
    if not question.strip():
        return None

    session.begin_run(clear_trace=False, clear_grounding=False)
    logger.info(f"[query] {question}")
    try:
        res = run_query_agent(question, session.reports)
        session.plan = res.text
        session.grounding_links = list(res.grounding)
        return True
    except Exception as e:
        session.last_error = e
        logger.error(f"[query] Failed: {e}", exc_info=True)
        return False
    finally:
        session.finish_run()
