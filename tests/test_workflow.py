"""Coordinator behaviour: step trace, fallbacks, failure handling and lifecycle."""

from __future__ import annotations

import pytest

import desertwatch.workflow as wf
from desertwatch.agents.base import (
    DiscoveryResult,
    MatchResult,
    ParseResult,
    PredictionResult,
    TextResult,
)
from desertwatch.data.seed import GHANA_HOSPITALS
from desertwatch.models import Forecast, GroundingLink, HospitalReport, ParsedCapabilities
from desertwatch.session import WorkflowBusyError


@pytest.fixture
def agents(monkeypatch, metrics):
    """Stub every agent used by the coordinator; tests override individual ones."""
    found = [HospitalReport(facility_name="Bole District Hospital", region="Savannah", unstructured_text="No X-ray.")]
    monkeypatch.setattr(
        wf,
        "run_discovery_agent",
        lambda topic: DiscoveryResult(found, [GroundingLink(uri="https://d.gh")], metrics),
    )
    monkeypatch.setattr(
        wf, "run_parser_agent", lambda text: ParseResult(ParsedCapabilities(facility_name="Bole"), metrics)
    )
    monkeypatch.setattr(wf, "run_verifier_agent", lambda parsed, raw: TextResult("verified", [], metrics))
    monkeypatch.setattr(
        wf,
        "run_predictor_agent",
        lambda reports: PredictionResult([Forecast(region="Savannah", future_gap="Imaging")], metrics),
    )
    monkeypatch.setattr(
        wf,
        "run_strategist_agent",
        lambda reports, location=None: TextResult("## Plan", [GroundingLink(uri="https://s.gh")], metrics),
    )
    monkeypatch.setattr(wf, "run_matcher_agent", lambda reports: MatchResult([], metrics))
    monkeypatch.setattr(
        wf,
        "run_query_agent",
        lambda q, data: TextResult(f"answer: {q}", [GroundingLink(uri="https://q.gh")], metrics),
    )
    return found


def _boom(*args, **kwargs):
    raise RuntimeError("inference core down")


class TestAgenticWorkflow:
    def test_happy_path(self, session, agents):
        assert wf.run_agentic_workflow(session) is True

        assert [s.action for s in session.steps] == [
            "Internet Discovery",
            "IDP Feature Extraction",
            "Semantic Verification",
            "Gap Forecasting",
            "Strategic RAG Synthesis",
        ]
        assert all(s.status == "completed" for s in session.steps)
        assert session.reports == agents
        assert session.plan == "## Plan"
        assert [g.uri for g in session.grounding_links] == ["https://d.gh", "https://s.gh"]
        assert session.is_thinking is False
        assert session.active_view == "analysis"

    def test_empty_discovery_keeps_existing_reports(self, session, agents, monkeypatch, metrics):
        monkeypatch.setattr(wf, "run_discovery_agent", lambda topic: DiscoveryResult([], [], metrics))
        seen = {}

        def strategist(reports, location=None):
            seen["reports"] = list(reports)
            return TextResult("plan", [], metrics)

        monkeypatch.setattr(wf, "run_strategist_agent", strategist)

        assert wf.run_agentic_workflow(session) is True
        assert session.reports == GHANA_HOSPITALS
        assert seen["reports"] == GHANA_HOSPITALS
        assert session.steps[0].status == "error"
        assert session.steps[-1].status == "completed"

    def test_failure_appends_single_error_step(self, session, agents, monkeypatch):
        monkeypatch.setattr(wf, "run_verifier_agent", _boom)

        assert wf.run_agentic_workflow(session) is False
        statuses = [(s.agent_name, s.action, s.status) for s in session.steps]
        assert statuses[:2] == [
            ("Parser", "Internet Discovery", "completed"),
            ("Parser", "IDP Feature Extraction", "completed"),
        ]
        assert statuses[-1] == ("Strategist", "Error Handling", "error")
        assert session.steps[-1].description == "Inference core connection failed."
        assert session.plan is None
        assert session.is_thinking is False
        assert isinstance(session.last_error, RuntimeError)

    def test_run_in_flight_sees_cleared_state(self, session, agents, monkeypatch, metrics):
        session.add_step("Matcher", "Stale Step", status="completed")
        session.plan = "stale plan"
        seen = {}

        def verifier(parsed, raw):
            seen["is_thinking"] = session.is_thinking
            seen["plan"] = session.plan
            seen["actions"] = [s.action for s in session.steps]
            return TextResult("verified", [], metrics)

        monkeypatch.setattr(wf, "run_verifier_agent", verifier)
        wf.run_agentic_workflow(session)

        assert seen["is_thinking"] is True
        assert seen["plan"] is None
        assert seen["actions"] == ["Internet Discovery", "IDP Feature Extraction", "Semantic Verification"]
        assert session.is_thinking is False
        assert "Stale Step" not in [s.action for s in session.steps]

    def test_new_run_clears_previous_trace(self, session, agents):
        session.plan = "old"
        session.grounding_links = [GroundingLink(uri="https://old")]
        wf.run_agentic_workflow(session)
        assert "https://old" not in [g.uri for g in session.grounding_links]
        assert len(session.steps) == 5

    def test_busy_session_rejected(self, session, agents):
        session.begin_run()
        with pytest.raises(WorkflowBusyError):
            wf.run_agentic_workflow(session)
        session.finish_run()


class TestInterventionProtocol:
    def test_success(self, session, agents):
        report = session.get_report("gh-tth")
        session.selected_report_id = "gh-tth"
        session.grounding_links = [GroundingLink(uri="https://old")]

        assert wf.run_intervention_protocol(session, report) is True
        assert [(s.agent_name, s.action) for s in session.steps] == [
            ("Matcher", "Tactical Deployment"),
            ("Strategist", "Intervention Synthesis"),
        ]
        assert session.selected_report_id is None
        assert session.plan.startswith("answer: Create a detailed tactical intervention plan for Tamale")
        assert [g.uri for g in session.grounding_links] == ["https://q.gh"]

    def test_prompt_names_gaps(self, session):
        prompt = wf.intervention_prompt(session.get_report("gh-tth"))
        assert "Anaesthesia staffing" in prompt
        assert "estimated costs" in prompt

    def test_failure_marks_in_flight_step(self, session, agents, monkeypatch):
        monkeypatch.setattr(wf, "run_query_agent", _boom)

        assert wf.run_intervention_protocol(session, session.get_report("gh-tth")) is False
        assert [s.status for s in session.steps] == ["completed", "error"]
        assert session.is_thinking is False

    def test_busy_session_keeps_selection(self, session, agents):
        session.selected_report_id = "gh-tth"
        session.begin_run()
        with pytest.raises(WorkflowBusyError):
            wf.run_intervention_protocol(session, session.get_report("gh-tth"))
        session.finish_run()
        assert session.selected_report_id == "gh-tth"


class TestDirectQuery:
    def test_blank_question_ignored(self, session, agents):
        assert wf.run_query(session, "   ") is None
        assert session.active_view == "dashboard"

    def test_answer_replaces_plan_and_grounding(self, session, agents):
        session.grounding_links = [GroundingLink(uri="https://old")]
        assert wf.run_query(session, "Where is oxygen short?") is True
        assert session.plan == "answer: Where is oxygen short?"
        assert [g.uri for g in session.grounding_links] == ["https://q.gh"]

    def test_failure_clears_thinking(self, session, agents, monkeypatch):
        monkeypatch.setattr(wf, "run_query_agent", _boom)
        assert wf.run_query(session, "anything") is False
        assert session.is_thinking is False
        assert session.plan is None
