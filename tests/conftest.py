"""Shared fixtures: an in-process fake chat model and fresh sessions/stores."""

from __future__ import annotations

import json
from typing import Any, List, Optional, Union

import pytest
from langchain_core.messages import AIMessage

import desertwatch.workflow as wf
from desertwatch.agents import discovery, matcher, parser, predictor, query, strategist, verifier
from desertwatch.agents.base import DiscoveryResult, MatchResult, ParseResult, PredictionResult, TextResult
from desertwatch.models import GroundingLink, ParsedCapabilities, StepMetrics
from desertwatch.session import DashboardSession
from desertwatch.store import PreferenceStore

_AGENT_MODULES = (discovery, matcher, parser, predictor, query, strategist, verifier)


def search_reply(text: str, urls: Optional[List[tuple]] = None) -> AIMessage:
    """A Responses-API style reply: one text block carrying url_citation annotations."""
    annotations = [
        {"type": "url_citation", "url": url, "title": title, "start_index": 0, "end_index": 1}
        for title, url in (urls or [])
    ]
    return AIMessage(content=[{"type": "text", "text": text, "annotations": annotations}])


class FakeLLM:
    """
    Stands in for both get_llm() and get_search_llm() results.

    Replies are consumed in order; a reply that is an Exception is raised instead.
    """

    def __init__(self, replies: List[Union[str, AIMessage, Exception]]) -> None:
        self.replies = list(replies)
        self.calls: List[List[Any]] = []
        self.bound: List[Any] = []

    def bind(self, **kwargs: Any) -> "FakeLLM":
        self.bound.append(kwargs)
        return self

    def bind_tools(self, tools: Any, **kwargs: Any) -> "FakeLLM":
        self.bound.append(tools)
        return self

    def invoke(self, messages: Any, **kwargs: Any) -> AIMessage:
        self.calls.append(messages)
        if not self.replies:
            raise AssertionError("FakeLLM ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, AIMessage):
            return reply
        return AIMessage(content=reply)


@pytest.fixture
def fake_llm(monkeypatch):
    """Factory: fake_llm([...replies]) patches every agent's model factory."""

    def _install(replies: List[Union[str, AIMessage, Exception]]) -> FakeLLM:
        llm = FakeLLM(replies)
        for module in _AGENT_MODULES:
            if hasattr(module, "get_llm"):
                monkeypatch.setattr(module, "get_llm", lambda **kwargs: llm)
            if hasattr(module, "get_search_llm"):
                monkeypatch.setattr(module, "get_search_llm", lambda **kwargs: llm)
        return llm

    return _install


@pytest.fixture
def metrics() -> StepMetrics:
    return StepMetrics(execution_time=12, success_rate=0.99, hallucination_score=0.01)


@pytest.fixture
def session() -> DashboardSession:
    return DashboardSession()


@pytest.fixture
def store(tmp_path) -> PreferenceStore:
    return PreferenceStore(tmp_path / "state" / "session.db")


def reports_json(*names: str) -> str:
    return json.dumps(
        [
            {
                "facilityName": name,
                "region": "Northern",
                "reportDate": "2025-01-10",
                "unstructuredText": f"{name} has no working oxygen plant.",
                "coordinates": [9.4, -0.85],
                "extractedData": {
                    "beds": 120,
                    "equipmentList": [{"name": "Oxygen Plant", "status": "Offline"}],
                    "gaps": ["Oxygen"],
                    "confidence": 0.8,
                },
            }
            for name in names
        ]
    )


@pytest.fixture
def stub_agents(monkeypatch, metrics):
    """Stub every agent at the coordinator: empty discovery, canned plan and answer."""
    monkeypatch.setattr(wf, "run_discovery_agent", lambda topic: DiscoveryResult([], [], metrics))
    monkeypatch.setattr(wf, "run_parser_agent", lambda text: ParseResult(ParsedCapabilities(), metrics))
    monkeypatch.setattr(wf, "run_verifier_agent", lambda parsed, raw: TextResult("ok", [], metrics))
    monkeypatch.setattr(wf, "run_predictor_agent", lambda reports: PredictionResult([], metrics))
    monkeypatch.setattr(wf, "run_matcher_agent", lambda reports: MatchResult([], metrics))
    monkeypatch.setattr(
        wf,
        "run_strategist_agent",
        lambda reports, location=None: TextResult("## Plan\n* **Deploy** oxygen", [], metrics),
    )
    monkeypatch.setattr(
        wf,
        "run_query_agent",
        lambda q, data: TextResult("## Answer", [GroundingLink(title="GHS", uri="https://ghs.gov.gh")], metrics),
    )
