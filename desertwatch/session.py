"""
DashboardSession — the single mutable state object behind every view.

Holds what the dashboard shows: current reports, desert regions, the agent trace,
the synthesized plan, grounding links and the lifecycle flags. Only the workflow
that currently owns the session (is_thinking=True) mutates it; begin_run() makes
that ownership exclusive.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from desertwatch.data.seed import DESERT_REGIONS, GHANA_HOSPITALS
from desertwatch.models import (
    AgentName,
    AgentStep,
    GeoPoint,
    GroundingLink,
    HospitalReport,
    MedicalDesert,
    StepStatus,
    ViewState,
)

logger = logging.getLogger(__name__)


class WorkflowBusyError(RuntimeError):
    """A workflow is already running on this session."""


class DashboardSession:
    def __init__(
        self,
        reports: Optional[List[HospitalReport]] = None,
        deserts: Optional[List[MedicalDesert]] = None,
    ) -> None:
        self.reports: List[HospitalReport] = list(GHANA_HOSPITALS if reports is None else reports)
        self.deserts: List[MedicalDesert] = list(DESERT_REGIONS if deserts is None else deserts)
        self.steps: List[AgentStep] = []
        self.plan: Optional[str] = None
        self.grounding_links: List[GroundingLink] = []
        self.is_thinking: bool = False
        self.active_view: ViewState = "dashboard"
        self.user_location: Optional[GeoPoint] = None
        self.selected_report_id: Optional[str] = None
        self.selected_desert_id: Optional[str] = None
        self.last_error: Optional[BaseException] = None
        self._lock = threading.Lock()

    # ── Run lifecycle ────────────────────────────────────────────────────────

    def begin_run(self, *, clear_trace: bool = True, clear_grounding: bool = True) -> None:
        """
        Claim the session for a workflow and switch to the analysis view.

        Raises WorkflowBusyError if another workflow still holds it.
        """
        with self._lock:
            if self.is_thinking:
                raise WorkflowBusyError("A workflow is already running")
            self.is_thinking = True
        self.last_error = None
        if clear_trace:
            self.steps = []
            self.plan = None
        if clear_grounding:
            self.grounding_links = []
        self.active_view = "analysis"

    def finish_run(self) -> None:
        with self._lock:
            self.is_thinking = False

    # ── Agent trace ──────────────────────────────────────────────────────────

    def add_step(
        self,
        agent_name: AgentName,
        action: str,
        *,
        status: StepStatus = "active",
        description: Optional[str] = None,
    ) -> AgentStep:
        step = AgentStep(agent_name=agent_name, action=action, status=status, description=description)
        self.steps.append(step)
        logger.debug(f"Step +{agent_name}/{action} [{status}]")
        return step

    def update_last_step(self, **updates: Any) -> None:
        """Replace the last step with a copy carrying `updates`; no-op on an empty trace."""
        if not self.steps:
            return
        last = self.steps[-1]
        self.steps[-1] = last.model_copy(update=updates)
        logger.debug(f"Step ~{last.agent_name}/{last.action} {sorted(updates)}")

    # ── Lookups ──────────────────────────────────────────────────────────────

    def get_report(self, report_id: str) -> Optional[HospitalReport]:
        return next((r for r in self.reports if r.id == report_id), None)

    def get_desert(self, desert_id: Optional[str]) -> Optional[MedicalDesert]:
        if not desert_id:
            return None
        return next((d for d in self.deserts if d.id == desert_id), None)

    def analysis_snapshot(self) -> Dict[str, Any]:
        """Copy of the analysis-feed state, safe to serialize while a run is in flight."""
        return {
            "is_thinking": self.is_thinking,
            "active_view": self.active_view,
            "steps": list(self.steps),
            "plan": self.plan,
            "grounding_links": list(self.grounding_links),
        }
