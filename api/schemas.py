"""
API Request / Response Models — Pydantic schemas for the REST API.

Domain records (reports, deserts, steps) are served as the camelCase
desertwatch.models types; the wrappers below cover the request bodies and the
composite responses.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from desertwatch.models import (
    AgentStep,
    AuditLog,
    CamelModel,
    GroundingLink,
    HospitalReport,
    Theme,
    ViewState,
    VipUser,
)


# ── Requests ────────────────────────────────────────────────────────────────


class QueryRequest(BaseModel):
    """Request model for free-form planner questions."""

    question: str = Field(
        ...,
        description="Natural language question about the current facility reports",
        examples=["Which northern facilities lack dialysis capacity?"],
    )


class WorkflowRequest(BaseModel):
    topic: Optional[str] = Field(None, description="Discovery search topic; defaults to DISCOVERY_TOPIC")


class ThemeRequest(BaseModel):
    theme: Theme


class LocationRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


# ── Responses ───────────────────────────────────────────────────────────────


class AnalysisResponse(CamelModel):
    """The analysis feed: trace, plan and citations."""

    is_thinking: bool
    active_view: ViewState
    steps: List[AgentStep] = Field(default_factory=list)
    plan: Optional[str] = None
    grounding_links: List[GroundingLink] = Field(default_factory=list)


class RunResponse(AnalysisResponse):
    ok: bool = Field(..., description="False when a stage failed; see the trace for the errored step")
    elapsed: float = Field(..., description="Processing time in seconds")


class DashboardResponse(CamelModel):
    facilities: int
    verified_facilities: int
    medical_deserts: int
    severe_deserts: int
    average_confidence: float
    is_thinking: bool
    logic_grounding: Literal["Verified", "Ready"]
    plan_distribution: Literal["Broadcast", "Pending"]
    recent_audit: List[AuditLog] = Field(default_factory=list)


class ReportDetailResponse(CamelModel):
    report: HospitalReport
    equipment_counts: Dict[str, int]
    distance_km: Optional[float] = Field(None, description="Distance from the user location, when known")


class DocumentResponse(BaseModel):
    html: Optional[str] = None
    blocks: List[Dict[str, Any]] = Field(default_factory=list)


class SessionResponse(CamelModel):
    user: Optional[VipUser] = None
    theme: Theme = "dark"
    user_location: Optional[Dict[str, float]] = None
    active_view: ViewState = "dashboard"
