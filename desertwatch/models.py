"""
Domain records shared by the agents, the workflow coordinator and the views.

Records are produced wholesale (by a model response or by seed data) and replaced,
never patched. Field names are snake_case in Python and camelCase on the wire, so
model output and frontend payloads in either spelling validate.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EquipmentStatus = Literal["Operational", "Limited", "Offline"]
StepStatus = Literal["pending", "active", "completed", "error"]
AgentName = Literal["Parser", "Verifier", "Strategist", "Matcher", "Predictor"]
AuditStatus = Literal["success", "warning", "info"]
ViewState = Literal["dashboard", "map", "analysis", "audit", "simulation"]
Theme = Literal["dark", "light"]


def new_id() -> str:
    return uuid.uuid4().hex[:9]


def now_time_str() -> str:
    return datetime.now().strftime("%H:%M:%S")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _coerce_coordinates(value: Any) -> Optional[Tuple[float, float]]:
    """[lat, lon] pairs only; anything else (empty list, nulls) means unknown."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and len(value) == 2 and all(
        isinstance(v, (int, float)) for v in value
    ):
        return float(value[0]), float(value[1])
    return None


# ── Facility reports ────────────────────────────────────────────────────────


class EquipmentItem(CamelModel):
    name: str
    status: EquipmentStatus = "Operational"

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> str:
        s = str(v or "").strip().capitalize()
        # Models sometimes answer "Partial"/"Unknown"; treat as degraded
        return s if s in ("Operational", "Limited", "Offline") else "Limited"


class ExtractedData(CamelModel):
    beds: int = 0
    specialties: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    equipment_list: List[EquipmentItem] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)
    verified: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("beds", mode="before")
    @classmethod
    def _beds_or_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_fraction(cls, v: Any) -> Any:
        # Percentages (e.g. 85) are rescaled to 0-1
        if isinstance(v, (int, float)) and 1 < v <= 100:
            return v / 100
        return v


class HospitalReport(CamelModel):
    id: str = Field(default_factory=new_id)
    facility_name: str
    region: str = ""
    report_date: str = ""
    unstructured_text: str = ""
    coordinates: Optional[Tuple[float, float]] = None
    extracted_data: Optional[ExtractedData] = None

    @field_validator("coordinates", mode="before")
    @classmethod
    def _coords(cls, v: Any) -> Optional[Tuple[float, float]]:
        return _coerce_coordinates(v)


class MedicalDesert(CamelModel):
    id: str
    region: str
    population_density: Literal["High", "Medium", "Low"]
    primary_gaps: List[str] = Field(default_factory=list)
    severity: float = Field(ge=0, le=100)
    coordinates: Tuple[float, float]
    predicted_risk: float = Field(ge=0, le=100)
    predictive_gaps: List[str] = Field(default_factory=list)


# ── Agent trace ─────────────────────────────────────────────────────────────


class StepMetrics(CamelModel):
    execution_time: int = Field(description="Wall-clock time of the model call (ms)")
    success_rate: float = Field(ge=0.0, le=1.0)
    hallucination_score: float = Field(ge=0.0, le=1.0, description="Lower is better")


class AgentStep(CamelModel):
    id: str = Field(default_factory=new_id)
    agent_name: AgentName
    action: str
    status: StepStatus
    timestamp: str = Field(default_factory=now_time_str)
    citation: Optional[str] = None
    description: Optional[str] = None
    metrics: Optional[StepMetrics] = None
    detailed_logs: List[str] = Field(default_factory=list)
    intermediate_output: Optional[Any] = None


class AuditLog(CamelModel):
    id: str
    timestamp: str
    event: str
    user: str
    status: AuditStatus


class GroundingLink(CamelModel):
    """A citation returned alongside a model answer when retrieval tools were used."""

    title: str = ""
    uri: str
    source: Literal["web", "maps"] = "web"


# ── Agent outputs ───────────────────────────────────────────────────────────


class ParsedCapabilities(CamelModel):
    facility_name: str = ""
    beds: int = 0
    specialties: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    equipment_list: List[EquipmentItem] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)
    confidence: float = 0.0

    @field_validator("beds", mode="before")
    @classmethod
    def _beds_or_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class PlacementRecommendation(CamelModel):
    facility: str
    role: str
    reason: str = ""
    priority: str = ""


class Forecast(CamelModel):
    region: str
    future_gap: str
    probability: float = 0.0
    timeframe: str = ""


class GeoPoint(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class VipUser(CamelModel):
    """Mock signed-in operator; there is no real authentication behind it."""

    email: str
    name: str
    role: str
