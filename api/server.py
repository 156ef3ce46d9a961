"""
DesertWatch API Server

FastAPI REST API that exposes the multi-agent workflow and the dashboard views
(knowledge grid, map, audit, analysis document) to the frontend.

Run:
    uvicorn api.server:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from api.schemas import (
    AnalysisResponse,
    DashboardResponse,
    DocumentResponse,
    LocationRequest,
    QueryRequest,
    ReportDetailResponse,
    RunResponse,
    SessionResponse,
    ThemeRequest,
    WorkflowRequest,
)
from desertwatch.config import DISCOVERY_TOPIC, STATE_DB_PATH
from desertwatch.data.seed import AUDIT_LOG
from desertwatch.llm_errors import format_provider_error, is_rate_limit_error
from desertwatch.models import GeoPoint, HospitalReport, MedicalDesert
from desertwatch.session import DashboardSession, WorkflowBusyError
from desertwatch.store import PreferenceStore
from desertwatch.tools.geo import haversine_km, report_location
from desertwatch.views.dashboard import dashboard_summary
from desertwatch.views.grid import equipment_status_counts, filter_audit, filter_reports
from desertwatch.views.map_layer import build_map_layer, deserts_geojson
from desertwatch.views.markdown import parse_markdown, render_html
from desertwatch.workflow import run_agentic_workflow, run_intervention_protocol, run_query

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

RATE_LIMIT_DETAIL = "Model provider rate limit reached. Please wait 20-30 seconds and try again."


def create_app(
    session: Optional[DashboardSession] = None,
    store: Optional[PreferenceStore] = None,
) -> FastAPI:
    """Build the app around one dashboard session and one preference store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.session = session or DashboardSession()
        app.state.store = store or PreferenceStore(STATE_DB_PATH)
        logger.info(
            f"🚀 DesertWatch API ready | {len(app.state.session.reports)} reports, "
            f"{len(app.state.session.deserts)} deserts"
        )
        yield

    app = FastAPI(
        title="DesertWatch API",
        description="Multi-agent intelligence on hospital infrastructure gaps and medical deserts",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _session() -> DashboardSession:
        return app.state.session

    def _store() -> PreferenceStore:
        return app.state.store

    def _analysis() -> Dict[str, Any]:
        return _session().analysis_snapshot()

    def _run_response(ok: bool, start: float) -> RunResponse:
        err = _session().last_error
        if not ok and err is not None and is_rate_limit_error(err):
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=RATE_LIMIT_DETAIL)
        return RunResponse(ok=ok, elapsed=round(time.time() - start, 2), **_analysis())

    def _busy(e: WorkflowBusyError) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    def _require_report(report_id: str) -> HospitalReport:
        report = _session().get_report(report_id)
        if report is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown report: {report_id}")
        return report

    def _session_response() -> SessionResponse:
        loc = _session().user_location
        return SessionResponse(
            user=_store().get_user(),
            theme=_store().get_theme(),
            user_location=loc.model_dump() if loc else None,
            active_view=_session().active_view,
        )

    # ── Read endpoints ──────────────────────────────────────────────────────

    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check() -> Dict[str, str]:
        """Health check endpoint for monitoring and load balancers."""
        return {"status": "healthy", "service": "desertwatch"}

    @app.get("/api/dashboard", response_model=DashboardResponse, response_model_by_alias=True)
    async def get_dashboard() -> DashboardResponse:
        return DashboardResponse(**dashboard_summary(_session()))

    @app.get("/api/reports", response_model=List[HospitalReport], response_model_by_alias=True)
    async def list_reports(
        search: str = "",
        region: str = "All",
        radius_km: Optional[float] = Query(None, gt=0),
    ) -> List[HospitalReport]:
        return filter_reports(
            _session().reports,
            search=search,
            region=region,
            radius_km=radius_km,
            origin=_session().user_location,
        )

    @app.get("/api/reports/{report_id}", response_model=ReportDetailResponse, response_model_by_alias=True)
    async def get_report(report_id: str) -> ReportDetailResponse:
        report = _require_report(report_id)
        _session().selected_report_id = report_id
        distance = None
        origin = _session().user_location
        loc = report_location(report)
        if origin is not None and loc is not None:
            distance = round(haversine_km(origin.lat, origin.lng, loc[0], loc[1]), 1)
        return ReportDetailResponse(
            report=report,
            equipment_counts=equipment_status_counts(report),
            distance_km=distance,
        )

    @app.get("/api/deserts", response_model=List[MedicalDesert], response_model_by_alias=True)
    async def list_deserts() -> List[MedicalDesert]:
        return _session().deserts

    @app.get("/api/map")
    async def get_map(selected: Optional[str] = None) -> Dict[str, Any]:
        if selected is not None and _session().get_desert(selected) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown desert: {selected}")
        _session().selected_desert_id = selected
        return build_map_layer(_session().deserts, selected_id=selected, theme=_store().get_theme())

    @app.get("/api/map.geojson")
    async def get_map_geojson() -> Dict[str, Any]:
        return deserts_geojson(_session().deserts)

    @app.get("/api/audit")
    async def get_audit(status_filter: str = Query("all", alias="status", pattern="^(all|success|warning|info)$")):
        return [log.model_dump(by_alias=True) for log in filter_audit(AUDIT_LOG, status_filter)]

    @app.get("/api/analysis", response_model=AnalysisResponse, response_model_by_alias=True)
    async def get_analysis() -> AnalysisResponse:
        return AnalysisResponse(**_analysis())

    @app.get("/api/analysis/document", response_model=DocumentResponse)
    async def get_document() -> DocumentResponse:
        plan = _session().plan
        if not plan:
            return DocumentResponse()
        return DocumentResponse(
            html=render_html(plan),
            blocks=[asdict(b) for b in parse_markdown(plan)],
        )

    # ── Agent runs ──────────────────────────────────────────────────────────
    # Workflows are synchronous model calls; they run in a worker thread so the
    # event loop keeps serving /api/analysis polls while a run is in flight.

    @app.post("/api/workflow", response_model=RunResponse, response_model_by_alias=True)
    async def start_workflow(req: Optional[WorkflowRequest] = None) -> RunResponse:
        if _store().get_user() is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in to run the workflow")
        topic = (req.topic if req and req.topic else None) or DISCOVERY_TOPIC
        logger.info(f"📝 Workflow requested | topic={topic[:60]}")
        start = time.time()
        try:
            ok = await asyncio.to_thread(run_agentic_workflow, _session(), topic)
        except WorkflowBusyError as e:
            raise _busy(e)
        return _run_response(ok, start)

    @app.post(
        "/api/reports/{report_id}/intervention",
        response_model=RunResponse,
        response_model_by_alias=True,
    )
    async def start_intervention(report_id: str) -> RunResponse:
        report = _require_report(report_id)
        start = time.time()
        try:
            ok = await asyncio.to_thread(run_intervention_protocol, _session(), report)
        except WorkflowBusyError as e:
            raise _busy(e)
        return _run_response(ok, start)

    @app.post("/api/query", response_model=RunResponse, response_model_by_alias=True)
    async def process_query(req: QueryRequest) -> RunResponse:
        """Answer a direct planner question over the current reports."""
        logger.info(f"📝 Processing query: {req.question}")
        start = time.time()
        try:
            result = await asyncio.to_thread(run_query, _session(), req.question)
        except WorkflowBusyError as e:
            raise _busy(e)

        if result is None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Question is empty")
        if result is False:
            err = _session().last_error
            if err is not None and is_rate_limit_error(err):
                raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=RATE_LIMIT_DETAIL)
            detail = format_provider_error(err) if err is not None else "unknown error"
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Query processing failed: {detail}",
            )
        logger.info(f"✅ Query completed in {time.time() - start:.2f}s")
        return _run_response(True, start)

    # ── Session / preferences ───────────────────────────────────────────────

    @app.get("/api/session", response_model=SessionResponse, response_model_by_alias=True)
    async def get_session() -> SessionResponse:
        return _session_response()

    @app.post("/api/session/login", response_model=SessionResponse, response_model_by_alias=True)
    async def login() -> SessionResponse:
        _store().login_demo_user()
        return _session_response()

    @app.post("/api/session/logout", response_model=SessionResponse, response_model_by_alias=True)
    async def logout() -> SessionResponse:
        _store().logout()
        _session().active_view = "dashboard"
        return _session_response()

    @app.put("/api/session/theme", response_model=SessionResponse, response_model_by_alias=True)
    async def set_theme(req: ThemeRequest) -> SessionResponse:
        _store().set_theme(req.theme)
        return _session_response()

    @app.put("/api/session/location", response_model=SessionResponse, response_model_by_alias=True)
    async def set_location(req: LocationRequest) -> SessionResponse:
        _session().user_location = GeoPoint(lat=req.lat, lng=req.lng)
        return _session_response()

    return app


app = create_app()
