"""Dashboard summary cards: counts and status flags derived from the session."""

from __future__ import annotations

from typing import Any, Dict

from desertwatch.data.seed import AUDIT_LOG
from desertwatch.session import DashboardSession
from desertwatch.views.map_layer import is_severe


def dashboard_summary(session: DashboardSession, recent_audit: int = 4) -> Dict[str, Any]:
    confidences = [
        r.extracted_data.confidence for r in session.reports if r.extracted_data is not None
    ]
    avg_confidence = round(sum(confidences) / len(confidences), 3) if confidences else 0.0
    verified = sum(1 for r in session.reports if r.extracted_data and r.extracted_data.verified)

    return {
        "facilities": len(session.reports),
        "verified_facilities": verified,
        "medical_deserts": len(session.deserts),
        "severe_deserts": sum(1 for d in session.deserts if is_severe(d)),
        "average_confidence": avg_confidence,
        "is_thinking": session.is_thinking,
        "logic_grounding": "Verified" if session.plan else "Ready",
        "plan_distribution": "Broadcast" if session.plan else "Pending",
        "recent_audit": AUDIT_LOG[:recent_audit],
    }
