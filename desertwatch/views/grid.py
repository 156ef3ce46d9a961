"""Knowledge grid and audit log filters."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Sequence

from desertwatch.models import AuditLog, GeoPoint, HospitalReport
from desertwatch.tools.geo import reports_within_radius

AuditFilter = Literal["all", "success", "warning", "info"]


def filter_reports(
    reports: Sequence[HospitalReport],
    search: str = "",
    region: str = "All",
    radius_km: Optional[float] = None,
    origin: Optional[GeoPoint] = None,
) -> List[HospitalReport]:
    """
    Case-insensitive substring match on "facility_name region", then an exact
    region filter ("All" disables it), then an optional radius around `origin`.
    The radius is ignored when no origin is known.
    """
    needle = search.lower()
    matched = [
        r
        for r in reports
        if needle in f"{r.facility_name} {r.region}".lower()
        and (region == "All" or r.region == region)
    ]
    if radius_km is not None and origin is not None:
        matched = reports_within_radius(matched, origin.lat, origin.lng, radius_km)
    return matched


def report_regions(reports: Sequence[HospitalReport]) -> List[str]:
    """Region options for the grid filter, "All" first."""
    return ["All"] + sorted({r.region for r in reports if r.region})


def filter_audit(logs: Sequence[AuditLog], status: AuditFilter = "all") -> List[AuditLog]:
    return [log for log in logs if status == "all" or log.status == status]


def equipment_status_counts(report: HospitalReport) -> Dict[str, int]:
    """Operational/Limited/Offline tallies for the report detail card."""
    counts = {"Operational": 0, "Limited": 0, "Offline": 0}
    if report.extracted_data:
        for item in report.extracted_data.equipment_list:
            counts[item.status] += 1
    return counts
