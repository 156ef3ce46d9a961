"""
Ghana geo helpers — great-circle distance and region centroids.

Discovered reports usually carry [lat, lon] from the model; seed and parsed reports
sometimes only name a region. For distance filtering we fall back to the region
centroid, then give up (None).
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Tuple

from desertwatch.models import HospitalReport

EARTH_RADIUS_KM = 6371.0

# Region centroids (fallback when a report has no coordinates)
GHANA_REGIONS: Dict[str, Tuple[float, float]] = {
    "greater accra": (5.6037, -0.1870),
    "ashanti": (6.7470, -1.5209),
    "western": (5.0900, -1.9400),
    "western north": (6.2000, -2.5000),
    "central": (5.3000, -1.1000),
    "eastern": (6.2000, -0.5000),
    "volta": (6.7000, 0.5000),
    "oti": (8.0000, 0.5000),
    "northern": (9.5000, -1.0000),
    "savannah": (9.0000, -1.8000),
    "north east": (10.5000, -0.3000),
    "upper east": (10.8000, -0.8000),
    "upper west": (10.3000, -2.4000),
    "bono": (7.5000, -2.3000),
    "bono east": (7.8000, -1.5000),
    "ahafo": (6.9000, -2.4000),
    "brong ahafo": (7.5000, -1.7000),
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in km (Haversine formula)."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def region_centroid(region: Optional[str]) -> Optional[Tuple[float, float]]:
    """Return the centroid for a Ghana region name, tolerating a trailing 'Region'."""
    if not region:
        return None
    key = region.strip().lower()
    if key.endswith(" region"):
        key = key[: -len(" region")]
    if key in GHANA_REGIONS:
        return GHANA_REGIONS[key]
    # Longest name first so "western north" wins over "western"
    for rname in sorted(GHANA_REGIONS, key=len, reverse=True):
        if rname in key:
            return GHANA_REGIONS[rname]
    return None


def report_location(report: HospitalReport) -> Optional[Tuple[float, float]]:
    """Coordinates of a report, falling back to its region centroid."""
    if report.coordinates is not None:
        return report.coordinates
    return region_centroid(report.region)


def reports_within_radius(
    reports: Iterable[HospitalReport],
    center_lat: float,
    center_lon: float,
    radius_km: float,
) -> List[HospitalReport]:
    """Return reports within radius_km of (center_lat, center_lon), input order kept."""
    results = []
    for report in reports:
        coords = report_location(report)
        if coords is None:
            continue
        if haversine_km(center_lat, center_lon, coords[0], coords[1]) <= radius_km:
            results.append(report)
    return results
