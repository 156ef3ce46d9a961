"""
Map layer: turns MedicalDesert records into marker specs for the Leaflet frontend.

The frontend owns the map widget; this module decides what each marker looks like
(colour and radius from severity, highlight for the selected desert) and which
basemap tiles go with the current theme.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from desertwatch.config import MAP_CENTER, MAP_ZOOM, SEVERITY_THRESHOLD
from desertwatch.models import MedicalDesert, Theme

SEVERE_COLOR = "#f43f5e"
NORMAL_COLOR = "#10b981"

TILE_URLS: Dict[str, str] = {
    "dark": "https://{s}.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}{r}.png",
    "light": "https://{s}.basemaps.cartocdn.com/light_all/{z}/{x}/{y}{r}.png",
}
TILE_ATTRIBUTION = "&copy; OpenStreetMap"


def is_severe(desert: MedicalDesert, threshold: int = SEVERITY_THRESHOLD) -> bool:
    return desert.severity > threshold


def desert_marker(desert: MedicalDesert, selected: bool = False) -> Dict[str, Any]:
    """Marker spec for one desert; selected markers are larger and outlined in white."""
    color = SEVERE_COLOR if is_severe(desert) else NORMAL_COLOR
    scale = 45 if selected else 30
    return {
        "id": desert.id,
        "region": desert.region,
        "lat": desert.coordinates[0],
        "lon": desert.coordinates[1],
        "severity": desert.severity,
        "severe": is_severe(desert),
        "selected": selected,
        "radius": max(12, (desert.severity / 100) * scale),
        "fill_color": color,
        "stroke_color": "#fff" if selected else color,
        "weight": 2 if selected else 1,
        "opacity": 0.8 if selected else 0.4,
        "fill_opacity": 0.3 if selected else 0.15,
        "tooltip": f"{desert.region}, severity {desert.severity:g}",
    }


def build_map_layer(
    deserts: Sequence[MedicalDesert],
    selected_id: Optional[str] = None,
    theme: Theme = "dark",
) -> Dict[str, Any]:
    """Everything the map widget needs to draw: view, tiles and markers."""
    return {
        "center": {"lat": MAP_CENTER[0], "lon": MAP_CENTER[1]},
        "zoom": MAP_ZOOM,
        "tiles": {"url": TILE_URLS[theme], "attribution": TILE_ATTRIBUTION, "max_zoom": 19},
        "markers": [desert_marker(d, selected=d.id == selected_id) for d in deserts],
    }


def deserts_geojson(deserts: Sequence[MedicalDesert]) -> Dict[str, Any]:
    """GeoJSON FeatureCollection of desert centroids (note: GeoJSON is [lon, lat])."""
    features: List[Dict[str, Any]] = []
    for d in deserts:
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [d.coordinates[1], d.coordinates[0]]},
                "properties": {
                    "id": d.id,
                    "region": d.region,
                    "severity": d.severity,
                    "predictedRisk": d.predicted_risk,
                    "populationDensity": d.population_density,
                    "primaryGaps": d.primary_gaps,
                    "severe": is_severe(d),
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}
