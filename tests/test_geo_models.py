from __future__ import annotations

import pytest
from pydantic import ValidationError

from desertwatch.models import EquipmentItem, ExtractedData, GeoPoint, HospitalReport
from desertwatch.tools.geo import haversine_km, region_centroid, report_location


class TestGeo:
    def test_haversine_zero(self):
        assert haversine_km(9.4, -0.85, 9.4, -0.85) == 0

    def test_haversine_one_degree_latitude(self):
        assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.1)

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Northern", (9.5, -1.0)),
            ("Upper East Region", (10.8, -0.8)),
            ("Western North", (6.2, -2.5)),
            ("Mars", None),
            (None, None),
        ],
    )
    def test_region_centroid(self, name, expected):
        assert region_centroid(name) == expected

    def test_report_location_prefers_coordinates(self):
        r = HospitalReport(facility_name="x", region="Volta", coordinates=[6.6, 0.47])
        assert report_location(r) == (6.6, 0.47)
        assert report_location(r.model_copy(update={"coordinates": None})) == (6.7, 0.5)


class TestModels:
    def test_camel_case_payload(self):
        r = HospitalReport.model_validate({"facilityName": "Ho", "unstructuredText": "t", "coordinates": []})
        assert r.facility_name == "Ho"
        assert r.coordinates is None
        assert len(r.id) == 9
        assert "facilityName" in r.model_dump(by_alias=True)

    def test_unknown_equipment_status_is_limited(self):
        assert EquipmentItem(name="MRI", status="unknown").status == "Limited"
        assert EquipmentItem(name="MRI", status="offline").status == "Offline"

    def test_confidence_percentage_rescaled(self):
        assert ExtractedData(confidence=85).confidence == pytest.approx(0.85)
        assert ExtractedData(confidence=1).confidence == 1
        with pytest.raises(ValidationError):
            ExtractedData(confidence=-0.2)

    def test_geopoint_bounds(self):
        with pytest.raises(ValidationError):
            GeoPoint(lat=91, lng=0)
