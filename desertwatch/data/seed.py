"""
Static seed data: the knowledge buffer shown before any discovery run, the medical
desert regions drawn on the map, and the read-only audit trail.

Coordinates are approximate city/region centroids (OpenStreetMap).
"""

from __future__ import annotations

from typing import List

from desertwatch.models import AuditLog, HospitalReport, MedicalDesert

# ── Facility reports (knowledge buffer) ─────────────────────────────────────
_HOSPITALS = [
    {
        "id": "gh-tth",
        "facility_name": "Tamale Teaching Hospital",
        "region": "Northern",
        "report_date": "2024-11-04",
        "unstructured_text": (
            "Tamale Teaching Hospital reports its oxygen plant running at reduced output "
            "since September; cylinders are being trucked from Kumasi. The single CT "
            "scanner is operational but the MRI has been offline for four months awaiting "
            "a replacement coil. Only two resident anaesthetists cover 800 beds."
        ),
        "coordinates": (9.4007, -0.8393),
        "extracted_data": {
            "beds": 800,
            "specialties": ["Internal Medicine", "Surgery", "Obstetrics", "Paediatrics"],
            "equipment": ["Oxygen Plant", "CT Scanner", "MRI"],
            "equipment_list": [
                {"name": "Oxygen Plant", "status": "Limited"},
                {"name": "CT Scanner", "status": "Operational"},
                {"name": "MRI", "status": "Offline"},
            ],
            "gaps": ["Anaesthesia staffing", "MRI repair", "Oxygen supply"],
            "verified": True,
            "confidence": 0.91,
        },
    },
    {
        "id": "gh-swm",
        "facility_name": "Sefwi-Wiawso Municipal Hospital",
        "region": "Western North",
        "report_date": "2024-09-18",
        "unstructured_text": (
            "Sefwi-Wiawso Municipal Hospital serves as the de facto regional referral "
            "point for Western North. No dialysis unit exists in the region; patients "
            "travel to Kumasi. The theatre runs with one general surgeon and the X-ray "
            "machine is intermittently out of service due to power fluctuations."
        ),
        "coordinates": (6.2050, -2.4900),
        "extracted_data": {
            "beds": 150,
            "specialties": ["General Surgery", "Obstetrics"],
            "equipment": ["X-ray", "Operating Theatre"],
            "equipment_list": [
                {"name": "X-ray", "status": "Limited"},
                {"name": "Operating Theatre", "status": "Operational"},
            ],
            "gaps": ["Dialysis", "Surgeons", "Stable power"],
            "verified": False,
            "confidence": 0.74,
        },
    },
    {
        "id": "gh-kbth",
        "facility_name": "Korle-Bu Teaching Hospital",
        "region": "Greater Accra",
        "report_date": "2025-01-22",
        "unstructured_text": (
            "Korle-Bu Teaching Hospital, the national referral centre, operates the "
            "Radiotherapy and Nuclear Medicine centre and the National Cardiothoracic "
            "Centre. The renal unit reported a dialysis backlog after two of twelve "
            "machines failed; oncology claims were validated against the 2024 annual report."
        ),
        "coordinates": (5.5367, -0.2277),
        "extracted_data": {
            "beds": 2000,
            "specialties": ["Oncology", "Cardiothoracic Surgery", "Nephrology", "Neurosurgery"],
            "equipment": ["Linear Accelerator", "Dialysis", "MRI", "Cath Lab"],
            "equipment_list": [
                {"name": "Linear Accelerator", "status": "Operational"},
                {"name": "Dialysis", "status": "Limited"},
                {"name": "MRI", "status": "Operational"},
                {"name": "Cath Lab", "status": "Operational"},
            ],
            "gaps": ["Dialysis capacity"],
            "verified": True,
            "confidence": 0.96,
        },
    },
    {
        "id": "gh-brh",
        "facility_name": "Upper East Regional Hospital",
        "region": "Upper East",
        "report_date": "2024-10-30",
        "unstructured_text": (
            "The Upper East Regional Hospital in Bolgatanga has no resident obstetrician "
            "since July; caesarean sections are handled by general medical officers. "
            "The neonatal unit has six incubators, two of which are non-functional."
        ),
        "coordinates": (10.7870, -0.8540),
        "extracted_data": {
            "beds": 260,
            "specialties": ["General Medicine", "Paediatrics"],
            "equipment": ["Incubators", "Ultrasound"],
            "equipment_list": [
                {"name": "Incubators", "status": "Limited"},
                {"name": "Ultrasound", "status": "Operational"},
            ],
            "gaps": ["Obstetrician", "Neonatal equipment"],
            "verified": False,
            "confidence": 0.68,
        },
    },
    {
        "id": "gh-wrh",
        "facility_name": "Upper West Regional Hospital",
        "region": "Upper West",
        "report_date": "2024-12-12",
        "unstructured_text": (
            "Upper West Regional Hospital in Wa lacks a functional CT scanner; trauma "
            "cases are referred to Tamale, a 300 km journey. The blood bank frequently "
            "runs short during the rainy season."
        ),
        "coordinates": (10.0601, -2.5099),
        "extracted_data": {
            "beds": 220,
            "specialties": ["General Medicine", "Surgery"],
            "equipment": ["CT Scanner", "Blood Bank"],
            "equipment_list": [
                {"name": "CT Scanner", "status": "Offline"},
                {"name": "Blood Bank", "status": "Limited"},
            ],
            "gaps": ["CT imaging", "Blood supply", "Trauma care"],
            "verified": True,
            "confidence": 0.82,
        },
    },
    {
        "id": "gh-htb",
        "facility_name": "Ho Teaching Hospital",
        "region": "Volta",
        "report_date": "2025-02-03",
        "unstructured_text": (
            "Ho Teaching Hospital commissioned a new oxygen plant in 2024 and runs an "
            "eye unit with visiting ophthalmologists. Psychiatric services are limited "
            "to outpatient clinics twice a week."
        ),
        "coordinates": (6.6012, 0.4693),
        "extracted_data": {
            "beds": 340,
            "specialties": ["Ophthalmology", "Internal Medicine", "Surgery"],
            "equipment": ["Oxygen Plant", "Slit Lamp"],
            "equipment_list": [
                {"name": "Oxygen Plant", "status": "Operational"},
                {"name": "Slit Lamp", "status": "Operational"},
            ],
            "gaps": ["Inpatient psychiatry"],
            "verified": True,
            "confidence": 0.88,
        },
    },
]

GHANA_HOSPITALS: List[HospitalReport] = [HospitalReport(**h) for h in _HOSPITALS]

# ── Medical deserts (map layer) ─────────────────────────────────────────────
_DESERTS = [
    {
        "id": "md-northern",
        "region": "Northern Region",
        "population_density": "Medium",
        "primary_gaps": ["Anaesthesia", "MRI", "Oxygen"],
        "severity": 88,
        "coordinates": (9.5000, -1.0000),
        "predicted_risk": 91,
        "predictive_gaps": ["Specialist attrition", "Oxygen logistics"],
    },
    {
        "id": "md-upper-east",
        "region": "Upper East",
        "population_density": "Medium",
        "primary_gaps": ["Obstetrics", "Neonatal care"],
        "severity": 92,
        "coordinates": (10.8000, -0.8000),
        "predicted_risk": 94,
        "predictive_gaps": ["Maternal mortality", "Incubator failures"],
    },
    {
        "id": "md-upper-west",
        "region": "Upper West",
        "population_density": "Low",
        "primary_gaps": ["CT imaging", "Trauma surgery", "Blood bank"],
        "severity": 86,
        "coordinates": (10.3000, -2.4000),
        "predicted_risk": 89,
        "predictive_gaps": ["Road-trauma referrals"],
    },
    {
        "id": "md-western-north",
        "region": "Western North",
        "population_density": "Low",
        "primary_gaps": ["Dialysis", "Surgeons"],
        "severity": 79,
        "coordinates": (6.2000, -2.5000),
        "predicted_risk": 85,
        "predictive_gaps": ["Renal failure backlog"],
    },
    {
        "id": "md-savannah",
        "region": "Savannah",
        "population_density": "Low",
        "primary_gaps": ["Regional hospital", "Emergency transport"],
        "severity": 83,
        "coordinates": (9.0000, -1.8000),
        "predicted_risk": 87,
        "predictive_gaps": ["Emergency response time"],
    },
    {
        "id": "md-oti",
        "region": "Oti",
        "population_density": "Low",
        "primary_gaps": ["Laboratory services", "Specialist outreach"],
        "severity": 74,
        "coordinates": (8.0000, 0.5000),
        "predicted_risk": 78,
        "predictive_gaps": ["Diagnostics backlog"],
    },
]

DESERT_REGIONS: List[MedicalDesert] = [MedicalDesert(**d) for d in _DESERTS]

# ── Audit trail (read-only) ─────────────────────────────────────────────────
AUDIT_LOG: List[AuditLog] = [
    AuditLog(id="1", timestamp="10:45 AM", event="New Report Ingested: Sefwi-Wiawso Municipal", user="Admin_User", status="success"),
    AuditLog(id="2", timestamp="11:12 AM", event="Anomaly Detected in Oxygen Capability - Tamale", user="Verifier_Agent", status="warning"),
    AuditLog(id="3", timestamp="12:01 PM", event="Regional Plan v4.2 Protocol Generated", user="Strategist_Agent", status="info"),
    AuditLog(id="4", timestamp="01:15 PM", event="Matcher Optimization: 3 Surgeons deployed to Northern Region", user="Matcher_Agent", status="success"),
    AuditLog(id="5", timestamp="02:30 PM", event="Predictive Risk Shift: Western North severity increased", user="Predictor_Agent", status="warning"),
    AuditLog(id="6", timestamp="03:45 PM", event="Semantic Verification: Korle-Bu oncology claims validated", user="Verifier_Agent", status="success"),
]
