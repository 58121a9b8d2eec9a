from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from main import app  # noqa: E402
from services.report_service import build_dashboard, build_report, glucose_trend  # noqa: E402
from utils.datetime_utils import parse_iso, to_iso  # noqa: E402
from utils.health_metrics import calculate_age, calculate_bmi  # noqa: E402

NOW = datetime(2026, 3, 15, 12, 0, 0)


def test_bmi():
    assert calculate_bmi(170, 70) == 24.2
    assert calculate_bmi(0, 70) is None
    assert calculate_bmi(170, 0) is None
    assert calculate_bmi(None, 70) is None
    assert calculate_bmi(180, None) is None


def test_age_counts_whole_years():
    assert calculate_age(date(1990, 3, 15), today=date(2026, 3, 15)) == 36
    assert calculate_age(date(1990, 3, 16), today=date(2026, 3, 15)) == 35
    assert calculate_age(datetime(2000, 1, 1), today=date(2026, 3, 15)) == 26
    assert calculate_age(None) is None


def test_canonical_datetime_text():
    assert to_iso(datetime(2026, 1, 5, 8, 30, 0, 123456)) == "2026-01-05T08:30:00.123Z"
    assert parse_iso("2026-01-05T08:30:00.123Z") == datetime(2026, 1, 5, 8, 30, 0, 123000)
    assert parse_iso("2026-01-05T10:30:00+02:00") == datetime(2026, 1, 5, 8, 30, 0)
    with pytest.raises(ValueError):
        parse_iso("yesterday")


def test_report_filters_range_and_summarizes():
    glucose = [
        {"timestamp": "2026-03-14T08:00:00.000Z", "glycemia": 1.6},
        {"timestamp": "2026-03-10T08:00:00.000Z", "glycemia": 0.8},
        {"timestamp": "2026-03-01T08:00:00.000Z", "glycemia": 3.0},
    ]
    weights = [
        {"date": "2026-03-14T07:00:00.000Z", "weight": 79.0},
        {"date": "2026-03-09T07:00:00.000Z", "weight": 80.5},
        {"date": "2026-02-01T07:00:00.000Z", "weight": 90.0},
    ]
    report = build_report(glucose, weights, days=7, now=NOW)

    assert report["glucose"]["count"] == 2
    assert report["glucose"]["avg"] == pytest.approx(1.2)
    assert report["glucose"]["max"] == 1.6
    assert report["glucose"]["min"] == 0.8
    assert report["weight"] == {"change": -1.5, "trend": "down"}
    assert [g["glycemia"] for g in report["glucose_series"]] == [0.8, 1.6]


def test_report_with_no_data_is_zeroed():
    report = build_report([], [{"date": "2026-03-14T07:00:00.000Z", "weight": 79.0}], days=14, now=NOW)
    assert report["glucose"] == {"avg": 0.0, "max": 0.0, "min": 0.0, "count": 0}
    assert report["weight"] == {"change": 0.0, "trend": "stable"}


def test_report_rejects_unknown_range():
    with pytest.raises(ValueError):
        build_report([], [], days=9, now=NOW)


def test_glucose_trend_compares_latest_two():
    assert glucose_trend([]) == "Stable"
    assert glucose_trend([{"glycemia": 1.4}, {"glycemia": 1.1}]) == "Trending Up"
    assert glucose_trend([{"glycemia": 0.9}, {"glycemia": 1.1}]) == "Trending Down"
    assert glucose_trend([{"glycemia": 1.1}, {"glycemia": 1.1}]) == "Stable"


def test_dashboard_uses_latest_weight_for_bmi():
    profile = {"height": 170.0, "birthdate": None}
    weights = [{"date": "2026-03-14T07:00:00.000Z", "weight": 70.0}, {"date": "2026-03-01T07:00:00.000Z", "weight": 90.0}]
    dashboard = build_dashboard(profile, [], weights)
    assert dashboard["bmi"] == 24.2
    assert dashboard["latest_weight"] == 70.0
    assert dashboard["latest_log"] is None
    assert dashboard["age"] is None


def test_reports_endpoint(unique_email):
    client = TestClient(app)
    client.post("/api/auth/signup", json={"email": unique_email, "password": "Gluco!Pass123", "name": "Report User"})
    client.post("/api/glucose-logs", json={"meal_type": "Breakfast", "glycemia": 1.2, "dosage": 3})
    client.put("/api/profile", json={"height": 170})
    client.post("/api/weight-history", json={"weight": 70})

    report = client.get("/api/reports", params={"days": 30})
    assert report.status_code == 200
    assert report.json()["glucose"]["count"] == 1
    assert report.json()["end"].endswith("Z")
    assert client.get("/api/reports", params={"days": 3}).status_code == 400

    dashboard = client.get("/api/dashboard").json()
    assert dashboard["bmi"] == 24.2
    assert dashboard["latest_log"]["meal_type"] == "Breakfast"
