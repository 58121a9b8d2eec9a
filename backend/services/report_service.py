from datetime import datetime
from typing import Any

from utils.datetime_utils import days_before, parse_iso, utcnow_naive
from utils.health_metrics import calculate_age, calculate_bmi

REPORT_RANGES_DAYS = (7, 14, 30)


def _within(rows: list[dict[str, Any]], field: str, start: datetime, end: datetime) -> list[dict[str, Any]]:
    picked = [r for r in rows if start <= parse_iso(r[field]) <= end]
    return sorted(picked, key=lambda r: parse_iso(r[field]))


def weight_trend(change: float) -> str:
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "stable"


def build_report(
    glucose_logs: list[dict[str, Any]],
    weight_history: list[dict[str, Any]],
    days: int = 7,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Summary statistics over the trailing ``days``; series come back oldest first."""
    if days not in REPORT_RANGES_DAYS:
        raise ValueError(f"Unsupported report range: {days}")
    end = now or utcnow_naive()
    start = days_before(end, days)

    glucose = _within(glucose_logs, "timestamp", start, end)
    weights = _within(weight_history, "date", start, end)

    values = [g["glycemia"] for g in glucose]
    glucose_stats = {
        "avg": sum(values) / len(values) if values else 0.0,
        "max": max(values) if values else 0.0,
        "min": min(values) if values else 0.0,
        "count": len(values),
    }

    change = 0.0
    if len(weights) >= 2:
        change = weights[-1]["weight"] - weights[0]["weight"]
    return {
        "days": days,
        "start": start,
        "end": end,
        "glucose": glucose_stats,
        "weight": {"change": round(change, 1), "trend": weight_trend(change)},
        "glucose_series": glucose,
        "weight_series": weights,
    }


def glucose_trend(glucose_logs: list[dict[str, Any]]) -> str:
    """Compare the two most recent readings; logs are most-recent-first."""
    if len(glucose_logs) < 2:
        return "Stable"
    latest, previous = glucose_logs[0]["glycemia"], glucose_logs[1]["glycemia"]
    if latest > previous:
        return "Trending Up"
    if latest < previous:
        return "Trending Down"
    return "Stable"


def build_dashboard(
    profile: dict[str, Any] | None,
    glucose_logs: list[dict[str, Any]],
    weight_history: list[dict[str, Any]],
) -> dict[str, Any]:
    latest_weight = weight_history[0]["weight"] if weight_history else None
    height = profile.get("height") if profile else None
    birthdate = profile.get("birthdate") if profile else None
    return {
        "latest_log": glucose_logs[0] if glucose_logs else None,
        "glucose_trend": glucose_trend(glucose_logs),
        "latest_weight": latest_weight,
        "bmi": calculate_bmi(height, latest_weight),
        "age": calculate_age(parse_iso(birthdate)) if birthdate else None,
        "log_count": len(glucose_logs),
    }
