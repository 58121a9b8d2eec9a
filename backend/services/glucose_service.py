import math
from typing import Any

from sqlalchemy.orm import Session

from auth.utils import new_id
from db.models import MEAL_TYPES, GlucoseLog
from services.errors import NotFound, ValidationFailure
from utils.datetime_utils import parse_iso, to_iso, utcnow_naive

MEAL_TYPE_ALIASES = {"no": "NoMeal", "nomeal": "NoMeal", "none": "NoMeal"}
_MEAL_TYPES_BY_KEY = {m.lower(): m for m in MEAL_TYPES}


def normalize_meal_type(value: str) -> str:
    key = str(value or "").strip().lower().replace(" ", "").replace("_", "")
    meal_type = MEAL_TYPE_ALIASES.get(key) or _MEAL_TYPES_BY_KEY.get(key)
    if not meal_type:
        raise ValidationFailure(f"Unknown meal type: {value}")
    return meal_type


def _validated_reading(data: dict[str, Any]) -> tuple[float, float]:
    try:
        glycemia = float(data["glycemia"])
        dosage = float(data.get("dosage") or 0)
    except (KeyError, TypeError, ValueError):
        raise ValidationFailure("Glycemia and dosage must be numbers.")
    if not (math.isfinite(glycemia) and math.isfinite(dosage)):
        raise ValidationFailure("Glycemia and dosage must be finite numbers.")
    if glycemia <= 0:
        raise ValidationFailure("Glycemia must be greater than 0.")
    if dosage < 0:
        raise ValidationFailure("Dosage must be 0 or more.")
    return glycemia, dosage


def _parse_timestamp(value) -> Any:
    if not value:
        return utcnow_naive()
    try:
        return parse_iso(value)
    except ValueError:
        raise ValidationFailure("Invalid timestamp.")


def _clean_notes(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def serialize_glucose_log(log: GlucoseLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "timestamp": to_iso(log.timestamp),
        "meal_type": log.meal_type,
        "glycemia": log.glycemia,
        "dosage": log.dosage,
        "notes": log.notes,
    }


def get_all(db: Session, user_id: str) -> list[dict[str, Any]]:
    logs = (
        db.query(GlucoseLog)
        .filter(GlucoseLog.user_id == user_id)
        .order_by(GlucoseLog.timestamp.desc(), GlucoseLog.id.desc())
        .all()
    )
    return [serialize_glucose_log(log) for log in logs]


def add(db: Session, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    glycemia, dosage = _validated_reading(data)
    log = GlucoseLog(
        id=new_id("gl"),
        user_id=user_id,
        timestamp=_parse_timestamp(data.get("timestamp")),
        meal_type=normalize_meal_type(data.get("meal_type")),
        glycemia=glycemia,
        dosage=dosage,
        notes=_clean_notes(data.get("notes")),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return serialize_glucose_log(log)


def update(db: Session, user_id: str, row: dict[str, Any]) -> dict[str, Any]:
    log = (
        db.query(GlucoseLog)
        .filter(GlucoseLog.id == row.get("id"), GlucoseLog.user_id == user_id)
        .first()
    )
    if not log:
        raise NotFound("Glucose log not found.")
    glycemia, dosage = _validated_reading(row)
    meal_type = normalize_meal_type(row.get("meal_type"))
    timestamp = _parse_timestamp(row.get("timestamp") or log.timestamp)

    log.glycemia = glycemia
    log.dosage = dosage
    log.meal_type = meal_type
    log.timestamp = timestamp
    if "notes" in row:
        log.notes = _clean_notes(row.get("notes"))
    db.commit()
    db.refresh(log)
    return serialize_glucose_log(log)


def delete(db: Session, user_id: str, log_id: str) -> int:
    deleted = (
        db.query(GlucoseLog)
        .filter(GlucoseLog.id == log_id, GlucoseLog.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def delete_many(db: Session, user_id: str, ids: list[str]) -> int:
    ids = [i for i in dict.fromkeys(ids or []) if i]
    if not ids:
        return 0
    deleted = (
        db.query(GlucoseLog)
        .filter(GlucoseLog.user_id == user_id, GlucoseLog.id.in_(ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
