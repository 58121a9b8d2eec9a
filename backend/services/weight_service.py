import math
from typing import Any

from sqlalchemy.orm import Session

from auth.utils import new_id
from db.models import WeightEntry
from services.errors import NotFound, ValidationFailure
from utils.datetime_utils import parse_iso, to_iso, utcnow_naive


def _validated_weight(data: dict[str, Any]) -> float:
    try:
        weight = float(data["weight"])
    except (KeyError, TypeError, ValueError):
        raise ValidationFailure("Weight must be a number.")
    if not math.isfinite(weight):
        raise ValidationFailure("Weight must be a finite number.")
    if weight <= 0:
        raise ValidationFailure("Weight must be a positive number.")
    return weight


def _parse_date(value):
    if not value:
        return utcnow_naive()
    try:
        return parse_iso(value)
    except ValueError:
        raise ValidationFailure("Invalid date.")


def serialize_weight_entry(entry: WeightEntry) -> dict[str, Any]:
    return {"id": entry.id, "date": to_iso(entry.date), "weight": entry.weight}


def get_all(db: Session, user_id: str) -> list[dict[str, Any]]:
    entries = (
        db.query(WeightEntry)
        .filter(WeightEntry.user_id == user_id)
        .order_by(WeightEntry.date.desc(), WeightEntry.id.desc())
        .all()
    )
    return [serialize_weight_entry(e) for e in entries]


def add(db: Session, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    entry = WeightEntry(
        id=new_id("weight"),
        user_id=user_id,
        date=_parse_date(data.get("date")),
        weight=_validated_weight(data),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return serialize_weight_entry(entry)


def update(db: Session, user_id: str, row: dict[str, Any]) -> dict[str, Any]:
    entry = (
        db.query(WeightEntry)
        .filter(WeightEntry.id == row.get("id"), WeightEntry.user_id == user_id)
        .first()
    )
    if not entry:
        raise NotFound("Weight entry not found.")
    weight = _validated_weight(row)
    date = _parse_date(row.get("date") or entry.date)

    entry.weight = weight
    entry.date = date
    db.commit()
    db.refresh(entry)
    return serialize_weight_entry(entry)


def delete(db: Session, user_id: str, entry_id: str) -> int:
    deleted = (
        db.query(WeightEntry)
        .filter(WeightEntry.id == entry_id, WeightEntry.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def delete_many(db: Session, user_id: str, ids: list[str]) -> int:
    ids = [i for i in dict.fromkeys(ids or []) if i]
    if not ids:
        return 0
    deleted = (
        db.query(WeightEntry)
        .filter(WeightEntry.user_id == user_id, WeightEntry.id.in_(ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
