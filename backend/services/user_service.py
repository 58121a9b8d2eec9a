import logging
import math
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.utils import hash_password, new_id, normalize_email, verify_password
from db.models import User
from services.errors import DuplicateEmail, InvalidCredentials, ValidationFailure
from utils.datetime_utils import parse_iso, to_iso

logger = logging.getLogger(__name__)


def serialize_app_user(user: User) -> dict[str, Any]:
    return {"id": user.id, "email": user.email, "display_name": user.name}


def serialize_profile(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "birthdate": to_iso(user.birthdate),
        "height": user.height,
    }


def signup(db: Session, email: str, password: str, name: str) -> dict[str, Any]:
    normalized = normalize_email(email)
    if db.query(User).filter(User.email == normalized).first():
        raise DuplicateEmail()

    user = User(
        id=new_id("user"),
        name=" ".join((name or "").strip().split()),
        email=normalized,
        password_hash=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email.
        db.rollback()
        raise DuplicateEmail()
    logger.info("Created user %s", user.id)
    return serialize_app_user(user)


def login(db: Session, email: str, password: str) -> dict[str, Any]:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return serialize_app_user(user)


def get_user_profile(db: Session, user_id: str) -> dict[str, Any] | None:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return None
    return serialize_profile(user)


def update_user_profile(db: Session, user_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
    """Apply the provided name/height/birthdate fields; absent keys are left alone."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return None

    changes: dict[str, Any] = {}
    if data.get("name") is not None:
        name = " ".join(str(data["name"]).strip().split())
        if len(name) < 2:
            raise ValidationFailure("Name must be at least 2 characters.")
        changes["name"] = name
    if "height" in data:
        height = data["height"]
        if height is not None:
            try:
                height = float(height)
            except (TypeError, ValueError):
                raise ValidationFailure("Height must be a number.")
            if not math.isfinite(height) or height <= 0:
                raise ValidationFailure("Height must be positive.")
        changes["height"] = height
    if data.get("birthdate"):
        try:
            changes["birthdate"] = parse_iso(data["birthdate"])
        except ValueError:
            raise ValidationFailure("Invalid date format.")

    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return serialize_profile(user)
