import logging
from datetime import timedelta

import jwt
from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from db.database import get_db
from db.models import User
from utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


def _cookie_name() -> str:
    return (settings.AUTH_COOKIE_NAME or "").strip() or "glucotrack_session"


def create_session_token(user_id: str) -> str:
    now = utcnow()
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(seconds=settings.session_max_age_seconds),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> str | None:
    """Return the user id carried by a valid token, or None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        logger.warning("Rejected session cookie with invalid signature")
        return None
    user_id = str(payload.get("sub") or "").strip()
    return user_id or None


def create_session(response: Response, user_id: str) -> None:
    samesite = (settings.AUTH_COOKIE_SAMESITE or "lax").strip().lower()
    if samesite not in {"strict", "lax", "none"}:
        samesite = "lax"
    response.set_cookie(
        key=_cookie_name(),
        value=create_session_token(user_id),
        httponly=bool(settings.AUTH_COOKIE_HTTPONLY),
        secure=settings.session_cookie_secure,
        samesite=samesite,  # type: ignore[arg-type]
        path=settings.AUTH_COOKIE_PATH or "/",
        max_age=settings.session_max_age_seconds,
    )


def clear_session(response: Response) -> None:
    response.delete_cookie(key=_cookie_name(), path=settings.AUTH_COOKIE_PATH or "/")


def check_session(request: Request, db: Session) -> User | None:
    token = request.cookies.get(_cookie_name())
    if not token:
        return None
    user_id = decode_session_token(token)
    if not user_id:
        return None
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Session lookup failed: {e}")
        db.rollback()
        return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user = check_session(request, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    request.state.user_id = user.id
    return user
