from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.session import get_current_user
from db.database import get_db
from db.models import User
from services import user_service
from services.errors import ValidationFailure

router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    height: Optional[float] = None  # cm
    birthdate: Optional[str] = None  # ISO date


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    birthdate: Optional[str] = None
    height: Optional[float] = None


@router.get("", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = user_service.get_user_profile(db, user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("", response_model=ProfileResponse)
def update_profile(
    req: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        profile = user_service.update_user_profile(db, user.id, req.model_dump(exclude_unset=True))
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=e.message)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
