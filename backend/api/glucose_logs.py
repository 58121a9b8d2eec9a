from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.session import get_current_user
from db.database import get_db
from db.models import User
from services import glucose_service
from services.errors import NotFound, ValidationFailure

router = APIRouter(prefix="/glucose-logs", tags=["glucose-logs"])


# --- Pydantic Schemas ---

class GlucoseLogCreate(BaseModel):
    timestamp: Optional[str] = None  # ISO; defaults to now
    meal_type: str
    glycemia: float = Field(gt=0)  # g/L
    dosage: float = Field(default=0, ge=0)  # units
    notes: Optional[str] = None


class GlucoseLogUpdate(BaseModel):
    timestamp: Optional[str] = None
    meal_type: str
    glycemia: float = Field(gt=0)
    dosage: float = Field(ge=0)
    notes: Optional[str] = None


class GlucoseLogResponse(BaseModel):
    id: str
    timestamp: str
    meal_type: str
    glycemia: float
    dosage: float
    notes: Optional[str] = None


class BulkDeleteRequest(BaseModel):
    ids: list[str]


@router.get("", response_model=list[GlucoseLogResponse])
def list_glucose_logs(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return glucose_service.get_all(db, user.id)


@router.post("", response_model=GlucoseLogResponse, status_code=status.HTTP_201_CREATED)
def add_glucose_log(
    req: GlucoseLogCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return glucose_service.add(db, user.id, req.model_dump())
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.put("/{log_id}", response_model=GlucoseLogResponse)
def update_glucose_log(
    log_id: str,
    req: GlucoseLogUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = req.model_dump(exclude_unset=True)
    row["id"] = log_id
    try:
        return glucose_service.update(db, user.id, row)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.delete("/{log_id}")
def delete_glucose_log(log_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    deleted = glucose_service.delete(db, user.id, log_id)
    return {"status": "ok", "deleted": deleted}


@router.post("/delete")
def delete_glucose_logs(
    req: BulkDeleteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deleted = glucose_service.delete_many(db, user.id, req.ids)
    return {"status": "ok", "deleted": deleted}
