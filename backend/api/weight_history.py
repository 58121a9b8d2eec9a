from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.session import get_current_user
from db.database import get_db
from db.models import User
from services import weight_service
from services.errors import NotFound, ValidationFailure

router = APIRouter(prefix="/weight-history", tags=["weight-history"])


class WeightEntryCreate(BaseModel):
    date: Optional[str] = None  # ISO; defaults to now
    weight: float = Field(gt=0)  # kg


class WeightEntryUpdate(BaseModel):
    date: Optional[str] = None
    weight: float = Field(gt=0)


class WeightEntryResponse(BaseModel):
    id: str
    date: str
    weight: float


class BulkDeleteRequest(BaseModel):
    ids: list[str]


@router.get("", response_model=list[WeightEntryResponse])
def list_weight_history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return weight_service.get_all(db, user.id)


@router.post("", response_model=WeightEntryResponse, status_code=status.HTTP_201_CREATED)
def add_weight_entry(
    req: WeightEntryCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return weight_service.add(db, user.id, req.model_dump())
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.put("/{entry_id}", response_model=WeightEntryResponse)
def update_weight_entry(
    entry_id: str,
    req: WeightEntryUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = req.model_dump(exclude_unset=True)
    row["id"] = entry_id
    try:
        return weight_service.update(db, user.id, row)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.delete("/{entry_id}")
def delete_weight_entry(entry_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    deleted = weight_service.delete(db, user.id, entry_id)
    return {"status": "ok", "deleted": deleted}


@router.post("/delete")
def delete_weight_entries(
    req: BulkDeleteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deleted = weight_service.delete_many(db, user.id, req.ids)
    return {"status": "ok", "deleted": deleted}
