from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth.session import get_current_user
from db.database import get_db
from db.models import User
from services import glucose_service
from services.reminder_service import get_suggested_reminders

router = APIRouter(prefix="/reminders", tags=["reminders"])


class ReminderResponse(BaseModel):
    time: str
    message: str


class ReminderListResponse(BaseModel):
    reminders: list[ReminderResponse]


@router.post("", response_model=ReminderListResponse)
async def suggest_reminders(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    logs = glucose_service.get_all(db, user.id)
    return {"reminders": await get_suggested_reminders(logs)}
