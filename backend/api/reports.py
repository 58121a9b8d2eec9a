from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from auth.session import get_current_user
from db.database import get_db
from db.models import User
from services import glucose_service, user_service, weight_service
from services.report_service import REPORT_RANGES_DAYS, build_dashboard, build_report
from utils.datetime_utils import to_iso

router = APIRouter(tags=["reports"])


@router.get("/reports")
def get_report(
    days: int = Query(default=7),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if days not in REPORT_RANGES_DAYS:
        allowed = ", ".join(str(d) for d in REPORT_RANGES_DAYS)
        raise HTTPException(status_code=400, detail=f"days must be one of {allowed}")
    report = build_report(
        glucose_service.get_all(db, user.id),
        weight_service.get_all(db, user.id),
        days=days,
    )
    report["start"] = to_iso(report["start"])
    report["end"] = to_iso(report["end"])
    return report


@router.get("/dashboard")
def get_dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return build_dashboard(
        user_service.get_user_profile(db, user.id),
        glucose_service.get_all(db, user.id),
        weight_service.get_all(db, user.id),
    )
