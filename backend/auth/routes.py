import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from auth.models import AppUserResponse, LoginRequest, SignupRequest
from auth.session import check_session, clear_session, create_session
from db.database import get_db
from services import user_service
from services.errors import DuplicateEmail, InvalidCredentials

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=AppUserResponse, status_code=status.HTTP_201_CREATED)
def signup(req: SignupRequest, response: Response, db: Session = Depends(get_db)):
    try:
        user = user_service.signup(db, req.email, req.password, req.name)
    except DuplicateEmail as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    create_session(response, user["id"])
    return user


@router.post("/login", response_model=AppUserResponse)
def login(req: LoginRequest, response: Response, db: Session = Depends(get_db)):
    try:
        user = user_service.login(db, req.email, req.password)
    except InvalidCredentials as e:
        logger.warning("Failed login attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    create_session(response, user["id"])
    return user


@router.post("/logout")
def logout(response: Response):
    clear_session(response)
    return {"status": "ok"}


@router.get("/session", response_model=AppUserResponse | None)
def session(request: Request, db: Session = Depends(get_db)):
    user = check_session(request, db)
    if not user:
        return None
    return user_service.serialize_app_user(user)
