# app/routers/auth.py
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.clients.mailer import Mailer, get_mailer
from app.core.config import settings
from app.core.limiter import limiter
from app.dependencies import get_current_user, get_db
from app.models.user import User
from app.schemas.user import AuthResponse, LoginRequest, ProfileResponse, RegisterRequest, UserOut
from app.services import auth as auth_service
from app.services import notification as notification_service

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    register_data: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """
    Регистрация по email и паролю, с необязательным реферальным кодом.
    Защищено лимитом запросов с одного IP.
    """
    user, welcome_credit = auth_service.register_user(db, register_data)
    background_tasks.add_task(notification_service.send_welcome, mailer, user, welcome_credit)
    return AuthResponse(token=auth_service.create_user_token(user), user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    user = auth_service.authenticate_user(db, login_data)
    return AuthResponse(token=auth_service.create_user_token(user), user=UserOut.model_validate(user))


@router.get("/profile", response_model=ProfileResponse)
def read_profile(current_user: User = Depends(get_current_user)):
    """Профиль текущего пользователя: реферальный код и баланс кредитов."""
    return ProfileResponse(user=UserOut.model_validate(current_user))
