# app/routers/admin/auth.py

from fastapi import APIRouter

from app.schemas.admin import AdminLoginRequest, AdminToken
from app.services import auth as auth_service

router = APIRouter()


@router.post("/login", response_model=AdminToken)
def admin_login(login_data: AdminLoginRequest):
    """
    [АДМИН] Обменивает email и пароль администратора на JWT с ролью admin.
    """
    return AdminToken(token=auth_service.authenticate_admin(login_data.email, login_data.password))
