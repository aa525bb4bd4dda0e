# app/schemas/user.py
from datetime import datetime
from pydantic import EmailStr, Field
from typing import Optional

from app.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    referral_code: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


# Публичное представление пользователя (без хеша пароля)
class UserOut(CamelModel):
    id: int
    email: str
    name: str
    referral_code: str
    referred_by: Optional[str] = None
    credits: float
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    user: UserOut


class ProfileResponse(CamelModel):
    success: bool = True
    user: UserOut
