# app/schemas/order.py
from datetime import datetime
from pydantic import EmailStr, Field
from typing import List, Optional

from app.schemas.base import CamelModel


# Одна позиция корзины
class CartItem(CamelModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    qty: int = Field(..., ge=1)


class CheckoutRequest(CamelModel):
    items: List[CartItem] = Field(..., min_length=1)
    customer_email: EmailStr
    homework_email: Optional[str] = None
    homework_password: Optional[str] = None
    discount_code: Optional[str] = None
    user_id: Optional[int] = None


class CheckoutResponse(CamelModel):
    id: str
    url: Optional[str] = None


class LoginDetailsRequest(CamelModel):
    """Данные домашнего аккаунта, присланные после оплаты."""
    session_id: str = Field(..., min_length=1)
    homework_email: str = Field(..., min_length=1)
    homework_password: str = Field(..., min_length=1)


class SuccessResponse(CamelModel):
    success: bool = True


# Заказ в ответах API; пароль от домашнего аккаунта никогда не отдается
class OrderOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    customer_email: str
    items: List[CartItem]
    subtotal: float
    credits_used: float
    total: float
    homework_email: Optional[str] = None
    stripe_session_id: Optional[str] = None
    status: str
    discount_code: Optional[str] = None
    discount_amount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderListResponse(CamelModel):
    success: bool = True
    orders: List[OrderOut]
