# app/schemas/admin.py
from enum import Enum
from pydantic import Field
from typing import List, Optional

from app.schemas.base import CamelModel
from app.schemas.order import OrderOut
from app.schemas.user import UserOut


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class AdminLoginRequest(CamelModel):
    # Сравнивается с ADMIN_EMAIL из настроек, это не почтовый ящик
    email: str = Field(..., min_length=1)
    password: str


class AdminToken(CamelModel):
    success: bool = True
    token: str
    token_type: str = "bearer"


class AdminOrderStatusUpdate(CamelModel):
    status: OrderStatus


class AdminOrderResponse(CamelModel):
    success: bool = True
    order: OrderOut


class AdminOrderCredentials(CamelModel):
    """Расшифрованные данные домашнего аккаунта по заказу."""
    success: bool = True
    order_id: int
    homework_email: Optional[str] = None
    homework_password: Optional[str] = None


class AdminUserListResponse(CamelModel):
    success: bool = True
    users: List[UserOut]


class AdminStats(CamelModel):
    total_orders: int
    total_users: int
    total_revenue: float
    pending_orders: int


class AdminStatsResponse(CamelModel):
    success: bool = True
    stats: AdminStats
