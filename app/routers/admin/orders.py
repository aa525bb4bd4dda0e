# app/routers/admin/orders.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.crud import order as crud_order
from app.dependencies import get_db
from app.schemas.admin import AdminOrderCredentials, AdminOrderResponse, AdminOrderStatusUpdate, OrderStatus
from app.schemas.order import OrderListResponse, OrderOut
from app.services import admin as admin_service


router = APIRouter()


@router.get("/orders", response_model=OrderListResponse)
def get_orders_list(
    status: Optional[OrderStatus] = Query(default=None, description="Фильтр по статусу"),
    db: Session = Depends(get_db)
):
    """
    [АДМИН] Последние заказы (не более 100), новые первыми.
    """
    orders = crud_order.get_orders(db, status=status.value if status else None)
    return OrderListResponse(orders=[OrderOut.model_validate(order) for order in orders])


@router.patch("/order/{order_id}", response_model=AdminOrderResponse)
async def update_order_status_endpoint(
    order_id: int,
    status_update: AdminOrderStatusUpdate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """
    [АДМИН] Обновляет статус заказа.
    """
    order = await admin_service.update_order_status(db, redis, order_id, status_update.status.value)
    return AdminOrderResponse(order=OrderOut.model_validate(order))


@router.get("/order/{order_id}/credentials", response_model=AdminOrderCredentials)
def get_order_credentials_endpoint(order_id: int, db: Session = Depends(get_db)):
    """
    [АДМИН] Расшифрованные данные домашнего аккаунта по заказу.
    """
    return admin_service.get_order_credentials(db, order_id)
