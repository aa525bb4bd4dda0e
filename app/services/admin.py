# app/services/admin.py

import logging

from fastapi import HTTPException, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decrypt_secret
from app.crud import order as crud_order
from app.crud import user as crud_user
from app.models.order import Order
from app.schemas.admin import AdminOrderCredentials, AdminStats

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "admin:stats"


async def get_stats(db: Session, redis: Redis) -> AdminStats:
    """Сводная статистика для админки, кешируется в Redis на короткое время."""
    cached_data = await redis.get(STATS_CACHE_KEY)
    if cached_data:
        logger.info("Serving admin stats from cache.")
        return AdminStats.model_validate_json(cached_data)

    logger.info("Calculating fresh admin stats.")
    stats = AdminStats(
        total_orders=crud_order.count_orders(db),
        total_users=crud_user.count_all_users(db),
        # Выручка - только по завершенным заказам
        total_revenue=round(crud_order.sum_revenue(db, status="completed"), 2),
        pending_orders=crud_order.count_orders(db, status="pending"),
    )
    await redis.set(STATS_CACHE_KEY, stats.model_dump_json(), ex=settings.STATS_CACHE_TTL_SECONDS)
    return stats


async def update_order_status(db: Session, redis: Redis, order_id: int, new_status: str) -> Order:
    order = crud_order.get_order_by_id(db, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order with ID {order_id} not found.")

    old_status = order.status
    order = crud_order.update_order_status(db, order, new_status)
    # Выручка и число ожидающих заказов зависят от статуса
    await redis.delete(STATS_CACHE_KEY)
    logger.info(f"Order {order_id} status changed: {old_status} -> {new_status}")
    return order


def get_order_credentials(db: Session, order_id: int) -> AdminOrderCredentials:
    order = crud_order.get_order_by_id(db, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order with ID {order_id} not found.")
    logger.info(f"Homework credentials for order {order_id} were viewed by admin.")
    return AdminOrderCredentials(
        order_id=order.id,
        homework_email=order.homework_email,
        homework_password=decrypt_secret(order.homework_password_encrypted),
    )
