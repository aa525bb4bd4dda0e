# app/routers/admin/stats.py

from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_db
from app.schemas.admin import AdminStatsResponse
from app.services import admin as admin_service

router = APIRouter()


@router.get("/stats", response_model=AdminStatsResponse)
async def get_admin_stats(
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """
    [АДМИН] Количество заказов и пользователей, выручка по завершенным заказам.
    """
    return AdminStatsResponse(stats=await admin_service.get_stats(db, redis))
