# app/routers/admin/__init__.py

from fastapi import APIRouter, Depends
from app.dependencies import get_admin_user

from . import auth, discounts, orders, stats, users

# Главный роутер админки.
# Вход (/admin/login) открыт; все остальные эндпоинты подключаются к
# `protected`, зависимость которого применяется к каждому из них.
router = APIRouter(prefix="/admin", tags=["Admin"])

protected = APIRouter(dependencies=[Depends(get_admin_user)])

# /admin/orders, /admin/order/{id}, /admin/order/{id}/credentials
protected.include_router(orders.router)

# /admin/users
protected.include_router(users.router)

# /admin/discounts, /admin/discount/create
protected.include_router(discounts.router)

# /admin/stats
protected.include_router(stats.router)

router.include_router(auth.router)
router.include_router(protected)
