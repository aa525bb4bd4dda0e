# app/routers/order.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import order as crud_order
from app.dependencies import get_current_user, get_db
from app.models.user import User
from app.schemas.order import OrderListResponse, OrderOut

router = APIRouter()


@router.get("/orders", response_model=OrderListResponse)
def get_orders_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """История заказов текущего пользователя, новые первыми."""
    orders = crud_order.get_user_orders(db, user_id=current_user.id)
    return OrderListResponse(orders=[OrderOut.model_validate(order) for order in orders])
