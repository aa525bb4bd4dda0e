# app/crud/order.py
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.order import Order

# Жесткий лимит на выдачу списка заказов в админке
ADMIN_ORDERS_LIMIT = 100


def create_order(db: Session, **fields) -> Order:
    db_order = Order(**fields)
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    return db_order

def get_order_by_id(db: Session, order_id: int) -> Order | None:
    return db.query(Order).filter(Order.id == order_id).first()

def get_order_by_session_id(db: Session, session_id: str) -> Order | None:
    return db.query(Order).filter(Order.stripe_session_id == session_id).first()

def get_user_orders(db: Session, user_id: int) -> list[Order]:
    """Заказы пользователя от новых к старым."""
    return db.query(Order).filter(Order.user_id == user_id).order_by(
        Order.created_at.desc(), Order.id.desc()
    ).all()

def get_orders(db: Session, status: str | None = None, limit: int = ADMIN_ORDERS_LIMIT) -> list[Order]:
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).limit(min(limit, ADMIN_ORDERS_LIMIT)).all()

def update_order_status(db: Session, order: Order, status: str) -> Order:
    order.status = status
    db.commit()
    db.refresh(order)
    return order

def count_orders(db: Session, status: str | None = None) -> int:
    query = db.query(func.count(Order.id))
    if status:
        query = query.filter(Order.status == status)
    return query.scalar()

def sum_revenue(db: Session, status: str = "completed") -> float:
    """Сумма `total` по заказам в заданном статусе."""
    total = db.query(func.sum(Order.total)).filter(Order.status == status).scalar()
    return float(total or 0)
