# app/crud/discount.py
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.models.discount import Discount


def get_discount_by_code(db: Session, code: str) -> Discount | None:
    return db.query(Discount).filter(Discount.code == code.strip().upper()).first()

def get_active_discount_by_code(db: Session, code: str) -> Discount | None:
    return db.query(Discount).filter(
        Discount.code == code.strip().upper(),
        Discount.active.is_(True)
    ).first()

def get_discounts(db: Session) -> list[Discount]:
    return db.query(Discount).order_by(Discount.created_at.desc(), Discount.id.desc()).all()

def create_discount(
    db: Session,
    code: str,
    type: str,
    value: float,
    min_purchase: float = 0,
    max_uses: int | None = None,
    expires_at: datetime | None = None
) -> Discount:
    db_discount = Discount(
        code=code.strip().upper(),
        type=type,
        value=value,
        min_purchase=min_purchase,
        max_uses=max_uses,
        expires_at=expires_at
    )
    db.add(db_discount)
    db.commit()
    db.refresh(db_discount)
    return db_discount

def increment_usage(db: Session, discount_id: int) -> bool:
    """
    Увеличивает used_count на 1 одним условным UPDATE.
    Не срабатывает, если купон выключен или лимит уже исчерпан.
    """
    updated = db.query(Discount).filter(
        Discount.id == discount_id,
        Discount.active.is_(True),
        or_(Discount.max_uses.is_(None), Discount.used_count < Discount.max_uses)
    ).update({Discount.used_count: Discount.used_count + 1}, synchronize_session=False)
    return updated == 1

def decrement_usage(db: Session, discount_id: int) -> bool:
    """Возвращает одно использование купона (компенсация), не опускаясь ниже нуля."""
    updated = db.query(Discount).filter(
        Discount.id == discount_id,
        Discount.used_count > 0
    ).update({Discount.used_count: Discount.used_count - 1}, synchronize_session=False)
    return updated == 1
