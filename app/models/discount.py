# app/models/discount.py
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, String, func
from app.db.session import Base

class Discount(Base):
    __tablename__ = "discounts"
    __table_args__ = (
        CheckConstraint("used_count >= 0", name="ck_discounts_used_count_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, index=True, nullable=False)

    # 'percentage' или 'fixed'
    type = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    min_purchase = Column(Float, default=0, nullable=False, server_default='0')

    # None - без ограничения
    max_uses = Column(Integer, nullable=True)
    used_count = Column(Integer, default=0, nullable=False, server_default='0')

    active = Column(Boolean, default=True, nullable=False, server_default='true')
    expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
