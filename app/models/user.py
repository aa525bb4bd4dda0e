# app/models/user.py

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String, func
from sqlalchemy.orm import relationship
from .order import Order
from app.db.session import Base

class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)

    referral_code = Column(String, unique=True, index=True, nullable=False)
    # Код, по которому пользователь пришел (если был)
    referred_by = Column(String, nullable=True)

    # Баланс кредитов в валюте магазина
    credits = Column(Float, default=0, nullable=False, server_default='0')

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    orders = relationship("Order", back_populates="user")
