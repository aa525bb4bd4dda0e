# app/models/referral.py
from sqlalchemy import Column, DateTime, Float, Integer, String, func
from app.db.session import Base

class Referral(Base):
    __tablename__ = "referrals"
    id = Column(Integer, primary_key=True, index=True)

    # Реферальный код пригласившего
    referrer_code = Column(String, nullable=False, index=True)
    # Email приглашенного; один пользователь может быть приглашен только один раз
    referred_email = Column(String, nullable=False, unique=True)

    reward = Column(Float, default=0, nullable=False)
    status = Column(String, default="completed", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
