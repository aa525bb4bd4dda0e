# app/crud/referral.py
from sqlalchemy.orm import Session
from app.models.referral import Referral

def create_referral(db: Session, referrer_code: str, referred_email: str, reward: float) -> Referral:
    """Добавляет в сессию запись о реферальном вознаграждении."""
    db_referral = Referral(referrer_code=referrer_code, referred_email=referred_email, reward=reward)
    db.add(db_referral)
    return db_referral

def get_referrals_by_code(db: Session, referrer_code: str) -> list[Referral]:
    return db.query(Referral).filter(Referral.referrer_code == referrer_code).all()
