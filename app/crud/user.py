# app/crud/user.py
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.user import User


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Получает пользователя по его первичному ключу."""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()

def get_user_by_referral_code(db: Session, code: str) -> User | None:
    return db.query(User).filter(User.referral_code == code).first()

def create_user(
    db: Session,
    email: str,
    password_hash: str,
    name: str,
    referral_code: str,
    referred_by: str | None = None,
    credits: float = 0
) -> User:
    """
    Создает пользователя и добавляет его в сессию.
    Требует внешнего вызова db.commit().
    """
    db_user = User(
        email=email.strip().lower(),
        password_hash=password_hash,
        name=name,
        referral_code=referral_code,
        referred_by=referred_by,
        credits=credits
    )
    db.add(db_user)
    db.flush()
    return db_user

def get_users(db: Session, skip: int = 0, limit: int | None = None) -> list[User]:
    """Список пользователей, новые первыми."""
    query = db.query(User).order_by(User.created_at.desc(), User.id.desc()).offset(skip)
    if limit:
        query = query.limit(limit)
    return query.all()

def count_all_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar()

# --- Атомарные операции с балансом ---

def add_credits(db: Session, user_id: int, amount: float) -> bool:
    """Начисляет кредиты одним UPDATE, без чтения баланса."""
    updated = db.query(User).filter(User.id == user_id).update(
        {User.credits: User.credits + amount}, synchronize_session=False
    )
    return updated == 1

def consume_credits(db: Session, user_id: int, amount: float) -> bool:
    """
    Списывает кредиты, только если их хватает (`credits >= amount`).
    Возвращает False, если баланс изменился и списание невозможно.
    """
    updated = db.query(User).filter(
        User.id == user_id,
        User.credits >= amount
    ).update({User.credits: User.credits - amount}, synchronize_session=False)
    return updated == 1
