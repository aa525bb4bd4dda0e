# app/services/auth.py

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import hash_password, verify_password
from app.crud import referral as crud_referral
from app.crud import user as crud_user
from app.dependencies import ADMIN_ROLE, check_admin_credentials
from app.models.user import User
from app.schemas.user import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_PREFIX = "HW"
# Сколько раз повторяем регистрацию при коллизии реферального кода
REGISTRATION_ATTEMPTS = 3


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Создает JWT токен."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


def create_admin_token(email: str) -> str:
    return create_access_token(
        data={"sub": email, "role": ADMIN_ROLE},
        expires_delta=timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES),
    )


def generate_referral_code() -> str:
    return REFERRAL_CODE_PREFIX + "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(8))


def _unique_referral_code(db: Session) -> str:
    new_code = generate_referral_code()
    while crud_user.get_user_by_referral_code(db, code=new_code):
        new_code = generate_referral_code()
    return new_code


def register_user(db: Session, data: RegisterRequest) -> tuple[User, float]:
    """
    Регистрирует пользователя. Если передан существующий реферальный код,
    новый пользователь и пригласивший получают кредиты, а вознаграждение
    фиксируется одной записью Referral. Всё в одной транзакции.
    Возвращает пользователя и размер приветственного бонуса.
    """
    email = data.email.strip().lower()
    if crud_user.get_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    referrer = None
    if data.referral_code:
        referrer = crud_user.get_user_by_referral_code(db, code=data.referral_code.strip().upper())
        if not referrer:
            logger.info(f"Unknown referral code '{data.referral_code}' supplied at registration; ignoring.")

    welcome_credit = settings.REFERRAL_WELCOME_CREDIT if referrer else 0

    password_hash = hash_password(data.password)
    referrer_id = referrer.id if referrer else None
    referrer_code = referrer.referral_code if referrer else None

    for attempt in range(1, REGISTRATION_ATTEMPTS + 1):
        try:
            db_user = crud_user.create_user(
                db,
                email=email,
                password_hash=password_hash,
                name=data.name.strip(),
                referral_code=_unique_referral_code(db),
                referred_by=referrer_code,
                credits=welcome_credit,
            )
            if referrer_id is not None:
                crud_user.add_credits(db, referrer_id, settings.REFERRER_REWARD)
                crud_referral.create_referral(
                    db, referrer_code=referrer_code, referred_email=email,
                    reward=settings.REFERRER_REWARD
                )
            db.commit()
            break
        except IntegrityError:
            db.rollback()
            if crud_user.get_user_by_email(db, email):
                # Параллельная регистрация с тем же email
                logger.warning(f"Concurrent registration for {email} detected.")
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
            # Реферальный код успели занять между проверкой и вставкой
            logger.warning(f"Referral code collision while registering {email} (attempt {attempt}).")
    else:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not complete registration, please try again"
        )

    db.refresh(db_user)
    if referrer_id is not None:
        logger.info(f"Referral rewarded: referrer_id={referrer_id} -> new user {db_user.id}")
    logger.info(f"Registered user {db_user.id} ({email})")
    return db_user, welcome_credit


def authenticate_user(db: Session, data: LoginRequest) -> User:
    user = crud_user.get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.password_hash):
        logger.info(f"Failed login attempt for {data.email}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")
    return user


def authenticate_admin(email: str, password: str) -> str:
    if not check_admin_credentials(email, password):
        logger.warning(f"Failed admin login attempt for {email}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin credentials")
    logger.info("Admin logged in.")
    return create_admin_token(settings.ADMIN_EMAIL)
