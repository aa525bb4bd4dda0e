# app/dependencies.py

import logging
import secrets
from typing import Optional, Iterator

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from app.core.config import settings
from app.db.session import SessionLocal
from app.crud import user as crud_user
from app.models.user import User

# --- Инициализация логгера ---
logger = logging.getLogger(__name__)

# --- Схема аутентификации ---
# auto_error=False: отсутствие токена обрабатываем сами, чтобы всегда отдавать 401
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"

# --- Управление сессией БД ---
def get_db_session_instance() -> Session:
    """Создает и возвращает экземпляр сессии БД."""
    return SessionLocal()

def get_db() -> Iterator[Session]:
    """
    Основная зависимость FastAPI для получения сессии БД.
    Это генератор, который корректно работает с `Depends`.
    """
    db = get_db_session_instance()
    try:
        yield db
    finally:
        db.close()

# --- Зависимости аутентификации и авторизации ---

def _decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    ОБЯЗАТЕЛЬНАЯ зависимость.
    Требует валидный токен пользователя. Если его нет или он невалиден - ошибка 401.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = _decode_token(credentials.credentials)
        user_id: str = payload.get("sub")
        if user_id is None or payload.get("role") == ADMIN_ROLE or not str(user_id).isdigit():
            logger.warning("Token payload is missing 'sub' or is not a user token.")
            raise credentials_exception
    except JWTError as e:
        logger.warning(f"JWT Error during token decoding: {e}")
        raise credentials_exception

    user = crud_user.get_user_by_id(db, int(user_id))
    if user is None:
        logger.warning(f"User with ID {user_id} from token not found in DB.")
        raise credentials_exception
    logger.debug(f"Successfully authenticated user ID: {user.id}")
    return user


def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    ОПЦИОНАЛЬНАЯ зависимость.
    Токен не передан - возвращает None. Токен передан, но невалиден - 401:
    молча продолжить как гость значило бы потерять кредиты пользователя.
    """
    if not credentials:
        return None
    return get_current_user(credentials, db)


def get_admin_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    admin_email: Optional[str] = Header(default=None, alias="email"),
    admin_password: Optional[str] = Header(default=None, alias="password"),
) -> str:
    """
    Зависимость для защиты админских эндпоинтов.
    Основной способ - админский JWT из /api/admin/login. Старая проверка по
    заголовкам email/password работает, только если включена в настройках.
    Возвращает email администратора.
    """
    forbidden = HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid admin credentials"
    )

    if credentials is not None:
        try:
            payload = _decode_token(credentials.credentials)
        except JWTError as e:
            logger.warning(f"Admin token rejected: {e}")
            raise forbidden
        if payload.get("role") != ADMIN_ROLE:
            logger.warning(f"Permission denied for token subject {payload.get('sub')}: not an admin token.")
            raise forbidden
        return payload.get("sub")

    if settings.ADMIN_HEADER_AUTH_ENABLED and admin_email and admin_password:
        if check_admin_credentials(admin_email, admin_password):
            logger.info("Admin access granted via legacy header credentials.")
            return admin_email

    logger.warning("Admin access denied: no valid credentials supplied.")
    raise forbidden


def check_admin_credentials(email: str, password: str) -> bool:
    """Сравнение с настроенной парой email/пароль за постоянное время."""
    email_ok = secrets.compare_digest(email.strip().lower().encode(), settings.ADMIN_EMAIL.strip().lower().encode())
    password_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return email_ok and password_ok
