# app/core/security.py

import logging

import bcrypt
from cryptography.fernet import Fernet, InvalidToken

from app.core.config import settings

logger = logging.getLogger(__name__)

_fernet = Fernet(settings.CREDENTIALS_ENCRYPTION_KEY.encode())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Хеш в базе поврежден или не bcrypt
        logger.warning("Stored password hash has an invalid format.")
        return False


def encrypt_secret(value: str | None) -> str | None:
    """Шифрует строку для хранения в БД (данные домашних аккаунтов)."""
    if value is None:
        return None
    return _fernet.encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_secret(token: str | None) -> str | None:
    if token is None:
        return None
    try:
        return _fernet.decrypt(token.encode("utf-8")).decode("utf-8")
    except InvalidToken:
        logger.error("Failed to decrypt stored secret: key mismatch or corrupted value.")
        return None
