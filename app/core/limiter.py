# app/core/limiter.py

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)


def key_func(request: Request) -> str:
    """
    Определяет, как идентифицировать запрос для применения лимита.
    Эндпоинты входа анонимны, поэтому ключ - IP-адрес клиента.
    """
    return get_remote_address(request)


# Счетчики хранятся в Redis, чтобы лимит был общим для всех воркеров.
# 'moving-window' - гибкий алгоритм без всплесков на границе окна.
limiter = Limiter(
    key_func=key_func,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI or settings.REDIS_URL,
    strategy="moving-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
