# app/core/redis.py
import redis.asyncio as redis
from app.core.config import settings

# Единственный на процесс клиент; ответы сразу декодируются в строки
redis_client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)

async def get_redis_client() -> redis.Redis:
    """Зависимость для получения клиента Redis в эндпоинтах."""
    return redis_client

async def close_redis_client():
    """Закрывает пул соединений при остановке приложения."""
    await redis_client.aclose()
