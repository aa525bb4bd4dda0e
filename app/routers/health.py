# app/routers/health.py
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def read_root():
    """Проверка живости для платформы хостинга."""
    return "hwplug Backend Running!"
