# app/main.py

import logging
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

# Конфигурация и ядро
from app.core.config import settings as config
from app.core.limiter import limiter
from app.core.logging_config import setup_logging
from app.core.redis import close_redis_client

# Роутеры FastAPI
from app.routers import auth, checkout, discount, health, order
from app.routers import admin as admin_router

# --- Инициализация ---
logger = logging.getLogger(__name__)


# --- Обработчики ошибок: единый формат {"success": false, "error": ...} ---
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Validation error for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Глобальный обработчик для всех необработанных исключений.
    Логирует ошибку и отдает её текст клиенту с кодом 500.
    """
    logger.critical(f"Unhandled exception for request: {request.method} {request.url}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc) or "Internal Server Error"},
    )


# --- Lifespan Manager (запуск и остановка приложения) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Application lifespan startup (port {config.PORT})...")

    yield

    await close_redis_client()
    logger.info("Application shut down.")


# --- Создание FastAPI приложения ---
app = FastAPI(
    title="hwplug Backend",
    description="Order intake, checkout and notifications for the hwplug homework service",
    version="2.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Регистрация обработчиков исключений ---
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Подключение роутеров FastAPI ---
api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(order.router, tags=["Orders"])
api_router.include_router(discount.router, tags=["Discounts"])
api_router.include_router(admin_router.router)

# Проверка живости и оформление заказа остаются в корне, как ждет фронтенд
app.include_router(health.router, tags=["Health"])
app.include_router(checkout.router, tags=["Checkout"])
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=config.PORT)
