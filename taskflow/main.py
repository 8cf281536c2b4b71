"""
Главный файл FastAPI приложения.

Запуск:
    uvicorn taskflow.main:app --reload

API документация:
    http://localhost:8000/docs       - Swagger UI
    http://localhost:8000/redoc      - ReDoc

Версионирование:
    API доступно по путям /api/v1/...
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .api import (
    dashboard_router,
    projects_router,
    tasks_router,
    users_public_router,
    users_router,
)
from .api.dependencies import get_current_user
from .api.errors import register_error_handlers
from .api.limiter import RATE_LIMIT, limiter, rate_limit_exceeded_handler
from .api.middleware import RequestLoggingMiddleware
from .core.config import settings
from .core.database import AsyncSessionLocal
from .core.logging import get_logger, setup_logging

# Инициализируем логирование при импорте модуля
setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

logger = get_logger(__name__)

# ============================================================================
# APPLICATION METADATA
# ============================================================================

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # Will be set on startup


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup/shutdown events.

    Таблицы создаёт Alembic (или init_db.py), здесь только логирование.
    """
    global APP_START_TIME

    APP_START_TIME = time.time()
    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
        },
    )

    yield  # Application runs here

    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Управление проектами и задачами.

    ## Возможности

    * **Проекты** - статус, даты начала/окончания, статистика по задачам
    * **Задачи** - приоритет, дедлайн, исполнитель, просроченные / скоро дедлайн
    * **Права** - владелец проекта или администратор; исполнитель меняет статус
    * **Дашборд** - сводка по моим проектам и назначенным мне задачам

    ## Аутентификация

    `POST /api/v1/users/register` выдаёт персональный ключ.
    Все остальные `/api/v1/*` endpoints требуют заголовок `X-API-Key`.

    ## 3-Layer Architecture

    ```
    API Layer (FastAPI) → Service Layer (Business Logic) → Repository Layer (Database)
    ```
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Подключаем rate limiter к приложению
app.state.limiter = limiter
# slowapi handler имеет специфичный тип, но работает корректно
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Каждый запрос логируется с методом, путём, статусом и временем
app.add_middleware(RequestLoggingMiddleware)


# ============================================================================
# API VERSIONING
# ============================================================================

# Endpoints, требующие X-API-Key
protected_router = APIRouter(dependencies=[Depends(get_current_user)])
protected_router.include_router(projects_router)
protected_router.include_router(tasks_router)
protected_router.include_router(users_router)
protected_router.include_router(dashboard_router)

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(users_public_router)
api_v1_router.include_router(protected_router)

app.include_router(api_v1_router)

register_error_handlers(app)


# ============================================================================
# ROOT ENDPOINT
# ============================================================================


@app.get("/", tags=["root"], summary="Root endpoint", description="Информация о API")
@limiter.limit(RATE_LIMIT)
async def root(request: Request):
    """Информация о API и полезные ссылки."""
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "api_version": "v1",
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
        "endpoints": {
            "register": "/api/v1/users/register",
            "projects": "/api/v1/projects",
            "tasks": "/api/v1/tasks",
            "dashboard": "/api/v1/dashboard",
            "options": "/api/v1/options",
        },
        "rate_limit": RATE_LIMIT,
    }


# ============================================================================
# HEALTH CHECK
# ============================================================================


@app.get(
    "/health", tags=["health"], summary="Health check", description="Проверка работоспособности API"
)
@limiter.limit(RATE_LIMIT)
async def health_check(request: Request):
    """
    Health check endpoint.

    Проверяет подключение к базе данных.

    Пример ответа (200 OK):
    ```json
    {
        "status": "ok",
        "checks": {"database": "connected", "version": "1.0.0", "uptime_seconds": 3600},
        "timestamp": "2026-01-22T12:00:00Z"
    }
    ```

    При недоступной БД - 503 и "status": "error".
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    db_status = "disconnected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            db_status = "connected"
    except SQLAlchemyError:
        logger.exception("Health check: database unavailable")

    checks = {
        "database": db_status,
        "version": APP_VERSION,
        "uptime_seconds": uptime_seconds,
    }

    overall_status = "ok" if db_status == "connected" else "error"
    status_code = 200 if overall_status == "ok" else 503

    return JSONResponse(
        status_code=status_code,
        content={
            "status": overall_status,
            "checks": checks,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
