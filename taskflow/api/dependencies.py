"""
Dependencies для FastAPI endpoints.

Цепочка зависимостей одного запроса:
    get_db -> get_current_user (X-API-Key -> User) -> get_*_service

Сессия БД общая для аутентификации и сервиса: один commit/rollback
на весь запрос.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.logging import actor_id_var
from ..models import User
from ..services import DashboardService, ProjectService, TaskService, UserService

__all__ = [
    "api_key_header",
    "get_current_user",
    "get_dashboard_service",
    "get_db",
    "get_project_service",
    "get_task_service",
    "get_user_service",
]

# ============================================================================
# API KEY AUTHENTICATION
# ============================================================================

# name="X-API-Key" - название заголовка, который клиент должен отправить
api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,  # Не выбрасывать ошибку автоматически, мы сами обработаем
    description="Персональный API ключ (выдаётся при регистрации)",
)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_current_user(
    request: Request,
    api_key: str | None = Depends(api_key_header),
    users: UserService = Depends(get_user_service),
) -> User:
    """
    Dependency: аутентифицированный пользователь (actor).

    Как работает:
    1. Клиент отправляет заголовок X-API-Key
    2. Ищем пользователя с этим ключом
    3. Нет заголовка или ключ неизвестен - 401 Unauthorized

    Пример запроса:
        curl -H "X-API-Key: <key>" http://localhost:8000/api/v1/projects
    """
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is missing. Add header: X-API-Key: your-key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    user = await users.authenticate(api_key)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    # actor_id попадает в логи сервисов этого запроса; middleware работает
    # в другом контексте и берёт его из request.state
    actor_id_var.set(user.id)
    request.state.actor_id = user.id
    return user


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    """
    Dependency для ProjectService.

    FastAPI кеширует get_db в рамках запроса, поэтому сервис получает
    ту же сессию, что и get_current_user.
    """
    return ProjectService(db)


async def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


async def get_dashboard_service(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(db)
