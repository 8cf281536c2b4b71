"""
API endpoints для пользователей.

- POST /users/register  - регистрация (без ключа), возвращает API ключ
- GET  /users/me        - текущий пользователь
- GET  /users           - список пользователей для выбора исполнителя
"""

from fastapi import APIRouter, Depends, Query, Request, status

from ..models import User
from ..services import UserService
from .dependencies import get_current_user, get_user_service
from .limiter import RATE_LIMIT, limiter
from .schemas import ErrorResponse, UserBrief, UserCreate, UserResponse, UserWithKeyResponse

# Регистрация доступна без X-API-Key, остальные endpoints - только с ключом
public_router = APIRouter(prefix="/users", tags=["users"])
router = APIRouter(prefix="/users", tags=["users"])


@public_router.post(
    "/register",
    response_model=UserWithKeyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Зарегистрироваться",
    description="Создать пользователя и получить персональный API ключ",
    responses={422: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
@limiter.limit(RATE_LIMIT)
async def register(
    request: Request,
    data: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserWithKeyResponse:
    """
    Пример запроса:
    ```json
    {"name": "Alice", "email": "alice@example.com"}
    ```

    Ключ из ответа передавайте в заголовке `X-API-Key`.
    """
    user = await service.register(name=data.name, email=data.email)
    return UserWithKeyResponse.model_validate(user)


@router.get("/me", response_model=UserResponse, summary="Текущий пользователь")
async def get_me(actor: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(actor)


@router.get("", response_model=list[UserBrief], summary="Список пользователей")
async def list_users(
    skip: int = Query(0, ge=0, description="Количество записей для пропуска (offset)"),
    limit: int = Query(100, ge=1, le=100, description="Максимальное количество записей"),
    actor: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> list[UserBrief]:
    users = await service.list_users(skip=skip, limit=limit)
    return [UserBrief.model_validate(u) for u in users]
