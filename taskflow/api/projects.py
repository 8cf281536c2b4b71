"""
API endpoints для работы с проектами.

URL структура:
- GET    /projects                - список проектов (фильтры + пагинация)
- POST   /projects                - создать проект
- GET    /projects/{id}           - проект с задачами
- PUT    /projects/{id}           - обновить проект
- DELETE /projects/{id}           - удалить проект (вместе с задачами)
- GET    /projects/{id}/stats     - статистика по задачам
- POST   /projects/{id}/archive   - архивировать
- POST   /projects/{id}/complete  - завершить
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..core.config import settings
from ..models import ProjectStatus, User, utc_today
from ..repositories import PageParams, ProjectFilters
from ..services import ProjectService
from .dependencies import get_current_user, get_project_service
from .schemas import (
    ErrorResponse,
    PageResponse,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectStatsResponse,
    ProjectUpdate,
)

router = APIRouter(prefix="/projects", tags=["projects"])

NOT_FOUND_OR_FORBIDDEN = {
    403: {"model": ErrorResponse, "description": "Проект принадлежит другому пользователю"},
    404: {"model": ErrorResponse, "description": "Проект не найден"},
}


def _detail(project) -> ProjectDetailResponse:
    return ProjectDetailResponse.from_project(project, utc_today(), settings.DUE_SOON_DAYS)


# ============================================================================
# LIST & CREATE
# ============================================================================


@router.get(
    "",
    response_model=PageResponse[ProjectResponse],
    summary="Получить список проектов",
    description="""
    Проекты текущего пользователя (администратор видит все).

    **Фильтрация:** status, search (по name и description, без учёта регистра)

    **Сортировка:** sort_by = created_at | updated_at | name | status |
    start_date | end_date; sort_dir = asc | desc
    """,
)
async def list_projects(
    status_filter: ProjectStatus | None = Query(None, alias="status", description="Статус"),
    search: str | None = Query(None, description="Поиск по названию и описанию"),
    sort_by: str = Query("created_at", description="Поле сортировки"),
    sort_dir: Literal["asc", "desc"] = Query("desc", description="Направление сортировки"),
    page: int = Query(1, ge=1, description="Номер страницы (с 1)"),
    per_page: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Размер страницы",
    ),
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> PageResponse[ProjectResponse]:
    """
    Примеры запросов:
    ```
    GET /api/v1/projects?status=active
    GET /api/v1/projects?search=alpha&sort_by=name&sort_dir=asc
    GET /api/v1/projects?page=2&per_page=10
    ```
    """
    result = await service.list_projects(
        actor,
        ProjectFilters(status=status_filter, search=search, sort_by=sort_by, sort_dir=sort_dir),
        PageParams(page=page, per_page=per_page),
    )
    return PageResponse[ProjectResponse].from_page(
        result, [ProjectResponse.model_validate(p) for p in result.items]
    )


@router.post(
    "",
    response_model=ProjectDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать проект",
    description="""
    Создать проект. Владельцем становится текущий пользователь.

    Бизнес-правила:
    - Название обязательно (до 255 символов)
    - Дата начала не в прошлом
    - Дата окончания не раньше даты начала
    """,
    responses={422: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
async def create_project(
    data: ProjectCreate,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    project = await service.create_project(
        actor,
        name=data.name,
        description=data.description,
        status=data.status,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    return _detail(project)


# ============================================================================
# SINGLE PROJECT
# ============================================================================


@router.get(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Получить проект",
    description="Проект с владельцем и списком задач",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def get_project(
    project_id: int,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    return _detail(await service.get_project(actor, project_id))


@router.put(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Обновить проект",
    description="Частичное обновление: меняются только переданные поля",
    responses={
        **NOT_FOUND_OR_FORBIDDEN,
        422: {"model": ErrorResponse, "description": "Ошибка валидации"},
    },
)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    """
    Пример запроса:
    ```json
    {"name": "Alpha Launch v2", "end_date": "2026-12-31"}
    ```
    """
    # exclude_unset: отличаем "поле не передано" от "передан null"
    project = await service.update_project(
        actor, project_id, **data.model_dump(exclude_unset=True)
    )
    return _detail(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить проект",
    description="Удалить проект. ВНИМАНИЕ: все задачи проекта тоже будут удалены!",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def delete_project(
    project_id: int,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> None:
    await service.delete_project(actor, project_id)


# ============================================================================
# ACTIONS & STATS
# ============================================================================


@router.get(
    "/{project_id}/stats",
    response_model=ProjectStatsResponse,
    summary="Статистика проекта",
    description="Количество задач по статусам, просроченные и процент выполнения",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def get_project_stats(
    project_id: int,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectStatsResponse:
    """
    Пример ответа:
    ```json
    {
        "project_id": 1, "project_name": "Alpha Launch",
        "total": 3, "completed": 1, "pending": 1, "in_progress": 1,
        "overdue": 1, "completion_rate": 33.33
    }
    ```
    """
    stats = await service.get_project_stats(actor, project_id)
    return ProjectStatsResponse(**stats)


@router.post(
    "/{project_id}/archive",
    response_model=ProjectDetailResponse,
    summary="Архивировать проект",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def archive_project(
    project_id: int,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    return _detail(await service.archive_project(actor, project_id))


@router.post(
    "/{project_id}/complete",
    response_model=ProjectDetailResponse,
    summary="Завершить проект",
    description="Статус completed; если дата окончания не задана, ставится сегодняшняя",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def complete_project(
    project_id: int,
    actor: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    return _detail(await service.complete_project(actor, project_id))
