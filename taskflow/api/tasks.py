"""
API endpoints для работы с задачами.

URL структура:
- GET    /tasks                - список задач (фильтры + пагинация)
- POST   /tasks                - создать задачу
- GET    /tasks/overdue        - просроченные задачи
- GET    /tasks/due-soon       - задачи с близким дедлайном
- GET    /tasks/{id}           - одна задача
- PUT    /tasks/{id}           - обновить задачу
- POST   /tasks/{id}/complete  - завершить задачу
- DELETE /tasks/{id}           - удалить задачу
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..core.config import settings
from ..models import Task, TaskPriority, TaskStatus, User, utc_today
from ..repositories import PageParams, TaskFilters
from ..services import TaskService
from .dependencies import get_current_user, get_task_service
from .schemas import (
    ErrorResponse,
    PageResponse,
    TaskCreate,
    TaskDetailResponse,
    TaskResponse,
    TaskUpdate,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])

NOT_FOUND_OR_FORBIDDEN = {
    403: {"model": ErrorResponse, "description": "Нет прав на задачу"},
    404: {"model": ErrorResponse, "description": "Задача не найдена"},
}


def _response(task: Task) -> TaskResponse:
    return TaskResponse.from_task(task, utc_today(), settings.DUE_SOON_DAYS)


def _detail(task: Task) -> TaskDetailResponse:
    return TaskDetailResponse.from_task(task, utc_today(), settings.DUE_SOON_DAYS)


# ============================================================================
# LIST & CREATE
# ============================================================================


@router.get(
    "",
    response_model=PageResponse[TaskResponse],
    summary="Получить задачи с фильтрами",
    description="""
    Задачи в проектах текущего пользователя (администратор видит все).

    **Фильтрация:** project_id, status, priority, assigned_to, search
    (по title и description, без учёта регистра). Все фильтры через AND.

    **Сортировка:** sort_by = created_at | updated_at | title | status |
    priority | due_date; sort_dir = asc | desc
    """,
)
async def list_tasks(
    project_id: int | None = Query(None, description="ID проекта"),
    status_filter: TaskStatus | None = Query(None, alias="status", description="Статус"),
    priority: TaskPriority | None = Query(None, description="Приоритет"),
    assigned_to: int | None = Query(None, description="ID исполнителя"),
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
    service: TaskService = Depends(get_task_service),
) -> PageResponse[TaskResponse]:
    """
    Примеры запросов:
    ```
    GET /api/v1/tasks?status=pending
    GET /api/v1/tasks?project_id=1&priority=high&sort_by=priority
    GET /api/v1/tasks?search=deploy&page=2
    ```
    """
    filters = TaskFilters(
        project_id=project_id,
        status=status_filter,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )
    result = await service.list_tasks(actor, filters, PageParams(page=page, per_page=per_page))
    today = utc_today()
    return PageResponse[TaskResponse].from_page(
        result,
        [TaskResponse.from_task(t, today, settings.DUE_SOON_DAYS) for t in result.items],
    )


@router.post(
    "",
    response_model=TaskDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    description="""
    Создать задачу в проекте.

    Бизнес-правила:
    - Проект должен существовать и принадлежать текущему пользователю
    - Исполнитель (если указан) должен существовать
    - Дедлайн не в прошлом
    """,
    responses={
        403: {"model": ErrorResponse, "description": "Проект принадлежит другому пользователю"},
        422: {"model": ErrorResponse, "description": "Ошибка валидации"},
    },
)
async def create_task(
    data: TaskCreate,
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """
    Пример запроса:
    ```json
    {
        "project_id": 1,
        "title": "Написать тесты",
        "priority": "high",
        "due_date": "2026-11-01"
    }
    ```
    """
    task = await service.create_task(
        actor,
        project_id=data.project_id,
        title=data.title,
        description=data.description,
        priority=data.priority,
        status=data.status,
        due_date=data.due_date,
        assigned_to=data.assigned_to,
    )
    return _detail(task)


# ============================================================================
# DEADLINES
# ============================================================================


@router.get(
    "/overdue",
    response_model=list[TaskResponse],
    summary="Получить просроченные задачи",
    description="Дедлайн прошёл, задача не завершена и не отменена. Сортировка по дедлайну.",
)
async def get_overdue_tasks(
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    today = utc_today()
    tasks = await service.get_overdue_tasks(actor, today=today)
    return [TaskResponse.from_task(t, today, settings.DUE_SOON_DAYS) for t in tasks]


@router.get(
    "/due-soon",
    response_model=list[TaskResponse],
    summary="Получить задачи с близким дедлайном",
    description="Дедлайн сегодня или в ближайшие DUE_SOON_DAYS дней.",
)
async def get_due_soon_tasks(
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    today = utc_today()
    tasks = await service.get_due_soon_tasks(actor, today=today)
    return [TaskResponse.from_task(t, today, settings.DUE_SOON_DAYS) for t in tasks]


# ============================================================================
# SINGLE TASK
# ============================================================================


@router.get(
    "/{task_id}",
    response_model=TaskDetailResponse,
    summary="Получить задачу по ID",
    description="Задача вместе с проектом и исполнителем",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def get_task(
    task_id: int,
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    return _detail(await service.get_task(actor, task_id))


@router.put(
    "/{task_id}",
    response_model=TaskDetailResponse,
    summary="Обновить задачу",
    description="""
    Частичное обновление задачи.

    - Исполнитель (не владелец проекта) может менять только status
    - Перенос в другой проект требует прав на целевой проект
    - completed_at ставится/сбрасывается автоматически при смене статуса
    """,
    responses={
        **NOT_FOUND_OR_FORBIDDEN,
        422: {"model": ErrorResponse, "description": "Ошибка валидации"},
    },
)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    task = await service.update_task(actor, task_id, **data.model_dump(exclude_unset=True))
    return _detail(task)


@router.post(
    "/{task_id}/complete",
    response_model=TaskDetailResponse,
    summary="Завершить задачу",
    description="Shortcut для смены статуса на completed (доступен исполнителю)",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def complete_task(
    task_id: int,
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    return _detail(await service.complete_task(actor, task_id))


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить задачу",
    responses=NOT_FOUND_OR_FORBIDDEN,
)
async def delete_task(
    task_id: int,
    actor: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> None:
    await service.delete_task(actor, task_id)
