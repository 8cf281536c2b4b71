"""
API endpoints: дашборд и справочники.

- GET /dashboard  - сводка по моим проектам и задачам
- GET /options    - значения перечислений (статусы, приоритеты) с подписями
"""

from fastapi import APIRouter, Depends

from ..core.config import settings
from ..models import ProjectStatus, TaskPriority, TaskStatus, User
from ..services import DashboardService
from .dependencies import get_current_user, get_dashboard_service
from .schemas import (
    DashboardResponse,
    OptionResponse,
    OptionsResponse,
    ProjectCountsResponse,
    ProjectResponse,
    TaskResponse,
    TaskStatsResponse,
)

router = APIRouter(tags=["dashboard"])


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Дашборд",
    description="""
    Сводка для текущего пользователя:
    - счётчики проектов по статусам
    - статистика задач в моих проектах и задач, назначенных мне
    - 5 последних проектов и 10 последних задач
    - просроченные задачи и задачи с близким дедлайном
    """,
)
async def get_dashboard(
    actor: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    data = await service.get_dashboard(actor)
    today = data["today"]

    def tasks(items) -> list[TaskResponse]:
        return [TaskResponse.from_task(t, today, settings.DUE_SOON_DAYS) for t in items]

    return DashboardResponse(
        today=today,
        projects=ProjectCountsResponse(**data["projects"]),
        tasks=TaskStatsResponse(**data["tasks"]),
        assigned_tasks=TaskStatsResponse(**data["assigned_tasks"]),
        recent_projects=[ProjectResponse.model_validate(p) for p in data["recent_projects"]],
        recent_tasks=tasks(data["recent_tasks"]),
        overdue_tasks=tasks(data["overdue_tasks"]),
        due_soon_tasks=tasks(data["due_soon_tasks"]),
    )


@router.get("/options", response_model=OptionsResponse, summary="Значения перечислений")
async def get_options(actor: User = Depends(get_current_user)) -> OptionsResponse:
    """
    Пример ответа:
    ```json
    {
        "task_statuses": [{"value": "pending", "label": "Pending"}, ...],
        "task_priorities": [{"value": "low", "label": "Low"}, ...],
        "project_statuses": [{"value": "active", "label": "Active"}, ...]
    }
    ```
    """
    return OptionsResponse(
        task_statuses=[OptionResponse(**o) for o in TaskStatus.options()],
        task_priorities=[OptionResponse(**o) for o in TaskPriority.options()],
        project_statuses=[OptionResponse(**o) for o in ProjectStatus.options()],
    )
