"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.

Входные схемы проверяют только форму запроса (типы полей).
Бизнес-правила (обязательность, длины, enum значения, даты) проверяет
сервисный слой, чтобы все ошибки по полям возвращались одним ответом.
"""

from datetime import date, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..models import Project, ProjectStatus, Task, TaskPriority, TaskStatus
from ..repositories import Page
from ..services.statistics import is_due_soon, is_overdue

T = TypeVar("T")

# ============================================================================
# USER SCHEMAS
# ============================================================================


class UserCreate(BaseModel):
    """
    Схема регистрации (POST /users/register).

    Пример запроса:
    {
        "name": "Alice",
        "email": "alice@example.com"
    }
    """

    name: str = Field(..., description="Имя пользователя")
    email: str = Field(..., description="Email (уникальный)")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    is_admin: bool
    created_at: datetime


class UserWithKeyResponse(UserResponse):
    """
    Ответ регистрации: единственное место, где возвращается API ключ.

    Дальше его передают в заголовке X-API-Key.
    """

    api_key: str


class UserBrief(BaseModel):
    """Короткое представление пользователя (выбор исполнителя)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


# ============================================================================
# PROJECT SCHEMAS
# ============================================================================


class ProjectCreate(BaseModel):
    """
    Схема для создания проекта (POST /projects).

    Пример запроса:
    {
        "name": "Alpha Launch",
        "description": "Первый релиз",
        "start_date": "2026-11-01",
        "end_date": "2026-12-01"
    }
    """

    name: str | None = Field(None, description="Название проекта (обязательно, до 255 символов)")
    description: str | None = Field(None, description="Описание (до 1000 символов)")
    status: str | None = Field(
        default=ProjectStatus.ACTIVE.value,
        description=f"Статус: {' | '.join(ProjectStatus.values())}",
    )
    start_date: date | None = Field(None, description="Дата начала (не в прошлом)")
    end_date: date | None = Field(None, description="Дата окончания (>= start_date)")


class ProjectUpdate(BaseModel):
    """
    Схема для обновления проекта (PUT /projects/{id}).

    Все поля опциональные (частичное обновление). Переданный null для
    description/start_date/end_date очищает значение.
    """

    name: str | None = None
    description: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProjectResponse(BaseModel):
    """
    Схема проекта в ответе API.

    Пример ответа:
    {
        "id": 1,
        "owner_id": 1,
        "name": "Alpha Launch",
        "status": "active",
        "status_label": "Active",
        "tasks_count": 3,
        ...
    }
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    description: str | None
    status: ProjectStatus
    start_date: date | None
    end_date: date | None
    tasks_count: int = 0
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def status_label(self) -> str:
        return self.status.label


# ============================================================================
# TASK SCHEMAS
# ============================================================================


class TaskCreate(BaseModel):
    """
    Схема для создания задачи (POST /tasks).

    Пример запроса:
    {
        "project_id": 1,
        "title": "Написать тесты",
        "priority": "high",
        "due_date": "2026-11-01",
        "assigned_to": 2
    }
    """

    project_id: int | None = Field(None, description="ID проекта (обязателен)")
    title: str | None = Field(None, description="Название задачи (обязательно, до 255 символов)")
    description: str | None = Field(None, description="Описание (до 1000 символов)")
    status: str | None = Field(
        default=TaskStatus.PENDING.value,
        description=f"Статус: {' | '.join(TaskStatus.values())}",
    )
    priority: str | None = Field(
        default=TaskPriority.MEDIUM.value,
        description=f"Приоритет: {' | '.join(TaskPriority.values())}",
    )
    due_date: date | None = Field(None, description="Дедлайн (не в прошлом)")
    assigned_to: int | None = Field(None, description="ID исполнителя")


class TaskUpdate(BaseModel):
    """
    Схема для обновления задачи (PUT /tasks/{id}).

    Все поля опциональные. Исполнитель задачи может менять только status.
    """

    project_id: int | None = None
    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    due_date: date | None = None
    assigned_to: int | None = None


class TaskResponse(BaseModel):
    """
    Схема задачи в ответе API.

    is_overdue / is_due_soon вычисляются на момент ответа
    (один `today` на весь запрос), поэтому собираем через from_task().
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    assigned_to: int | None
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    is_overdue: bool = False
    is_due_soon: bool = False

    @computed_field
    @property
    def status_label(self) -> str:
        return self.status.label

    @computed_field
    @property
    def priority_label(self) -> str:
        return self.priority.label

    @classmethod
    def from_task(cls, task: Task, today: date, window_days: int) -> "TaskResponse":
        response = cls.model_validate(task)
        response.is_overdue = is_overdue(task, today)
        response.is_due_soon = is_due_soon(task, today, window_days)
        return response


class TaskDetailResponse(TaskResponse):
    """Задача вместе с проектом и исполнителем (GET /tasks/{id})."""

    project: ProjectResponse | None = None
    assignee: UserBrief | None = None


class ProjectDetailResponse(ProjectResponse):
    """Проект с владельцем и задачами (GET /projects/{id})."""

    owner: UserBrief
    tasks: list[TaskResponse] = []

    @classmethod
    def from_project(
        cls, project: Project, today: date, window_days: int
    ) -> "ProjectDetailResponse":
        base = ProjectResponse.model_validate(project)
        return cls(
            **base.model_dump(exclude={"status_label"}),
            owner=UserBrief.model_validate(project.owner),
            tasks=[TaskResponse.from_task(t, today, window_days) for t in project.tasks],
        )


# ============================================================================
# STATISTICS & DASHBOARD SCHEMAS
# ============================================================================


class TaskStatsResponse(BaseModel):
    total: int
    completed: int
    pending: int
    in_progress: int
    overdue: int
    completion_rate: float = Field(..., description="Процент выполненных (0-100)")


class ProjectStatsResponse(TaskStatsResponse):
    """
    Статистика проекта (GET /projects/{id}/stats).

    Пример ответа:
    {
        "project_id": 1,
        "project_name": "Alpha Launch",
        "total": 3, "completed": 1, "pending": 1, "in_progress": 1,
        "overdue": 1, "completion_rate": 33.33
    }
    """

    project_id: int
    project_name: str


class ProjectCountsResponse(BaseModel):
    total: int
    active: int
    completed: int
    archived: int


class DashboardResponse(BaseModel):
    """Сводка GET /dashboard."""

    today: date
    projects: ProjectCountsResponse
    tasks: TaskStatsResponse = Field(..., description="Задачи в моих проектах")
    assigned_tasks: TaskStatsResponse = Field(..., description="Задачи, назначенные мне")
    recent_projects: list[ProjectResponse]
    recent_tasks: list[TaskResponse]
    overdue_tasks: list[TaskResponse]
    due_soon_tasks: list[TaskResponse]


# ============================================================================
# PAGINATION & OPTIONS
# ============================================================================


class PageResponse(BaseModel, Generic[T]):
    """
    Страница результатов.

    Пример ответа:
    {
        "items": [...],
        "total": 42, "page": 2, "per_page": 15,
        "total_pages": 3, "has_next": true, "has_prev": true
    }
    """

    items: list[T]
    total: int
    page: int
    per_page: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page: Page, items: list[T]) -> "PageResponse[T]":
        return cls(
            items=items,
            total=page.total,
            page=page.page,
            per_page=page.per_page,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )


class OptionResponse(BaseModel):
    value: str
    label: str


class OptionsResponse(BaseModel):
    """Значения всех перечислений для построения select-ов на клиенте."""

    task_statuses: list[OptionResponse]
    task_priorities: list[OptionResponse]
    project_statuses: list[OptionResponse]


# ============================================================================
# ERROR SCHEMAS (Единый формат ошибок)
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    {
        "field": "end_date",
        "message": "The end date must be on or after the start date."
    }
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    code: str = Field(..., description="Код ошибки (VALIDATION_ERROR, FORBIDDEN, NOT_FOUND)")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(
        None, description="Детали ошибки (для ошибок валидации)"
    )


class ErrorResponse(BaseModel):
    """
    Единый формат ошибки API.

    Пример ответа (422):
    {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Validation failed",
            "details": [
                {"field": "name", "message": "The project name is required."}
            ]
        }
    }
    """

    error: ErrorBody
