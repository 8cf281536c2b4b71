"""Task service with business logic."""

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import ForbiddenError, ValidationFailedError
from ..core.logging import get_logger
from ..models import Task, TaskPriority, TaskStatus, User, utc_now, utc_today
from ..repositories import (
    Page,
    PageParams,
    ProjectRepository,
    TaskFilters,
    TaskRepository,
    UserRepository,
)
from .policy import Action, authorize_task, can_update_project, ensure_allowed, is_assignee_only
from .statistics import select_due_soon, select_overdue
from .validation import FieldErrors, validate_task_data

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"project_id", "assigned_to", "title", "description", "priority", "status", "due_date"}
)


class TaskService:
    """
    Сервис для работы с задачами.

    Координирует несколько репозиториев:
    - TaskRepository (задачи)
    - ProjectRepository (проверка проекта + права на него)
    - UserRepository (проверка исполнителя)
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.task_repo = TaskRepository(db)
        self.project_repo = ProjectRepository(db)
        self.user_repo = UserRepository(db)

    async def _get_authorized(self, actor: User, task_id: int, action: Action) -> Task:
        task = await self.task_repo.get_by_id_full(task_id)
        ensure_allowed(authorize_task(actor, action, task), action, "Task", task_id)
        return task

    async def _check_assignee(self, errors: FieldErrors, assigned_to: int | None) -> None:
        if assigned_to is not None and not await self.user_repo.exists(assigned_to):
            errors.add("assigned_to", "The selected user does not exist.")

    async def create_task(
        self,
        actor: User,
        project_id: int | None,
        title: str | None,
        description: str | None = None,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        status: TaskStatus | str = TaskStatus.PENDING,
        due_date: date | None = None,
        assigned_to: int | None = None,
    ) -> Task:
        """
        Создать задачу в проекте.

        Бизнес-правила:
        1. Проект обязателен и должен существовать
        2. actor должен иметь право обновлять этот проект
        3. Исполнитель (если указан) должен существовать
        4. Дедлайн не в прошлом

        Raises:
            ValidationFailedError: ошибки полей (включая несуществующий проект)
            ForbiddenError: проект чужой
        """
        # 1. ВАЛИДАЦИЯ: поля
        data = {
            "project_id": project_id,
            "title": title,
            "description": description,
            "priority": priority,
            "status": status,
            "due_date": due_date,
        }
        errors = validate_task_data(data, today=utc_today())

        # 2. ВАЛИДАЦИЯ: проект и исполнитель существуют
        project = None
        if project_id is not None:
            project = await self.project_repo.get_by_id(project_id)
            if project is None:
                errors.add("project_id", "The selected project does not exist.")
        await self._check_assignee(errors, assigned_to)

        errors.raise_if_any()

        # 3. ПРАВА: создавать задачи можно только в своих проектах
        if not can_update_project(actor, project):
            raise ForbiddenError("create tasks in", "Project", project_id)

        # 4. СОЗДАНИЕ
        status = TaskStatus(status)
        task = await self.task_repo.create(
            Task(
                project_id=project_id,
                assigned_to=assigned_to,
                title=title.strip(),
                description=description.strip() if description else None,
                priority=TaskPriority(priority),
                status=status,
                due_date=due_date,
                completed_at=utc_now() if status == TaskStatus.COMPLETED else None,
            )
        )
        logger.info("Task created", extra={"task_id": task.id, "project_id": project_id})

        # 5. ЗАГРУЗКА: вернуть задачу с проектом и исполнителем
        return await self.task_repo.get_by_id_full(task.id)

    async def get_task(self, actor: User, task_id: int) -> Task:
        return await self._get_authorized(actor, task_id, Action.VIEW)

    async def list_tasks(
        self,
        actor: User,
        filters: TaskFilters | None = None,
        page: PageParams | None = None,
    ) -> Page[Task]:
        """Список задач в проектах actor (admin - все), с фильтрами."""
        ensure_allowed(authorize_task(actor, Action.VIEW_ANY), Action.VIEW_ANY, "Task", "*")
        return await self.task_repo.get_filtered(
            actor, filters or TaskFilters(), page or PageParams()
        )

    async def update_task(self, actor: User, task_id: int, **changes: Any) -> Task:
        """
        Частичное обновление задачи.

        Бизнес-логика:
        1. Исполнитель (не владелец) может менять только status
        2. Перенос в другой проект - нужно право update на целевой проект
        3. При смене статуса на COMPLETED - установить completed_at
        4. При смене статуса с COMPLETED - сбросить completed_at
        """
        # 1. ПРОВЕРКА: задача существует и actor может её обновлять
        task = await self._get_authorized(actor, task_id, Action.UPDATE)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailedError(
                {field: ["This field cannot be updated."] for field in sorted(unknown)}
            )

        # Поля, совпадающие с текущими значениями, не считаются изменениями
        changes = {key: value for key, value in changes.items() if getattr(task, key) != value}

        # 2. ПРАВА: исполнитель меняет только статус
        if is_assignee_only(actor, task) and set(changes) - {"status"}:
            raise ForbiddenError(
                "update", "Task", task_id, reason="assignees may only change the status"
            )

        # 3. ВАЛИДАЦИЯ: поля + существование связей
        errors = validate_task_data(changes, partial=True)

        target_project = None
        if changes.get("project_id") is not None:
            target_project = await self.project_repo.get_by_id(changes["project_id"])
            if target_project is None:
                errors.add("project_id", "The selected project does not exist.")
        if "assigned_to" in changes:
            await self._check_assignee(errors, changes["assigned_to"])

        errors.raise_if_any()

        # 4. ПРАВА: перенос только в проект, который actor может обновлять
        if target_project is not None and not can_update_project(actor, target_project):
            raise ForbiddenError("move tasks to", "Project", target_project.id)

        # 5. НОРМАЛИЗАЦИЯ
        if "title" in changes:
            changes["title"] = changes["title"].strip()
        if "description" in changes:
            changes["description"] = (
                changes["description"].strip() if changes["description"] else None
            )
        if "priority" in changes:
            changes["priority"] = TaskPriority(changes["priority"])

        # 6. БИЗНЕС-ЛОГИКА: completed_at следует за статусом
        if "status" in changes:
            new_status = TaskStatus(changes["status"])
            changes["status"] = new_status
            if new_status == TaskStatus.COMPLETED:
                changes["completed_at"] = utc_now()
            elif task.status == TaskStatus.COMPLETED:
                changes["completed_at"] = None

        # 7. ПРИМЕНЕНИЕ
        if changes:
            await self.task_repo.update(task, **changes)
            if "project_id" in changes:
                logger.info(
                    "Task moved",
                    extra={"task_id": task_id, "project_id": changes["project_id"]},
                )

        return await self.task_repo.get_by_id_full(task_id)

    async def complete_task(self, actor: User, task_id: int) -> Task:
        """
        Отметить задачу выполненной.

        Shortcut для update_task(status=COMPLETED); доступен и исполнителю.
        """
        return await self.update_task(actor, task_id, status=TaskStatus.COMPLETED)

    async def delete_task(self, actor: User, task_id: int) -> None:
        task = await self._get_authorized(actor, task_id, Action.DELETE)
        await self.task_repo.delete(task)
        logger.info("Task deleted", extra={"task_id": task_id})

    async def get_overdue_tasks(self, actor: User, today: date | None = None) -> list[Task]:
        """Просроченные задачи, видимые actor, по возрастанию due_date."""
        tasks = await self.task_repo.get_visible(actor)
        return select_overdue(tasks, today or utc_today())

    async def get_due_soon_tasks(
        self, actor: User, today: date | None = None, window_days: int | None = None
    ) -> list[Task]:
        """Задачи с дедлайном в ближайшие DUE_SOON_DAYS дней (включительно)."""
        tasks = await self.task_repo.get_visible(actor)
        if window_days is None:
            window_days = settings.DUE_SOON_DAYS
        return select_due_soon(tasks, today or utc_today(), window_days)
