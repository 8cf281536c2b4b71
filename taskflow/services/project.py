"""Project service with business logic."""

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationFailedError
from ..core.logging import get_logger
from ..models import Project, ProjectStatus, User, utc_today
from ..repositories import Page, PageParams, ProjectFilters, ProjectRepository
from .policy import Action, authorize_project, ensure_allowed
from .statistics import compute_task_stats
from .validation import validate_project_data

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "description", "status", "start_date", "end_date"})


class ProjectService:
    """
    Сервис для работы с проектами.

    Содержит бизнес-логику:
    - Проверка прав через policy (владелец / admin)
    - Валидация полей (все ошибки за один проход)
    - Статистика по задачам проекта
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.project_repo = ProjectRepository(db)

    async def _get_authorized(self, actor: User, project_id: int, action: Action) -> Project:
        """
        Загрузить проект и проверить право на действие.

        Raises:
            NotFoundError: проекта нет
            ForbiddenError: проект чужой и actor не admin
        """
        project = await self.project_repo.get_by_id_full(project_id)
        ensure_allowed(authorize_project(actor, action, project), action, "Project", project_id)
        return project

    async def list_projects(
        self,
        actor: User,
        filters: ProjectFilters | None = None,
        page: PageParams | None = None,
    ) -> Page[Project]:
        """
        Список проектов, видимых actor, с фильтрами и пагинацией.

        Пример:
            page = await service.list_projects(
                user, ProjectFilters(search="alpha"), PageParams(page=1, per_page=15)
            )
        """
        ensure_allowed(
            authorize_project(actor, Action.VIEW_ANY), Action.VIEW_ANY, "Project", "*"
        )
        return await self.project_repo.get_filtered(
            actor, filters or ProjectFilters(), page or PageParams()
        )

    async def get_project(self, actor: User, project_id: int) -> Project:
        """Проект с задачами и владельцем."""
        return await self._get_authorized(actor, project_id, Action.VIEW)

    async def create_project(
        self,
        actor: User,
        name: str | None,
        description: str | None = None,
        status: ProjectStatus | str = ProjectStatus.ACTIVE,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Project:
        """
        Создать проект, владелец - actor.

        Бизнес-правила:
        1. Название обязательно, до 255 символов
        2. Описание до 1000 символов
        3. Дата начала не в прошлом
        4. Дата окончания не раньше даты начала

        Raises:
            ValidationFailedError: со всеми ошибками по полям сразу
        """
        ensure_allowed(authorize_project(actor, Action.CREATE), Action.CREATE, "Project", "*")

        data = {
            "name": name,
            "description": description,
            "status": status,
            "start_date": start_date,
            "end_date": end_date,
        }
        validate_project_data(data, today=utc_today()).raise_if_any()

        project = await self.project_repo.create(
            Project(
                owner_id=actor.id,
                name=name.strip(),
                description=description.strip() if description else None,
                status=ProjectStatus(status),
                start_date=start_date,
                end_date=end_date,
            )
        )
        logger.info("Project created", extra={"project_id": project.id})

        return await self.project_repo.get_by_id_full(project.id)

    async def update_project(self, actor: User, project_id: int, **changes: Any) -> Project:
        """
        Частичное обновление проекта.

        Передаются только изменяемые поля; None для description/start_date/
        end_date очищает значение.

        Пример:
            await service.update_project(user, 1, name="Новое имя", end_date=None)

        Бизнес-правило:
        - end_date >= start_date проверяется на ИТОГОВЫХ значениях
          (можно прислать только end_date)
        """
        project = await self._get_authorized(actor, project_id, Action.UPDATE)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailedError(
                {field: ["This field cannot be updated."] for field in sorted(unknown)}
            )

        merged = {
            "start_date": changes.get("start_date", project.start_date),
            "end_date": changes.get("end_date", project.end_date),
        }
        validate_project_data({**changes, **merged}, partial=True).raise_if_any()

        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if "description" in changes:
            changes["description"] = (
                changes["description"].strip() if changes["description"] else None
            )
        if "status" in changes:
            changes["status"] = ProjectStatus(changes["status"])

        if changes:
            await self.project_repo.update(project, **changes)

        return await self.project_repo.get_by_id_full(project_id)

    async def delete_project(self, actor: User, project_id: int) -> None:
        """
        Удалить проект вместе со всеми задачами (cascade).

        Удаление проекта и его задач - один flush в одной транзакции.
        """
        project = await self._get_authorized(actor, project_id, Action.DELETE)

        tasks_count = len(project.tasks)
        await self.project_repo.delete(project)
        logger.info(
            "Project deleted", extra={"project_id": project_id, "tasks_deleted": tasks_count}
        )

    async def archive_project(self, actor: User, project_id: int) -> Project:
        """Перевести проект в статус archived."""
        return await self.update_project(actor, project_id, status=ProjectStatus.ARCHIVED)

    async def complete_project(
        self, actor: User, project_id: int, today: date | None = None
    ) -> Project:
        """
        Завершить проект.

        Если end_date не задана - ставим сегодняшнюю дату.
        """
        project = await self._get_authorized(actor, project_id, Action.UPDATE)
        changes: dict[str, Any] = {"status": ProjectStatus.COMPLETED}
        if project.end_date is None:
            today = today or utc_today()
            # end_date не может оказаться раньше start_date из будущего
            changes["end_date"] = max(today, project.start_date or today)
        return await self.update_project(actor, project_id, **changes)

    async def get_project_stats(
        self, actor: User, project_id: int, today: date | None = None
    ) -> dict:
        """
        Получить статистику по проекту.

        Returns:
            {
                "project_id": 1,
                "project_name": "Alpha Launch",
                "total": 3, "completed": 1, "pending": 1, "in_progress": 1,
                "overdue": 1, "completion_rate": 33.33
            }

        Это бизнес-логика! Repository не должен знать, как считать процент.
        """
        project = await self._get_authorized(actor, project_id, Action.VIEW)
        stats = compute_task_stats(project.tasks, today or utc_today())
        return {"project_id": project.id, "project_name": project.name, **stats.as_dict()}
