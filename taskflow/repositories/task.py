"""Task repository with specific queries."""

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from ..models import Project, Task, TaskPriority, User
from .base import BaseRepository
from .filters import TaskFilters, apply_sort, text_search
from .pagination import Page, PageParams, paginate

# Приоритет сортируем по весу, а не по алфавиту ("high" < "low" < "medium")
PRIORITY_ORDER = case(
    {priority.value: priority.rank for priority in TaskPriority},
    value=Task.priority,
)

TASK_SORT_COLUMNS = {
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
    "title": Task.title,
    "status": Task.status,
    "priority": PRIORITY_ORDER,
    "due_date": Task.due_date,
}


def _with_relations(query: Select) -> Select:
    return query.options(selectinload(Task.project), selectinload(Task.assignee))


class TaskRepository(BaseRepository[Task]):
    """
    Репозиторий для работы с задачами.

    Включает методы для:
    - Видимой пользователю выборки (через владельца проекта)
    - Фильтрации по проекту/статусу/приоритету/исполнителю + поиск
    - Выборок для дашборда (мои проекты, назначенные мне)
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Task, db)

    async def get_by_id_full(self, id: int) -> Task | None:
        """
        Получить задачу с проектом и исполнителем (eager loading).

        Проект нужен политикам: владелец задачи = task.project.owner_id.
        """
        result = await self.db.execute(
            _with_relations(select(Task))
            .where(Task.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def scoped_query(self, actor: User) -> Select:
        """
        Базовая выборка задач, видимых actor.

        SQL эквивалент (не admin):
            SELECT tasks.* FROM tasks
            JOIN projects ON projects.id = tasks.project_id
            WHERE projects.owner_id = {actor.id};
        """
        query = select(Task)
        if not actor.is_admin:
            query = query.join(Task.project).where(Project.owner_id == actor.id)
        return query

    async def get_filtered(
        self, actor: User, filters: TaskFilters, page: PageParams
    ) -> Page[Task]:
        """
        Получить задачи с фильтрами, сортировкой и пагинацией.

        Все фильтры комбинируются через AND поверх scoped_query():
            ... AND project_id = {project_id}
                AND status = {status}
                AND priority = {priority}
                AND assigned_to = {assigned_to}
                AND (title ILIKE '%q%' OR description ILIKE '%q%')
            ORDER BY {sort_by} {sort_dir}, id {sort_dir}
            OFFSET ... LIMIT ...;
        """
        query = _with_relations(self.scoped_query(actor))

        conditions = []
        if filters.project_id is not None:
            conditions.append(Task.project_id == filters.project_id)
        if filters.status is not None:
            conditions.append(Task.status == filters.status)
        if filters.priority is not None:
            conditions.append(Task.priority == filters.priority)
        if filters.assigned_to is not None:
            conditions.append(Task.assigned_to == filters.assigned_to)

        search = text_search(filters.search, Task.title, Task.description)
        if search is not None:
            conditions.append(search)

        if conditions:
            query = query.where(*conditions)

        query = apply_sort(query, TASK_SORT_COLUMNS, filters.sort_by, filters.sort_dir, Task.id)
        return await paginate(self.db, query, page)

    async def get_visible(self, actor: User) -> list[Task]:
        """Все задачи, видимые actor (для overdue / due-soon выборок)."""
        result = await self.db.execute(_with_relations(self.scoped_query(actor)).order_by(Task.id))
        return list(result.scalars().all())

    async def get_for_owner(self, owner_id: int) -> list[Task]:
        """
        Все задачи в проектах пользователя ("мои задачи").

        SQL эквивалент:
            SELECT tasks.* FROM tasks
            JOIN projects ON projects.id = tasks.project_id
            WHERE projects.owner_id = {owner_id};
        """
        result = await self.db.execute(
            _with_relations(select(Task))
            .join(Task.project)
            .where(Project.owner_id == owner_id)
            .order_by(Task.id)
        )
        return list(result.scalars().all())

    async def get_assigned_to(self, user_id: int) -> list[Task]:
        """Все задачи, назначенные пользователю (в любых проектах)."""
        result = await self.db.execute(
            _with_relations(select(Task)).where(Task.assigned_to == user_id).order_by(Task.id)
        )
        return list(result.scalars().all())

    async def get_recent_for_owner(self, owner_id: int, limit: int = 10) -> list[Task]:
        """Последние созданные задачи в проектах пользователя."""
        result = await self.db.execute(
            _with_relations(select(Task))
            .join(Task.project)
            .where(Project.owner_id == owner_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
