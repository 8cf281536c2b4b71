"""Project repository with specific queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from ..models import Project, Task, User
from .base import BaseRepository
from .filters import ProjectFilters, apply_sort, text_search
from .pagination import Page, PageParams, paginate

PROJECT_SORT_COLUMNS = {
    "created_at": Project.created_at,
    "updated_at": Project.updated_at,
    "name": Project.name,
    "status": Project.status,
    "start_date": Project.start_date,
    "end_date": Project.end_date,
}


class ProjectRepository(BaseRepository[Project]):
    """
    Репозиторий для работы с проектами.

    Наследуется от BaseRepository и добавляет:
    - eager loading задач
    - видимую пользователю выборку (scope) + фильтры + пагинацию
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Project, db)

    async def get_by_id_full(self, id: int) -> Project | None:
        """
        Получить проект с владельцем и задачами (eager loading).

        populate_existing=True перезаписывает объект в identity map,
        поэтому после update() возвращаются актуальные данные.

        SQL эквивалент:
            SELECT * FROM projects WHERE id = {id};
            SELECT * FROM tasks WHERE project_id IN ({id});
            SELECT * FROM users WHERE id IN (...);
        """
        result = await self.db.execute(
            select(Project)
            .options(
                selectinload(Project.owner),
                selectinload(Project.tasks).selectinload(Task.assignee),
            )
            .where(Project.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def scoped_query(self, actor: User) -> Select:
        """
        Базовая выборка проектов, видимых actor.

        Обычный пользователь видит только свои проекты, администратор - все.
        Фильтры применяются поверх этой выборки и не могут её расширить.
        """
        query = select(Project)
        if not actor.is_admin:
            query = query.where(Project.owner_id == actor.id)
        return query

    async def get_filtered(
        self, actor: User, filters: ProjectFilters, page: PageParams
    ) -> Page[Project]:
        """
        Получить проекты с фильтрами, сортировкой и пагинацией.

        Все фильтры комбинируются через AND:
            SELECT * FROM projects
            WHERE owner_id = {actor.id}                    -- если не admin
              AND status = {status}                        -- если указан
              AND (name ILIKE '%q%' OR description ILIKE '%q%')  -- если указан
            ORDER BY {sort_by} {sort_dir}, id {sort_dir}
            OFFSET (page - 1) * per_page LIMIT per_page;
        """
        query = self.scoped_query(actor).options(selectinload(Project.owner))

        if filters.status is not None:
            query = query.where(Project.status == filters.status)

        search = text_search(filters.search, Project.name, Project.description)
        if search is not None:
            query = query.where(search)

        query = apply_sort(
            query, PROJECT_SORT_COLUMNS, filters.sort_by, filters.sort_dir, Project.id
        )
        return await paginate(self.db, query, page)

    async def get_by_owner(self, owner_id: int) -> list[Project]:
        """Все проекты пользователя (для счётчиков на дашборде)."""
        result = await self.db.execute(
            select(Project).where(Project.owner_id == owner_id).order_by(Project.id)
        )
        return list(result.scalars().all())

    async def get_recent(self, owner_id: int, limit: int = 5) -> list[Project]:
        """
        Последние созданные проекты пользователя.

        SQL эквивалент:
            SELECT * FROM projects WHERE owner_id = {owner_id}
            ORDER BY created_at DESC, id DESC LIMIT {limit};
        """
        result = await self.db.execute(
            select(Project)
            .options(selectinload(Project.owner))
            .where(Project.owner_id == owner_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
