"""Dashboard aggregation for the authenticated user."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..models import User, utc_today
from ..repositories import ProjectRepository, TaskRepository
from .statistics import (
    compute_project_counts,
    compute_task_stats,
    select_due_soon,
    select_overdue,
)

RECENT_PROJECTS_LIMIT = 5
RECENT_TASKS_LIMIT = 10


class DashboardService:
    """
    Сводка для главной страницы пользователя.

    Считает по проектам, которыми actor владеет, и отдельно по задачам,
    назначенным actor (в том числе в чужих проектах).
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.project_repo = ProjectRepository(db)
        self.task_repo = TaskRepository(db)

    async def get_dashboard(self, actor: User, today: date | None = None) -> dict:
        """
        Returns:
            {
                "today": date,
                "projects": {"total", "active", "completed", "archived"},
                "tasks": {"total", "completed", "pending", "in_progress",
                          "overdue", "completion_rate"},
                "assigned_tasks": {...тот же формат...},
                "recent_projects": [Project, ...],   # до 5, новые первыми
                "recent_tasks": [Task, ...],         # до 10, новые первыми
                "overdue_tasks": [Task, ...],        # по возрастанию due_date
                "due_soon_tasks": [Task, ...],
            }
        """
        today = today or utc_today()

        projects = await self.project_repo.get_by_owner(actor.id)
        owned_tasks = await self.task_repo.get_for_owner(actor.id)
        assigned_tasks = await self.task_repo.get_assigned_to(actor.id)

        return {
            "today": today,
            "projects": compute_project_counts(projects).as_dict(),
            "tasks": compute_task_stats(owned_tasks, today).as_dict(),
            "assigned_tasks": compute_task_stats(assigned_tasks, today).as_dict(),
            "recent_projects": await self.project_repo.get_recent(
                actor.id, RECENT_PROJECTS_LIMIT
            ),
            "recent_tasks": await self.task_repo.get_recent_for_owner(
                actor.id, RECENT_TASKS_LIMIT
            ),
            "overdue_tasks": select_overdue(owned_tasks, today),
            "due_soon_tasks": select_due_soon(owned_tasks, today, settings.DUE_SOON_DAYS),
        }
