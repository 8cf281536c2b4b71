"""
Statistics over collections of tasks and projects.

Все функции чистые: получают уже загруженные задачи и явный `today`.
`today` вычисляется один раз на вызов сервиса, поэтому задачи с одинаковым
due_date всегда классифицируются одинаково.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date, timedelta

from ..models import Project, ProjectStatus, Task, TaskStatus


@dataclass(frozen=True)
class TaskStats:
    """Counts by status plus overdue count and completion rate."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    overdue: int = 0
    completion_rate: float = 0.0

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ProjectCounts:
    """Counts of projects by status."""

    total: int = 0
    active: int = 0
    completed: int = 0
    archived: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def _is_terminal(task: Task) -> bool:
    return TaskStatus(task.status).is_terminal


def is_overdue(task: Task, today: date) -> bool:
    """due_date strictly before today and status is not completed/cancelled."""
    if task.due_date is None or _is_terminal(task):
        return False
    return task.due_date < today


def is_due_soon(task: Task, today: date, window_days: int) -> bool:
    """
    due_date within [today, today + window_days] for an active task.

    Просроченные и завершённые задачи никогда не "скоро дедлайн".
    """
    if task.due_date is None or _is_terminal(task):
        return False
    return today <= task.due_date <= today + timedelta(days=window_days)


def completion_rate(completed: int, total: int) -> float:
    """Percentage rounded to 2 places; 0.0 when there is nothing to complete."""
    if total <= 0:
        return 0.0
    return round(completed / total * 100, 2)


def compute_task_stats(tasks: Iterable[Task], today: date) -> TaskStats:
    """
    Посчитать статистику по набору задач.

    overdue считается независимо от статусов: просроченная pending задача
    попадает и в pending, и в overdue.

    Пример:
        compute_task_stats(project.tasks, today)
        # TaskStats(total=3, completed=1, pending=1, in_progress=1,
        #           overdue=1, completion_rate=33.33)
    """
    total = completed = pending = in_progress = overdue = 0

    for task in tasks:
        total += 1
        status = TaskStatus(task.status)
        if status == TaskStatus.COMPLETED:
            completed += 1
        elif status == TaskStatus.PENDING:
            pending += 1
        elif status == TaskStatus.IN_PROGRESS:
            in_progress += 1

        if is_overdue(task, today):
            overdue += 1

    return TaskStats(
        total=total,
        completed=completed,
        pending=pending,
        in_progress=in_progress,
        overdue=overdue,
        completion_rate=completion_rate(completed, total),
    )


def _by_due_date(task: Task) -> tuple[date, int]:
    return (task.due_date, task.id or 0)


def select_overdue(tasks: Iterable[Task], today: date) -> list[Task]:
    """Overdue tasks ordered by ascending due_date."""
    return sorted((t for t in tasks if is_overdue(t, today)), key=_by_due_date)


def select_due_soon(tasks: Iterable[Task], today: date, window_days: int) -> list[Task]:
    """Due-soon tasks ordered by ascending due_date."""
    return sorted((t for t in tasks if is_due_soon(t, today, window_days)), key=_by_due_date)


def compute_project_counts(projects: Iterable[Project]) -> ProjectCounts:
    """Count projects by status."""
    total = active = completed = archived = 0
    for project in projects:
        total += 1
        status = ProjectStatus(project.status)
        if status == ProjectStatus.ACTIVE:
            active += 1
        elif status == ProjectStatus.COMPLETED:
            completed += 1
        else:
            archived += 1
    return ProjectCounts(total=total, active=active, completed=completed, archived=archived)
