"""SQLAlchemy models for TaskFlow."""

from .base import Base, TimestampMixin, utc_now, utc_today
from .enums import TERMINAL_STATUSES, ProjectStatus, TaskPriority, TaskStatus
from .project import Project
from .task import Task
from .user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "utc_now",
    "utc_today",
    "User",
    "Project",
    "ProjectStatus",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TERMINAL_STATUSES",
]
