"""Service layer with business logic."""

from .dashboard import DashboardService
from .project import ProjectService
from .task import TaskService
from .user import UserService

__all__ = [
    "DashboardService",
    "ProjectService",
    "TaskService",
    "UserService",
]
