"""Repository layer for data access."""

from .base import BaseRepository
from .filters import ProjectFilters, TaskFilters
from .pagination import Page, PageParams, paginate
from .project import ProjectRepository
from .task import TaskRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "ProjectRepository",
    "TaskRepository",
    "UserRepository",
    "ProjectFilters",
    "TaskFilters",
    "Page",
    "PageParams",
    "paginate",
]
