"""API layer - FastAPI endpoints."""

from .dashboard import router as dashboard_router
from .projects import router as projects_router
from .tasks import router as tasks_router
from .users import public_router as users_public_router
from .users import router as users_router

__all__ = [
    "dashboard_router",
    "projects_router",
    "tasks_router",
    "users_public_router",
    "users_router",
]
