"""Core application components."""

from .config import Settings, settings
from .database import AsyncSessionLocal, engine, get_db, init_db
from .exceptions import DomainError, ForbiddenError, NotFoundError, ValidationFailedError

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "DomainError",
    "NotFoundError",
    "ForbiddenError",
    "ValidationFailedError",
]
