"""User service: registration and API key lookup."""

import re
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import User
from ..repositories import UserRepository
from .validation import NAME_MAX_LENGTH, FieldErrors

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def generate_api_key() -> str:
    """Random URL-safe token for the X-API-Key header."""
    return secrets.token_urlsafe(32)


class UserService:
    """
    Сервис пользователей.

    Регистрация всегда создаёт обычного пользователя; администратора
    создаёт только init_db.py (ADMIN_EMAIL) или код с is_admin=True.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def register(self, name: str, email: str, is_admin: bool = False) -> User:
        """
        Зарегистрировать пользователя и выдать ему API ключ.

        Raises:
            ValidationFailedError: пустое имя, неверный или занятый email
        """
        errors = FieldErrors()

        if not name or not name.strip():
            errors.add("name", "The name is required.")
        elif len(name.strip()) > NAME_MAX_LENGTH:
            errors.add("name", f"The name cannot exceed {NAME_MAX_LENGTH} characters.")

        if not email or not EMAIL_PATTERN.match(email.strip()):
            errors.add("email", "The email must be a valid email address.")
        elif await self.user_repo.get_by_email(email):
            errors.add("email", "The email has already been taken.")

        errors.raise_if_any()

        user = await self.user_repo.create(
            User(
                name=name.strip(),
                email=email.strip().lower(),
                is_admin=is_admin,
                api_key=generate_api_key(),
            )
        )
        logger.info("User registered", extra={"user_id": user.id, "is_admin": is_admin})
        return user

    async def authenticate(self, api_key: str) -> User | None:
        """Вернуть пользователя по API ключу или None."""
        if not api_key:
            return None
        return await self.user_repo.get_by_api_key(api_key)

    async def list_users(self, skip: int = 0, limit: int = 100) -> list[User]:
        """Список пользователей (для выбора исполнителя задачи)."""
        return await self.user_repo.get_all(skip=skip, limit=limit)
