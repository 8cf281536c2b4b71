"""User repository."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей: поиск по API ключу и email."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_api_key(self, api_key: str) -> User | None:
        """
        Найти пользователя по ключу из заголовка X-API-Key.

        SQL эквивалент:
            SELECT * FROM users WHERE api_key = {api_key} LIMIT 1;
        """
        result = await self.db.execute(select(User).where(User.api_key == api_key))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Email сравнивается без учёта регистра."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()
