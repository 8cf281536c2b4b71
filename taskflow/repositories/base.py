"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий с CRUD операциями.

    Репозиторий только делает flush(); commit/rollback - забота
    зависимости get_db (одна транзакция на запрос).

    Пример:
        repo = BaseRepository[User](User, db)
        user = await repo.get_by_id(1)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Сохранить новый объект.

        flush() отправляет INSERT, refresh() подтягивает ID и значения
        по умолчанию (timestamps, статусы, подзапросы column_property).
        """
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """Все записи по порядку ID (OFFSET {skip} LIMIT {limit})."""
        result = await self.db.execute(
            select(self.model).order_by(self.model.id).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def update(self, obj: ModelType, **fields: Any) -> ModelType:
        """
        Обновить уже загруженный объект.

        Неизвестные атрибуты игнорируются. Связи после update не
        перезагружаются - сервис перечитывает объект через get_*_full().

        Пример:
            project = await repo.update(project, name="Новое название", status=ProjectStatus.COMPLETED)
        """
        for key, value in fields.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.flush()
        return obj

    async def delete(self, obj: ModelType) -> None:
        """
        Удалить объект через ORM.

        session.delete() (а не DELETE ... WHERE) чтобы сработали каскады
        relationship(cascade="all, delete-orphan").
        """
        await self.db.delete(obj)
        await self.db.flush()

    async def exists(self, id: int) -> bool:
        """SELECT EXISTS(SELECT 1 FROM table WHERE id={id})."""
        result = await self.db.execute(
            select(select(self.model.id).where(self.model.id == id).exists())
        )
        return bool(result.scalar())

    async def count(self) -> int:
        """SELECT COUNT(*) FROM table."""
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
