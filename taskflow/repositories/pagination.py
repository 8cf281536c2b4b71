"""Offset/limit pagination for select() queries."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

T = TypeVar("T")


@dataclass(frozen=True)
class PageParams:
    """
    Параметры страницы.

    page нумеруется с 1. Страница за пределами данных - это пустой
    результат, а не ошибка.
    """

    page: int = 1
    per_page: int = 15

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass
class Page(Generic[T]):
    """One page of results plus totals."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 15

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page  # ceiling division

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


async def paginate(db: AsyncSession, query: Select, params: PageParams) -> Page:
    """
    Выполнить запрос с пагинацией.

    SQL эквивалент:
        SELECT COUNT(*) FROM (<query>);
        <query> OFFSET {offset} LIMIT {per_page};
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    if params.page < 1 or params.per_page < 1 or params.offset >= total:
        return Page(items=[], total=total, page=params.page, per_page=params.per_page)

    result = await db.execute(query.offset(params.offset).limit(params.per_page))
    items = list(result.scalars().unique().all())

    return Page(items=items, total=total, page=params.page, per_page=params.per_page)
