"""Filter parameters and shared query helpers for list endpoints."""

from dataclasses import dataclass
from typing import Literal

from sqlalchemy import ColumnElement, or_
from sqlalchemy.sql import Select

from ..core.exceptions import ValidationFailedError
from ..models import ProjectStatus, TaskPriority, TaskStatus

SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class ProjectFilters:
    """
    Фильтры списка проектов. None = фильтр не применяется.

    search ищет подстроку (без учёта регистра) в name ИЛИ description.
    """

    status: ProjectStatus | None = None
    search: str | None = None
    sort_by: str = "created_at"
    sort_dir: SortDirection = "desc"


@dataclass(frozen=True)
class TaskFilters:
    """
    Фильтры списка задач. None = фильтр не применяется.

    search ищет подстроку (без учёта регистра) в title ИЛИ description.
    """

    project_id: int | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: int | None = None
    search: str | None = None
    sort_by: str = "created_at"
    sort_dir: SortDirection = "desc"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def text_search(term: str | None, *columns) -> ColumnElement[bool] | None:
    """
    Условие поиска подстроки по нескольким колонкам через OR.

    SQL эквивалент:
        WHERE (col1 ILIKE '%term%' OR col2 ILIKE '%term%')
    """
    if term is None or not term.strip():
        return None
    pattern = f"%{escape_like(term.strip())}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


def apply_sort(
    query: Select,
    sort_columns: dict[str, ColumnElement],
    sort_by: str,
    sort_dir: str,
    tiebreaker: ColumnElement,
) -> Select:
    """
    Добавить ORDER BY по разрешённому полю.

    tiebreaker (обычно id) делает порядок детерминированным, когда
    значения сортируемой колонки совпадают.
    """
    errors: dict[str, list[str]] = {}
    if sort_by not in sort_columns:
        allowed = ", ".join(sorted(sort_columns))
        errors["sort_by"] = [f"Unknown sort field '{sort_by}'. Allowed: {allowed}."]
    if sort_dir not in ("asc", "desc"):
        errors["sort_dir"] = ["Sort direction must be 'asc' or 'desc'."]
    if errors:
        raise ValidationFailedError(errors)

    column = sort_columns[sort_by]
    if sort_dir == "asc":
        return query.order_by(column.asc(), tiebreaker.asc())
    return query.order_by(column.desc(), tiebreaker.desc())
