"""
Field validation rules for project and task commands.

Правила проверяются все за один проход: ошибки копятся в FieldErrors
и выбрасываются одним ValidationFailedError со списком по полям.

Пример:
    errors = validate_project_data({"name": "", "end_date": ...})
    errors.raise_if_any()
    # ValidationFailedError({"name": [...], "end_date": [...]})
"""

from datetime import date
from typing import Any

from ..core.exceptions import ValidationFailedError
from ..models import ProjectStatus, TaskPriority, TaskStatus

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


class FieldErrors:
    """Collector of per-field error messages."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, []).append(message)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __contains__(self, field: str) -> bool:
        return field in self._errors

    def as_dict(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}

    def raise_if_any(self) -> None:
        if self._errors:
            raise ValidationFailedError(self.as_dict())


def _check_required_text(
    errors: FieldErrors, field: str, value: Any, label: str, max_length: int
) -> None:
    if value is None or not str(value).strip():
        errors.add(field, f"The {label} is required.")
    elif len(str(value).strip()) > max_length:
        errors.add(field, f"The {label} cannot exceed {max_length} characters.")


def _check_optional_text(
    errors: FieldErrors, field: str, value: Any, label: str, max_length: int
) -> None:
    if value is not None and len(str(value).strip()) > max_length:
        errors.add(field, f"The {label} cannot exceed {max_length} characters.")


def _check_choice(errors: FieldErrors, field: str, value: Any, enum_cls) -> None:
    if value is None:
        errors.add(field, f"The {field.replace('_', ' ')} is required.")
    elif not enum_cls.has_value(value):
        errors.add(field, f"The selected {field.replace('_', ' ')} is invalid.")


def _should_check(data: dict[str, Any], field: str, partial: bool) -> bool:
    return not partial or field in data


def validate_project_data(
    data: dict[str, Any], *, partial: bool = False, today: date | None = None
) -> FieldErrors:
    """
    Проверить поля проекта.

    Args:
        data: Поля команды (для update - итоговые значения start/end_date)
        partial: Update - проверяем только переданные поля
        today: Если указан, start_date не может быть раньше (правило create)

    Returns:
        FieldErrors (пустой если всё ок)
    """
    errors = FieldErrors()

    if _should_check(data, "name", partial):
        _check_required_text(errors, "name", data.get("name"), "project name", NAME_MAX_LENGTH)

    _check_optional_text(
        errors, "description", data.get("description"), "project description",
        DESCRIPTION_MAX_LENGTH,
    )

    if _should_check(data, "status", partial):
        _check_choice(errors, "status", data.get("status"), ProjectStatus)

    start_date = data.get("start_date")
    end_date = data.get("end_date")

    if today is not None and start_date is not None and start_date < today:
        errors.add("start_date", "The start date must be today or later.")

    if start_date is not None and end_date is not None and end_date < start_date:
        errors.add("end_date", "The end date must be on or after the start date.")

    return errors


def validate_task_data(
    data: dict[str, Any], *, partial: bool = False, today: date | None = None
) -> FieldErrors:
    """
    Проверить поля задачи.

    Существование project_id / assigned_to проверяет сервис (нужна БД)
    и добавляет ошибки в тот же FieldErrors.
    """
    errors = FieldErrors()

    if _should_check(data, "project_id", partial) and data.get("project_id") is None:
        errors.add("project_id", "Please select a project for this task.")

    if _should_check(data, "title", partial):
        _check_required_text(errors, "title", data.get("title"), "task title", NAME_MAX_LENGTH)

    _check_optional_text(
        errors, "description", data.get("description"), "task description",
        DESCRIPTION_MAX_LENGTH,
    )

    if _should_check(data, "priority", partial):
        _check_choice(errors, "priority", data.get("priority"), TaskPriority)

    if _should_check(data, "status", partial):
        _check_choice(errors, "status", data.get("status"), TaskStatus)

    due_date = data.get("due_date")
    if today is not None and due_date is not None and due_date < today:
        errors.add("due_date", "The due date must be today or later.")

    return errors
