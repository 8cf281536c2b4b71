"""
Enumerations for task status, task priority and project status.

Все перечисления закрытые: значение из запроса проверяется через has_value(),
а label используется для отображения в клиенте.
"""

import enum


class LabeledEnum(str, enum.Enum):
    """str-enum with a display label and raw-value helpers."""

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def has_value(cls, value: object) -> bool:
        if isinstance(value, cls):
            return True
        return value in cls._value2member_map_

    @classmethod
    def options(cls) -> list[dict[str, str]]:
        """Список {value, label} для селектов в клиенте."""
        return [{"value": member.value, "label": member.label} for member in cls]


class TaskStatus(LabeledEnum):
    """Task status enum."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Completed/cancelled tasks are never overdue or due soon."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


class TaskPriority(LabeledEnum):
    """Task priority enum."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        # alphabetical order of the values is not the priority order
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {TaskPriority.LOW: 1, TaskPriority.MEDIUM: 2, TaskPriority.HIGH: 3}


class ProjectStatus(LabeledEnum):
    """Project status enum. Transitions between values are not restricted."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"
