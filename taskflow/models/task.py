"""Task model."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, func, select
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import TaskPriority, TaskStatus
from .project import Project


class Task(Base, TimestampMixin):
    """
    Задача внутри проекта.

    Владелец задачи не хранится: это владелец проекта (task.project.owner_id).
    assigned_to - необязательный исполнитель.
    """

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Foreign Keys
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    assigned_to: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), index=True, nullable=True
    )

    # Task properties
    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus, native_enum=False, values_callable=lambda e: e.values()),
        default=TaskStatus.PENDING,
        nullable=False,
    )
    priority: Mapped[TaskPriority] = mapped_column(
        SQLEnum(TaskPriority, native_enum=False, values_callable=lambda e: e.values()),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    due_date: Mapped[date | None] = mapped_column(Date, index=True, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="tasks")
    assignee: Mapped["User | None"] = relationship("User", back_populates="assigned_tasks")

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', status={self.status})>"


# Количество задач проекта - подзапрос, загружается вместе с проектом:
#   SELECT projects.*, (SELECT COUNT(tasks.id) FROM tasks
#                       WHERE tasks.project_id = projects.id) AS tasks_count
Project.tasks_count = column_property(
    select(func.count(Task.id))
    .where(Task.project_id == Project.id)
    .correlate_except(Task)
    .scalar_subquery()
)
