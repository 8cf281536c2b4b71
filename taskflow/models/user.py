"""User model."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """
    Пользователь системы.

    Владеет проектами (owner) и может быть исполнителем задач (assignee).
    is_admin даёт доступ ко всем проектам и задачам.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Ключ для заголовка X-API-Key
    api_key: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    # Relationships
    projects: Mapped[list["Project"]] = relationship("Project", back_populates="owner")
    assigned_tasks: Mapped[list["Task"]] = relationship("Task", back_populates="assignee")

    def __repr__(self) -> str:
        role = "admin" if self.is_admin else "user"
        return f"<User(id={self.id}, email='{self.email}', {role})>"
