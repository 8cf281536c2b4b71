"""
Authorization policies for projects and tasks.

Чистые функции без I/O: отвечают на вопрос "может ли actor выполнить
action над ресурсом". Никаких запросов в БД - ресурс (и для задачи её
проект) должен быть уже загружен.

Правила:

    | Action       | Project          | Task                         |
    |--------------|------------------|------------------------------|
    | view_any     | всегда           | всегда                       |
    | view         | владелец / admin | владелец проекта / admin     |
    | create       | всегда           | всегда                       |
    | update       | владелец / admin | владелец / исполнитель / admin |
    | delete       | владелец / admin | владелец проекта / admin     |
    | restore      | владелец / admin | владелец проекта / admin     |
    | force_delete | только admin     | только admin                 |

Исполнитель (assignee) может обновлять задачу, но какие поля ему можно
менять - решает вызывающий код (TaskService), не политика.
"""

import enum
from collections.abc import Callable
from typing import Any

from ..core.exceptions import ForbiddenError, NotFoundError
from ..models import Project, Task, User


class Action(str, enum.Enum):
    """Actions checked by the policies."""

    VIEW_ANY = "view_any"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    FORCE_DELETE = "force_delete"

    @property
    def needs_resource(self) -> bool:
        return self not in (Action.VIEW_ANY, Action.CREATE)


class Decision(str, enum.Enum):
    """Outcome of a policy check."""

    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOWED


# ============================================================================
# OWNERSHIP HELPERS
# ============================================================================


def task_owner_id(task: Task) -> int:
    """Owner of a task is the owner of its project."""
    return task.project.owner_id


def _is_admin(actor: User) -> bool:
    return bool(actor.is_admin)


def _always(actor: User, resource: Any) -> bool:
    return True


def _admin_only(actor: User, resource: Any) -> bool:
    return _is_admin(actor)


def _project_owner_or_admin(actor: User, project: Project) -> bool:
    return actor.id == project.owner_id or _is_admin(actor)


def _task_owner_or_admin(actor: User, task: Task) -> bool:
    return actor.id == task_owner_id(task) or _is_admin(actor)


def _task_owner_assignee_or_admin(actor: User, task: Task) -> bool:
    if actor.id == task_owner_id(task):
        return True
    if task.assigned_to is not None and actor.id == task.assigned_to:
        return True
    return _is_admin(actor)


PROJECT_RULES: dict[Action, Callable[[User, Any], bool]] = {
    Action.VIEW_ANY: _always,
    Action.VIEW: _project_owner_or_admin,
    Action.CREATE: _always,
    Action.UPDATE: _project_owner_or_admin,
    Action.DELETE: _project_owner_or_admin,
    Action.RESTORE: _project_owner_or_admin,
    Action.FORCE_DELETE: _admin_only,
}

TASK_RULES: dict[Action, Callable[[User, Any], bool]] = {
    Action.VIEW_ANY: _always,
    Action.VIEW: _task_owner_or_admin,
    Action.CREATE: _always,
    Action.UPDATE: _task_owner_assignee_or_admin,
    Action.DELETE: _task_owner_or_admin,
    Action.RESTORE: _task_owner_or_admin,
    Action.FORCE_DELETE: _admin_only,
}


# ============================================================================
# EVALUATION
# ============================================================================


def _evaluate(rules: dict, actor: User, action: Action, resource: Any | None) -> Decision:
    if action.needs_resource and resource is None:
        return Decision.NOT_FOUND
    return Decision.ALLOWED if rules[action](actor, resource) else Decision.FORBIDDEN


def authorize_project(actor: User, action: Action, project: Project | None = None) -> Decision:
    """
    Проверить действие над проектом.

    Args:
        actor: Аутентифицированный пользователь
        action: Действие
        project: Проект (None если не найден или действие без ресурса)

    Returns:
        ALLOWED, FORBIDDEN или NOT_FOUND (проект нужен, но его нет)
    """
    return _evaluate(PROJECT_RULES, actor, action, project)


def authorize_task(actor: User, action: Action, task: Task | None = None) -> Decision:
    """
    Проверить действие над задачей.

    Задача должна быть загружена вместе с project (task.project.owner_id).
    """
    return _evaluate(TASK_RULES, actor, action, task)


def ensure_allowed(decision: Decision, action: Action, resource: str, resource_id: int) -> None:
    """
    Превратить решение политики в исключение.

    Raises:
        NotFoundError: decision == NOT_FOUND
        ForbiddenError: decision == FORBIDDEN
    """
    if decision is Decision.NOT_FOUND:
        raise NotFoundError(resource, resource_id)
    if decision is Decision.FORBIDDEN:
        raise ForbiddenError(action.value.replace("_", " "), resource, resource_id)


# ============================================================================
# BOOLEAN SHORTCUTS
# ============================================================================


def can_view_project(actor: User, project: Project) -> bool:
    return authorize_project(actor, Action.VIEW, project).allowed


def can_update_project(actor: User, project: Project) -> bool:
    return authorize_project(actor, Action.UPDATE, project).allowed


def can_delete_project(actor: User, project: Project) -> bool:
    return authorize_project(actor, Action.DELETE, project).allowed


def can_restore_project(actor: User, project: Project) -> bool:
    return authorize_project(actor, Action.RESTORE, project).allowed


def can_force_delete_project(actor: User, project: Project) -> bool:
    return authorize_project(actor, Action.FORCE_DELETE, project).allowed


def can_view_task(actor: User, task: Task) -> bool:
    return authorize_task(actor, Action.VIEW, task).allowed


def can_update_task(actor: User, task: Task) -> bool:
    return authorize_task(actor, Action.UPDATE, task).allowed


def can_delete_task(actor: User, task: Task) -> bool:
    return authorize_task(actor, Action.DELETE, task).allowed


def can_restore_task(actor: User, task: Task) -> bool:
    return authorize_task(actor, Action.RESTORE, task).allowed


def can_force_delete_task(actor: User, task: Task) -> bool:
    return authorize_task(actor, Action.FORCE_DELETE, task).allowed


def is_assignee_only(actor: User, task: Task) -> bool:
    """Actor may update the task only because it is assigned to them."""
    return (
        task.assigned_to is not None
        and actor.id == task.assigned_to
        and not _task_owner_or_admin(actor, task)
    )
