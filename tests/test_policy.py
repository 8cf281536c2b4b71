"""
Тесты для политик доступа.

Политики - чистые функции, поэтому объекты моделей создаются без БД.
"""

import pytest

from taskflow.core.exceptions import ForbiddenError, NotFoundError
from taskflow.models import Project, Task, User
from taskflow.services.policy import (
    Action,
    Decision,
    authorize_project,
    authorize_task,
    can_delete_project,
    can_delete_task,
    can_force_delete_project,
    can_force_delete_task,
    can_restore_project,
    can_update_project,
    can_update_task,
    can_view_project,
    can_view_task,
    ensure_allowed,
    is_assignee_only,
    task_owner_id,
)


@pytest.fixture
def owner():
    return User(id=1, name="Owner", email="owner@example.com", is_admin=False, api_key="k1")


@pytest.fixture
def stranger():
    return User(id=2, name="Stranger", email="s@example.com", is_admin=False, api_key="k2")


@pytest.fixture
def assignee():
    return User(id=3, name="Assignee", email="a@example.com", is_admin=False, api_key="k3")


@pytest.fixture
def admin():
    return User(id=4, name="Admin", email="admin@example.com", is_admin=True, api_key="k4")


@pytest.fixture
def project(owner):
    return Project(id=10, owner_id=owner.id, name="P1")


@pytest.fixture
def task(project, assignee):
    return Task(id=100, project_id=project.id, project=project, assigned_to=assignee.id, title="T")


# ============================================================================
# PROJECT POLICY
# ============================================================================


def test_owner_can_manage_project(owner, project):
    assert can_view_project(owner, project)
    assert can_update_project(owner, project)
    assert can_delete_project(owner, project)
    assert can_restore_project(owner, project)


def test_stranger_cannot_touch_project(stranger, project):
    assert not can_view_project(stranger, project)
    assert not can_update_project(stranger, project)
    assert not can_delete_project(stranger, project)


def test_force_delete_is_admin_only(owner, admin, project, task):
    assert not can_force_delete_project(owner, project)
    assert can_force_delete_project(admin, project)
    assert not can_force_delete_task(owner, task)
    assert can_force_delete_task(admin, task)


@pytest.mark.parametrize("action", list(Action))
def test_admin_is_allowed_everything(admin, project, task, action):
    assert authorize_project(admin, action, project) is Decision.ALLOWED
    assert authorize_task(admin, action, task) is Decision.ALLOWED


def test_view_any_and_create_need_no_resource(stranger):
    assert authorize_project(stranger, Action.VIEW_ANY) is Decision.ALLOWED
    assert authorize_project(stranger, Action.CREATE) is Decision.ALLOWED
    assert authorize_task(stranger, Action.CREATE) is Decision.ALLOWED


def test_missing_resource_is_not_found(owner):
    assert authorize_project(owner, Action.VIEW, None) is Decision.NOT_FOUND
    assert authorize_task(owner, Action.DELETE, None) is Decision.NOT_FOUND


# ============================================================================
# TASK POLICY
# ============================================================================


def test_task_owner_is_project_owner(task, owner):
    assert task_owner_id(task) == owner.id


def test_assignee_can_update_but_not_view_or_delete(assignee, task):
    assert can_update_task(assignee, task)
    assert not can_view_task(assignee, task)
    assert not can_delete_task(assignee, task)


def test_stranger_cannot_update_task(stranger, task):
    assert not can_update_task(stranger, task)
    assert authorize_task(stranger, Action.UPDATE, task) is Decision.FORBIDDEN


def test_is_assignee_only(owner, assignee, admin, project):
    own_task = Task(id=1, project=project, assigned_to=owner.id, title="mine")
    other_task = Task(id=2, project=project, assigned_to=assignee.id, title="theirs")

    assert is_assignee_only(assignee, other_task)
    assert not is_assignee_only(owner, own_task)
    assert not is_assignee_only(owner, other_task)
    assert not is_assignee_only(admin, other_task)


# ============================================================================
# ensure_allowed
# ============================================================================


def test_ensure_allowed_passes_silently():
    ensure_allowed(Decision.ALLOWED, Action.VIEW, "Project", 1)


def test_ensure_allowed_raises_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_allowed(Decision.FORBIDDEN, Action.UPDATE, "Project", 7)
    assert exc_info.value.code == "FORBIDDEN"
    assert "Project with id=7" in exc_info.value.message


def test_ensure_allowed_raises_not_found():
    with pytest.raises(NotFoundError) as exc_info:
        ensure_allowed(Decision.NOT_FOUND, Action.VIEW, "Task", 99)
    assert exc_info.value.message == "Task with id=99 not found"
