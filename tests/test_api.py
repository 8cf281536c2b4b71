"""
Тесты для API Layer (REST endpoints).

Проверяем:
- HTTP статус-коды и аутентификацию по X-API-Key
- Форматы запросов/ответов (JSON)
- Единый формат ошибок (422, 403, 404)
- Интеграцию всех слоёв (API → Service → Repository → DB)
"""

import logging
from datetime import timedelta

import pytest
from httpx import AsyncClient

from taskflow.core.logging import actor_id_var
from taskflow.models import Project, Task, TaskStatus, utc_today


async def create_project(client: AsyncClient, headers: dict, **fields) -> dict:
    response = await client.post("/api/v1/projects", json=fields, headers=headers)
    assert response.status_code == 201, response.json()
    return response.json()


async def create_task(client: AsyncClient, headers: dict, **fields) -> dict:
    response = await client.post("/api/v1/tasks", json=fields, headers=headers)
    assert response.status_code == 201, response.json()
    return response.json()


# ============================================================================
# AUTH & USERS
# ============================================================================


@pytest.mark.asyncio
async def test_missing_api_key_is_unauthorized(test_client: AsyncClient):
    response = await test_client.get("/api/v1/projects")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_api_key_is_unauthorized(test_client: AsyncClient):
    response = await test_client.get("/api/v1/projects", headers={"X-API-Key": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_and_use_key(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/users/register", json={"name": "Dave", "email": "dave@example.com"}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["is_admin"] is False
    api_key = data["api_key"]

    me = await test_client.get("/api/v1/users/me", headers={"X-API-Key": api_key})
    assert me.status_code == 200
    assert me.json()["email"] == "dave@example.com"
    assert "api_key" not in me.json()


@pytest.mark.asyncio
async def test_register_validation_error(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/users/register", json={"name": "", "email": "not-an-email"}
    )

    assert response.status_code == 422
    fields = {d["field"] for d in response.json()["error"]["details"]}
    assert fields == {"name", "email"}


@pytest.mark.asyncio
async def test_list_users(test_client: AsyncClient, alice_headers, bob):
    response = await test_client.get("/api/v1/users", headers=alice_headers)

    assert response.status_code == 200
    assert {u["name"] for u in response.json()} == {"Alice", "Bob"}


@pytest.mark.asyncio
async def test_request_log_carries_actor_id(test_client: AsyncClient, alice, alice_headers):
    """Запись "Request completed" видит actor_id, установленный в dependency."""
    seen: list[int | None] = []

    class ActorCapture(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            if record.getMessage() == "Request completed":
                seen.append(actor_id_var.get())

    request_logger = logging.getLogger("taskflow.requests")
    handler = ActorCapture()
    previous_level = request_logger.level
    request_logger.addHandler(handler)
    request_logger.setLevel(logging.INFO)
    try:
        response = await test_client.get("/api/v1/users/me", headers=alice_headers)
    finally:
        request_logger.removeHandler(handler)
        request_logger.setLevel(previous_level)

    assert response.status_code == 200
    assert seen == [alice.id]


# ============================================================================
# PROJECT API
# ============================================================================


@pytest.mark.asyncio
async def test_create_project(test_client: AsyncClient, alice, alice_headers):
    start = utc_today() + timedelta(days=1)
    data = await create_project(
        test_client,
        alice_headers,
        name="Alpha Launch",
        description="First release",
        start_date=start.isoformat(),
    )

    assert data["name"] == "Alpha Launch"
    assert data["owner_id"] == alice.id
    assert data["status"] == "active"
    assert data["status_label"] == "Active"
    assert data["start_date"] == start.isoformat()
    assert data["owner"]["name"] == "Alice"
    assert data["tasks"] == []


@pytest.mark.asyncio
async def test_create_project_validation_error(test_client: AsyncClient, alice_headers):
    """Все ошибки полей возвращаются одним ответом 422."""
    today = utc_today()
    response = await test_client.post(
        "/api/v1/projects",
        json={
            "name": "",
            "start_date": (today + timedelta(days=5)).isoformat(),
            "end_date": today.isoformat(),
        },
        headers=alice_headers,
    )

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {d["field"] for d in error["details"]} == {"name", "end_date"}


@pytest.mark.asyncio
async def test_create_project_invalid_status(test_client: AsyncClient, alice_headers):
    response = await test_client.post(
        "/api/v1/projects", json={"name": "P", "status": "paused"}, headers=alice_headers
    )

    assert response.status_code == 422
    assert response.json()["error"]["details"] == [
        {"field": "status", "message": "The selected status is invalid."}
    ]


@pytest.mark.asyncio
async def test_create_project_unknown_status_and_empty_name_reported_together(
    test_client: AsyncClient, alice_headers
):
    """Неизвестное значение enum не скрывает остальные ошибки полей."""
    response = await test_client.post(
        "/api/v1/projects", json={"name": "", "status": "bogus"}, headers=alice_headers
    )

    assert response.status_code == 422
    assert {d["field"] for d in response.json()["error"]["details"]} == {"name", "status"}


@pytest.mark.asyncio
async def test_list_projects_scoped_and_searchable(
    test_client: AsyncClient, alice_headers, bob_headers
):
    await create_project(test_client, alice_headers, name="Alpha Launch")
    await create_project(test_client, alice_headers, name="Beta", description="contains alpha here")
    await create_project(test_client, alice_headers, name="Gamma")
    await create_project(test_client, bob_headers, name="Bob alpha")

    response = await test_client.get(
        "/api/v1/projects", params={"search": "alpha"}, headers=alice_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {p["name"] for p in data["items"]} == {"Alpha Launch", "Beta"}
    assert data["page"] == 1
    assert data["per_page"] == 15
    assert data["has_next"] is False


@pytest.mark.asyncio
async def test_list_projects_pagination(test_client: AsyncClient, alice_headers):
    for i in range(3):
        await create_project(test_client, alice_headers, name=f"P{i}")

    response = await test_client.get(
        "/api/v1/projects",
        params={"per_page": 2, "page": 2, "sort_by": "name", "sort_dir": "asc"},
        headers=alice_headers,
    )

    data = response.json()
    assert [p["name"] for p in data["items"]] == ["P2"]
    assert data["total_pages"] == 2
    assert data["has_prev"] is True


@pytest.mark.asyncio
async def test_list_projects_unknown_sort_field(test_client: AsyncClient, alice_headers):
    response = await test_client.get(
        "/api/v1/projects", params={"sort_by": "password"}, headers=alice_headers
    )

    assert response.status_code == 422
    assert response.json()["error"]["details"][0]["field"] == "sort_by"


@pytest.mark.asyncio
async def test_get_project_not_found(test_client: AsyncClient, alice_headers):
    response = await test_client.get("/api/v1/projects/999", headers=alice_headers)

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["details"] is None


@pytest.mark.asyncio
async def test_foreign_project_is_forbidden(test_client: AsyncClient, alice_headers, bob_headers):
    project = await create_project(test_client, alice_headers, name="Alice's")

    get_response = await test_client.get(f"/api/v1/projects/{project['id']}", headers=bob_headers)
    put_response = await test_client.put(
        f"/api/v1/projects/{project['id']}", json={"name": "Mine now"}, headers=bob_headers
    )

    assert get_response.status_code == 403
    assert put_response.status_code == 403
    assert put_response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_admin_sees_foreign_project(test_client: AsyncClient, alice_headers, admin_headers):
    project = await create_project(test_client, alice_headers, name="Alice's")

    response = await test_client.get(f"/api/v1/projects/{project['id']}", headers=admin_headers)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_project_partial(test_client: AsyncClient, alice_headers):
    project = await create_project(
        test_client, alice_headers, name="P", description="keep me"
    )

    response = await test_client.put(
        f"/api/v1/projects/{project['id']}", json={"status": "completed"}, headers=alice_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["description"] == "keep me"


@pytest.mark.asyncio
async def test_archive_and_complete_project(test_client: AsyncClient, alice_headers):
    project = await create_project(test_client, alice_headers, name="P")

    archived = await test_client.post(
        f"/api/v1/projects/{project['id']}/archive", headers=alice_headers
    )
    completed = await test_client.post(
        f"/api/v1/projects/{project['id']}/complete", headers=alice_headers
    )

    assert archived.json()["status"] == "archived"
    assert completed.json()["status"] == "completed"
    assert completed.json()["end_date"] == utc_today().isoformat()


@pytest.mark.asyncio
async def test_delete_project_cascades(test_client: AsyncClient, alice_headers):
    project = await create_project(test_client, alice_headers, name="P")
    task = await create_task(test_client, alice_headers, project_id=project["id"], title="T")

    response = await test_client.delete(f"/api/v1/projects/{project['id']}", headers=alice_headers)

    assert response.status_code == 204
    task_response = await test_client.get(f"/api/v1/tasks/{task['id']}", headers=alice_headers)
    assert task_response.status_code == 404


@pytest.mark.asyncio
async def test_project_stats(test_client: AsyncClient, test_db, alice, alice_headers):
    today = utc_today()
    project = Project(owner_id=alice.id, name="P1")
    test_db.add(project)
    await test_db.flush()
    test_db.add_all(
        [
            Task(project_id=project.id, title="done", status=TaskStatus.COMPLETED),
            Task(
                project_id=project.id,
                title="late",
                status=TaskStatus.PENDING,
                due_date=today - timedelta(days=1),
            ),
            Task(project_id=project.id, title="doing", status=TaskStatus.IN_PROGRESS),
        ]
    )
    await test_db.commit()

    response = await test_client.get(f"/api/v1/projects/{project.id}/stats", headers=alice_headers)

    assert response.status_code == 200
    assert response.json() == {
        "project_id": project.id,
        "project_name": "P1",
        "total": 3,
        "completed": 1,
        "pending": 1,
        "in_progress": 1,
        "overdue": 1,
        "completion_rate": 33.33,
    }


@pytest.mark.asyncio
async def test_empty_project_stats_are_zero(test_client: AsyncClient, alice_headers):
    project = await create_project(test_client, alice_headers, name="Empty")

    response = await test_client.get(
        f"/api/v1/projects/{project['id']}/stats", headers=alice_headers
    )

    assert response.json()["total"] == 0
    assert response.json()["completion_rate"] == 0.0


# ============================================================================
# TASK API
# ============================================================================


@pytest.mark.asyncio
async def test_create_task(test_client: AsyncClient, alice_headers, bob):
    project = await create_project(test_client, alice_headers, name="P")
    due = utc_today() + timedelta(days=2)

    data = await create_task(
        test_client,
        alice_headers,
        project_id=project["id"],
        title="Write tests",
        priority="high",
        due_date=due.isoformat(),
        assigned_to=bob.id,
    )

    assert data["title"] == "Write tests"
    assert data["priority_label"] == "High"
    assert data["status"] == "pending"
    assert data["is_due_soon"] is True
    assert data["is_overdue"] is False
    assert data["project"]["id"] == project["id"]
    assert data["assignee"]["name"] == "Bob"


@pytest.mark.asyncio
async def test_create_task_without_project(test_client: AsyncClient, alice_headers):
    response = await test_client.post(
        "/api/v1/tasks", json={"title": "Orphan"}, headers=alice_headers
    )

    assert response.status_code == 422
    details = response.json()["error"]["details"]
    assert details == [{"field": "project_id", "message": "Please select a project for this task."}]


@pytest.mark.asyncio
async def test_create_task_reports_all_field_errors_together(
    test_client: AsyncClient, alice_headers
):
    project = await create_project(test_client, alice_headers, name="P")

    response = await test_client.post(
        "/api/v1/tasks",
        json={
            "project_id": project["id"],
            "title": "",
            "priority": "urgent",
            "due_date": (utc_today() - timedelta(days=2)).isoformat(),
        },
        headers=alice_headers,
    )

    assert response.status_code == 422
    details = response.json()["error"]["details"]
    assert {d["field"] for d in details} == {"title", "priority", "due_date"}


@pytest.mark.asyncio
async def test_update_task_unknown_status_and_empty_title(
    test_client: AsyncClient, alice_headers
):
    project = await create_project(test_client, alice_headers, name="P")
    task = await create_task(test_client, alice_headers, project_id=project["id"], title="T")

    response = await test_client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"title": " ", "status": "done"},
        headers=alice_headers,
    )

    assert response.status_code == 422
    assert {d["field"] for d in response.json()["error"]["details"]} == {"title", "status"}


@pytest.mark.asyncio
async def test_create_task_in_foreign_project(
    test_client: AsyncClient, alice_headers, bob_headers
):
    project = await create_project(test_client, alice_headers, name="Alice's")

    response = await test_client.post(
        "/api/v1/tasks", json={"project_id": project["id"], "title": "T"}, headers=bob_headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_tasks_status_filter(test_client: AsyncClient, alice_headers):
    project = await create_project(test_client, alice_headers, name="P")
    await create_task(test_client, alice_headers, project_id=project["id"], title="A")
    await create_task(test_client, alice_headers, project_id=project["id"], title="B")
    await create_task(
        test_client, alice_headers, project_id=project["id"], title="C", status="completed"
    )

    response = await test_client.get(
        "/api/v1/tasks", params={"status": "pending"}, headers=alice_headers
    )

    data = response.json()
    assert data["total"] == 2
    assert {t["title"] for t in data["items"]} == {"A", "B"}


@pytest.mark.asyncio
async def test_assignee_updates_status_only(
    test_client: AsyncClient, alice_headers, bob, bob_headers
):
    project = await create_project(test_client, alice_headers, name="P")
    task = await create_task(
        test_client, alice_headers, project_id=project["id"], title="T", assigned_to=bob.id
    )

    ok = await test_client.put(
        f"/api/v1/tasks/{task['id']}", json={"status": "in_progress"}, headers=bob_headers
    )
    forbidden = await test_client.put(
        f"/api/v1/tasks/{task['id']}", json={"title": "Renamed"}, headers=bob_headers
    )
    cannot_view = await test_client.get(f"/api/v1/tasks/{task['id']}", headers=bob_headers)

    assert ok.status_code == 200
    assert ok.json()["status"] == "in_progress"
    assert forbidden.status_code == 403
    assert cannot_view.status_code == 403


@pytest.mark.asyncio
async def test_complete_task(test_client: AsyncClient, alice_headers):
    project = await create_project(test_client, alice_headers, name="P")
    task = await create_task(test_client, alice_headers, project_id=project["id"], title="T")

    response = await test_client.post(
        f"/api/v1/tasks/{task['id']}/complete", headers=alice_headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["completed_at"] is not None


@pytest.mark.asyncio
async def test_delete_task(test_client: AsyncClient, alice_headers, bob_headers):
    project = await create_project(test_client, alice_headers, name="P")
    task = await create_task(test_client, alice_headers, project_id=project["id"], title="T")

    forbidden = await test_client.delete(f"/api/v1/tasks/{task['id']}", headers=bob_headers)
    deleted = await test_client.delete(f"/api/v1/tasks/{task['id']}", headers=alice_headers)

    assert forbidden.status_code == 403
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_overdue_and_due_soon_endpoints(
    test_client: AsyncClient, test_db, alice, alice_headers
):
    today = utc_today()
    project = Project(owner_id=alice.id, name="P")
    test_db.add(project)
    await test_db.flush()
    test_db.add_all(
        [
            Task(project_id=project.id, title="late", due_date=today - timedelta(days=1)),
            Task(project_id=project.id, title="today", due_date=today),
            Task(project_id=project.id, title="someday"),
        ]
    )
    await test_db.commit()

    overdue = await test_client.get("/api/v1/tasks/overdue", headers=alice_headers)
    due_soon = await test_client.get("/api/v1/tasks/due-soon", headers=alice_headers)

    assert [t["title"] for t in overdue.json()] == ["late"]
    assert overdue.json()[0]["is_overdue"] is True
    assert [t["title"] for t in due_soon.json()] == ["today"]


# ============================================================================
# DASHBOARD & OPTIONS
# ============================================================================


@pytest.mark.asyncio
async def test_dashboard(test_client: AsyncClient, alice_headers, bob_headers, alice):
    project = await create_project(test_client, alice_headers, name="Mine")
    await create_task(test_client, alice_headers, project_id=project["id"], title="T1")
    bob_project = await create_project(test_client, bob_headers, name="Bob's")
    await create_task(
        test_client, bob_headers, project_id=bob_project["id"], title="For Alice",
        assigned_to=alice.id,
    )

    response = await test_client.get("/api/v1/dashboard", headers=alice_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["projects"]["total"] == 1
    assert data["tasks"]["total"] == 1
    assert data["assigned_tasks"]["total"] == 1
    assert [p["name"] for p in data["recent_projects"]] == ["Mine"]
    assert [t["title"] for t in data["recent_tasks"]] == ["T1"]


@pytest.mark.asyncio
async def test_options(test_client: AsyncClient, alice_headers):
    response = await test_client.get("/api/v1/options", headers=alice_headers)

    assert response.status_code == 200
    data = response.json()
    assert {"value": "in_progress", "label": "In Progress"} in data["task_statuses"]
    assert [o["value"] for o in data["task_priorities"]] == ["low", "medium", "high"]
    assert len(data["project_statuses"]) == 3


# ============================================================================
# ROOT
# ============================================================================


@pytest.mark.asyncio
async def test_root(test_client: AsyncClient):
    response = await test_client.get("/")

    assert response.status_code == 200
    assert response.json()["api_version"] == "v1"
    assert "X-Request-ID" in response.headers
