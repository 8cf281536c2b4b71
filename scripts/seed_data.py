#!/usr/bin/env python3
"""
Seed script: populate a running server with demo users, projects and tasks.

Даты считаются от сегодняшнего дня, поэтому на дашборде сразу видны
задачи "скоро дедлайн"; просроченных через API создать нельзя
(дедлайн не может быть в прошлом).

Запуск:
    uvicorn taskflow.main:app &
    python scripts/seed_data.py
"""

from datetime import date, timedelta

import requests

API_URL = "http://localhost:8000/api/v1"

USERS = [
    {"name": "Alice Demo", "email": "alice.demo@example.com"},
    {"name": "Bob Demo", "email": "bob.demo@example.com"},
]

# (days from today) for start/end dates
PROJECTS = [
    {"name": "Alpha Launch", "description": "First public release", "start": 0, "end": 30},
    {"name": "Website Redesign", "description": "New landing page and docs", "start": 3, "end": 45},
    {"name": "Internal Tools", "description": "Scripts and dashboards", "start": None, "end": None},
]

# assignee: index in USERS (None = unassigned), due: days from today
TASKS = {
    "Alpha Launch": [
        {"title": "Freeze API", "priority": "high", "due": 1, "assignee": 0},
        {"title": "Write release notes", "priority": "medium", "due": 5, "assignee": 1},
        {"title": "Load testing", "priority": "high", "due": 2, "assignee": 1},
        {"title": "Announce on blog", "priority": "low", "due": 30, "assignee": None},
    ],
    "Website Redesign": [
        {"title": "Collect references", "priority": "low", "due": 7, "assignee": 1},
        {"title": "Prototype hero section", "priority": "medium", "due": 14, "assignee": None},
    ],
    "Internal Tools": [
        {"title": "Backup script", "priority": "medium", "due": None, "assignee": 0},
    ],
}


def _iso(offset: int | None) -> str | None:
    if offset is None:
        return None
    return (date.today() + timedelta(days=offset)).isoformat()


def register_user(user_data):
    """Register a user and return it together with its API key."""
    response = requests.post(f"{API_URL}/users/register", json=user_data)
    if response.status_code == 201:
        return response.json()
    print(f"Error registering {user_data['email']}: {response.text}")
    return None


def create_project(headers, project_data):
    """Create a project via API."""
    payload = {
        "name": project_data["name"],
        "description": project_data["description"],
        "start_date": _iso(project_data["start"]),
        "end_date": _iso(project_data["end"]),
    }
    response = requests.post(f"{API_URL}/projects", headers=headers, json=payload)
    if response.status_code == 201:
        return response.json()
    print(f"Error creating project {project_data['name']}: {response.text}")
    return None


def create_task(headers, task_data, project_id, users):
    """Create a task via API."""
    payload = {
        "title": task_data["title"],
        "project_id": project_id,
        "priority": task_data["priority"],
        "due_date": _iso(task_data["due"]),
    }
    if task_data["assignee"] is not None:
        payload["assigned_to"] = users[task_data["assignee"]]["id"]

    response = requests.post(f"{API_URL}/tasks", headers=headers, json=payload)
    if response.status_code == 201:
        return response.json()
    print(f"Error creating task {task_data['title']}: {response.text}")
    return None


def main():
    print("=" * 60)
    print("Seeding database with demo data")
    print("=" * 60)

    print("\n👤 Registering users...")
    users = [u for u in (register_user(data) for data in USERS) if u]
    if not users:
        print("No users registered, aborting")
        return
    for user in users:
        print(f"  ✅ {user['email']}  X-API-Key: {user['api_key']}")

    # Все проекты принадлежат первому пользователю
    owner_headers = {"X-API-Key": users[0]["api_key"], "Content-Type": "application/json"}

    print("\n📁 Creating projects...")
    project_ids = {}
    for project_data in PROJECTS:
        project = create_project(owner_headers, project_data)
        if project:
            project_ids[project_data["name"]] = project["id"]
            print(f"  ✅ {project_data['name']} (id={project['id']})")

    print("\n📋 Creating tasks...")
    total_tasks = 0
    for project_name, tasks in TASKS.items():
        if project_name not in project_ids:
            print(f"  ⚠️ Project {project_name} not found, skipping tasks")
            continue

        print(f"\n  📁 {project_name}:")
        for task_data in tasks:
            if task_data["assignee"] is not None and task_data["assignee"] >= len(users):
                task_data = {**task_data, "assignee": None}
            task = create_task(owner_headers, task_data, project_ids[project_name], users)
            if task:
                total_tasks += 1
                print(f"    ✅ {task_data['title']} (due: {task['due_date'] or 'no date'})")

    print("\n" + "=" * 60)
    print(f"✅ Done! Created {len(project_ids)} projects and {total_tasks} tasks")
    print("=" * 60)


if __name__ == "__main__":
    main()
