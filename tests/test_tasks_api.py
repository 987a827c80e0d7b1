from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_created_task_uses_defaults(client: AsyncClient, login) -> None:
    admin = await login("admin")

    response = await client.post("/api/tasks", json={"title": "T1"})

    assert response.status_code == 201
    task = response.json()
    assert task["title"] == "T1"
    assert task["status"] == "activo"
    assert task["priority"] == "media"
    assert task["progress_state"] == "inicializado"
    assert task["description"] == ""
    assert task["created_by"] == admin["id"]
    assert task["creator_name"] == "admin"
    assert task["assigned_to"] is None


async def test_created_by_is_always_the_caller(client: AsyncClient, login, make_user) -> None:
    worker = await make_user("sofia")
    caller = await login("sofia")

    response = await client.post(
        "/api/tasks",
        json={"title": "Spoofed owner", "created_by": 1, "creator_name": "admin"},
    )

    assert response.status_code == 201
    assert response.json()["created_by"] == caller["id"] == worker.id
    assert response.json()["creator_name"] == "sofia"


async def test_create_then_get_round_trip(client: AsyncClient, login, make_user) -> None:
    worker = await make_user("diego")
    await login("admin")
    payload = {
        "title": "  Revisar pedidos: año 2031 ✓  ",
        "description": "Línea 1\nLínea 2\t(con tabulador)",
        "priority": "alta",
        "assigned_to": worker.id,
        "due_date": "2031-03-09",
    }

    created = await client.post("/api/tasks", json=payload)
    assert created.status_code == 201
    fetched = await client.get(f"/api/tasks/{created.json()['id']}")

    assert fetched.status_code == 200
    body = fetched.json()
    for field_name, value in payload.items():
        assert body[field_name] == value
    assert body["assigned_name"] == "diego"
    assert body["updates"] == []


async def test_create_validation_errors(client: AsyncClient, login) -> None:
    await login("admin")

    blank = await client.post("/api/tasks", json={"title": "   "})
    assert blank.status_code == 400
    assert blank.json()["error"] == "Title is required"

    missing = await client.post("/api/tasks", json={})
    assert missing.status_code == 400
    assert missing.json()["code"] == "validation_error"

    bad_priority = await client.post("/api/tasks", json={"title": "x", "priority": "urgente"})
    assert bad_priority.status_code == 400

    ghost = await client.post("/api/tasks", json={"title": "x", "assigned_to": 9999})
    assert ghost.status_code == 400
    assert ghost.json()["error"] == "Assigned user does not exist"


async def test_partial_update_over_http(client: AsyncClient, login, make_user) -> None:
    worker = await make_user("paula")
    await login("admin")
    created = (
        await client.post(
            "/api/tasks",
            json={"title": "Fix door", "description": "Back entrance", "priority": "baja", "assigned_to": worker.id},
        )
    ).json()

    response = await client.put(f"/api/tasks/{created['id']}", json={"status": "finalizado"})

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "finalizado"
    for field_name in ("title", "description", "priority", "assigned_to", "due_date", "created_by"):
        assert updated[field_name] == created[field_name]
    assert updated["updated_at"] > created["updated_at"]

    cleared = await client.put(f"/api/tasks/{created['id']}", json={"assigned_to": None, "description": None})
    assert cleared.json()["assigned_to"] is None
    assert cleared.json()["assigned_name"] is None
    assert cleared.json()["description"] == ""

    empty = await client.put(f"/api/tasks/{created['id']}", json={})
    assert empty.status_code == 400
    assert empty.json()["error"] == "No fields to update"

    null_title = await client.put(f"/api/tasks/{created['id']}", json={"title": None})
    assert null_title.status_code == 400

    missing = await client.put("/api/tasks/4040", json={"title": "nothing"})
    assert missing.status_code == 404


async def test_progress_update_is_reflected_on_task(client: AsyncClient, login) -> None:
    await login("admin")
    task = (await client.post("/api/tasks", json={"title": "Count pallets"})).json()

    response = await client.post(
        f"/api/tasks/{task['id']}/updates",
        json={"comment": "All counted", "progress_state": "finalizado"},
    )

    assert response.status_code == 201
    update = response.json()
    assert update["task_id"] == task["id"]
    assert update["user_name"] == "admin"
    assert update["progress_state"] == "finalizado"

    detail = (await client.get(f"/api/tasks/{task['id']}")).json()
    assert detail["progress_state"] == "finalizado"
    assert [item["id"] for item in detail["updates"]] == [update["id"]]

    empty = await client.post(f"/api/tasks/{task['id']}/updates", json={"comment": ""})
    assert empty.status_code == 400

    missing = await client.post("/api/tasks/999/updates", json={"comment": "hello"})
    assert missing.status_code == 404


async def test_delete_task_cascades_updates(client: AsyncClient, login) -> None:
    await login("admin")
    task = (await client.post("/api/tasks", json={"title": "Disposable"})).json()
    await client.post(f"/api/tasks/{task['id']}/updates", json={"comment": "note"})

    deleted = await client.delete(f"/api/tasks/{task['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Task deleted successfully"}

    assert (await client.get(f"/api/tasks/{task['id']}")).status_code == 404
    assert (await client.delete(f"/api/tasks/{task['id']}")).status_code == 404


async def test_list_filters_and_stats(client: AsyncClient, login, make_user) -> None:
    worker = await make_user("hugo")
    await login("admin")
    first = (await client.post("/api/tasks", json={"title": "A", "assigned_to": worker.id})).json()
    second = (await client.post("/api/tasks", json={"title": "B", "priority": "alta"})).json()
    third = (await client.post("/api/tasks", json={"title": "C"})).json()
    await client.patch(f"/api/tasks/{second['id']}/status", json={"status": "inactivo"})
    await client.patch(f"/api/tasks/{third['id']}/status", json={"status": "finalizado"})
    await client.post(f"/api/tasks/{first['id']}/updates", json={"progress_state": "en proceso"})

    async def titles(**params: str) -> list[str]:
        response = await client.get("/api/tasks", params=params)
        assert response.status_code == 200, response.text
        return [task["title"] for task in response.json()]

    assert await titles() == ["C", "B", "A"]
    assert await titles(status="activo") == ["A"]
    assert await titles(priority="alta") == ["B"]
    assert await titles(progress_state="en proceso") == ["A"]
    assert await titles(assigned_to=str(worker.id)) == ["A"]
    assert await titles(assigned_to="null") == ["C", "B"]
    assert await titles(status="finalizado", assigned_to="null") == ["C"]

    bad_assignee = await client.get("/api/tasks", params={"assigned_to": "hugo"})
    assert bad_assignee.status_code == 400
    bad_status = await client.get("/api/tasks", params={"status": "cerrado"})
    assert bad_status.status_code == 400

    stats = await client.get("/api/tasks/stats/overview")
    assert stats.status_code == 200
    assert stats.json() == {"total": 3, "active": 1, "inactive": 1, "completed": 1, "unassigned": 2}


async def test_assign_and_status_endpoints(client: AsyncClient, login, make_user) -> None:
    worker = await make_user("olga")
    await login("admin")
    task = (await client.post("/api/tasks", json={"title": "Water plants"})).json()

    assigned = await client.post(f"/api/tasks/{task['id']}/assign", json={"assigned_to": worker.id})
    assert assigned.status_code == 200
    assert assigned.json()["assigned_name"] == "olga"

    unknown = await client.post(f"/api/tasks/{task['id']}/assign", json={"assigned_to": 8080})
    assert unknown.status_code == 400

    unassigned = await client.post(f"/api/tasks/{task['id']}/assign", json={"assigned_to": None})
    assert unassigned.json()["assigned_to"] is None

    changed = await client.patch(f"/api/tasks/{task['id']}/status", json={"status": "inactivo"})
    assert changed.status_code == 200
    assert changed.json()["status"] == "inactivo"

    invalid = await client.patch(f"/api/tasks/{task['id']}/status", json={"status": "borrado"})
    assert invalid.status_code == 400
