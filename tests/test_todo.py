import uuid

import pytest

pytestmark = pytest.mark.anyio


async def create_todo(client, headers, title="Buy milk", description=""):
    return await client.post(
        "/api/v1/todo",
        json={"title": title, "description": description},
        headers=headers,
    )


async def test_create_and_list_todo(client, auth_headers):
    headers, _ = await auth_headers("bob")

    res = await create_todo(client, headers, description="2 liters")
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Success to create todo"
    todo = body["data"]["todo"]
    assert todo["title"] == "Buy milk"
    assert todo["description"] == "2 liters"
    assert todo["completed"] is False

    res = await client.get("/api/v1/todo", headers=headers)
    assert res.status_code == 200
    todos = res.json()["data"]["todos"]
    assert [t["id"] for t in todos] == [todo["id"]]


async def test_list_is_ordered_by_creation(client, auth_headers):
    headers, _ = await auth_headers("bob")
    for title in ("first", "second", "third"):
        await create_todo(client, headers, title=title)

    res = await client.get("/api/v1/todo", headers=headers)
    assert [t["title"] for t in res.json()["data"]["todos"]] == ["first", "second", "third"]


async def test_update_todo(client, auth_headers):
    headers, _ = await auth_headers("bob")
    todo_id = (await create_todo(client, headers)).json()["data"]["todo"]["id"]

    res = await client.put(
        f"/api/v1/todo/{todo_id}",
        json={"title": "Buy oat milk", "description": "", "completed": True},
        headers=headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Todo updated successfully"
    assert body["data"]["todo"]["title"] == "Buy oat milk"
    assert body["data"]["todo"]["completed"] is True


async def test_update_missing_todo_returns_404(client, auth_headers):
    headers, _ = await auth_headers("bob")
    res = await client.put(
        f"/api/v1/todo/{uuid.uuid4()}",
        json={"title": "nothing here", "completed": False},
        headers=headers,
    )
    assert res.status_code == 404
    assert res.json() == {"message": "Todo not found", "data": None, "status_code": 404}


async def test_delete_todo(client, auth_headers):
    headers, _ = await auth_headers("bob")
    todo_id = (await create_todo(client, headers)).json()["data"]["todo"]["id"]

    res = await client.delete(f"/api/v1/todo/{todo_id}", headers=headers)
    assert res.status_code == 200
    assert res.json()["message"] == "Todo deleted successfully"

    res = await client.get("/api/v1/todo", headers=headers)
    assert res.json()["data"]["todos"] == []

    res = await client.delete(f"/api/v1/todo/{todo_id}", headers=headers)
    assert res.status_code == 404


async def test_todos_are_scoped_to_owner(client, auth_headers):
    alice, _ = await auth_headers("alice")
    bob, _ = await auth_headers("bob")
    todo_id = (await create_todo(client, alice, title="alice only")).json()["data"]["todo"]["id"]

    res = await client.get("/api/v1/todo", headers=bob)
    assert res.json()["data"]["todos"] == []

    res = await client.put(
        f"/api/v1/todo/{todo_id}",
        json={"title": "hijacked", "completed": True},
        headers=bob,
    )
    assert res.status_code == 404

    res = await client.delete(f"/api/v1/todo/{todo_id}", headers=bob)
    assert res.status_code == 404

    res = await client.get("/api/v1/todo", headers=alice)
    todos = res.json()["data"]["todos"]
    assert len(todos) == 1
    assert todos[0]["title"] == "alice only"
    assert todos[0]["completed"] is False


async def test_todo_routes_require_token(client):
    assert (await client.get("/api/v1/todo")).status_code == 401
    assert (await client.post("/api/v1/todo", json={"title": "x"})).status_code == 401
    assert (await client.put(f"/api/v1/todo/{uuid.uuid4()}", json={"title": "x"})).status_code == 401
    assert (await client.delete(f"/api/v1/todo/{uuid.uuid4()}")).status_code == 401


async def test_create_todo_validation(client, auth_headers):
    headers, _ = await auth_headers("bob")

    res = await create_todo(client, headers, title="")
    assert res.status_code == 422
    assert res.json()["data"][0]["field"] == "title"

    res = await create_todo(client, headers, description="x" * 1001)
    assert res.status_code == 422
    assert res.json()["data"][0]["field"] == "description"


async def test_invalid_todo_id_is_rejected(client, auth_headers):
    headers, _ = await auth_headers("bob")
    res = await client.delete("/api/v1/todo/not-a-uuid", headers=headers)
    assert res.status_code == 422
    assert res.json()["data"][0]["field"] == "todo_id"
