import io
import json
from dataclasses import replace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import inspect

from todo_api import middleware
from todo_api.database import create_tables
from todo_api.logger import setup_logger
from todo_api.main import create_app, lifespan
from todo_api.utils.errors import InternalServerError

pytestmark = pytest.mark.anyio


async def test_health(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


async def test_openapi_docs_are_served(client):
    res = await client.get("/openapi.json")
    assert res.status_code == 200
    schema = res.json()
    assert "/api/v1/auth/login" in schema["paths"]
    assert "/api/v1/todo/{todo_id}" in schema["paths"]
    assert "HTTPBearer" in schema["components"]["securitySchemes"]

    res = await client.get("/swagger")
    assert res.status_code == 200


async def test_unknown_route_uses_envelope(client):
    res = await client.get("/api/v1/nope")
    assert res.status_code == 404
    assert res.json() == {"message": "Not Found", "data": None, "status_code": 404}


async def test_unhandled_error_returns_500_envelope(initialized_app, client):
    async def boom():
        raise RuntimeError("database exploded")

    initialized_app.add_api_route("/boom", boom)
    res = await client.get("/boom")
    assert res.status_code == 500
    assert res.json() == {"message": "Internal server error", "data": None, "status_code": 500}


async def test_debug_mode_exposes_underlying_error(settings):
    app = create_app(replace(settings, app_mode="debug"))
    await create_tables(app.state.engine)

    async def boom():
        raise InternalServerError("Failed to do it", ValueError("disk full"))

    app.add_api_route("/boom", boom)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        res = await ac.get("/boom")
        assert res.status_code == 500
        assert res.json()["message"] == "disk full"

        res = await ac.get("/api/v1/auth/me", headers={"Authorization": "Bearer junk"})
        assert res.status_code == 401
        assert res.json()["message"] != "Invalid token"
    await app.state.engine.dispose()


async def test_release_mode_logs_client_errors_as_json(initialized_app, client):
    buf = io.StringIO()
    setup_logger("release", stream=buf)

    await client.get("/api/v1/todo")
    await client.get("/health")

    records = [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]
    http = [r for r in records if r["event"] == "HTTP Request Client Error"]
    assert len(http) == 1
    assert http[0]["status"] == 401
    assert http[0]["path"] == "/api/v1/todo"
    assert http[0]["method"] == "GET"
    assert "latency_ms" in http[0]
    assert not [r for r in records if r.get("path") == "/health"]


async def test_release_mode_skips_successful_requests(initialized_app, client):
    buf = io.StringIO()
    setup_logger("release", stream=buf)

    res = await client.get("/openapi.json")
    assert res.status_code == 200
    assert "HTTP Request" not in buf.getvalue()


def _json_records(buf):
    return [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]


async def test_release_mode_warns_on_slow_requests(initialized_app, client, monkeypatch):
    monkeypatch.setattr(middleware, "SLOW_REQUEST_SECONDS", -1.0)
    buf = io.StringIO()
    setup_logger("release", stream=buf)

    res = await client.get("/openapi.json")
    assert res.status_code == 200

    slow = [r for r in _json_records(buf) if r["event"] == "HTTP Slow Request"]
    assert len(slow) == 1
    assert slow[0]["status"] == 200
    assert slow[0]["level"] == "warning"


async def test_debug_mode_logs_every_request(settings):
    app = create_app(replace(settings, app_mode="debug"))
    await create_tables(app.state.engine)
    buf = io.StringIO()
    setup_logger("debug", stream=buf)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.get("/openapi.json")).status_code == 200
        assert (await ac.get("/api/v1/todo")).status_code == 401
        assert (await ac.get("/health")).status_code == 200
    await app.state.engine.dispose()

    lines = [line for line in buf.getvalue().splitlines() if "HTTP Request" in line]
    assert len(lines) == 2
    assert "/openapi.json" in lines[0] and "status=200" in lines[0]
    assert "/api/v1/todo" in lines[1] and "status=401" in lines[1]


async def test_lifespan_connects_migrates_and_logs(settings):
    app = create_app(replace(settings, db_auto_migrate=True))
    buf = io.StringIO()
    setup_logger("release", stream=buf)

    async with lifespan(app):
        async with app.state.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert {"users", "todos", "refresh_tokens"} <= set(tables)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            res = await ac.post(
                "/api/v1/auth/register",
                json={"username": "alice", "password": "pw", "password_confirmation": "pw"},
            )
            assert res.status_code == 201

    events = [r["event"] for r in _json_records(buf)]
    assert events.index("Successfully connected to database") < events.index("Database tables ensured")
    assert events.index("Database tables ensured") < events.index("Starting server")
    assert events[-2:] == ["Shutting down server...", "Server exited"]

    connected = next(r for r in _json_records(buf) if r["event"] == "Successfully connected to database")
    assert connected["database"] == ":memory:"


async def test_lifespan_skips_migration_when_disabled(settings):
    app = create_app(settings)
    buf = io.StringIO()
    setup_logger("release", stream=buf)

    async with lifespan(app):
        async with app.state.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert tables == []

    events = [r["event"] for r in _json_records(buf)]
    assert "Successfully connected to database" in events
    assert "Database tables ensured" not in events
