import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_AUTO_MIGRATE", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from todo_api.config import Settings
from todo_api.database import create_tables
from todo_api.main import create_app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(
        app_name="todo-api-test",
        app_mode="release",
        database_url=TEST_DATABASE_URL,
        db_auto_migrate=False,
        jwt_secret="test-secret",
    )


@pytest.fixture
async def initialized_app(settings):
    app = create_app(settings)
    # fresh in-memory database per test
    await create_tables(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def client(initialized_app):
    transport = ASGITransport(app=initialized_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(client, username, password="secret-pass"):
    return await client.post(
        "/api/v1/auth/register",
        json={"username": username, "password": password, "password_confirmation": password},
    )


async def login(client, username, password="secret-pass"):
    return await client.post("/api/v1/auth/login", json={"username": username, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    """Register and log in a user, returning ``(headers, refresh_token)``."""

    async def _make(username):
        await register(client, username)
        res = await login(client, username)
        data = res.json()["data"]
        return bearer(data["access_token"]), data["refresh_token"]

    return _make
