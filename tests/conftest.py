"""
Shared fixtures: an app wired to a throwaway SQLite database.
"""

import httpx
import pytest
import pytest_asyncio

from config.settings import Settings
from main import create_app

TEST_SECRET = "test-jwt-secret"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'todo.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    await app.state.db.create_all()
    yield app
    await app.state.db.dispose()


@pytest_asyncio.fixture
async def db(app):
    return app.state.db


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def register(client, username="alice", email="a@x.com", password="p1"):
    """Register a user and return (user dict, auth headers)."""
    resp = await client.post(
        "/api/register",
        json={"username": username, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["user"], {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def register_user(client):
    async def _register(username="alice", email="a@x.com", password="p1"):
        return await register(client, username, email, password)

    return _register
