import os
from collections.abc import AsyncGenerator

# Must be set before app.main is imported: it builds the default app at import.
os.environ.setdefault("DefaultConnection", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "Development")
os.environ.setdefault("APPSETTINGS_PATH", "tests/appsettings.missing.json")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.domain.models import Base
from app.main import create_app

BASE = "http://test"
PASSWORD = "secret"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "DefaultConnection": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "ENVIRONMENT": "Development",
        "STORAGE_LOCAL_PATH": str(tmp_path / "uploads"),
        "JWT_SECRET_KEY": "test-secret-key-0123456789",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def build_app(settings: Settings) -> FastAPI:
    """Create the app and its tables (ASGITransport does not run lifespan)."""
    application = create_app(settings)
    async with application.state.database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return application


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    application = await build_app(settings)
    yield application
    application.dependency_overrides.clear()
    await application.state.database.dispose()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE) as c:
        yield c


async def register(client: AsyncClient, email: str, user_name: str, password: str = PASSWORD):
    return await client.post(
        "/api/auth/register",
        json={"email": email, "user_name": user_name, "password": password},
    )


async def login(client: AsyncClient, email: str, password: str = PASSWORD) -> str:
    resp = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


@pytest.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Register a user and return a client with auth headers."""
    await register(client, "reader@example.com", "reader")
    token = await login(client, "reader@example.com")
    client.headers["Authorization"] = f"Bearer {token}"
    return client
