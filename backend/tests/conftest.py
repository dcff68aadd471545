"""Pytest fixtures for testing."""
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from api.main import create_app
from core.config import Settings
from db.session import build_engine, build_session_factory, init_db

TEST_SECRET = "test-signing-secret"
TEST_PASSWORD = "Abcd1234!"


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Settings pointing at a per-test SQLite file, ignoring any local .env."""
    values: dict[str, object] = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "jwt_secret": TEST_SECRET,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
async def async_engine(settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create an engine on a fresh database file with all tables created."""
    engine = build_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(async_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """A session for service-level tests. Nothing is committed."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    return create_app(settings, session_factory)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Unauthenticated client against the in-process app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


@pytest.fixture
def register_user(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Register a user through the API and return the response body."""

    async def register(email: str = "a@test.com", password: str = TEST_PASSWORD) -> dict:
        response = await client.post(
            "/api/auth/register", json={"email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return register


@pytest.fixture
async def auth_headers(register_user: Callable[..., Awaitable[dict]]) -> dict[str, str]:
    """Authorization headers for a freshly registered user."""
    data = await register_user()
    return {"Authorization": f"Bearer {data['token']}"}
