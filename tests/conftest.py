"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  ``StaticPool`` keeps every session on the one
connection that owns the in-memory database, and the app is handed that
``Database`` explicitly.
"""

import itertools
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from carpool.api.app import create_app
from carpool.api.middleware import limiter
from carpool.config import Settings
from carpool.infrastructure.database import Database

TEST_DB_URL = "sqlite+aiosqlite://"


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url=TEST_DB_URL,
        jwt_secret="test-secret",
        redis_url=None,
        create_tables=False,
    )
    values.update(overrides)
    return Settings(**values)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Create tables, yield the handle, then drop everything."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(engine)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
def app(database: Database):
    limiter.reset()
    return create_app(make_settings(), database)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client: AsyncClient):
    """Register a fresh user; returns ``{"id", "email", "headers"}``."""
    counter = itertools.count(1)

    async def _register(gender: str = "male", **extra) -> dict:
        n = next(counter)
        body = {
            "name": f"User {n}",
            "email": f"user{n}@example.com",
            "password": "secret123",
            "gender": gender,
            "phone": f"555-010{n}",
        }
        body.update(extra)
        resp = await client.post("/api/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return {
            "id": data["user"]["id"],
            "email": data["user"]["email"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _register


@pytest.fixture
def create_ride(client: AsyncClient):
    """Post a ride as *driver*; returns the response JSON."""

    async def _create(driver: dict, **overrides) -> dict:
        body = {
            "destination": "Airport Terminal 2",
            "start_location": "Downtown",
            "date": "2030-05-01",
            "time": "08:30",
            "total_seats": 3,
            "cost_per_person": 10,
        }
        body.update(overrides)
        resp = await client.post("/api/rides", json=body, headers=driver["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
