"""
FamilyEvents Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── db_engine:        SQLite database file under tmp_path, schema created
    │   └── session_factory
    │       ├── test_client:  HTTPX AsyncClient wired to the app, with
    │       │                 get_db_session pointed at the test database
    │       └── create_user:  inserts a User, returns it with auth headers
    ├── mock_db_session:  AsyncMock session for pure service tests
    ├── temp_storage:     temporary directory for file operations
    └── sample_png_bytes: minimal PNG header for upload tests
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="familyevents_db_"), "health.db")
)
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["DEMO_LOGIN_ENABLED"] = "true"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="familyevents_test_")
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from dataclasses import dataclass
from typing import Dict
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.database import Base, build_engine, get_db_session
from app.models.user import User
from app.services.auth_service import auth_service


@dataclass
class SeededUser:
    """A user row inserted for a test, plus the headers that authenticate as it."""
    id: UUID
    email: str
    name: str
    headers: Dict[str, str]


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """
    A fresh SQLite database per test.

    build_engine() turns on PRAGMA foreign_keys, so ON DELETE CASCADE
    behaves the way it does on PostgreSQL.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def create_user(session_factory):
    """
    Factory fixture: `alice = await create_user("alice@example.com")`.

    The returned headers carry a bearer token signed with the test secret.
    """

    async def _create(email: str, name: str = None) -> SeededUser:
        async with session_factory() as session:
            user = User(email=email.lower(), name=name or email.split("@")[0].title())
            session.add(user)
            await session.commit()
            token = auth_service.create_access_token(user.id, user.email)
            return SeededUser(
                id=user.id,
                email=user.email,
                name=user.name,
                headers={"Authorization": f"Bearer {token}"},
            )

    return _create


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    A MagicMock that simulates AsyncSession behavior.
    Why:     Unit tests of single service methods should not need a database.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# File Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    """A fresh temporary storage directory for each test."""
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_png_bytes():
    """
    PNG signature + IHDR chunk header.

    Not a decodable image; MIME sniffing is patched in the tests that use it.
    """
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to our FastAPI app.
    How:     Uses ASGITransport to route requests directly to the app, and
             overrides get_db_session so each request runs in its own
             transaction on the per-test database (commit on success,
             rollback on error, like the real dependency).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.main import app

    async def _test_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Scenario Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def api(test_client):
    """
    Thin helpers for the setup steps most route tests share.

        family = await api.create_family(alice, "Smiths")
        await api.add_member(alice, family["id"], bob)
        event = await api.create_event(alice, family["id"])
    """
    return ApiHelper(test_client)


class ApiHelper:
    def __init__(self, client: AsyncClient):
        self.client = client

    async def create_family(self, owner: SeededUser, name: str = "The Smiths") -> dict:
        response = await self.client.post(
            "/api/families", json={"name": name}, headers=owner.headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def add_member(
        self, admin: SeededUser, family_id: str, user: SeededUser, role: str = "member"
    ) -> dict:
        response = await self.client.post(
            f"/api/families/{family_id}/members",
            json={"email": user.email, "role": role},
            headers=admin.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def create_event(
        self, creator: SeededUser, family_id: str, title: str = "Grandma's 80th"
    ) -> dict:
        response = await self.client.post(
            "/api/events",
            json={
                "title": title,
                "date": "2024-06-15T18:00:00Z",
                "family_id": family_id,
                "event_type": "birthday",
                "tags": ["family"],
            },
            headers=creator.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def add_contributor(
        self, actor: SeededUser, event_id: str, user: SeededUser, **flags
    ) -> dict:
        response = await self.client.post(
            f"/api/events/{event_id}/contributors",
            json={"user_id": str(user.id), **flags},
            headers=actor.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def comment(
        self, author: SeededUser, event_id: str, content: str = "Lovely day!", parent_id=None
    ) -> dict:
        body = {"content": content}
        if parent_id is not None:
            body["parent_id"] = parent_id
        response = await self.client.post(
            f"/api/events/{event_id}/comments", json=body, headers=author.headers
        )
        assert response.status_code == 201, response.text
        return response.json()
