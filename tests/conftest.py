"""
Photoshare Backend - Test Configuration (conftest.py)
======================================================

Shared pytest fixtures.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:    AsyncMock session for failure-path unit tests
    ├── temp_storage:       fresh directory for blob store tests
    ├── sample_image_bytes: tiny JPEG payload
    ├── db_engine:          aiosqlite engine on a per-test file, schema created
    │   └── db_session:     real AsyncSession on that engine
    │   └── test_client:    HTTPX AsyncClient over a fresh app using that engine
    │       └── auth_headers: register + login helper returning Bearer headers
    └── make_user:          inserts a user row directly (service tests)
"""

import os
import tempfile

# Must happen before anything imports photoshare.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="photoshare_db_"), "app.db"
)
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="photoshare_uploads_")
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import photoshare.models  # noqa: E402,F401
from photoshare.database import Base, get_db_session  # noqa: E402
from photoshare.models.user import User  # noqa: E402
from photoshare.services.user_service import hash_password  # noqa: E402

TEST_PASSWORD = "correct horse battery staple"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("x", {}, None)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest JPEG-shaped payload: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Engine on an empty SQLite file with the full schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Insert a user without going through registration."""

    async def _make(username: str = "alice", email: str = None) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(TEST_PASSWORD, rounds=4),
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX client over a fresh app wired to the per-test database.

    A new app per test also gives each test fresh rate limiter state.
    """
    from photoshare.main import create_app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers(test_client):
    """
    Register (if needed) and log in a user through the API.

    Usage:
        headers = await auth_headers("alice")
    """

    async def _login(username: str = "alice", password: str = TEST_PASSWORD) -> dict:
        await test_client.post(
            "/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        response = await test_client.post(
            "/auth/login",
            json={"emailOrUsername": username, "password": password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
