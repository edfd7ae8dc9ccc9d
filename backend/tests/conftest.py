"""
East Village Everything — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the test suite.
How:   Each test gets a fresh in-memory SQLite database (aiosqlite) with the
       schema created from the ORM metadata and foreign keys switched on, so
       the tag and junction cascades behave as they do on PostgreSQL.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:        async engine on a private in-memory database
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── db_session:       one AsyncSession for service-level tests
    ├── mock_db_session:  AsyncMock session for failure-path tests
    ├── test_client:      httpx AsyncClient against the app, DB overridden
    └── admin_client:     test_client already logged in as an admin
"""

import os

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, build_engine, get_db_session
from app.middleware.rate_limit import login_throttle
from app.schemas.user import UserCreate
from app.services.user_service import user_service

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def db_engine():
    # StaticPool: every session shares the single in-memory connection
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    AsyncSession stand-in for tests that only need to control what
    execute/flush return or raise.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture(autouse=True)
def reset_login_throttle():
    login_throttle._attempts.clear()
    yield
    login_throttle._attempts.clear()


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX client talking to the FastAPI app through ASGITransport.

    get_db_session is overridden with one that uses the test database but
    keeps the commit/rollback behavior of the real dependency.
    """
    from app.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_user(session_factory):
    async with session_factory() as session:
        user = await user_service.create(
            session,
            UserCreate(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Admin"),
        )
        await session.commit()
    return user


@pytest_asyncio.fixture
async def admin_client(test_client, admin_user):
    response = await test_client.post(
        "/admin/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return test_client
