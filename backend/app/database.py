"""
East Village Everything — Database Session Management
=======================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling and provides a session
       dependency that commits on success and rolls back on error. Every
       request is therefore one unit of work: a place create with its tag
       replacement, a tag delete with its has_children recomputation, or a
       bulk tag save either fully applies or leaves no trace.
Who:   Used by route handlers via FastAPI's dependency injection system,
       and by scripts via session_scope().

Engines:
    PostgreSQL (asyncpg) in production, SQLite (aiosqlite) in tests.
    SQLite does not enforce foreign keys unless asked to, so a connect-time
    pragma turns them on; the tag and junction cascades rely on it.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def enable_sqlite_foreign_keys(sync_engine: Engine) -> None:
    """Issue PRAGMA foreign_keys=ON on every new SQLite connection."""

    @event.listens_for(sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Pool settings only apply to server databases; SQLite uses the
    dialect's default pool.
    """
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        kwargs.update(overrides)
        new_engine = create_async_engine(url, **kwargs)
        enable_sqlite_foreign_keys(new_engine.sync_engine)
        return new_engine

    kwargs.update(
        pool_size=settings.db_pool_size,          # Persistent connections (default: 20)
        max_overflow=settings.db_max_overflow,     # Extra connections for spikes (default: 10)
        pool_pre_ping=settings.db_pool_pre_ping,  # Validate before use (default: True)
        pool_recycle=3600,                         # Recycle after 1 hour
    )
    kwargs.update(overrides)
    return create_async_engine(url, **kwargs)


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: returned ORM objects stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    """
    Same unit-of-work semantics as get_db_session, for code running
    outside a request (maintenance scripts, shell sessions).

    Example:
        async with session_scope() as db:
            await tag_service.bulk_save(db, tags)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Close all pooled connections; called from the app lifespan on shutdown."""
    await engine.dispose()
