"""
FamilyEvents Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transaction model:
    One session = one transaction = one request. Services only flush();
    get_db_session() commits after the handler returns. Multi-row writes
    (family + admin membership) are therefore atomic without explicit
    transaction blocks in the services.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite URLs (tests, local runs) skip the pool sizing and turn on
    foreign-key enforcement so ON DELETE CASCADE behaves like PostgreSQL.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine configured for the given URL.

    PostgreSQL gets the pooled configuration from settings. SQLite gets
    PRAGMA foreign_keys=ON on every new connection, and in-memory SQLite
    gets a StaticPool so all sessions see the same database.
    """
    echo = settings.log_level == "DEBUG"

    if not database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            echo=echo,
        )

    options = {"echo": echo}
    if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    sqlite_engine = create_async_engine(database_url, **options)

    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings.database_url)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, which the
# response serialization relies on
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for autogenerate and
    the test suite uses for create_all().
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/families")
        async def list_families(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            # Rollback for ANY failure, including permission errors raised
            # after a flush, so no partial write survives
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Gracefully closes all pooled connections (application shutdown)."""
    await engine.dispose()
