"""Database connection, session management and period locks."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from payroll_admin.config import get_settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine


def get_engine(database_url: str | None = None) -> AsyncEngine:
    """Create async database engine."""
    settings = get_settings()
    url = database_url or settings.database_url
    if url.startswith("postgresql"):
        return create_async_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
        )
    return create_async_engine(url, echo=False)


# Global engine and session factory
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_db() -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Initialize database engine and session factory."""
    global _engine, _session_factory
    if _engine is None or _session_factory is None:
        _engine = get_engine()
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _engine, _session_factory


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    from payroll_admin.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    """Dispose the global engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def supports_advisory_locks(engine: AsyncEngine) -> bool:
    """Advisory locks exist only on PostgreSQL."""
    return engine.dialect.name == "postgresql"


def period_lock_key(year: int, month: int) -> str:
    """Lock key shared by all workers generating the same period."""
    return f"payroll-period:{year:04d}-{month:02d}"


async def acquire_advisory_lock(conn: AsyncConnection, key: str) -> bool:
    """Acquire a session-level advisory lock.

    Returns True if lock acquired, False if already held.
    """
    result = await conn.execute(
        text("SELECT pg_try_advisory_lock(hashtext(:key))"),
        {"key": key},
    )
    row = result.scalar()
    return bool(row)


async def release_advisory_lock(conn: AsyncConnection, key: str) -> None:
    """Release a session-level advisory lock."""
    await conn.execute(
        text("SELECT pg_advisory_unlock(hashtext(:key))"),
        {"key": key},
    )


@asynccontextmanager
async def advisory_lock(engine: AsyncEngine, key: str) -> AsyncGenerator[bool, None]:
    """Hold an advisory lock on a dedicated connection.

    The lock lives on its own connection so that commits made by the
    caller's session (which return connections to the pool) cannot drop it.
    Yields whether the lock was acquired.
    """
    async with engine.connect() as conn:
        acquired = await acquire_advisory_lock(conn, key)
        try:
            yield acquired
        finally:
            if acquired:
                await release_advisory_lock(conn, key)
