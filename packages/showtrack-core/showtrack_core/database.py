"""Database connection and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from showtrack_core.config import get_settings


def create_engine_from_url(url: str, pool_size: int = 5) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    PostgreSQL (asyncpg) gets a sized connection pool. SQLite (aiosqlite) is used for
    local runs and tests and keeps SQLAlchemy's default pool for that dialect.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False, future=True)

    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_size=pool_size,
        max_overflow=10,
    )


_settings = get_settings()

engine = create_engine_from_url(_settings.database.url, _settings.database.pool_size)

# Create async session factory
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session.

    Yields:
        AsyncSession: Database session

    Example:
        async with get_session() as session:
            result = await session.execute(select(Game))
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(target: AsyncEngine | None = None) -> None:
    """
    Initialize database schema.

    Creates all tables defined in SQLModel.
    """
    # Register table metadata before create_all
    import showtrack_core.models  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
