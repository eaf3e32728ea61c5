from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from fleetfuel.infrastructure.models import Base


def create_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for the configured database."""

    return create_async_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create missing tables; used for SQLite and tests, Alembic manages Postgres."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
