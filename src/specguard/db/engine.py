"""Async SQLAlchemy engine factory."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from specguard.db.models import Base


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    For file-backed SQLite URLs the parent directory is created so the
    default ``.specguard/specs.db`` works in a fresh checkout.

    Args:
        database_url: Async database URL (sqlite+aiosqlite://..., postgresql+asyncpg://...).
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create the plan tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
