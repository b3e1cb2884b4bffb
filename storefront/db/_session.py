"""
Engine and session factory.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.db._models import Base


def create_engine(url: str, *, isolation_level: str | None = None) -> AsyncEngine:
    options: dict[str, Any] = {"echo": False}
    if isolation_level is not None:
        options["isolation_level"] = isolation_level
    return create_async_engine(url, **options)


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
    *,
    isolation_level: str | None = None,
    create_tables: bool = True,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create database and return (session_factory, engine)."""
    engine = create_engine(url, isolation_level=isolation_level)

    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("create_engine", "create_database")
