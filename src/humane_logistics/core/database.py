"""Async SQLAlchemy engine and session factory helpers.

Provides:
- build_engine():          create an AsyncEngine for a database URL
- build_session_factory(): the async_sessionmaker bound to an engine
- verify_connection():     ``SELECT 1`` health probe used at startup

Unlike a module-level singleton, engines are built on demand so that the
ingestion tool, the analytics API and the tests can each target their own
database URL.

Connection pool sizing applies to server databases only; SQLite URLs use
SQLAlchemy's default pool for the dialect.
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from humane_logistics.core.models.base import Base  # noqa: F401


def build_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create the async engine from a database URL.

    Args:
        database_url: Async SQLAlchemy DSN (``postgresql+asyncpg://...`` or
            ``sqlite+aiosqlite:///...``).
        **kwargs: Extra keyword arguments forwarded to
            :func:`~sqlalchemy.ext.asyncio.create_async_engine`.

    Returns:
        A new :class:`AsyncEngine`.
    """
    options: dict[str, Any] = {"echo": False}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True)
    options.update(kwargs)
    return create_async_engine(database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to *engine*."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def verify_connection(engine: AsyncEngine) -> None:
    """Run ``SELECT 1`` against *engine*.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached.
        OSError: If the driver fails at the socket level.
    """
    async with engine.connect() as conn:
        await conn.execute(sa.text("SELECT 1"))
