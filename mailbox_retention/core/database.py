"""Database connection and session management."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from mailbox_retention.core.config import Settings
from mailbox_retention.models.base import Base


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured store database."""
    url = settings.async_database_url
    # NullPool for test databases to avoid connections outliving the event loop
    return create_async_engine(
        url,
        echo=False,
        poolclass=NullPool if "test" in url else None,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create the message tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
