"""
mindreport/db/session.py — Async SQLAlchemy session factory.

Uses asyncpg driver for Postgres.
Provides get_db() FastAPI dependency for connection-per-request pattern.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mindreport.config import get_settings

settings = get_settings()

# Convert postgresql:// → postgresql+asyncpg:// for async driver
ASYNC_DATABASE_URL = str(settings.database_url).replace(
    "postgresql://", "postgresql+asyncpg://", 1
)

engine = create_async_engine(
    ASYNC_DATABASE_URL,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,       # Detect stale connections before use
    echo=False,               # rows carry health data; never echo them
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields one read-only async session per request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.rollback()
