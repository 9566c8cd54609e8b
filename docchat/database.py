"""Database configuration and session management."""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from docchat.config import settings


def _engine_options() -> Dict[str, Any]:
    """Pool options for the configured backend (SQLite has no sized pool)."""
    options: Dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not settings.is_sqlite:
        options.update(pool_size=10, max_overflow=20)
    return options


# Async engine for async operations
async_engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to provide a clean async session per request with safety checks.
    """
    async with AsyncSessionLocal() as session:
        try:
            # Ensure connection is healthy
            try:
                await session.execute(text("SELECT 1"))
            except SQLAlchemyError:
                await session.rollback()

            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
