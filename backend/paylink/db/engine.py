"""
PURPOSE: Async engine and session factory construction.

The engine is built from an explicit Settings object at application startup
rather than at import time, so the process can still boot when no database
is configured.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from paylink.config.settings import Settings
from paylink.db.base import Base
from paylink.utils.logger import get_logger

logger = get_logger(__name__)


def build_engine(settings: Settings) -> Optional[AsyncEngine]:
    """
    PURPOSE: Create the async engine for the configured DATABASE_URL.

    Args:
        settings: Application settings.

    Returns:
        AsyncEngine, or None when DATABASE_URL is not set.
    """
    if not settings.database_configured:
        return None

    url = settings.DATABASE_URL.strip()
    kwargs: dict = {"echo": settings.DEBUG, "pool_pre_ping": True}
    # SQLite uses its own single-connection pools
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=10, max_overflow=5)

    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to `engine`."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """
    PURPOSE: Create any missing tables for the registered models.

    CALLED BY: Application startup when AUTO_CREATE_SCHEMA is on.
    """
    # Registers the models on Base.metadata
    import paylink.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_schema_ready", tables=sorted(Base.metadata.tables))
