"""
Database module for Night Owl Gallery.

Provides async SQLAlchemy engine and session factory management for the
durable content, identity, and favorites store.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import get_settings

from .models import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used by the SQL data store."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database() -> None:
    """
    Initialize the database engine and session factory.

    Should be called during application startup.
    """
    global _engine, _async_session_factory

    settings = get_settings()

    if not settings.is_database_configured:
        logger.info("Database is disabled or DATABASE_URL is not set, skipping initialization")
        return

    logger.info("Initializing database connection...")

    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": settings.debug and settings.db_echo,
    }
    if not settings.database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    _engine = create_async_engine(settings.database_url, **engine_kwargs)
    _async_session_factory = create_session_factory(_engine)

    if settings.db_create_tables:
        await create_tables(_engine)
        logger.info("Database tables created")

    logger.info("Database initialized successfully")


async def close_database() -> None:
    """
    Close the database connection.

    Should be called during application shutdown.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.info("Closing database connection...")
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connection closed")


def get_session_factory() -> async_sessionmaker[AsyncSession] | None:
    """Get the session factory, or None if the database is not initialized."""
    return _async_session_factory


def is_database_available() -> bool:
    """Check if database is available and initialized."""
    return _engine is not None and _async_session_factory is not None


# Export commonly used items
__all__ = [
    "create_session_factory",
    "create_tables",
    "init_database",
    "close_database",
    "get_session_factory",
    "is_database_available",
]
