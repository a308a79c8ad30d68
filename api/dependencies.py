"""
FastAPI dependency injection for stores and gallery services.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException

from core.config import Settings, get_settings
from core.redis import get_redis
from database import get_session_factory, is_database_available
from services.content_repository import ContentRepository
from services.data_store import DataStore, LocalStore
from services.download_counter import HttpMediaDownloader, MediaDownloader
from services.gallery_session import GalleryConfig
from services.local_store import RedisLocalStore
from services.sql_store import SqlDataStore
from services.trending import TrendingService

logger = logging.getLogger(__name__)


async def get_data_store() -> DataStore:
    """
    Get the durable data store dependency.

    Raises 503 if the database is not configured/available.
    """
    if not is_database_available():
        raise HTTPException(
            status_code=503,
            detail="Database not configured",
        )
    return SqlDataStore(get_session_factory())


async def get_local_store(settings: Settings = Depends(get_settings)) -> LocalStore:
    """Get the favorites cache; a no-op cache when Redis is not initialized."""
    return RedisLocalStore(get_redis(), ttl_seconds=settings.favorites_cache_ttl or None)


async def get_media_downloader(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[MediaDownloader, None]:
    """Get a media downloader, closed when the request finishes."""
    downloader = HttpMediaDownloader(
        download_dir=settings.download_dir,
        timeout=settings.download_timeout,
    )
    try:
        yield downloader
    finally:
        await downloader.close()


async def get_gallery_config(settings: Settings = Depends(get_settings)) -> GalleryConfig:
    """Get per-session gallery configuration."""
    return GalleryConfig.from_settings(settings)


async def get_content_repository(
    data_store: DataStore = Depends(get_data_store),
) -> ContentRepository:
    """Get ContentRepository dependency."""
    return ContentRepository(data_store)


async def get_trending_service(
    content_repository: ContentRepository = Depends(get_content_repository),
    settings: Settings = Depends(get_settings),
) -> TrendingService:
    """Get TrendingService dependency."""
    return TrendingService(content_repository, settings)
