"""
Services module for Night Owl Gallery.
"""
from .content_models import ContentItem, ContentKind, Identity
from .content_repository import ContentRepository
from .data_store import ContentQuery, DataStore, LocalStore
from .download_counter import DownloadCounter, HttpMediaDownloader
from .favorites_store import FavoritesStore
from .gallery_session import GalleryConfig, GallerySession
from .identity_resolver import IdentityResolver
from .local_store import RedisLocalStore
from .sql_store import SqlDataStore
from .trending import TimeWindow, TrendingService

__all__ = [
    "ContentItem",
    "ContentKind",
    "Identity",
    "ContentQuery",
    "DataStore",
    "LocalStore",
    "IdentityResolver",
    "ContentRepository",
    "FavoritesStore",
    "DownloadCounter",
    "HttpMediaDownloader",
    "GalleryConfig",
    "GallerySession",
    "TimeWindow",
    "TrendingService",
    "SqlDataStore",
    "RedisLocalStore",
]
