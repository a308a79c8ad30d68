"""
Pydantic schemas for API request/response models.
"""

from .common import (
    ComponentHealth,
    DetailedHealthCheckResponse,
    ErrorDetail,
    ErrorResponse,
    HealthCheckResponse,
    HealthStatus,
)
from .gallery import (
    ContentItemInfo,
    DownloadedFileInfo,
    DownloadResponse,
    FavoriteToggleResponse,
    GalleryFacets,
    GalleryFilters,
    GalleryPageResponse,
    IdentityInfo,
)
from .trending import (
    TagCount,
    TrendingItemInfo,
    TrendingResponse,
    TrendingStatsInfo,
    TrendScoreInfo,
)

__all__ = [
    # Common
    "ErrorDetail",
    "ErrorResponse",
    "HealthStatus",
    "ComponentHealth",
    "HealthCheckResponse",
    "DetailedHealthCheckResponse",
    # Gallery
    "IdentityInfo",
    "ContentItemInfo",
    "GalleryFacets",
    "GalleryFilters",
    "GalleryPageResponse",
    "FavoriteToggleResponse",
    "DownloadedFileInfo",
    "DownloadResponse",
    # Trending
    "TrendScoreInfo",
    "TrendingItemInfo",
    "TagCount",
    "TrendingStatsInfo",
    "TrendingResponse",
]
