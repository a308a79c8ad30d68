"""
Repository layer for database access.

Provides async CRUD operations for content, identities and favorites.
"""

from .content_repo import ContentRecordRepository
from .favorite_repo import FavoriteRepository
from .user_profile_repo import UserProfileRepository

__all__ = [
    "ContentRecordRepository",
    "FavoriteRepository",
    "UserProfileRepository",
]
