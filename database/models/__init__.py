"""
SQLAlchemy models for Night Owl Gallery.
"""

from .base import Base, StringIdMixin, TimestampMixin, new_id
from .content import ContentColumnsMixin, Emote, Profile, ProfilePair, Wallpaper
from .favorite import Favorite
from .user_profile import UserProfile

__all__ = [
    # Base
    "Base",
    "StringIdMixin",
    "TimestampMixin",
    "new_id",
    # Models
    "ContentColumnsMixin",
    "Profile",
    "ProfilePair",
    "Emote",
    "Wallpaper",
    "UserProfile",
    "Favorite",
]
