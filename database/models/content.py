"""
Content tables: profile pictures and banners, profile pairs, emotes and wallpapers.

Rows are stored as uploaded; tags may hold a JSON array, a JSON-encoded
string, or a comma-delimited string depending on which client wrote them.
"""

from typing import Any

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StringIdMixin, TimestampMixin


class ContentColumnsMixin(StringIdMixin, TimestampMixin):
    """Columns shared by every content table."""

    # Uploader (user_profiles.user_id)
    user_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )

    title: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    category: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    tags: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
    )
    color: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    download_count: Mapped[int | None] = mapped_column(
        Integer,
        default=0,
        nullable=True,
    )

    # Moderation status: pending, approved, rejected
    status: Mapped[str] = mapped_column(
        String(20),
        default="approved",
        server_default="approved",
        nullable=False,
        index=True,
    )


class Profile(ContentColumnsMixin, Base):
    """Single-image upload: a profile picture or a banner."""

    __tablename__ = "profiles"

    # profile | banner
    type: Mapped[str] = mapped_column(
        String(20),
        default="profile",
        nullable=False,
        index=True,
    )
    image_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, type={self.type}, title={self.title})>"


class ProfilePair(ContentColumnsMixin, Base):
    """Matching profile picture and banner uploaded as one set."""

    __tablename__ = "profile_pairs"

    pfp_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    banner_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ProfilePair(id={self.id}, title={self.title})>"


class Emote(ContentColumnsMixin, Base):
    """Emote image."""

    __tablename__ = "emotes"

    image_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Emote(id={self.id}, title={self.title})>"


class Wallpaper(ContentColumnsMixin, Base):
    """Desktop or mobile wallpaper."""

    __tablename__ = "wallpapers"

    image_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    resolution: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Wallpaper(id={self.id}, title={self.title})>"


Index("idx_profiles_type_updated_at", Profile.type, Profile.updated_at)
