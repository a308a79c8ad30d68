"""
Favorite model linking users to content they bookmarked.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StringIdMixin


class Favorite(StringIdMixin, Base):
    """
    Favorite record linking a user to one content item.

    Content ids are only unique within a kind, so the kind is part of the key.
    """

    __tablename__ = "favorites"

    # Owner
    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )

    # Reference to the favorited content
    content_kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    content_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
    )

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Favorite(user_id={self.user_id}, kind={self.content_kind}, "
            f"content_id={self.content_id})>"
        )


# Unique constraint: user can only favorite an item once
Index(
    "idx_favorites_user_content_unique",
    Favorite.user_id,
    Favorite.content_kind,
    Favorite.content_id,
    unique=True,
)
