"""
UserProfile model: public identity of an uploader.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StringIdMixin, TimestampMixin


class UserProfile(StringIdMixin, TimestampMixin, Base):
    """
    Public profile for a user account.

    Accounts live in the external auth provider; this table only holds
    what galleries need to credit an upload.
    """

    __tablename__ = "user_profiles"

    # Auth provider user id (content rows reference this)
    user_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
    )
    username: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    display_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    avatar_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    bio: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<UserProfile(user_id={self.user_id}, username={self.username})>"
