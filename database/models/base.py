"""
Declarative base and shared column mixins.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    """Generate an opaque string identifier."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class StringIdMixin:
    """Opaque string primary key."""

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
    )


class TimestampMixin:
    """created_at / updated_at columns maintained by the database."""

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=True,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=True,
        index=True,
    )
