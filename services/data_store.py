"""
Interfaces of the external stores consumed by the gallery engine.

The durable DataStore is the source of truth for content, identities,
favorites and download counts. The LocalStore is a small per-user
key-value cache. Implementations raise ContentFetchError for failed reads
and MutationError for failed writes.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .content_models import ContentKind, Identity


@dataclass(frozen=True)
class ContentQuery:
    """Filters and ordering hint for one content collection."""

    updated_since: datetime | None = None
    status: str | None = None
    order_by: str = "updated_at"  # updated_at, created_at, download_count
    descending: bool = True
    limit: int | None = None


class DataStore(ABC):
    """Durable store for content, identities, favorites and counters."""

    @abstractmethod
    async def query_content(
        self,
        kind: ContentKind,
        query: ContentQuery,
    ) -> list[Mapping[str, Any]]:
        """
        Fetch raw content records of one kind.

        Records are returned as stored; coercion happens in ContentRepository.
        """

    @abstractmethod
    async def query_identities(self, user_ids: set[str]) -> dict[str, Identity]:
        """Fetch identities for a set of user ids in one request."""

    @abstractmethod
    async def add_favorite(self, user_id: str, kind: ContentKind, content_id: str) -> None:
        """Add a favorite. Adding an existing favorite is a no-op."""

    @abstractmethod
    async def remove_favorite(self, user_id: str, kind: ContentKind, content_id: str) -> None:
        """Remove a favorite. Removing a missing favorite is a no-op."""

    @abstractmethod
    async def list_favorites(self, user_id: str, kind: ContentKind) -> list[str]:
        """List favorited content ids of one kind."""

    @abstractmethod
    async def increment_download_count(
        self,
        kind: ContentKind,
        content_id: str,
        previous_count: int,
    ) -> None:
        """Store ``previous_count + 1`` as the item's download count."""


class LocalStore(ABC):
    """Key-value cache scoped per user and gallery kind by its callers."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get a value, or None when absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value."""
