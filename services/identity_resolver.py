"""
Batch resolution of uploader identities.
"""

import logging
from collections.abc import Iterable

from core.exceptions import ContentFetchError, ExternalServiceError

from .content_models import ContentItem, Identity, unique_owner_ids
from .data_store import DataStore

logger = logging.getLogger(__name__)


class IdentityResolver:
    """
    Resolves owner ids to identities with one store request per batch.

    Unknown or deleted users are simply absent from the result.
    """

    def __init__(self, data_store: DataStore):
        self._store = data_store

    async def resolve(self, owner_ids: Iterable[str | None]) -> dict[str, Identity]:
        """
        Resolve a batch of owner ids.

        Args:
            owner_ids: Owner ids, duplicates and empty values allowed

        Returns:
            Mapping of user id to Identity for the ids the store knows

        Raises:
            ContentFetchError: If the identity lookup fails
        """
        ids = {owner_id for owner_id in owner_ids if owner_id}
        if not ids:
            return {}

        try:
            identities = await self._store.query_identities(ids)
        except ExternalServiceError as e:
            logger.error(f"Identity lookup failed for {len(ids)} users: {e.message}")
            raise ContentFetchError(
                message="Failed to load uploader profiles",
                details={"users": len(ids)},
            ) from e

        return {user_id: identity for user_id, identity in identities.items() if user_id in ids}

    async def enrich(self, items: list[ContentItem]) -> list[ContentItem]:
        """Attach resolved identities to items in place and return them."""
        identities = await self.resolve(unique_owner_ids(items))
        for item in items:
            item.owner = identities.get(item.owner_id) if item.owner_id else None
        return items
