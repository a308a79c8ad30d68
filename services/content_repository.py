"""
Content repository: one logical collection, coerced and joined with identities.
"""

import logging

from core.exceptions import ContentFetchError, ExternalServiceError

from .content_models import ContentItem, ContentKind, content_item_from_record
from .data_store import ContentQuery, DataStore
from .identity_resolver import IdentityResolver

logger = logging.getLogger(__name__)


class ContentRepository:
    """Fetches content of one kind in the canonical ContentItem shape."""

    def __init__(self, data_store: DataStore, identity_resolver: IdentityResolver | None = None):
        self._store = data_store
        self.identity_resolver = identity_resolver or IdentityResolver(data_store)

    async def fetch(
        self,
        kind: ContentKind,
        query: ContentQuery | None = None,
        enrich: bool = True,
    ) -> list[ContentItem]:
        """
        Fetch all records of a kind matching the query.

        Args:
            kind: Content kind
            query: Filters and ordering hint
            enrich: Resolve uploader identities for the result

        Returns:
            Coerced items, enriched when requested

        Raises:
            ContentFetchError: If either the content or the identity request
                fails. No partial list is ever returned.
        """
        kind = ContentKind(kind)
        query = query or ContentQuery()

        try:
            records = await self._store.query_content(kind, query)
        except ExternalServiceError as e:
            logger.error(f"Failed to fetch {kind.value} content: {e.message}")
            raise ContentFetchError(
                message=f"Failed to load {kind.value} content",
                details={"kind": kind.value},
            ) from e

        try:
            items = [content_item_from_record(kind, record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed {kind.value} record: {e!r}")
            raise ContentFetchError(
                message=f"Failed to load {kind.value} content",
                details={"kind": kind.value, "reason": "malformed record"},
            ) from e

        if enrich:
            await self.identity_resolver.enrich(items)

        logger.debug(f"Fetched {len(items)} {kind.value} items")
        return items
