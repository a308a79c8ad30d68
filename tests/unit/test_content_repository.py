"""
Unit tests for content_repository module.
"""

import pytest

from core.exceptions import ContentFetchError
from services.content_models import ContentKind
from services.content_repository import ContentRepository
from services.data_store import ContentQuery


class TestContentRepository:
    """Tests for fetching canonical content."""

    @pytest.mark.asyncio
    async def test_fetch_coerces_and_enriches(self, gallery_store):
        repo = ContentRepository(gallery_store)

        items = await repo.fetch(ContentKind.PICTURE)

        by_id = {item.id: item for item in items}
        assert by_id["p2"].tags == frozenset({"cute", "dog"})
        assert by_id["p3"].tags == frozenset({"sky", "orange"})
        assert by_id["p1"].owner_name == "nightowl"
        assert by_id["p2"].owner_name == "Moth"
        assert by_id["p3"].owner_name == "Unknown User"
        assert len(gallery_store.identity_queries) == 1

    @pytest.mark.asyncio
    async def test_passes_query_through(self, gallery_store):
        repo = ContentRepository(gallery_store)
        query = ContentQuery(order_by="download_count", limit=1)

        items = await repo.fetch(ContentKind.PICTURE, query)

        assert [item.id for item in items] == ["p2"]
        assert gallery_store.content_queries == [(ContentKind.PICTURE, query)]

    @pytest.mark.asyncio
    async def test_fetch_without_enrich(self, gallery_store):
        items = await ContentRepository(gallery_store).fetch(ContentKind.PICTURE, enrich=False)

        assert all(item.owner is None for item in items)
        assert gallery_store.identity_queries == []

    @pytest.mark.asyncio
    async def test_content_failure(self, fake_store):
        fake_store.fail_content.add(ContentKind.EMOTE)

        with pytest.raises(ContentFetchError):
            await ContentRepository(fake_store).fetch(ContentKind.EMOTE)

    @pytest.mark.asyncio
    async def test_identity_failure_means_no_partial_result(self, fake_store, record_factory):
        fake_store.add(ContentKind.EMOTE, record_factory("e1"))
        fake_store.fail_identities = True

        with pytest.raises(ContentFetchError):
            await ContentRepository(fake_store).fetch(ContentKind.EMOTE)

    @pytest.mark.asyncio
    async def test_record_without_id_becomes_fetch_error(self, fake_store):
        fake_store.add(ContentKind.EMOTE, {"title": "No id", "tags": "a"})

        with pytest.raises(ContentFetchError) as exc_info:
            await ContentRepository(fake_store).fetch(ContentKind.EMOTE)

        assert exc_info.value.details["kind"] == "emote"
