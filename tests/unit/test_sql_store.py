"""
Unit tests for the SQL data store over an in-memory SQLite database.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import ContentFetchError, MutationError
from database.models import Emote, Profile, ProfilePair, UserProfile, Wallpaper
from services.content_models import ContentKind
from services.content_repository import ContentRepository
from services.data_store import ContentQuery
from services.sql_store import SqlDataStore

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def seeded_factory(sql_session_factory):
    async with sql_session_factory() as session:
        session.add_all([
            Profile(id="p1", type="profile", title="Cat pic", tags=["Cute"], user_id="u1",
                    image_url="https://cdn/p1.png", download_count=3, updated_at=NOW),
            Profile(id="b1", type="banner", title="Sky", tags="night, moon", user_id="u2",
                    image_url="https://cdn/b1.png", updated_at=NOW - timedelta(days=10)),
            Profile(id="b2", type="banner", title="Pending", status="pending",
                    image_url="https://cdn/b2.png", updated_at=NOW),
            ProfilePair(id="pp1", title=None, pfp_url="https://cdn/pp1.png",
                        banner_url="https://cdn/pp1b.png", updated_at=NOW),
            Emote(id="e1", title="Wave", image_url="https://cdn/e1.gif", download_count=9,
                  updated_at=NOW),
            Wallpaper(id="w1", title="Dunes", image_url="https://cdn/w1.jpg", resolution="4k",
                      updated_at=NOW),
            UserProfile(user_id="u1", username="nightowl"),
            UserProfile(user_id="u2", display_name="Moth"),
        ])
        await session.commit()
    return sql_session_factory


class TestQueryContent:
    """Tests for content queries."""

    @pytest.mark.asyncio
    async def test_profile_table_split_by_type(self, seeded_factory):
        store = SqlDataStore(seeded_factory)

        pictures = await store.query_content(ContentKind.PICTURE, ContentQuery())
        banners = await store.query_content(ContentKind.BANNER, ContentQuery())

        assert [r["id"] for r in pictures] == ["p1"]
        assert {r["id"] for r in banners} == {"b1", "b2"}

    @pytest.mark.asyncio
    async def test_filters_and_ordering(self, seeded_factory):
        store = SqlDataStore(seeded_factory)

        records = await store.query_content(
            ContentKind.BANNER,
            ContentQuery(status="approved", updated_since=NOW - timedelta(days=30)),
        )

        assert [r["id"] for r in records] == ["b1"]

    @pytest.mark.asyncio
    async def test_records_coerce_through_repository(self, seeded_factory):
        repo = ContentRepository(SqlDataStore(seeded_factory))

        banners = await repo.fetch(ContentKind.BANNER, ContentQuery(status="approved"))
        pairs = await repo.fetch(ContentKind.PAIR)

        assert banners[0].tags == frozenset({"night", "moon"})
        assert banners[0].owner_name == "Moth"
        assert pairs[0].title == "Untitled Pair"

    @pytest.mark.asyncio
    async def test_invalid_order_column(self, seeded_factory):
        store = SqlDataStore(seeded_factory)

        with pytest.raises(ValueError):
            await store.query_content(ContentKind.EMOTE, ContentQuery(order_by="image_url"))

    @pytest.mark.asyncio
    async def test_database_error_becomes_fetch_error(self):
        factory = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        with pytest.raises(ContentFetchError):
            await SqlDataStore(factory).query_content(ContentKind.EMOTE, ContentQuery())


class TestIdentities:
    """Tests for identity lookups."""

    @pytest.mark.asyncio
    async def test_query_identities(self, seeded_factory):
        identities = await SqlDataStore(seeded_factory).query_identities({"u1", "u2", "ghost"})

        assert set(identities) == {"u1", "u2"}
        assert identities["u1"].display == "nightowl"


class TestFavorites:
    """Tests for the favorites relation."""

    @pytest.mark.asyncio
    async def test_add_is_idempotent_and_remove(self, seeded_factory):
        store = SqlDataStore(seeded_factory)

        await store.add_favorite("u1", ContentKind.EMOTE, "e1")
        await store.add_favorite("u1", ContentKind.EMOTE, "e1")
        await store.add_favorite("u1", ContentKind.WALLPAPER, "w1")

        assert await store.list_favorites("u1", ContentKind.EMOTE) == ["e1"]

        await store.remove_favorite("u1", ContentKind.EMOTE, "e1")
        await store.remove_favorite("u1", ContentKind.EMOTE, "e1")

        assert await store.list_favorites("u1", ContentKind.EMOTE) == []
        assert await store.list_favorites("u1", ContentKind.WALLPAPER) == ["w1"]

    @pytest.mark.asyncio
    async def test_write_error_becomes_mutation_error(self):
        factory = MagicMock(side_effect=OperationalError("INSERT", {}, Exception("down")))

        with pytest.raises(MutationError):
            await SqlDataStore(factory).add_favorite("u1", ContentKind.EMOTE, "e1")


class TestDownloadCount:
    """Tests for the download counter write."""

    @pytest.mark.asyncio
    async def test_writes_previous_plus_one(self, seeded_factory):
        store = SqlDataStore(seeded_factory)

        await store.increment_download_count(ContentKind.EMOTE, "e1", 9)

        records = await store.query_content(ContentKind.EMOTE, ContentQuery())
        assert records[0]["download_count"] == 10

    @pytest.mark.asyncio
    async def test_missing_row(self, seeded_factory):
        with pytest.raises(MutationError):
            await SqlDataStore(seeded_factory).increment_download_count(ContentKind.EMOTE, "gone", 0)
