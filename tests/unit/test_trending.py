"""
Unit tests for trending module.

Tests scoring, ranking, stats and the trending service.
"""

import random
from datetime import UTC, datetime, timedelta

import pytest

from core.config import Settings
from core.exceptions import ContentFetchError
from services.content_models import ContentItem, ContentKind
from services.content_repository import ContentRepository
from services.trending import (
    GrowthRateEstimator,
    TimeWindow,
    TrendingService,
    rank_items,
    score_item,
    trending_tags,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def fixed_growth(item: ContentItem) -> int:
    return 7


def _item(
    id: str,
    age: timedelta | None = timedelta(0),
    downloads: int = 0,
    tags: set[str] | None = None,
    kind: ContentKind = ContentKind.EMOTE,
) -> ContentItem:
    return ContentItem(
        id=id,
        kind=kind,
        owner_id=f"owner-{id}",
        title=id,
        tags=frozenset(tags or ()),
        download_count=downloads,
        updated_at=None if age is None else NOW - age,
    )


class TestScoreItem:
    """Tests for per-item scoring."""

    def test_fresh_item_without_downloads(self):
        score = score_item(_item("a"), NOW, fixed_growth)

        assert score.recency_score == 100
        assert score.download_score == 0
        assert score.trend_score == 60

    def test_ten_days_old_with_thousand_downloads(self):
        score = score_item(_item("a", timedelta(days=10), 1000), NOW, fixed_growth)

        assert score.recency_score == 50
        assert score.download_score == 100
        assert score.trend_score == 70
        assert score.days_since_update == 10

    def test_days_since_update_at_least_one(self):
        assert score_item(_item("a", timedelta(hours=3)), NOW, fixed_growth).days_since_update == 1

    def test_recency_floors_at_zero(self):
        assert score_item(_item("a", timedelta(days=40)), NOW, fixed_growth).recency_score == 0

    def test_download_score_capped(self):
        assert score_item(_item("a", downloads=50_000), NOW, fixed_growth).download_score == 100

    def test_undated_item_scores_zero_recency(self):
        score = score_item(_item("a", age=None, downloads=100), NOW, fixed_growth)

        assert score.recency_score == 0
        assert score.trend_score == 4

    def test_growth_from_estimator(self):
        score = score_item(_item("a"), NOW, fixed_growth)
        assert score.growth_rate == 7
        assert score.growth_is_estimate is True


class TestGrowthRateEstimator:
    """Tests for the placeholder growth estimate."""

    def test_bands(self):
        estimator = GrowthRateEstimator(threshold=10, rng=random.Random(3))

        high = [estimator(_item("a", downloads=11)) for _ in range(50)]
        low = [estimator(_item("a", downloads=10)) for _ in range(50)]

        assert all(5 <= value <= 80 for value in high)
        assert all(-20 <= value <= 30 for value in low)

    def test_seeded_is_reproducible(self):
        first = GrowthRateEstimator(rng=random.Random(42))
        second = GrowthRateEstimator(rng=random.Random(42))
        item = _item("a", downloads=99)

        assert [first(item) for _ in range(5)] == [second(item) for _ in range(5)]


class TestRankItems:
    """Tests for ranking."""

    def test_deterministic(self):
        items = [_item(str(i), timedelta(days=i % 7), downloads=i * 37 % 500) for i in range(30)]

        first = [entry.item.id for entry in rank_items(items, NOW, fixed_growth)]
        second = [entry.item.id for entry in rank_items(items, NOW, fixed_growth)]

        assert first == second

    @pytest.mark.parametrize("count", [0, 5, 12, 40])
    def test_bounded_by_limit(self, count):
        items = [_item(str(i)) for i in range(count)]
        assert len(rank_items(items, NOW, fixed_growth)) == min(12, count)

    def test_orders_by_trend_plus_downloads(self):
        items = [
            _item("old", timedelta(days=30), downloads=10),
            _item("fresh", downloads=0),
            _item("popular", timedelta(days=2), downloads=900),
        ]

        ranked = rank_items(items, NOW, fixed_growth)

        assert [entry.item.id for entry in ranked] == ["popular", "fresh", "old"]

    def test_ties_keep_merge_order(self):
        items = [_item("x"), _item("y"), _item("z")]
        assert [e.item.id for e in rank_items(items, NOW, fixed_growth)] == ["x", "y", "z"]


def test_trending_tags_count_then_name():
    items = [
        _item("1", tags={"night", "owl"}),
        _item("2", tags={"night", "moon"}),
        _item("3", tags={"owl", "aurora"}),
    ]

    assert trending_tags(items, limit=3) == [("night", 2), ("owl", 2), ("aurora", 1)]


class TestTimeWindow:
    """Tests for window bounds."""

    @pytest.mark.parametrize(
        "window,days",
        [(TimeWindow.TODAY, 1), (TimeWindow.WEEK, 7), (TimeWindow.MONTH, 30)],
    )
    def test_lower_bound(self, window, days):
        assert window.lower_bound(NOW) == NOW - timedelta(days=days)

    def test_all_time_has_no_bound(self):
        assert TimeWindow.ALL.lower_bound(NOW) is None


class TestTrendingService:
    """Tests for the trending service."""

    @pytest.fixture
    def settings(self):
        return Settings(trending_limit=2, trending_fetch_limit=20)

    @pytest.fixture
    def service(self, fake_store, settings):
        return TrendingService(
            ContentRepository(fake_store),
            settings,
            growth_estimator=fixed_growth,
            clock=lambda: NOW,
        )

    @pytest.mark.asyncio
    async def test_queries_every_kind_with_window(self, fake_store, service):
        await service.get_trending(TimeWindow.WEEK)

        assert {kind for kind, _ in fake_store.content_queries} == set(ContentKind)
        for _, query in fake_store.content_queries:
            assert query.status == "approved"
            assert query.updated_since == NOW - timedelta(days=7)
            assert query.order_by == "download_count"
            assert query.limit == 20

    @pytest.mark.asyncio
    async def test_merges_ranks_and_enriches_top_only(self, fake_store, service, record_factory):
        fake_store.add_identity("u-top", username="top")
        fake_store.add(
            ContentKind.EMOTE,
            record_factory("e1", user_id="u-top", download_count=800, updated_at=NOW),
            record_factory("e2", user_id="u-low", download_count=0, updated_at=NOW - timedelta(days=6)),
        )
        fake_store.add(
            ContentKind.WALLPAPER,
            record_factory("w1", user_id="u-mid", download_count=300, updated_at=NOW, tags=["dark"]),
        )

        result = await service.get_trending(TimeWindow.WEEK)

        assert [entry.item.id for entry in result.items] == ["e1", "w1"]
        assert result.items[0].item.owner_name == "top"
        assert fake_store.identity_queries == [{"u-top", "u-mid"}]
        assert result.stats.total_uploads == 3
        assert result.stats.active_users == 3
        assert result.stats.total_downloads == 1100
        assert result.stats.trending_tags == [("dark", 1)]
        assert result.items[0].score.growth_is_estimate is False

    @pytest.mark.asyncio
    async def test_window_excludes_old_and_unapproved(self, fake_store, service, record_factory):
        fake_store.add(
            ContentKind.BANNER,
            record_factory("old", updated_at=NOW - timedelta(days=3)),
            record_factory("pending", status="pending", updated_at=NOW),
            record_factory("new", updated_at=NOW - timedelta(hours=2)),
        )

        result = await service.get_trending(TimeWindow.TODAY, "banner")

        assert [entry.item.id for entry in result.items] == ["new"]

    @pytest.mark.asyncio
    async def test_single_type_filter(self, fake_store, service):
        await service.get_trending(TimeWindow.ALL, "pair")

        assert [kind for kind, _ in fake_store.content_queries] == [ContentKind.PAIR]
        assert fake_store.content_queries[0][1].updated_since is None

    @pytest.mark.asyncio
    async def test_any_kind_failing_fails_whole_request(self, fake_store, service, record_factory):
        fake_store.add(ContentKind.EMOTE, record_factory("e1", updated_at=NOW))
        fake_store.fail_content.add(ContentKind.WALLPAPER)

        with pytest.raises(ContentFetchError) as exc_info:
            await service.get_trending(TimeWindow.MONTH)

        assert exc_info.value.details["kinds"] == ["wallpaper"]

    def test_default_estimator_is_flagged(self, fake_store, settings):
        service = TrendingService(ContentRepository(fake_store), settings, clock=lambda: NOW)
        assert isinstance(service._estimator, GrowthRateEstimator)
