"""
Trending: cross-kind fetch, scoring and ranking.

Scoring is a pure function of an item and a fixed ``now``. The growth rate
comes from an injectable estimator; the default one is a placeholder that
draws from a random band and is flagged as an estimate on every score.
"""

import asyncio
import logging
import math
import random
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

from core.config import Settings, get_settings
from core.exceptions import ContentFetchError

from .content_models import ContentItem, ContentKind
from .content_repository import ContentRepository
from .data_store import ContentQuery

logger = logging.getLogger(__name__)

APPROVED_STATUS = "approved"
TYPE_ALL = "all"

DEFAULT_TRENDING_LIMIT = 12
DEFAULT_TAG_LIMIT = 10


class TimeWindow(str, Enum):
    """Trending time windows."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    def lower_bound(self, now: datetime) -> datetime | None:
        """Oldest ``updated_at`` inside the window, None for all time."""
        days = _WINDOW_DAYS[self]
        if days is None:
            return None
        return now - timedelta(days=days)


_WINDOW_DAYS: dict[TimeWindow, int | None] = {
    TimeWindow.TODAY: 1,
    TimeWindow.WEEK: 7,
    TimeWindow.MONTH: 30,
    TimeWindow.ALL: None,
}


GrowthEstimator = Callable[[ContentItem], int]


class GrowthRateEstimator:
    """
    Placeholder growth estimate.

    There is no download history to derive a real rate from, so items above
    the threshold draw from a higher random band than the rest.
    """

    HIGH_BAND = (5, 80)
    LOW_BAND = (-20, 30)

    def __init__(self, threshold: int = 10, rng: random.Random | None = None):
        self.threshold = threshold
        self._rng = rng or random.Random()

    def __call__(self, item: ContentItem) -> int:
        low, high = self.HIGH_BAND if item.download_count > self.threshold else self.LOW_BAND
        return self._rng.randint(low, high)


@dataclass(frozen=True)
class TrendScore:
    """Derived trending metrics of one item. Never cached."""

    days_since_update: int
    recency_score: float
    download_score: float
    trend_score: int
    growth_rate: int
    growth_is_estimate: bool = True


@dataclass(frozen=True)
class RankedItem:
    """An item with its score."""

    item: ContentItem
    score: TrendScore

    @property
    def rank_key(self) -> float:
        return self.score.trend_score + self.item.download_count * 0.1


@dataclass(frozen=True)
class TrendingStats:
    """
    Aggregates over the candidates fetched for the window.

    Each kind contributes at most ``trending_fetch_limit`` candidates, so the
    totals describe the window sample rather than whole collections.
    """

    total_downloads: int = 0
    total_uploads: int = 0
    active_users: int = 0
    trending_tags: list[tuple[str, int]] = field(default_factory=list)


@dataclass(frozen=True)
class TrendingResult:
    """Ranked items plus window stats."""

    window: TimeWindow
    type_filter: str
    items: list[RankedItem]
    stats: TrendingStats
    generated_at: datetime


# ============ Scoring ============


def score_item(
    item: ContentItem,
    now: datetime,
    estimator: GrowthEstimator,
    growth_is_estimate: bool = True,
) -> TrendScore:
    """
    Score one item against a fixed ``now``.

    recency = max(0, 100 - age_days * 5), where age_days counts whole days
    since the last update; download = min(100, downloads * 0.1);
    trend = floor(recency * 0.6 + download * 0.4). Undated items get
    recency 0.
    """
    if item.updated_at is None:
        age_days = None
        days_since_update = 0
        recency = 0.0
    else:
        elapsed = (now - item.updated_at) / timedelta(days=1)
        age_days = max(0, math.floor(elapsed))
        days_since_update = max(1, age_days)
        recency = float(max(0, 100 - age_days * 5))

    downloads = min(100.0, item.download_count * 0.1)
    trend = math.floor(recency * 0.6 + downloads * 0.4)

    return TrendScore(
        days_since_update=days_since_update,
        recency_score=recency,
        download_score=downloads,
        trend_score=trend,
        growth_rate=estimator(item),
        growth_is_estimate=growth_is_estimate,
    )


def rank_items(
    items: Iterable[ContentItem],
    now: datetime,
    estimator: GrowthEstimator,
    limit: int = DEFAULT_TRENDING_LIMIT,
    growth_is_estimate: bool = True,
) -> list[RankedItem]:
    """Score, sort by trend score plus a download tie-breaker, and keep the top ``limit``."""
    ranked = [
        RankedItem(item, score_item(item, now, estimator, growth_is_estimate))
        for item in items
    ]
    ranked.sort(key=lambda entry: entry.rank_key, reverse=True)
    return ranked[:max(0, limit)]


def trending_tags(items: Iterable[ContentItem], limit: int = DEFAULT_TAG_LIMIT) -> list[tuple[str, int]]:
    """Most used tags, count descending then tag name."""
    counts = Counter(tag for item in items for tag in item.tags)
    ordered = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    return ordered[:limit]


def compute_stats(items: Sequence[ContentItem], tag_limit: int = DEFAULT_TAG_LIMIT) -> TrendingStats:
    return TrendingStats(
        total_downloads=sum(item.download_count for item in items),
        total_uploads=len(items),
        active_users=len({item.owner_id for item in items if item.owner_id}),
        trending_tags=trending_tags(items, tag_limit),
    )


# ============ Service ============


class TrendingService:
    """Fetches every requested kind for a window and ranks the merged set."""

    def __init__(
        self,
        content_repository: ContentRepository,
        settings: Settings | None = None,
        growth_estimator: GrowthEstimator | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._repository = content_repository
        self._settings = settings or get_settings()
        self._custom_estimator = growth_estimator is not None
        self._estimator = growth_estimator or GrowthRateEstimator(
            threshold=self._settings.growth_threshold
        )
        self._clock = clock or (lambda: datetime.now(UTC))

    @staticmethod
    def kinds_for(type_filter: str) -> list[ContentKind]:
        """Kinds covered by a type filter ("all" or one kind)."""
        if type_filter == TYPE_ALL:
            return list(ContentKind)
        return [ContentKind(type_filter)]

    async def get_trending(
        self,
        window: TimeWindow = TimeWindow.WEEK,
        type_filter: str = TYPE_ALL,
    ) -> TrendingResult:
        """
        Rank trending content.

        Args:
            window: Time window on ``updated_at``
            type_filter: "all" or a single content kind

        Returns:
            Top items (identities resolved for those only) and window stats

        Raises:
            ContentFetchError: If any kind fails to load
        """
        window = TimeWindow(window)
        kinds = self.kinds_for(type_filter)
        now = self._clock()

        query = ContentQuery(
            updated_since=window.lower_bound(now),
            status=APPROVED_STATUS,
            order_by="download_count",
            descending=True,
            limit=self._settings.trending_fetch_limit,
        )

        results = await asyncio.gather(
            *(self._repository.fetch(kind, query, enrich=False) for kind in kinds),
            return_exceptions=True,
        )

        merged: list[ContentItem] = []
        failed = []
        for kind, result in zip(kinds, results):
            if isinstance(result, ContentFetchError):
                logger.error(f"Trending fetch failed for {kind.value}: {result.message}")
                failed.append(kind.value)
                continue
            if isinstance(result, BaseException):
                raise result
            merged.extend(result)

        if failed:
            raise ContentFetchError(
                message="Failed to load trending content",
                details={"kinds": failed, "window": window.value},
            )

        ranked = rank_items(
            merged,
            now,
            self._estimator,
            limit=self._settings.trending_limit,
            growth_is_estimate=not self._custom_estimator,
        )
        await self._repository.identity_resolver.enrich([entry.item for entry in ranked])

        logger.info(
            f"Trending {window.value}/{type_filter}: {len(merged)} candidates, {len(ranked)} ranked"
        )

        return TrendingResult(
            window=window,
            type_filter=type_filter,
            items=ranked,
            stats=compute_stats(merged, self._settings.trending_tag_limit),
            generated_at=now,
        )
