"""
Trending router.

Endpoints:
- GET /api/trending - Top content across kinds for a time window
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_trending_service
from api.routers.galleries import content_item_to_info
from api.schemas.trending import (
    TagCount,
    TrendingItemInfo,
    TrendingResponse,
    TrendingStatsInfo,
    TrendScoreInfo,
)
from core.exceptions import ValidationError
from services.content_models import ContentKind
from services.trending import TYPE_ALL, RankedItem, TimeWindow, TrendingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trending", tags=["trending"])

TYPE_FILTERS = [TYPE_ALL] + [kind.value for kind in ContentKind]


def ranked_to_info(rank: int, entry: RankedItem) -> TrendingItemInfo:
    """Convert a ranked item to response model."""
    score = entry.score
    return TrendingItemInfo(
        rank=rank,
        item=content_item_to_info(entry.item),
        score=TrendScoreInfo(
            days_since_update=score.days_since_update,
            recency_score=score.recency_score,
            download_score=score.download_score,
            trend_score=score.trend_score,
            growth_rate=score.growth_rate,
            growth_is_estimate=score.growth_is_estimate,
        ),
    )


@router.get("", response_model=TrendingResponse)
async def get_trending(
    window: TimeWindow = Query(TimeWindow.WEEK, description="Time window"),
    type_filter: str = Query(TYPE_ALL, alias="type", description="'all' or one content kind"),
    service: TrendingService = Depends(get_trending_service),
):
    """Get the top trending items and window stats."""
    if type_filter not in TYPE_FILTERS:
        raise ValidationError(
            message=f"Unknown content type: {type_filter}",
            details={"allowed": TYPE_FILTERS},
        )

    result = await service.get_trending(window, type_filter)

    return TrendingResponse(
        window=result.window.value,
        type=result.type_filter,
        generated_at=result.generated_at,
        items=[ranked_to_info(rank, entry) for rank, entry in enumerate(result.items, start=1)],
        stats=TrendingStatsInfo(
            total_downloads=result.stats.total_downloads,
            total_uploads=result.stats.total_uploads,
            active_users=result.stats.active_users,
            trending_tags=[TagCount(tag=tag, count=count) for tag, count in result.stats.trending_tags],
        ),
    )
