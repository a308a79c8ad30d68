"""
Pydantic schemas for trending API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .gallery import ContentItemInfo


class TrendScoreInfo(BaseModel):
    """Derived trending metrics of one item."""

    days_since_update: int
    recency_score: float
    download_score: float
    trend_score: int
    growth_rate: int
    growth_is_estimate: bool = Field(
        ...,
        description="True when growth_rate is a placeholder rather than measured",
    )


class TrendingItemInfo(BaseModel):
    """One ranked item."""

    rank: int = Field(..., description="1-based rank")
    item: ContentItemInfo
    score: TrendScoreInfo


class TagCount(BaseModel):
    """Tag usage count."""

    tag: str
    count: int


class TrendingStatsInfo(BaseModel):
    """Aggregates over the candidates fetched for the window, capped per kind."""

    total_downloads: int = Field(0, description="Downloads across window candidates")
    total_uploads: int = Field(0, description="Uploads in the window, capped per kind")
    active_users: int = Field(0, description="Distinct uploaders among window candidates")
    trending_tags: list[TagCount] = Field(default_factory=list)


class TrendingResponse(BaseModel):
    """Response for trending content."""

    window: str
    type: str
    generated_at: datetime
    items: list[TrendingItemInfo] = Field(default_factory=list)
    stats: TrendingStatsInfo
