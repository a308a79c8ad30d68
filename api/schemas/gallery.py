"""
Pydantic schemas for gallery API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

# ============ Content Schemas ============


class IdentityInfo(BaseModel):
    """Uploader identity."""

    user_id: str = Field(..., description="Uploader user ID")
    username: str | None = Field(None, description="Username")
    display_name: str | None = Field(None, description="Display name")
    avatar_url: str | None = Field(None, description="Avatar URL")


class ContentItemInfo(BaseModel):
    """One gallery item."""

    id: str = Field(..., description="Content ID")
    kind: str = Field(..., description="Content kind")
    title: str = Field(..., description="Title, or the kind's placeholder")
    category: str = Field(..., description="Category")
    tags: list[str] = Field(default_factory=list, description="Normalized tags, sorted")
    image_url: str | None = Field(None, description="Image URL (single-image kinds)")
    pfp_url: str | None = Field(None, description="Profile picture URL (pairs)")
    banner_url: str | None = Field(None, description="Banner URL (pairs)")
    color: str | None = Field(None, description="Color label")
    download_count: int = Field(default=0, description="Download counter")
    is_animated: bool = Field(default=False, description="Whether the media is an animated format")
    owner: IdentityInfo | None = Field(None, description="Resolved uploader")
    owner_name: str = Field(..., description="Name shown for the uploader")
    is_favorite: bool | None = Field(
        None,
        description="Favorite flag, only present for signed-in users",
    )
    created_at: datetime | None = Field(None, description="Upload timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")


# ============ Gallery Page Schemas ============


class GalleryFacets(BaseModel):
    """Filter options available in the loaded gallery."""

    tags: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


class GalleryFilters(BaseModel):
    """Filters applied to a gallery page."""

    search: str = ""
    tags: list[str] = Field(default_factory=list)
    color: str = "all"
    category: str = "all"
    animated: bool = False
    sort: str = "newest"


class GalleryPageResponse(BaseModel):
    """Response for one gallery page."""

    kind: str = Field(..., description="Content kind")
    items: list[ContentItemInfo] = Field(default_factory=list)
    page: int = Field(..., description="Current page (1-indexed, clamped)")
    page_count: int = Field(..., description="Number of pages, at least 1")
    page_size: int = Field(..., description="Items per page")
    total: int = Field(..., description="Number of items matching the filters")
    filters: GalleryFilters
    facets: GalleryFacets


# ============ Action Schemas ============


class FavoriteToggleResponse(BaseModel):
    """Response for toggling a favorite."""

    content_id: str
    kind: str
    is_favorite: bool = Field(..., description="Membership after the toggle resolved")


class DownloadedFileInfo(BaseModel):
    """One fetched media file."""

    url: str
    filename: str
    saved: bool
    error: str | None = None


class DownloadResponse(BaseModel):
    """Response for a download."""

    content_id: str
    kind: str
    download_count: int = Field(..., description="Counter after the optimistic increment")
    persisted: bool = Field(..., description="Whether the durable counter was updated")
    files: list[DownloadedFileInfo] = Field(default_factory=list)
