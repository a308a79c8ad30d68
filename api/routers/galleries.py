"""
Gallery router: browsing, favorites and downloads for every content kind.

Endpoints:
- GET /api/galleries/{kind} - Filtered, sorted, paged gallery
- POST /api/galleries/{kind}/{content_id}/favorite - Toggle favorite
- POST /api/galleries/{kind}/{content_id}/download - Download and count
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.dependencies import (
    get_data_store,
    get_gallery_config,
    get_local_store,
    get_media_downloader,
)
from api.schemas.gallery import (
    ContentItemInfo,
    DownloadedFileInfo,
    DownloadResponse,
    FavoriteToggleResponse,
    GalleryFacets,
    GalleryFilters,
    GalleryPageResponse,
    IdentityInfo,
)
from core.security import get_current_user_id, require_current_user_id
from services.content_models import ContentItem, ContentKind
from services.content_repository import ContentRepository
from services.data_store import DataStore, LocalStore
from services.download_counter import DownloadCounter, MediaDownloader
from services.favorites_store import FavoritesStore
from services.gallery_filter import ALL, SortOrder, is_animated_url
from services.gallery_session import GalleryConfig, GallerySession, SessionStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/galleries", tags=["galleries"])


# ============ Helpers ============


def content_item_to_info(item: ContentItem, is_favorite: bool | None = None) -> ContentItemInfo:
    """Convert a content item to response model."""
    owner = None
    if item.owner:
        owner = IdentityInfo(
            user_id=item.owner.user_id,
            username=item.owner.username,
            display_name=item.owner.display_name,
            avatar_url=item.owner.avatar_url,
        )

    return ContentItemInfo(
        id=item.id,
        kind=item.kind.value,
        title=item.title,
        category=item.category,
        tags=sorted(item.tags),
        image_url=item.image_url,
        pfp_url=item.pfp_url,
        banner_url=item.banner_url,
        color=item.color,
        download_count=item.download_count,
        is_animated=is_animated_url(item.primary_media_url),
        owner=owner,
        owner_name=item.owner_name,
        is_favorite=is_favorite,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


async def open_session(
    kind: ContentKind,
    data_store: DataStore,
    config: GalleryConfig,
    local_store: LocalStore | None = None,
    user_id: str | None = None,
    downloader: MediaDownloader | None = None,
) -> GallerySession:
    """
    Build and load a gallery session for one request.

    Raises:
        ContentFetchError: If the gallery cannot be loaded
    """
    favorites = None
    if user_id and local_store is not None:
        favorites = FavoritesStore(
            data_store,
            local_store,
            user_id,
            kind,
            key_prefix=config.favorites_cache_prefix,
        )

    downloads = DownloadCounter(data_store, downloader, kind) if downloader else None

    session = GallerySession(
        kind,
        ContentRepository(data_store),
        config,
        favorites=favorites,
        downloads=downloads,
    )
    await session.load()
    if session.status == SessionStatus.ERROR:
        raise session.error
    return session


# ============ Endpoints ============


@router.get("/{kind}", response_model=GalleryPageResponse)
async def get_gallery(
    kind: ContentKind,
    search: str = Query("", max_length=200, description="Text search on title, category and tags"),
    tags: list[str] = Query(default=[], description="Tags, any of which must match"),
    color: str = Query(ALL, description="Color filter"),
    category: str = Query(ALL, description="Category filter"),
    animated: bool = Query(False, description="Only animated media"),
    sort: SortOrder = Query(SortOrder.NEWEST, description="Sort order"),
    page: int = Query(1, ge=1, description="Page number"),
    user_id: str | None = Depends(get_current_user_id),
    data_store: DataStore = Depends(get_data_store),
    local_store: LocalStore = Depends(get_local_store),
    config: GalleryConfig = Depends(get_gallery_config),
):
    """Get one page of a gallery with filters applied."""
    session = await open_session(kind, data_store, config, local_store, user_id)

    session.set_sort(sort)
    session.set_filter("search_query", search)
    session.set_filter("selected_tags", tags)
    session.set_filter("selected_color", color)
    session.set_filter("selected_category", category)
    session.set_filter("animated_only", animated)
    session.set_page(page)

    visible = session.get_visible_page()
    state = session.state

    return GalleryPageResponse(
        kind=kind.value,
        items=[
            content_item_to_info(
                item,
                is_favorite=session.is_favorite(item.id) if user_id else None,
            )
            for item in visible.items
        ],
        page=visible.page,
        page_count=visible.page_count,
        page_size=config.page_size,
        total=visible.total,
        filters=GalleryFilters(
            search=state.search_query,
            tags=sorted(state.selected_tags),
            color=state.selected_color,
            category=state.selected_category,
            animated=state.animated_only,
            sort=state.sort_order.value,
        ),
        facets=GalleryFacets(
            tags=session.available_tags(),
            colors=session.available_colors(),
            categories=session.available_categories(),
        ),
    )


@router.post("/{kind}/{content_id}/favorite", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    kind: ContentKind,
    content_id: str,
    user_id: str = Depends(require_current_user_id),
    data_store: DataStore = Depends(get_data_store),
    local_store: LocalStore = Depends(get_local_store),
    config: GalleryConfig = Depends(get_gallery_config),
):
    """Toggle a favorite for the current user."""
    session = await open_session(kind, data_store, config, local_store, user_id)
    is_favorite = await session.toggle_favorite(content_id)

    logger.info(f"User {user_id} {'added' if is_favorite else 'removed'} favorite {kind.value}/{content_id}")

    return FavoriteToggleResponse(
        content_id=content_id,
        kind=kind.value,
        is_favorite=is_favorite,
    )


@router.post("/{kind}/{content_id}/download", response_model=DownloadResponse)
async def download_content(
    kind: ContentKind,
    content_id: str,
    data_store: DataStore = Depends(get_data_store),
    downloader: MediaDownloader = Depends(get_media_downloader),
    config: GalleryConfig = Depends(get_gallery_config),
):
    """Download an item's media and bump its download counter."""
    session = await open_session(kind, data_store, config, downloader=downloader)
    result = await session.download(content_id)

    return DownloadResponse(
        content_id=result.content_id,
        kind=kind.value,
        download_count=result.download_count,
        persisted=result.persisted,
        files=[
            DownloadedFileInfo(
                url=saved.url,
                filename=saved.filename,
                saved=saved.saved,
                error=saved.error,
            )
            for saved in result.files
        ],
    )
