"""
Gallery session: the state behind one gallery screen.

One session class serves every content kind; per-kind differences live in
KindProfile. The working set is fetched once per load and everything the
screen shows (filtered, sorted, paged) is recomputed from it after each
state change.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from core.config import Settings, get_settings
from core.exceptions import (
    AuthenticationError,
    ContentFetchError,
    ContentNotFoundError,
    ValidationError,
)

from .content_models import ContentItem, ContentKind
from .content_repository import ContentRepository
from .data_store import ContentQuery
from .download_counter import DownloadCounter, DownloadResult
from .favorites_store import FavoritesStore
from .gallery_filter import (
    FilterState,
    SortOrder,
    available_categories,
    available_colors,
    available_tags,
    filter_items,
    sort_items,
)
from .pagination import DEFAULT_PAGE_SIZE, Page, clamp_page, page_count, paginate

logger = logging.getLogger(__name__)

FILTER_FIELDS = frozenset(
    {"search_query", "selected_tags", "selected_color", "selected_category", "animated_only"}
)


class SessionStatus(str, Enum):
    """Loading status of a session."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ViewMode(str, Enum):
    """Gallery layouts."""

    GRID = "grid"
    LIST = "list"


@dataclass(frozen=True)
class GalleryConfig:
    """Explicit per-session configuration."""

    page_size: int = DEFAULT_PAGE_SIZE
    favorites_cache_prefix: str = "favorites"

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be positive")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GalleryConfig":
        settings = settings or get_settings()
        return cls(
            page_size=settings.gallery_page_size,
            favorites_cache_prefix=settings.favorites_cache_prefix,
        )


@dataclass(frozen=True)
class GallerySessionState:
    """Screen state. Changing any filter resets ``page`` to 1."""

    filters: FilterState = field(default_factory=FilterState)
    view_mode: ViewMode = ViewMode.GRID
    sort_order: SortOrder = SortOrder.NEWEST
    page: int = 1

    @property
    def search_query(self) -> str:
        return self.filters.search_query

    @property
    def selected_tags(self) -> frozenset[str]:
        return self.filters.selected_tags

    @property
    def selected_color(self) -> str:
        return self.filters.selected_color

    @property
    def selected_category(self) -> str:
        return self.filters.selected_category

    @property
    def animated_only(self) -> bool:
        return self.filters.animated_only


class GallerySession:
    """
    State and actions of one gallery screen for one content kind.

    Favorites and downloads are optional collaborators: a session without
    a FavoritesStore belongs to a signed-out visitor.
    """

    def __init__(
        self,
        kind: ContentKind,
        content_repository: ContentRepository,
        config: GalleryConfig | None = None,
        favorites: FavoritesStore | None = None,
        downloads: DownloadCounter | None = None,
        sort_order: SortOrder = SortOrder.NEWEST,
    ):
        self.kind = ContentKind(kind)
        self.config = config or GalleryConfig()
        self._repository = content_repository
        self._favorites = favorites
        self._downloads = downloads

        self._state = GallerySessionState(sort_order=SortOrder(sort_order))
        self._items: list[ContentItem] = []
        self._visible: list[ContentItem] = []
        self._status = SessionStatus.IDLE
        self._error: ContentFetchError | None = None

    # ============ Read-only state ============

    @property
    def state(self) -> GallerySessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def error(self) -> ContentFetchError | None:
        """Last fetch failure, cleared by a successful reload."""
        return self._error

    @property
    def items(self) -> list[ContentItem]:
        """Working set, unfiltered."""
        return list(self._items)

    # ============ Loading ============

    async def load(self) -> SessionStatus:
        """
        Fetch the working set and rehydrate favorites.

        A fetch failure leaves the session in the error state with an empty
        working set; call ``reload()`` to retry.
        """
        self._status = SessionStatus.LOADING
        self._error = None

        try:
            items = await self._repository.fetch(
                self.kind,
                ContentQuery(order_by="updated_at", descending=True),
            )
        except ContentFetchError as e:
            logger.error(f"Gallery {self.kind.value} failed to load: {e.message}")
            self._items = []
            self._error = e
            self._status = SessionStatus.ERROR
            self._recompute()
            return self._status

        if self._favorites is not None:
            await self._favorites.load()

        self._items = items
        self._status = SessionStatus.READY
        self._recompute()
        logger.debug(f"Gallery {self.kind.value} loaded {len(items)} items")
        return self._status

    async def reload(self) -> SessionStatus:
        return await self.load()

    # ============ State changes ============

    def set_filter(self, name: str, value: Any) -> GallerySessionState:
        """Set one filter field and go back to page 1."""
        if name not in FILTER_FIELDS:
            raise ValidationError(
                message=f"Unknown filter: {name}",
                details={"field": name, "allowed": sorted(FILTER_FIELDS)},
            )
        if name == "selected_tags":
            if isinstance(value, str):
                value = [value]
            value = frozenset(value or ())
        elif name == "animated_only":
            value = bool(value)

        filters = replace(self._state.filters, **{name: value})
        self._state = replace(self._state, filters=filters, page=1)
        self._recompute()
        return self._state

    def toggle_tag(self, tag: str) -> GallerySessionState:
        """Add or remove one tag from the tag filter."""
        selected = set(self._state.selected_tags)
        normalized = tag.strip().lower()
        if normalized in selected:
            selected.discard(normalized)
        else:
            selected.add(normalized)
        return self.set_filter("selected_tags", selected)

    def clear_filters(self) -> GallerySessionState:
        self._state = replace(self._state, filters=FilterState(), page=1)
        self._recompute()
        return self._state

    def set_sort(self, order: SortOrder | str) -> GallerySessionState:
        self._state = replace(self._state, sort_order=SortOrder(order))
        self._recompute()
        return self._state

    def set_view_mode(self, mode: ViewMode | str) -> GallerySessionState:
        self._state = replace(self._state, view_mode=ViewMode(mode))
        return self._state

    def set_page(self, page: int) -> int:
        """Move to a page, clamped into the valid range. Returns the page set."""
        clamped = clamp_page(page, self.get_page_count())
        self._state = replace(self._state, page=clamped)
        return clamped

    # ============ Views ============

    def get_page_count(self) -> int:
        return page_count(len(self._visible), self.config.page_size)

    def get_visible_page(self) -> Page[ContentItem]:
        return paginate(self._visible, self._state.page, self.config.page_size)

    def available_tags(self) -> list[str]:
        return available_tags(self._items)

    def available_colors(self) -> list[str]:
        return available_colors(self._items)

    def available_categories(self) -> list[str]:
        return available_categories(self._items)

    def is_favorite(self, content_id: str) -> bool:
        return self._favorites is not None and self._favorites.is_favorite(content_id)

    def get_item(self, content_id: str) -> ContentItem:
        """
        Look up an item of the working set.

        Raises:
            ContentNotFoundError: If the id is not loaded
        """
        for item in self._items:
            if item.id == content_id:
                return item
        raise ContentNotFoundError(
            message=f"No {self.kind.value} with id {content_id}",
            details={"kind": self.kind.value, "content_id": content_id},
        )

    # ============ Actions ============

    async def toggle_favorite(self, content_id: str) -> bool:
        """
        Toggle a favorite.

        Returns:
            Membership after the durable write resolved

        Raises:
            AuthenticationError: If the session has no signed-in user
            ContentNotFoundError: If the id is not loaded
        """
        if self._favorites is None:
            raise AuthenticationError(message="Sign in to save favorites")
        self.get_item(content_id)
        return await self._favorites.toggle(content_id)

    async def download(self, content_id: str) -> DownloadResult:
        """
        Download an item and bump its counter.

        Raises:
            ContentNotFoundError: If the id is not loaded
            ValidationError: If the session has no downloader
        """
        item = self.get_item(content_id)
        if self._downloads is None:
            raise ValidationError(message="Downloads are not available in this session")

        result = await self._downloads.record_download(item)
        if self._state.sort_order == SortOrder.POPULAR:
            self._recompute()
        return result

    def _recompute(self) -> None:
        filtered = filter_items(self._items, self._state.filters)
        self._visible = sort_items(filtered, self._state.sort_order)
        page = clamp_page(self._state.page, self.get_page_count())
        if page != self._state.page:
            self._state = replace(self._state, page=page)
