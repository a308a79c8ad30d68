"""
Client-side filter and sort pipeline for gallery screens.

Every function here is pure: re-running it on each keystroke never
accumulates state, and filters only ever narrow the input.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from .content_models import ContentItem, normalize_tag

ALL = "all"
ANIMATED_EXTENSIONS = (".gif", ".apng")


class SortOrder(str, Enum):
    """Gallery sort orders."""

    NEWEST = "newest"
    POPULAR = "popular"
    TITLE = "title"
    NONE = "none"


@dataclass(frozen=True)
class FilterState:
    """Filter selections of a gallery screen. Defaults match everything."""

    search_query: str = ""
    selected_tags: frozenset[str] = field(default_factory=frozenset)
    selected_color: str = ALL
    selected_category: str = ALL
    animated_only: bool = False

    def __post_init__(self):
        tags = frozenset(
            tag for tag in (normalize_tag(t) for t in self.selected_tags) if tag
        )
        object.__setattr__(self, "selected_tags", tags)
        object.__setattr__(self, "search_query", (self.search_query or "").strip())
        object.__setattr__(self, "selected_color", self.selected_color or ALL)
        object.__setattr__(self, "selected_category", self.selected_category or ALL)

    @property
    def is_empty(self) -> bool:
        """True if no filter narrows the result."""
        return self == FilterState()


# ============ Predicates ============


def matches_text(item: ContentItem, query: str) -> bool:
    """Case-insensitive substring match on title, category or any tag."""
    if not query:
        return True
    needle = query.lower()
    return (
        needle in item.title.lower()
        or needle in item.category.lower()
        or any(needle in tag for tag in item.tags)
    )


def matches_tags(item: ContentItem, selected_tags: frozenset[str]) -> bool:
    """True if nothing is selected or the item carries any selected tag."""
    return not selected_tags or not selected_tags.isdisjoint(item.tags)


def matches_color(item: ContentItem, selected_color: str) -> bool:
    return selected_color == ALL or item.color == selected_color


def matches_category(item: ContentItem, selected_category: str) -> bool:
    return selected_category == ALL or item.category == selected_category


def is_animated_url(url: str | None) -> bool:
    """Animated formats are recognized by the suffix of the URL path."""
    if not url:
        return False
    path = urlsplit(url).path.lower()
    return path.endswith(ANIMATED_EXTENSIONS)


def matches_animated(item: ContentItem, animated_only: bool) -> bool:
    return not animated_only or is_animated_url(item.primary_media_url)


def matches(item: ContentItem, state: FilterState) -> bool:
    """All criteria, AND-combined."""
    return (
        matches_text(item, state.search_query)
        and matches_tags(item, state.selected_tags)
        and matches_color(item, state.selected_color)
        and matches_category(item, state.selected_category)
        and matches_animated(item, state.animated_only)
    )


def filter_items(items: Iterable[ContentItem], state: FilterState) -> list[ContentItem]:
    """Items matching every active filter, in input order."""
    return [item for item in items if matches(item, state)]


# ============ Sorting ============


def sort_items(items: Sequence[ContentItem], order: SortOrder) -> list[ContentItem]:
    """Stable sort by a single field."""
    order = SortOrder(order)
    if order == SortOrder.NEWEST:
        # Items without a timestamp sort after dated ones.
        dated = [item for item in items if item.updated_at is not None]
        undated = [item for item in items if item.updated_at is None]
        return sorted(dated, key=lambda item: item.updated_at, reverse=True) + undated
    if order == SortOrder.POPULAR:
        return sorted(items, key=lambda item: item.download_count, reverse=True)
    if order == SortOrder.TITLE:
        return sorted(items, key=lambda item: item.title.casefold())
    return list(items)


# ============ Facets ============


def available_tags(items: Iterable[ContentItem]) -> list[str]:
    """Sorted distinct tags across items."""
    return sorted({tag for item in items for tag in item.tags})


def available_colors(items: Iterable[ContentItem]) -> list[str]:
    """Sorted distinct colors across items."""
    return sorted({item.color for item in items if item.color})


def available_categories(items: Iterable[ContentItem]) -> list[str]:
    """Sorted distinct categories across items."""
    return sorted({item.category for item in items})
