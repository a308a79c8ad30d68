"""
Page slicing for gallery result lists.

``paginate`` does not clamp out-of-range pages; callers clamp with
``clamp_page`` first so paginate stays a plain slice.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results."""

    items: list[T]
    page: int
    page_count: int
    total: int


def page_count(total: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    """Number of pages, never less than 1."""
    return max(1, math.ceil(total / page_size))


def clamp_page(page: int, count: int) -> int:
    """Clamp a 1-indexed page number into ``[1, count]``."""
    return min(max(1, page), max(1, count))


def paginate(items: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """Slice ``items[(page-1)*size : page*size]``."""
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_count=page_count(len(items), page_size),
        total=len(items),
    )
