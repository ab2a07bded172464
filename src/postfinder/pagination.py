"""Page-number windows with ellipsis collapsing for paginated lists."""

from __future__ import annotations

import math
from typing import List, Literal, Sequence, Union

ELLIPSIS: Literal["ellipsis"] = "ellipsis"

PageToken = Union[int, Literal["ellipsis"]]


def total_pages(total_items: int, items_per_page: int) -> int:
    if items_per_page < 1:
        raise ValueError(f"items_per_page must be positive, got {items_per_page}")
    return math.ceil(max(total_items, 0) / items_per_page)


def page_window(
    total_items: int,
    items_per_page: int,
    current_page: int,
    visible_range: int = 2,
) -> List[PageToken]:
    """Page links to render around ``current_page``.

    The first and last pages are always reachable; runs of hidden pages
    between them and the window collapse into a single :data:`ELLIPSIS`.
    For 20 pages with ``current_page=6`` this yields
    ``[1, ELLIPSIS, 4, 5, 6, 7, 8, ELLIPSIS, 20]``. Out-of-range pages
    never raise and never produce out-of-range tokens.
    """
    pages_total = total_pages(total_items, items_per_page)
    pages: List[PageToken] = []

    if current_page > visible_range + 1:
        pages.extend([1, ELLIPSIS])
    else:
        pages.extend(range(1, min(current_page, visible_range + 1)))

    first = max(1, current_page - visible_range)
    last = min(pages_total, current_page + visible_range)
    for page in range(first, last + 1):
        if page not in pages:
            pages.append(page)

    if current_page < pages_total - visible_range:
        pages.extend([ELLIPSIS, pages_total])
    else:
        for page in range(current_page + 1, pages_total + 1):
            if page not in pages:
                pages.append(page)

    return pages


def has_multiple_pages(window: Sequence[PageToken]) -> bool:
    """Whether a paginator should be shown at all."""
    return len(window) > 1


def format_window(window: Sequence[PageToken], current_page: int | None = None) -> str:
    """Render a window as text, e.g. ``1 … 4 5 [6] 7 8 … 20``."""
    parts = []
    for token in window:
        if token == ELLIPSIS:
            parts.append("…")
        elif token == current_page:
            parts.append(f"[{token}]")
        else:
            parts.append(str(token))
    return " ".join(parts)
