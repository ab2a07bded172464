"""Filtered, paginated article listings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from postfinder.models import DocumentRecord
from postfinder.pagination import PageToken, has_multiple_pages, page_window

ITEMS_PER_PAGE = 8
HOME_SLUG = "index"
RECOMMENDED_COUNT = 3


@dataclass(frozen=True, slots=True)
class ArticlePage:
    items: tuple[DocumentRecord, ...]
    total: int
    page: int
    per_page: int
    window: tuple[PageToken, ...]

    @property
    def has_multiple_pages(self) -> bool:
        return has_multiple_pages(self.window)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "articles": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "pages": list(self.window),
            "has_multiple_pages": self.has_multiple_pages,
        }


def parse_page(raw: Any) -> int:
    """Page number from a query parameter; anything invalid means page 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def filter_articles(
    records: Sequence[DocumentRecord],
    *,
    folder: str | None = None,
    tag: str | None = None,
) -> List[DocumentRecord]:
    articles = [record for record in records if record.slug != HOME_SLUG]
    if folder:
        articles = [record for record in articles if record.folder == folder]
    if tag:
        articles = [record for record in articles if tag in record.tags]
    return articles


def select_articles(
    records: Sequence[DocumentRecord],
    *,
    folder: str | None = None,
    tag: str | None = None,
    page: Any = 1,
    per_page: int = ITEMS_PER_PAGE,
    visible_range: int = 2,
) -> ArticlePage:
    """One page of articles matching ``folder`` and ``tag``."""
    current = parse_page(page)
    articles = filter_articles(records, folder=folder, tag=tag)
    start = (current - 1) * per_page
    window = page_window(len(articles), per_page, current, visible_range)
    return ArticlePage(
        items=tuple(articles[start : start + per_page]),
        total=len(articles),
        page=current,
        per_page=per_page,
        window=tuple(window),
    )


def find_article(records: Sequence[DocumentRecord], slug: str) -> DocumentRecord | None:
    """The record whose slug is exactly ``slug``, if any."""
    for record in records:
        if record.slug == slug:
            return record
    return None


def recommend(
    records: Sequence[DocumentRecord],
    pinned: Sequence[str] = (),
    count: int = RECOMMENDED_COUNT,
) -> List[DocumentRecord]:
    """Pinned posts first, then the most recently updated ones.

    Pinned slugs missing from ``records`` are ignored. The home page is never
    recommended and no post appears twice.
    """
    if count < 1:
        return []

    chosen: List[DocumentRecord] = []
    for slug in pinned:
        record = find_article(records, slug)
        if record is not None and record not in chosen:
            chosen.append(record)
        if len(chosen) == count:
            return chosen

    used = {record.slug for record in chosen} | {HOME_SLUG}
    latest = sorted(records, key=lambda record: record.updated_at, reverse=True)
    for record in latest:
        if len(chosen) == count:
            break
        if record.slug not in used:
            chosen.append(record)
            used.add(record.slug)
    return chosen
