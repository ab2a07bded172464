"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_BASE_URL = "http://localhost:3000"


def _get_default_base_url() -> str:
    """Site origin used for sitemap URLs."""
    return os.environ.get("POSTFINDER_BASE_URL") or DEFAULT_BASE_URL


def _get_default_pinned_slugs() -> tuple[str, ...]:
    """Comma-separated slugs recommended ahead of the latest posts."""
    raw = os.environ.get("POSTFINDER_PINNED_SLUGS", "")
    return tuple(slug.strip() for slug in raw.split(",") if slug.strip())


@dataclass(slots=True)
class AppConfig:
    content_dir: Path = Path("content")
    output_path: Path = Path("public/search-index.json")
    marker_path: Path = Path("public/.search-index.stamp")
    sitemap_path: Path = Path("public/sitemap.xml")
    base_url: str = field(default_factory=_get_default_base_url)
    snippet_chars: int = 100
    result_limit: int = 10
    threshold: float = 0.3
    items_per_page: int = 8
    visible_range: int = 2
    pinned_slugs: tuple[str, ...] = field(default_factory=_get_default_pinned_slugs)
    recommended_count: int = 3

    @staticmethod
    def resolve(path: Path, base_dir: Path | None = None) -> Path:
        if Path(path).is_absolute() or base_dir is None:
            return Path(path)
        return base_dir / path

    def resolve_content_dir(self, base_dir: Path | None = None) -> Path:
        return self.resolve(self.content_dir, base_dir)

    def resolve_output_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve(self.output_path, base_dir)

    def resolve_marker_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve(self.marker_path, base_dir)

    def resolve_sitemap_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve(self.sitemap_path, base_dir)
