"""sitemap.xml generation for the blog."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List
from urllib.parse import quote
from xml.sax.saxutils import escape

from postfinder.errors import IndexIOError
from postfinder.index.indexer import find_markdown
from postfinder.utils.files import atomic_write_text, format_timestamp, slug_for

LOGGER = logging.getLogger(__name__)

STATIC_PATHS = ("/", "/articles")
PRIORITY = "0.80"

_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<urlset
      xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"
      xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
      xsi:schemaLocation="http://www.sitemaps.org/schemas/sitemap/0.9
            http://www.sitemaps.org/schemas/sitemap/0.9/sitemap.xsd">
"""


def sitemap_urls(slugs: Iterable[str], base_url: str) -> List[str]:
    base = base_url.rstrip("/")
    urls = [f"{base}{path}" for path in STATIC_PATHS]
    urls.extend(f"{base}/{quote(slug, safe='/')}" for slug in slugs)
    return urls


def build_sitemap(slugs: Iterable[str], base_url: str, now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    lastmod = format_timestamp(moment.timestamp())
    entries = [
        f"<url>\n  <loc>{escape(url)}</loc>\n  <lastmod>{lastmod}</lastmod>\n"
        f"  <priority>{PRIORITY}</priority>\n</url>"
        for url in sitemap_urls(slugs, base_url)
    ]
    return f"{_HEADER}\n" + "\n".join(entries) + "\n\n</urlset>"


def write_sitemap(content_dir: Path, output_path: Path, base_url: str) -> int:
    """Write the sitemap for every post under ``content_dir``; return the URL count."""
    slugs = [slug_for(path, content_dir) for path in find_markdown(content_dir)]
    xml = build_sitemap(slugs, base_url)
    try:
        atomic_write_text(output_path, xml)
    except OSError as exc:
        raise IndexIOError(f"Cannot write sitemap {output_path}: {exc}", output_path) from exc
    count = len(slugs) + len(STATIC_PATHS)
    LOGGER.info("Wrote %d URLs to %s", count, output_path)
    return count
