"""Document indexing pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from postfinder.errors import IndexIOError
from postfinder.index.storage import write_artifact
from postfinder.ingestion.markdown_loader import load_post
from postfinder.models import DocumentRecord
from postfinder.utils.files import iter_markdown_paths
from postfinder.utils.text import collation_key

LOGGER = logging.getLogger(__name__)


def _log_unreadable_dir(exc: OSError) -> None:
    LOGGER.error("Cannot read directory %s: %s", exc.filename, exc.strerror or exc)


def find_markdown(root: Path, on_error: Optional[Callable[[OSError], None]] = None) -> list[Path]:
    """Find all markdown posts under ``root``.

    Unreadable subdirectories are passed to ``on_error`` (logged by default)
    and skipped.

    Raises:
        IndexIOError: ``root`` is missing, not a directory or unreadable.
    """
    if not root.is_dir():
        raise IndexIOError(f"Content directory not found: {root}", root)
    try:
        return list(iter_markdown_paths(root, on_error or _log_unreadable_dir))
    except OSError as exc:
        raise IndexIOError(f"Cannot scan content directory {root}: {exc}", root) from exc


def sort_records(records: List[DocumentRecord]) -> List[DocumentRecord]:
    """Order by title; equal titles keep their scan order."""
    return sorted(records, key=lambda record: collation_key(record.title))


@dataclass(slots=True)
class BuildStats:
    indexed: int = 0
    parse_failures: int = 0
    skipped: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)
    output_path: Path | None = None

    def increment(self, status: str, path: Path) -> None:
        if status == "indexed":
            self.indexed += 1
        elif status == "parse_failure":
            self.indexed += 1
            self.parse_failures += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_files.append(path)


def collect_records(content_dir: Path) -> tuple[List[DocumentRecord], BuildStats]:
    """Parse every post under ``content_dir`` and return the sorted records.

    A post with broken front-matter is still indexed with empty metadata; a
    post or folder that cannot be read at all is counted as failed. Neither
    aborts the run.
    """
    stats = BuildStats()

    def _unreadable_dir(exc: OSError) -> None:
        _log_unreadable_dir(exc)
        stats.increment("failed", Path(exc.filename))

    paths = find_markdown(content_dir, _unreadable_dir)
    if not paths:
        LOGGER.warning("No markdown files found in %s", content_dir)

    records: List[DocumentRecord] = []
    seen: dict[str, Path] = {}

    for path in paths:
        try:
            record, error = load_post(path, content_dir)
        except OSError as exc:
            LOGGER.error("Failed to read %s: %s", path, exc)
            stats.increment("failed", path)
            continue

        if record.slug in seen:
            LOGGER.warning("Skipping %s: slug %r already used by %s", path, record.slug, seen[record.slug])
            stats.increment("skipped", path)
            continue
        seen[record.slug] = path

        if error is not None:
            LOGGER.warning("%s; indexing with empty metadata", error)
            stats.increment("parse_failure", path)
        else:
            stats.increment("indexed", path)
        records.append(record)

    return sort_records(records), stats


def build_index(content_dir: Path) -> List[DocumentRecord]:
    """Return the sorted records for ``content_dir`` without writing anything."""
    records, _ = collect_records(Path(content_dir))
    return records


class Indexer:
    """Scans a content tree and writes the search index artifact."""

    def __init__(self, content_dir: Path, output_path: Path) -> None:
        self.content_dir = Path(content_dir)
        self.output_path = Path(output_path)

    def build(self) -> BuildStats:
        """Rebuild the artifact from scratch."""
        records, stats = collect_records(self.content_dir)
        write_artifact(self.output_path, records)
        stats.output_path = self.output_path
        LOGGER.info(
            "Indexed %d documents into %s (%d parse failures, %d skipped, %d failed)",
            stats.indexed,
            self.output_path,
            stats.parse_failures,
            stats.skipped,
            stats.failed,
        )
        return stats
