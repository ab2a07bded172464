"""JSON search-index artifact and freshness marker."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import List, Sequence

from postfinder.errors import IndexIOError
from postfinder.models import DocumentRecord
from postfinder.utils.files import atomic_write_text, format_timestamp

LOGGER = logging.getLogger(__name__)


def serialize_records(records: Sequence[DocumentRecord]) -> str:
    """Render records the way the artifact stores them."""
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def write_artifact(path: Path, records: Sequence[DocumentRecord]) -> None:
    """Atomically replace the artifact at ``path``."""
    payload = serialize_records(records)
    try:
        atomic_write_text(path, payload)
    except OSError as exc:
        raise IndexIOError(f"Cannot write search index {path}: {exc}", path) from exc
    LOGGER.debug("Wrote %d records to %s", len(records), path)


def read_artifact(path: Path) -> List[DocumentRecord]:
    """Load all records from the artifact at ``path``."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise IndexIOError(f"Cannot read search index {path}: {exc}", path) from exc

    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("top-level value is not a list")
        return [DocumentRecord.from_dict(item) for item in data]
    except (ValueError, KeyError, TypeError) as exc:
        raise IndexIOError(f"Corrupt search index {path}: {exc}", path) from exc


def touch_marker(path: Path) -> None:
    """Rewrite the freshness marker so watchers see a change."""
    stamp = format_timestamp(time.time())
    try:
        atomic_write_text(path, f"refreshed at {stamp}\n")
    except OSError as exc:
        raise IndexIOError(f"Cannot write freshness marker {path}: {exc}", path) from exc


def modification_time(path: Path) -> int | None:
    """``st_mtime_ns`` of ``path``, or ``None`` when it does not exist."""
    try:
        return Path(path).stat().st_mtime_ns
    except FileNotFoundError:
        return None
