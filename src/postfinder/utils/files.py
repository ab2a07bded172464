"""Utility helpers for working with files."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, Optional

MARKDOWN_SUFFIX = ".md"


def is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() == MARKDOWN_SUFFIX


def iter_markdown_paths(
    root: Path,
    on_error: Optional[Callable[[OSError], None]] = None,
) -> Iterator[Path]:
    """Yield markdown files under ``root`` in sorted order, skipping hidden paths.

    An unreadable ``root`` raises :class:`OSError`. Errors on subdirectories
    go to ``on_error`` when given and are raised otherwise.
    """
    root = Path(root)

    def _walk_error(exc: OSError) -> None:
        if on_error is None or exc.filename is None or Path(exc.filename) == root:
            raise exc
        on_error(exc)

    candidates = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_walk_error):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        current = Path(dirpath)
        for name in filenames:
            path = current / name
            if not name.startswith(".") and is_markdown(path):
                candidates.append(path)

    candidates.sort(key=lambda child: child.relative_to(root).as_posix())
    for path in candidates:
        if path.is_file():
            yield path


def slug_for(path: Path, root: Path) -> str:
    """Path relative to ``root`` without its suffix, always ``/``-separated."""
    relative = PurePosixPath(path.relative_to(root).as_posix())
    return str(relative.with_suffix(""))


def folder_for(slug: str) -> str:
    return str(PurePosixPath(slug).parent)


def format_timestamp(timestamp: float) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_timestamps(stat: os.stat_result) -> tuple[str, str]:
    """Return ``(created, updated)`` for a stat result."""
    # st_birthtime is only reported on some platforms.
    created = getattr(stat, "st_birthtime", None) or stat.st_ctime
    return format_timestamp(created), format_timestamp(stat.st_mtime)


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
