"""Fuzzy search over the index artifact."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from postfinder.errors import IndexIOError, IndexNotReady
from postfinder.index.storage import modification_time, read_artifact
from postfinder.models import DocumentRecord, SearchResult
from postfinder.utils.fuzzy import similarity
from postfinder.utils.text import field_norm, is_blank, snippet

LOGGER = logging.getLogger(__name__)

SEARCH_KEYS = ("title", "summary", "tags", "content")
MAX_RESULTS = 10


@dataclass(frozen=True, slots=True)
class SearchOptions:
    threshold: float = 0.3
    location: int = 0
    distance: int = 100
    snippet_chars: int = 100


@dataclass(frozen=True, slots=True)
class _FieldValue:
    key: str
    text: str
    norm: float


def _field_values(record: DocumentRecord) -> tuple[_FieldValue, ...]:
    values: List[_FieldValue] = []
    for key in SEARCH_KEYS:
        raw = getattr(record, key)
        items = raw if isinstance(raw, tuple) else (raw,)
        for item in items:
            if is_blank(item):
                continue
            values.append(_FieldValue(key=key, text=item.lower(), norm=field_norm(item)))
    return tuple(values)


class SearchIndex:
    """Immutable fuzzy-match structure over a set of records.

    Every key weighs the same; a record's score is the product of
    ``score ** (weight * norm)`` over every field value that matched.
    """

    def __init__(self, records: Sequence[DocumentRecord], options: SearchOptions | None = None) -> None:
        self.options = options or SearchOptions()
        self._records = tuple(records)
        self._fields = tuple(_field_values(record) for record in self._records)
        self._weight = 1 / len(SEARCH_KEYS)

    @classmethod
    def load(cls, path: Path, options: SearchOptions | None = None) -> "SearchIndex":
        return cls(read_artifact(path), options)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[DocumentRecord, ...]:
        return self._records

    def _score(self, pattern: str, values: Sequence[_FieldValue]) -> float | None:
        total = 1.0
        matched = False
        for value in values:
            match = similarity(
                pattern,
                value.text,
                threshold=self.options.threshold,
                location=self.options.location,
                distance=self.options.distance,
            )
            if not match.is_match:
                continue
            matched = True
            base = sys.float_info.epsilon if match.score == 0 else match.score
            total *= base ** (self._weight * value.norm)
        return total if matched else None

    def query(self, text: str, limit: int = MAX_RESULTS) -> List[SearchResult]:
        """Return at most ``limit`` results, best first."""
        pattern = text.strip()
        if not pattern or limit < 1:
            return []

        pattern = pattern.lower()
        scored: List[tuple[float, int]] = []
        for position, values in enumerate(self._fields):
            score = self._score(pattern, values)
            if score is not None:
                scored.append((score, position))

        scored.sort()
        results: List[SearchResult] = []
        for score, position in scored[:limit]:
            record = self._records[position]
            results.append(
                SearchResult(
                    id=record.slug,
                    title=record.title,
                    snippet=snippet(record.content, self.options.snippet_chars),
                    score=score,
                )
            )
        return results


class SearchService:
    """Owns the active :class:`SearchIndex` and swaps it on reload.

    Readers take a handle with :meth:`current` and keep using it even if a
    reload happens meanwhile.
    """

    def __init__(
        self,
        index_path: Path,
        *,
        marker_path: Path | None = None,
        options: SearchOptions | None = None,
    ) -> None:
        self.index_path = Path(index_path)
        self.marker_path = Path(marker_path) if marker_path is not None else None
        self.options = options or SearchOptions()
        self._lock = threading.Lock()
        self._index: SearchIndex | None = None
        self._loaded_version: tuple[int | None, int | None] | None = None

    def _version(self) -> tuple[int | None, int | None]:
        marker = modification_time(self.marker_path) if self.marker_path else None
        return modification_time(self.index_path), marker

    def reload(self) -> SearchIndex:
        """Load the artifact and make it the active index."""
        version = self._version()
        index = SearchIndex.load(self.index_path, self.options)
        with self._lock:
            self._index = index
            self._loaded_version = version
        LOGGER.info("Loaded search index with %d documents from %s", len(index), self.index_path)
        return index

    def refresh_if_stale(self) -> bool:
        """Reload when the artifact or marker changed; return whether it did."""
        version = self._version()
        with self._lock:
            unchanged = self._index is not None and version == self._loaded_version
        if unchanged or version[0] is None:
            return False
        try:
            self.reload()
        except IndexIOError as exc:
            LOGGER.warning("Keeping previous search index: %s", exc)
            return False
        return True

    @property
    def ready(self) -> bool:
        with self._lock:
            return self._index is not None

    def current(self) -> SearchIndex:
        with self._lock:
            index = self._index
        if index is None:
            raise IndexNotReady(f"No search index loaded from {self.index_path}")
        return index

    def query(self, text: str, limit: int = MAX_RESULTS) -> List[SearchResult]:
        return self.current().query(text, limit)
