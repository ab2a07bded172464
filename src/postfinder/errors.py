"""Exceptions raised by PostFinder."""

from __future__ import annotations

from pathlib import Path


class PostFinderError(Exception):
    """Base class for PostFinder errors."""


class IndexIOError(PostFinderError):
    """The content tree or the index artifact could not be read or written."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class FrontMatterError(PostFinderError):
    """A post's front-matter block is not a valid YAML mapping."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid front-matter in {path}: {reason}")
        self.path = path
        self.reason = reason


class IndexNotReady(PostFinderError):
    """Raised when searching before any index has been loaded."""
