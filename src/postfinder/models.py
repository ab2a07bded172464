"""Core PostFinder data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping


def _text_field(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return ""
    return str(value)


def _tags_field(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value if tag is not None]


@dataclass(frozen=True, slots=True)
class FrontMatter:
    """Metadata block at the top of a markdown post.

    Only ``title``, ``summary`` and ``tags`` are kept; every other key in
    the block is ignored.
    """

    title: str = ""
    summary: str = ""
    tags: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FrontMatter":
        return cls(
            title=_text_field(data.get("title")),
            summary=_text_field(data.get("summary")),
            tags=tuple(_tags_field(data.get("tags"))),
        )


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """One indexed markdown post."""

    slug: str
    folder: str
    title: str
    summary: str
    tags: tuple[str, ...]
    content: str
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "tags": list(self.tags),
            "slug": self.slug,
            "folder": self.folder,
            "content": self.content,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentRecord":
        return cls(
            slug=str(data["slug"]),
            folder=str(data.get("folder", "")),
            title=_text_field(data.get("title")),
            summary=_text_field(data.get("summary")),
            tags=tuple(_tags_field(data.get("tags"))),
            content=_text_field(data.get("content")),
            created_at=str(data.get("createdAt", "")),
            updated_at=str(data.get("updatedAt", "")),
        )


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A ranked search hit with a preview snippet."""

    id: str
    title: str
    snippet: str
    score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "surrounding_text": self.snippet,
            "score": self.score,
        }
