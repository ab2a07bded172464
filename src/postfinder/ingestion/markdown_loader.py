"""Markdown loading and front-matter parsing.

Posts may start with a YAML block fenced by ``---`` lines::

    ---
    title: Building a blog
    tags: [python, web]
    ---
    Body text...

Uses PyYAML's safe loader, so tags and other values never construct
arbitrary Python objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from postfinder.errors import FrontMatterError
from postfinder.models import DocumentRecord, FrontMatter
from postfinder.utils.files import file_timestamps, folder_for, slug_for

DELIMITER = "---"
BOM = "\ufeff"


@dataclass(slots=True)
class ParsedPost:
    front_matter: FrontMatter
    body: str
    error: FrontMatterError | None = None


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split raw text into ``(front_matter_block, body)``.

    Returns ``None`` for the block when the text has no closed block at the
    very top; the whole text is then the body.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == DELIMITER:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return block, body

    return None, text


def parse_front_matter(block: str, path: Path) -> FrontMatter:
    """Parse a YAML block into a :class:`FrontMatter`.

    Raises:
        FrontMatterError: the block is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontMatterError(path, str(exc).replace("\n", " ")) from exc

    if data is None:
        return FrontMatter()
    if not isinstance(data, dict):
        raise FrontMatterError(path, f"expected a mapping, got {type(data).__name__}")
    return FrontMatter.from_mapping(data)


def parse_post(text: str, path: Path) -> ParsedPost:
    """Parse a post, substituting empty metadata when the block is invalid."""
    block, body = split_front_matter(text)
    if block is None:
        return ParsedPost(front_matter=FrontMatter(), body=body)

    try:
        front_matter = parse_front_matter(block, path)
    except FrontMatterError as exc:
        return ParsedPost(front_matter=FrontMatter(), body=body, error=exc)
    return ParsedPost(front_matter=front_matter, body=body)


def load_post(path: Path, root: Path) -> tuple[DocumentRecord, FrontMatterError | None]:
    """Read one markdown file into a record.

    Bytes that are not valid UTF-8 become U+FFFD. I/O errors propagate; a
    front-matter error is returned next to the record so the caller can
    report it.
    """
    text = path.read_bytes().decode("utf-8", errors="replace")
    stat = path.stat()
    parsed = parse_post(text, path)
    slug = slug_for(path, root)
    created_at, updated_at = file_timestamps(stat)

    record = DocumentRecord(
        slug=slug,
        folder=folder_for(slug),
        title=parsed.front_matter.title,
        summary=parsed.front_matter.summary,
        tags=parsed.front_matter.tags,
        content=parsed.body,
        created_at=created_at,
        updated_at=updated_at,
    )
    return record, parsed.error
