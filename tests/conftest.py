"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import pytest


def render_post(title: str | None = None, body: str = "", *, summary: str | None = None, tags: Iterable[str] | None = None) -> str:
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if summary is not None:
        lines.append(f"summary: {summary}")
    if tags is not None:
        lines.append("tags: [" + ", ".join(tags) + "]")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def write_post(content_dir: Path) -> Callable[..., Path]:
    """Write a markdown post under the content directory."""

    def _write(relative: str, title: str | None = None, body: str = "", **meta) -> Path:
        path = content_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_post(title, body, **meta), encoding="utf-8")
        return path

    return _write
