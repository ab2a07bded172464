"""Text helpers for sorting, snippets and field norms."""

from __future__ import annotations

import math
import unicodedata


def collation_key(text: str) -> tuple[str, str, str]:
    """Sort key approximating locale-aware comparison.

    Compares base letters case- and accent-insensitively first, then
    accents, then case with lowercase ordered before uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), decomposed.swapcase()


def snippet(text: str, max_chars: int = 100) -> str:
    """Fixed-length prefix of ``text`` used as a result preview."""
    if max_chars <= 0:
        return ""
    return text[:max_chars]


def is_blank(text: str) -> bool:
    return not text.strip()


def field_norm(text: str, mantissa: int = 3) -> float:
    """Length norm ``1 / sqrt(tokens)`` rounded to ``mantissa`` decimals.

    Tokens are runs of non-space characters, so longer fields weigh less.
    """
    tokens = max(len([token for token in text.split(" ") if token]), 1)
    return round(1 / math.sqrt(tokens), mantissa)
