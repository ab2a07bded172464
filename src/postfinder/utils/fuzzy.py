"""Approximate string matching with the Bitap algorithm.

Scores range from 0 (exact) to 1 (no match). A candidate found with ``e``
errors at position ``p`` scores ``e / len(pattern) + |location - p| /
distance``, so matches far from ``location`` need fewer errors to stay
under the threshold. Patterns longer than :data:`MAX_BITS` characters are
matched in chunks and the chunk scores averaged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

MAX_BITS = 32
MIN_SCORE = 0.001


@dataclass(frozen=True, slots=True)
class Match:
    is_match: bool
    score: float


NO_MATCH = Match(is_match=False, score=1.0)


def _alphabet(pattern: str) -> Dict[str, int]:
    mask: Dict[str, int] = {}
    length = len(pattern)
    for index, char in enumerate(pattern):
        mask[char] = mask.get(char, 0) | (1 << (length - index - 1))
    return mask


def _score(
    pattern_len: int,
    *,
    errors: int = 0,
    current_location: int = 0,
    expected_location: int = 0,
    distance: int = 100,
) -> float:
    accuracy = errors / pattern_len
    proximity = abs(expected_location - current_location)
    if not distance:
        return 1.0 if proximity else accuracy
    return accuracy + proximity / distance


def bitap_search(
    text: str,
    pattern: str,
    *,
    threshold: float = 0.3,
    location: int = 0,
    distance: int = 100,
) -> Match:
    """Search ``text`` for ``pattern`` (at most :data:`MAX_BITS` long).

    Both arguments must already be lowercased.
    """
    pattern_len = len(pattern)
    if pattern_len == 0:
        return NO_MATCH
    if pattern_len > MAX_BITS:
        raise ValueError(f"Pattern length exceeds max of {MAX_BITS}")

    alphabet = _alphabet(pattern)
    text_len = len(text)
    expected_location = max(0, min(location, text_len))
    current_threshold = threshold

    # Exact occurrences tighten the threshold before the fuzzy pass.
    best_location = expected_location
    index = text.find(pattern, best_location)
    while index > -1:
        score = _score(
            pattern_len,
            current_location=index,
            expected_location=expected_location,
            distance=distance,
        )
        current_threshold = min(score, current_threshold)
        best_location = index + pattern_len
        index = text.find(pattern, best_location)

    best_location = -1
    last_bits: List[int] = []
    final_score = 1.0
    bin_max = pattern_len + text_len
    mask = 1 << (pattern_len - 1)

    for errors in range(pattern_len):
        # Binary search for how far from expected_location we can stray
        # at this error level.
        bin_min = 0
        bin_mid = bin_max
        while bin_min < bin_mid:
            score = _score(
                pattern_len,
                errors=errors,
                current_location=expected_location + bin_mid,
                expected_location=expected_location,
                distance=distance,
            )
            if score <= current_threshold:
                bin_min = bin_mid
            else:
                bin_max = bin_mid
            bin_mid = (bin_max - bin_min) // 2 + bin_min

        bin_max = bin_mid
        start = max(1, expected_location - bin_mid + 1)
        finish = min(expected_location + bin_mid, text_len) + pattern_len

        bits = [0] * (finish + 2)
        bits[finish + 1] = (1 << errors) - 1

        j = finish
        while j >= start:
            current_location = j - 1
            char_match = alphabet.get(text[current_location], 0) if current_location < text_len else 0
            bits[j] = ((bits[j + 1] << 1) | 1) & char_match

            if errors:
                previous = last_bits[j + 1] if j + 1 < len(last_bits) else 0
                current = last_bits[j] if j < len(last_bits) else 0
                bits[j] |= ((previous | current) << 1) | 1 | previous

            if bits[j] & mask:
                final_score = _score(
                    pattern_len,
                    errors=errors,
                    current_location=current_location,
                    expected_location=expected_location,
                    distance=distance,
                )
                if final_score <= current_threshold:
                    current_threshold = final_score
                    best_location = current_location
                    if best_location <= expected_location:
                        break
                    start = max(1, 2 * expected_location - best_location)
            j -= 1

        score = _score(
            pattern_len,
            errors=errors + 1,
            current_location=expected_location,
            expected_location=expected_location,
            distance=distance,
        )
        if score > current_threshold:
            break
        last_bits = bits

    return Match(is_match=best_location >= 0, score=max(MIN_SCORE, final_score))


def _chunks(pattern: str) -> List[tuple[str, int]]:
    if len(pattern) <= MAX_BITS:
        return [(pattern, 0)]
    chunks = []
    remainder = len(pattern) % MAX_BITS
    end = len(pattern) - remainder
    for start in range(0, end, MAX_BITS):
        chunks.append((pattern[start : start + MAX_BITS], start))
    if remainder:
        start = len(pattern) - MAX_BITS
        chunks.append((pattern[start:], start))
    return chunks


def similarity(
    pattern: str,
    text: str,
    *,
    threshold: float = 0.3,
    location: int = 0,
    distance: int = 100,
) -> Match:
    """Case-insensitive fuzzy match of ``pattern`` against ``text``."""
    pattern = pattern.lower()
    text = text.lower()
    if not pattern:
        return NO_MATCH
    if pattern == text:
        return Match(is_match=True, score=0.0)

    matched = False
    total = 0.0
    chunks = _chunks(pattern)
    for chunk, start in chunks:
        result = bitap_search(
            text,
            chunk,
            threshold=threshold,
            location=location + start,
            distance=distance,
        )
        matched = matched or result.is_match
        total += result.score

    if not matched:
        return NO_MATCH
    return Match(is_match=True, score=total / len(chunks))
