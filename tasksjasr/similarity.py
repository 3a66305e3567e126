"""Edit-distance string similarity."""

from __future__ import annotations

from typing import List


def levenshtein_distance(first: str, second: str) -> int:
    """Classic Levenshtein distance with unit costs for insert, delete and substitute."""
    if len(first) < len(second):
        first, second = second, first
    if not second:
        return len(first)

    previous: List[int] = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """Normalized similarity in [0, 1]; two empty strings are identical.

    Callers are expected to normalize case beforehand.
    """
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(first, second)) / longest
