"""Typo-tolerant name matching for the local folder search."""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from rapidfuzz import fuzz

T = TypeVar("T")

# Minimum partial_ratio score (0-100) for a name to count as a match
DEFAULT_THRESHOLD = 60


def fuzzy_score(query: str, text: str) -> float:
    """Best-aligned substring similarity of *query* inside *text*."""
    if not query or not text:
        return 0.0
    return fuzz.partial_ratio(query.lower(), text.lower())


def fuzzy_filter(
    query: str,
    items: Sequence[T],
    key: Callable[[T], str],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[T]:
    """Return the items whose key matches *query*, best first.

    Ties keep their input order.
    """
    if not query:
        return list(items)
    scored = []
    for item in items:
        score = fuzzy_score(query, key(item))
        if score >= threshold:
            scored.append((score, item))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in scored]
