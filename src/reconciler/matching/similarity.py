#!/usr/bin/env python3
"""
Similarity Primitives

Pure, stateless comparison functions the candidate scorer combines:

- string_similarity: normalized Levenshtein similarity for names and IDs
- numeric_proximity: relative closeness of two amounts
- date_window_bonus: reward for a transaction that follows its order within
  a grace period, penalty for one that precedes it
- trigram_similarity: coarse trigram overlap used for candidate pre-filtering

None of these raise on odd input; they degrade to "no similarity".
"""

import math
from datetime import date
from typing import Any

from ..core.dates import FinancialDate

DEFAULT_DATE_BONUS = 0.1
DEFAULT_DATE_PENALTY = -0.05


def levenshtein_distance(a: str, b: str) -> int:
    """
    Classic edit distance: insertions, deletions and substitutions cost 1.

    Uses a two-row dynamic programming table, O(len(a) * len(b)) time.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Keep the shorter string as the row to bound memory
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            substitution = previous[j - 1] + (char_a != char_b)
            current.append(min(previous[j] + 1, current[j - 1] + 1, substitution))
        previous = current

    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """
    Normalized string similarity in [0, 1].

    1.0 for a case-insensitive exact match (and for two empty strings),
    0.0 when exactly one side is empty, otherwise
    ``1 - levenshtein(lower(a), lower(b)) / max(len(a), len(b))``.

    Examples:
        string_similarity("John Smith", "JOHN SMITH") -> 1.0
        string_similarity("John Smith", "Jon Smyth") -> 0.8
    """
    a = a or ""
    b = b or ""

    left = a.lower()
    right = b.lower()
    if left == right:
        return 1.0
    if not left or not right:
        return 0.0

    max_length = max(len(left), len(right))
    distance = levenshtein_distance(left, right)
    return max(0.0, min(1.0, 1.0 - distance / max_length))


def numeric_proximity(x: float, y: float) -> float:
    """
    Relative closeness of two numbers in [0, 1].

    1.0 when equal (including both zero), otherwise
    ``max(0, 1 - |x - y| / max(|x|, |y|))``. Opposite signs therefore score 0.
    Non-finite input scores 0.
    """
    try:
        if not (math.isfinite(x) and math.isfinite(y)):
            return 0.0
    except TypeError:
        return 0.0

    if x == y:
        return 1.0

    scale = max(abs(x), abs(y))
    return max(0.0, 1.0 - abs(x - y) / scale)


def _coerce_date(value: Any) -> date | None:
    """Best-effort conversion to a date; None when the value is unusable."""
    if value is None:
        return None
    try:
        return FinancialDate.parse(value).date
    except (ValueError, TypeError, AttributeError):
        return None


def date_window_bonus(
    candidate_date: Any,
    reference_date: Any,
    window_days: int,
    bonus: float = DEFAULT_DATE_BONUS,
    penalty: float = DEFAULT_DATE_PENALTY,
) -> float:
    """
    Score where a candidate date falls relative to a reference date.

    Args:
        candidate_date: Date of the transaction
        reference_date: Date of the order
        window_days: Grace period after the reference date
        bonus: Returned when 0 <= candidate - reference <= window_days
        penalty: Returned when the candidate precedes the reference

    Returns:
        ``bonus``, ``penalty``, or 0.0 when the candidate is past the window
        or either date is missing or malformed.
    """
    candidate = _coerce_date(candidate_date)
    reference = _coerce_date(reference_date)
    if candidate is None or reference is None:
        return 0.0

    delta_days = (candidate - reference).days
    if delta_days < 0:
        return penalty
    if delta_days <= window_days:
        return bonus
    return 0.0


def trigrams(text: str) -> set[str]:
    """
    Trigram set of a string, built the way PostgreSQL's pg_trgm builds it.

    Each lowercased alphanumeric word is padded with two leading spaces and
    one trailing space before slicing into three-character windows.
    """
    words = "".join(ch if ch.isalnum() else " " for ch in (text or "").lower()).split()

    result: set[str] = set()
    for word in words:
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            result.add(padded[i : i + 3])
    return result


def trigram_similarity(a: str, b: str) -> float:
    """Jaccard similarity of the two trigram sets, 0.0 when either is empty."""
    left = trigrams(a)
    right = trigrams(b)
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)
