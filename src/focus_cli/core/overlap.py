"""Half-open interval overlap test."""

from datetime import datetime


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Return True if ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect.

    Intervals that only touch (one ends exactly when the other starts) do
    not overlap.
    """
    return a_start < b_end and b_start < a_end
