"""
Half-open time range overlap.
"""

from __future__ import annotations

from datetime import datetime
from typing import NamedTuple, Protocol


class Interval(Protocol):
    """Anything with a `start` and an `end`."""

    @property
    def start(self) -> datetime: ...

    @property
    def end(self) -> datetime: ...


class TimeRange(NamedTuple):
    """Half-open range [start, end)."""

    start: datetime
    end: datetime


def overlaps(existing: Interval, candidate: Interval) -> bool:
    """Return True when two half-open ranges share any instant.

    Ranges that only touch (one ends exactly when the other starts) do not
    overlap.

    Examples:
        >>> from datetime import datetime
        >>> nine, ten, eleven = (datetime(2026, 1, 5, h) for h in (9, 10, 11))
        >>> overlaps(TimeRange(nine, ten), TimeRange(ten, eleven))
        False
        >>> overlaps(TimeRange(nine, eleven), TimeRange(ten, eleven))
        True
    """
    return existing.start < candidate.end and candidate.start < existing.end
