"""
Clock abstraction

Services that depend on "now" or "today" take a Clock so tests can pin time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Current timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


@dataclass(frozen=True)
class FixedClock:
    """Clock frozen at a single instant."""

    instant: datetime

    def now(self) -> datetime:
        return ensure_utc(self.instant)


def ensure_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime.

    Naive values are taken to already be UTC (SQLite returns them that way).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar date of an instant as seen in `tz`."""
    return ensure_utc(value).astimezone(tz).date()


def today(clock: Clock, tz: tzinfo) -> date:
    """Today's calendar date in `tz`."""
    return local_date(clock.now(), tz)
