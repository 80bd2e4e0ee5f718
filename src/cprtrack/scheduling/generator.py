"""
Weekly Schedule Generator

Expands a weekly recurring template into concrete, UTC-resolved session
candidates over a calendar date range.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any

from cprtrack.core.clock import ensure_utc
from cprtrack.core.validation import (
    WEEKDAY_NAMES,
    ValidationError,
    validate_day_of_week,
    validate_lecture_number,
    validate_time_of_day,
    validate_timezone,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleTemplateItem:
    """One weekly slot: a weekday, a wall-clock time window and a lecture number."""

    day_of_week: str
    start_time: time
    end_time: time
    lecture_number: int

    @classmethod
    def parse(
        cls,
        *,
        day_of_week: str | None,
        start_time: str | time | None,
        end_time: str | time | None,
        lecture_number: int | str | None,
    ) -> ScheduleTemplateItem:
        """Build an item from raw input.

        Raises:
            ValidationError: If any field is invalid or the window is empty
        """
        day = validate_day_of_week(day_of_week)
        start = validate_time_of_day(start_time)
        end = validate_time_of_day(end_time)
        if end <= start:
            raise ValidationError("End time must be after start time")

        return cls(
            day_of_week=day,
            start_time=start,
            end_time=end,
            lecture_number=validate_lecture_number(lecture_number),
        )


@dataclass(frozen=True)
class ScheduleCandidate:
    """A concrete session proposed by the generator (UTC instants)."""

    start_at: datetime
    end_at: datetime
    lecture_number: int

    @property
    def start(self) -> datetime:
        return self.start_at

    @property
    def end(self) -> datetime:
        return self.end_at


def parse_template_items(raw_items: Iterable[Mapping[str, Any]]) -> list[ScheduleTemplateItem]:
    """Parse raw template items, skipping malformed ones.

    Raises:
        ValidationError: If no well-formed item remains
    """
    items: list[ScheduleTemplateItem] = []
    for position, raw in enumerate(raw_items, start=1):
        try:
            items.append(
                ScheduleTemplateItem.parse(
                    day_of_week=raw.get("day_of_week"),
                    start_time=raw.get("start_time"),
                    end_time=raw.get("end_time"),
                    lecture_number=raw.get("lecture_number"),
                )
            )
        except ValidationError as e:
            logger.warning(f"Skipping schedule item #{position}: {e}")

    if not items:
        raise ValidationError("At least one valid schedule item is required")

    return items


class WeeklySchedule:
    """Lazy, restartable sequence of session candidates.

    Every calendar day in [range_start, range_end] is visited in order; for
    each template item whose weekday matches, the local date and times are
    resolved in `time_zone` and converted to UTC. Items keep their input
    order within a day.

    Candidates ending after the close of `range_end` (local midnight) are
    dropped. Candidates starting before `now` are dropped unless
    `allow_past` is set.
    """

    def __init__(
        self,
        *,
        range_start: date,
        range_end: date,
        time_zone: str | tzinfo,
        items: Sequence[ScheduleTemplateItem],
        allow_past: bool,
        now: datetime,
    ):
        if range_end < range_start:
            raise ValidationError("Schedule end date must not be before the start date")
        if not items:
            raise ValidationError("At least one valid schedule item is required")

        self.range_start = range_start
        self.range_end = range_end
        self.tz = validate_timezone(time_zone) if isinstance(time_zone, str) else time_zone
        self.items = tuple(items)
        self.allow_past = allow_past
        self.now = ensure_utc(now)

        self._items_by_day: dict[str, list[ScheduleTemplateItem]] = {}
        for item in self.items:
            self._items_by_day.setdefault(item.day_of_week, []).append(item)

    @property
    def range_end_instant(self) -> datetime:
        """Start of the day after `range_end`, in UTC."""
        return self._instant(self.range_end + timedelta(days=1), time.min)

    def _instant(self, day: date, wall_time: time) -> datetime:
        return datetime.combine(day, wall_time, tzinfo=self.tz).astimezone(UTC)

    def __iter__(self) -> Iterator[ScheduleCandidate]:
        limit = self.range_end_instant
        day = self.range_start
        while day <= self.range_end:
            for item in self._items_by_day.get(WEEKDAY_NAMES[day.weekday()], ()):
                start_at = self._instant(day, item.start_time)
                end_at = self._instant(day, item.end_time)

                if end_at > limit:
                    continue
                if not self.allow_past and start_at < self.now:
                    continue

                yield ScheduleCandidate(
                    start_at=start_at, end_at=end_at, lecture_number=item.lecture_number
                )
            day += timedelta(days=1)
