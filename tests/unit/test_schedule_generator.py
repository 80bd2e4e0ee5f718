"""
Unit Tests for the Weekly Schedule Generator
"""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

import pytest

from cprtrack.core.validation import ValidationError
from cprtrack.scheduling.generator import (
    ScheduleTemplateItem,
    WeeklySchedule,
    parse_template_items,
)

IST = ZoneInfo("Asia/Kolkata")
LONG_AGO = datetime(2000, 1, 1, tzinfo=UTC)


def item(day: str, start: str, end: str, lecture: int | str) -> ScheduleTemplateItem:
    return ScheduleTemplateItem.parse(
        day_of_week=day, start_time=start, end_time=end, lecture_number=lecture
    )


def schedule(items, *, start=date(2026, 1, 5), end=date(2026, 1, 11), **kwargs) -> WeeklySchedule:
    options = {"time_zone": IST, "allow_past": False, "now": LONG_AGO}
    options.update(kwargs)
    return WeeklySchedule(range_start=start, range_end=end, items=items, **options)


class TestTemplateItems:
    def test_parse_normalizes_fields(self):
        parsed = item(" monday ", "9:00", "10:30", "3")

        assert parsed.day_of_week == "Monday"
        assert parsed.start_time == time(9, 0)
        assert parsed.end_time == time(10, 30)
        assert parsed.lecture_number == 3

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="End time must be after start time"):
            item("Monday", "10:00", "09:00", 1)

    def test_malformed_items_are_skipped(self):
        items = parse_template_items(
            [
                {"day_of_week": "Funday", "start_time": "09:00", "end_time": "10:00", "lecture_number": 1},
                {"day_of_week": "Monday", "start_time": "9am", "end_time": "10:00", "lecture_number": 1},
                {"day_of_week": "Monday", "start_time": "09:00", "end_time": "10:00", "lecture_number": 0},
                {"day_of_week": "Tuesday", "start_time": "11:00", "end_time": "12:00", "lecture_number": 2},
            ]
        )

        assert len(items) == 1
        assert items[0].day_of_week == "Tuesday"

    def test_all_items_invalid_fails(self):
        with pytest.raises(ValidationError, match="At least one valid schedule item"):
            parse_template_items([{"day_of_week": "Monday"}])

    def test_empty_item_list_fails(self):
        with pytest.raises(ValidationError):
            parse_template_items([])


class TestWeeklySchedule:
    def test_resolves_local_times_to_utc(self):
        candidates = list(schedule([item("Monday", "10:00", "11:00", 1)]))

        assert len(candidates) == 1
        # 10:00 IST is 04:30 UTC
        assert candidates[0].start_at == datetime(2026, 1, 5, 4, 30, tzinfo=UTC)
        assert candidates[0].end_at == datetime(2026, 1, 5, 5, 30, tzinfo=UTC)
        assert candidates[0].lecture_number == 1

    def test_orders_by_day_then_item_order(self):
        items = [
            item("Wednesday", "14:00", "15:00", 3),
            item("Monday", "11:00", "12:00", 2),
            item("Monday", "09:00", "10:00", 1),
        ]
        lectures = [c.lecture_number for c in schedule(items)]

        assert lectures == [2, 1, 3]

    def test_range_is_inclusive_and_repeats_weekly(self):
        candidates = list(
            schedule([item("Monday", "09:00", "10:00", 1)], end=date(2026, 1, 19))
        )

        days = [c.start_at.astimezone(IST).date() for c in candidates]
        assert days == [date(2026, 1, 5), date(2026, 1, 12), date(2026, 1, 19)]

    def test_no_matching_weekday_yields_nothing(self):
        candidates = list(
            schedule([item("Sunday", "09:00", "10:00", 1)], end=date(2026, 1, 10))
        )
        assert candidates == []

    def test_past_candidates_dropped_by_default(self):
        now = datetime(2026, 1, 7, 0, 0, tzinfo=UTC)
        items = [item("Monday", "09:00", "10:00", 1), item("Thursday", "09:00", "10:00", 2)]

        candidates = list(schedule(items, now=now))

        assert [c.lecture_number for c in candidates] == [2]

    def test_past_candidates_kept_when_allowed(self):
        now = datetime(2026, 1, 7, 0, 0, tzinfo=UTC)
        items = [item("Monday", "09:00", "10:00", 1), item("Thursday", "09:00", "10:00", 2)]

        candidates = list(schedule(items, now=now, allow_past=True))

        assert [c.lecture_number for c in candidates] == [1, 2]

    def test_iteration_is_restartable(self):
        generated = schedule([item("Monday", "09:00", "10:00", 1)])

        assert list(generated) == list(generated)

    def test_range_end_instant_is_next_local_midnight(self):
        generated = schedule([item("Monday", "09:00", "10:00", 1)])

        # 12 Jan 00:00 IST
        assert generated.range_end_instant == datetime(2026, 1, 11, 18, 30, tzinfo=UTC)

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError, match="must not be before"):
            schedule([item("Monday", "09:00", "10:00", 1)], start=date(2026, 1, 10), end=date(2026, 1, 5))

    def test_unknown_time_zone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown time zone"):
            schedule([item("Monday", "09:00", "10:00", 1)], time_zone="Mars/Olympus")

    def test_dst_zone_keeps_wall_clock_time(self):
        new_york = ZoneInfo("America/New_York")
        # DST starts Sunday 8 Mar 2026
        candidates = list(
            schedule(
                [item("Monday", "09:00", "10:00", 1)],
                start=date(2026, 3, 2),
                end=date(2026, 3, 9),
                time_zone=new_york,
            )
        )

        assert [c.start_at.astimezone(new_york).hour for c in candidates] == [9, 9]
        assert candidates[0].start_at.hour == 14
        assert candidates[1].start_at.hour == 13
