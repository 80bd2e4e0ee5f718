"""
Progress Calculator

Computes a subject's progress snapshot (expected vs actual lecture progress,
lag, completion percentage and punctuality) from its sub-topics.

Pure: no database access and no clock reads. `today` is passed in.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol


class SubTopicLike(Protocol):
    """Fields the calculator reads from a sub-topic."""

    lecture_number: int
    status: str
    planned_start_date: date | None
    actual_start_date: date | None


@dataclass(frozen=True)
class ProgressSnapshot:
    """Per-subject progress, recomputed on every read and never stored.

    Attributes:
        expected_completion_lecture: Highest lecture number planned on or before today
        actual_completion_lecture: Lecture-equivalents finished (sum of per-lecture ratios)
        completion_lag: expected - actual; positive means behind schedule
        completion_percentage: Completed sub-topics as a whole-number percentage
        punctuality_issue_count: Due sub-topics started late or not started
        punctuality_issue_percentage: Issues as a share of due sub-topics
        has_curriculum_data: False when the subject has no sub-topics at all
    """

    expected_completion_lecture: int
    actual_completion_lecture: float
    completion_lag: float
    completion_percentage: int
    punctuality_issue_count: int
    punctuality_issue_percentage: float
    has_curriculum_data: bool

    @classmethod
    def empty(cls) -> ProgressSnapshot:
        return cls(
            expected_completion_lecture=0,
            actual_completion_lecture=0.0,
            completion_lag=0.0,
            completion_percentage=0,
            punctuality_issue_count=0,
            punctuality_issue_percentage=0.0,
            has_curriculum_data=False,
        )


def round_half_up(value: float, places: int = 0) -> Decimal:
    """Round with halves away from zero (2.5 -> 3), unlike built-in round()."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def completion_percentage(completed: int, total: int) -> int:
    """Whole-number percentage of completed items; 0 when there are none.

    >>> completion_percentage(1, 3)
    33
    >>> completion_percentage(1, 8)
    13
    >>> completion_percentage(0, 0)
    0
    """
    if total == 0:
        return 0
    return int(round_half_up(100 * completed / total))


def is_due(sub_topic: SubTopicLike, today: date) -> bool:
    """A sub-topic is due once its planned date has arrived."""
    return sub_topic.planned_start_date is not None and sub_topic.planned_start_date <= today


def has_punctuality_issue(sub_topic: SubTopicLike) -> bool:
    """Never started, or started after its planned date."""
    if sub_topic.actual_start_date is None:
        return True
    planned = sub_topic.planned_start_date
    return planned is not None and sub_topic.actual_start_date > planned


def lecture_progress(sub_topics: Iterable[SubTopicLike]) -> float:
    """Lecture-equivalents finished: per lecture, the share of its sub-topics completed.

    Unrounded.
    """
    # lecture number -> [completed, total]
    lectures: dict[int, list[int]] = defaultdict(lambda: [0, 0])
    for st in sub_topics:
        counts = lectures[st.lecture_number]
        counts[1] += 1
        if st.status == "COMPLETED":
            counts[0] += 1
    return sum(done / total for done, total in lectures.values() if total)


def calculate_progress(sub_topics: Iterable[SubTopicLike], today: date) -> ProgressSnapshot:
    """Compute the progress snapshot for one subject's sub-topics.

    Args:
        sub_topics: Every sub-topic of the subject
        today: Calendar date to evaluate against (inclusive)

    Returns:
        ProgressSnapshot; the empty snapshot when there are no sub-topics
    """
    sub_topics = list(sub_topics)
    if not sub_topics:
        return ProgressSnapshot.empty()

    due = [st for st in sub_topics if is_due(st, today)]
    expected = max((st.lecture_number for st in due), default=0)

    completed = sum(1 for st in sub_topics if st.status == "COMPLETED")
    actual = lecture_progress(sub_topics)

    issues = sum(1 for st in due if has_punctuality_issue(st))
    issue_percentage = float(round_half_up(100 * issues / len(due), 2)) if due else 0.0

    actual_rounded = float(round_half_up(actual, 2))
    return ProgressSnapshot(
        expected_completion_lecture=expected,
        actual_completion_lecture=actual_rounded,
        completion_lag=float(round_half_up(expected - actual, 2)),
        completion_percentage=completion_percentage(completed, len(sub_topics)),
        punctuality_issue_count=issues,
        punctuality_issue_percentage=issue_percentage,
        has_curriculum_data=True,
    )


@dataclass(frozen=True)
class WindowProgress:
    """Progress of one subject over the sub-topics planned inside a date window.

    Attributes:
        expected_sub_topics: Sub-topics whose planned date falls in the window
        completed_sub_topics: Of those, the ones marked completed
        completed_lectures: Lecture-equivalents finished over the whole curriculum
        lectures_behind: Highest lecture planned by the window's end, minus
            completed_lectures
    """

    expected_sub_topics: int
    completed_sub_topics: int
    completed_lectures: float
    lectures_behind: float

    @property
    def is_lagging(self) -> bool:
        return self.completed_sub_topics < self.expected_sub_topics


def window_progress(sub_topics: Iterable[SubTopicLike], start: date, end: date) -> WindowProgress:
    """Expected vs completed sub-topics planned within [start, end], both inclusive.

    >>> window_progress([], date(2026, 1, 1), date(2026, 1, 31)).is_lagging
    False
    """
    sub_topics = list(sub_topics)
    in_window = [
        st
        for st in sub_topics
        if st.planned_start_date is not None and start <= st.planned_start_date <= end
    ]
    expected_lecture = max((st.lecture_number for st in sub_topics if is_due(st, end)), default=0)
    completed_lectures = lecture_progress(sub_topics)

    return WindowProgress(
        expected_sub_topics=len(in_window),
        completed_sub_topics=sum(1 for st in in_window if st.status == "COMPLETED"),
        completed_lectures=float(round_half_up(completed_lectures, 2)),
        lectures_behind=float(round_half_up(expected_lecture - completed_lectures, 2)),
    )
