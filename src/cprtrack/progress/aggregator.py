"""
Progress Aggregation

Buckets per-subject progress into completed / lagging / ahead / on-track and
rolls it up per organizational unit (center, school or division).

Units are held in an arena: a list built once from the hierarchy, plus an
id -> slot index. Subjects are dropped into their unit's slot; every unit
gets a summary, even when no subject landed in it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from cprtrack.progress.calculator import ProgressSnapshot, round_half_up

if TYPE_CHECKING:
    from uuid import UUID

logger = logging.getLogger(__name__)


class ProgressBucket(StrEnum):
    COMPLETED = "completed"
    LAGGING = "lagging"
    AHEAD = "ahead"
    ON_TRACK = "on_track"


class OrgLevel(StrEnum):
    CENTER = "center"
    SCHOOL = "school"
    DIVISION = "division"


def classify(snapshot: ProgressSnapshot, threshold: float = 1.0) -> ProgressBucket:
    """Bucket a subject. The checks run in a fixed priority order.

    A fully completed subject is COMPLETED whatever its lag.

    >>> classify(ProgressSnapshot(5, 0.0, 5.0, 100, 0, 0.0, True))
    <ProgressBucket.COMPLETED: 'completed'>
    """
    if snapshot.completion_percentage == 100:
        return ProgressBucket.COMPLETED
    if snapshot.completion_lag > threshold:
        return ProgressBucket.LAGGING
    if snapshot.completion_lag < -threshold:
        return ProgressBucket.AHEAD
    return ProgressBucket.ON_TRACK


@dataclass(frozen=True)
class OrgUnitRef:
    """An organizational unit a summary is reported for."""

    id: UUID
    name: str
    level: OrgLevel


@dataclass(frozen=True)
class SubjectProgress:
    """A subject's identity, position in the hierarchy and progress snapshot."""

    subject_id: UUID
    subject_name: str
    subject_code: str
    teacher_id: UUID
    teacher_name: str
    batch_code: str
    center_id: UUID
    school_id: UUID
    division_id: UUID
    snapshot: ProgressSnapshot

    def unit_id(self, level: OrgLevel) -> UUID:
        if level == OrgLevel.CENTER:
            return self.center_id
        if level == OrgLevel.SCHOOL:
            return self.school_id
        return self.division_id


@dataclass(frozen=True)
class SubjectDetail:
    subject_name: str
    teacher_name: str
    batch_code: str
    completion_percentage: int
    completion_lag: float


@dataclass(frozen=True)
class TeacherDetail:
    teacher_name: str
    subject_name: str
    batch_code: str


@dataclass
class UnitSummary:
    """Rolled-up progress of one unit. All-zero when it has no subjects."""

    unit: OrgUnitRef
    total_subjects: int = 0
    subjects_without_curriculum: int = 0
    total_teachers: int = 0
    average_progress_rate: int = 0
    buckets: dict[ProgressBucket, list[SubjectDetail]] = field(
        default_factory=lambda: {bucket: [] for bucket in ProgressBucket}
    )
    teachers: list[TeacherDetail] = field(default_factory=list)

    def count(self, bucket: ProgressBucket) -> int:
        return len(self.buckets[bucket])


@dataclass
class _UnitSlot:
    subjects: list[SubjectProgress] = field(default_factory=list)

    def summarize(self, unit: OrgUnitRef, threshold: float) -> UnitSummary:
        summary = UnitSummary(unit=unit, total_subjects=len(self.subjects))
        teacher_ids: set[UUID] = set()
        percentages: list[int] = []

        for subject in self.subjects:
            snapshot = subject.snapshot
            if not snapshot.has_curriculum_data:
                summary.subjects_without_curriculum += 1
                continue

            percentages.append(snapshot.completion_percentage)
            teacher_ids.add(subject.teacher_id)
            summary.teachers.append(
                TeacherDetail(
                    teacher_name=subject.teacher_name,
                    subject_name=subject.subject_name,
                    batch_code=subject.batch_code,
                )
            )
            summary.buckets[classify(snapshot, threshold)].append(
                SubjectDetail(
                    subject_name=subject.subject_name,
                    teacher_name=subject.teacher_name,
                    batch_code=subject.batch_code,
                    completion_percentage=snapshot.completion_percentage,
                    completion_lag=snapshot.completion_lag,
                )
            )

        summary.total_teachers = len(teacher_ids)
        if percentages:
            summary.average_progress_rate = int(
                round_half_up(sum(percentages) / len(percentages))
            )
        return summary


def aggregate(
    subjects: Iterable[SubjectProgress],
    units: Sequence[OrgUnitRef],
    level: OrgLevel,
    *,
    threshold: float = 1.0,
) -> list[UnitSummary]:
    """Roll subjects up into one summary per unit, in `units` order.

    Args:
        subjects: Subjects to aggregate (callers pass ongoing subjects only)
        units: Every unit of `level`; each gets a summary
        level: Which hierarchy level a subject is grouped by
        threshold: Lag beyond which a subject is lagging or ahead
    """
    index = {unit.id: slot for slot, unit in enumerate(units)}
    slots = [_UnitSlot() for _ in units]

    for subject in subjects:
        slot = index.get(subject.unit_id(level))
        if slot is None:
            logger.debug(f"Subject {subject.subject_id} has no {level} unit in scope; ignored")
            continue
        slots[slot].subjects.append(subject)

    return [slot.summarize(unit, threshold) for unit, slot in zip(units, slots, strict=True)]
