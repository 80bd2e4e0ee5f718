"""
Progress Read Service

Loads subjects with their hierarchy and sub-topics, computes snapshots and
rolls them up for dashboards. Read-only: never writes, never commits.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.orm import selectinload

from cprtrack.core.clock import Clock, SystemClock, today
from cprtrack.core.exceptions import NotFoundError
from cprtrack.core.models import (
    Batch,
    Center,
    CurriculumModule,
    CurriculumTopic,
    Division,
    School,
    Semester,
    Subject,
)
from cprtrack.core.validation import ValidationError
from cprtrack.progress.aggregator import (
    OrgLevel,
    OrgUnitRef,
    SubjectProgress,
    UnitSummary,
    aggregate,
)
from cprtrack.progress.calculator import WindowProgress, calculate_progress, window_progress

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_UNIT_MODELS: dict[OrgLevel, type[Center] | type[School] | type[Division]] = {
    OrgLevel.CENTER: Center,
    OrgLevel.SCHOOL: School,
    OrgLevel.DIVISION: Division,
}


def batch_code(subject: Subject) -> str:
    """Compact class identifier, e.g. '1SOT2024A' (center code, school, batch, division)."""
    division = subject.semester.division
    batch = division.batch
    school = batch.school
    return f"{school.center.code}{school.name}{batch.name}{division.code}"


def parse_level(level: str | OrgLevel) -> OrgLevel:
    try:
        return OrgLevel(level)
    except ValueError as e:
        choices = ", ".join(lvl.value for lvl in OrgLevel)
        raise ValidationError(f"Invalid level '{level}'. Must be one of: {choices}") from e


def unit_criterion(level: OrgLevel, unit_id: UUID) -> ColumnElement[bool]:
    """Restricts a subject query (joined to its semester) to one unit."""
    if level is OrgLevel.DIVISION:
        return Semester.division_id == unit_id

    divisions = select(Division.id).join(Division.batch)
    if level is OrgLevel.SCHOOL:
        return Semester.division_id.in_(divisions.where(Batch.school_id == unit_id))
    return Semester.division_id.in_(
        divisions.join(Batch.school).where(School.center_id == unit_id)
    )


@dataclass(frozen=True)
class SubjectWindow:
    subject_id: UUID
    subject_name: str
    teacher_name: str
    progress: WindowProgress


@dataclass(frozen=True)
class DivisionWindow:
    """Window progress for every subject with curriculum in a division's current semester."""

    division_id: UUID
    semester_id: UUID
    start: date
    end: date
    subjects: list[SubjectWindow]


class ProgressService:
    """Progress snapshots per subject and per organizational unit."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        tz: tzinfo,
        clock: Clock | None = None,
        lag_threshold: float = 1.0,
    ):
        """Initialize service.

        Args:
            db: Database session
            tz: Zone whose calendar date counts as "today"
            clock: Time source (default: system clock)
            lag_threshold: Lag beyond which a subject is lagging or ahead
        """
        self.db = db
        self.tz = tz
        self.clock = clock or SystemClock()
        self.lag_threshold = lag_threshold

    def today(self) -> date:
        return today(self.clock, self.tz)

    async def subject_progress(self, subject_id: UUID) -> SubjectProgress:
        """Progress of one subject, ongoing or not.

        Raises:
            NotFoundError: If the subject does not exist
        """
        subjects = await self._load_subjects(Subject.id == subject_id)
        if not subjects:
            raise NotFoundError(f"Subject not found with ID: {subject_id}")
        return self._progress(subjects[0], self.today())

    async def dashboard(self, level: str | OrgLevel) -> list[UnitSummary]:
        """Summaries for every unit of `level`, over ongoing subjects only."""
        org_level = parse_level(level)
        units = await self._load_units(org_level)
        return await self._summarize(units, org_level)

    async def unit_summary(self, level: str | OrgLevel, unit_id: UUID) -> UnitSummary:
        """Summary for a single unit.

        Raises:
            ValidationError: If the level is unknown
            NotFoundError: If no unit of that level has this ID
        """
        org_level = parse_level(level)
        units = await self._load_units(org_level, unit_id=unit_id)
        if not units:
            raise NotFoundError(f"{org_level.value.capitalize()} not found with ID: {unit_id}")
        summaries = await self._summarize(units, org_level, unit_criterion(org_level, unit_id))
        return summaries[0]

    async def division_window(
        self, division_id: UUID, start: date | None = None, end: date | None = None
    ) -> DivisionWindow:
        """Sub-topics planned vs completed within a window, per subject of a division.

        Only the division's current semester counts. The window defaults to
        the semester's start through its end date (today when open-ended)
        and must lie inside the semester.

        Args:
            division_id: Division to report on
            start: First day of the window (inclusive)
            end: Last day of the window (inclusive)

        Raises:
            NotFoundError: If the division has no semester running today
            ValidationError: If the window is reversed or leaves the semester
        """
        on = self.today()
        semester = await self._current_semester(division_id, on)
        semester_end = semester.end_date or on
        start = start or semester.start_date
        end = end or semester_end

        if start < semester.start_date or end > semester_end:
            raise ValidationError(
                "Date range must be within the semester's period: "
                f"{semester.start_date.isoformat()} to "
                f"{semester.end_date.isoformat() if semester.end_date else 'Ongoing'}"
            )
        if start > end:
            raise ValidationError("Start date cannot be later than end date")

        subjects = await self._load_subjects(Subject.semester_id == semester.id)
        windows = []
        for subject in subjects:
            sub_topics = [st for m in subject.modules for t in m.topics for st in t.sub_topics]
            if not sub_topics:
                continue
            windows.append(
                SubjectWindow(
                    subject_id=subject.id,
                    subject_name=subject.name,
                    teacher_name=subject.teacher.name,
                    progress=window_progress(sub_topics, start, end),
                )
            )

        return DivisionWindow(
            division_id=division_id,
            semester_id=semester.id,
            start=start,
            end=end,
            subjects=windows,
        )

    async def lagging_subjects(
        self, division_id: UUID, start: date | None = None, end: date | None = None
    ) -> DivisionWindow:
        """Subjects of a division that completed fewer sub-topics than planned in the window.

        Same window rules as `division_window`, except the end defaults to today.
        """
        window = await self.division_window(division_id, start, end or self.today())
        lagging = [s for s in window.subjects if s.progress.is_lagging]
        logger.info(
            f"Division {division_id}: {len(lagging)} of {len(window.subjects)} subjects lagging "
            f"between {window.start} and {window.end}"
        )
        return DivisionWindow(
            division_id=window.division_id,
            semester_id=window.semester_id,
            start=window.start,
            end=window.end,
            subjects=lagging,
        )

    async def _current_semester(self, division_id: UUID, on: date) -> Semester:
        query = (
            select(Semester)
            .where(
                Semester.division_id == division_id,
                Semester.start_date <= on,
                or_(Semester.end_date.is_(None), Semester.end_date >= on),
            )
            .order_by(Semester.start_date.desc())
            .limit(1)
        )
        semester = (await self.db.execute(query)).scalar_one_or_none()
        if semester is None:
            raise NotFoundError(
                f"Division or its current semester not found with ID: {division_id}"
            )
        return semester

    async def _summarize(
        self,
        units: Sequence[OrgUnitRef],
        level: OrgLevel,
        *criteria: ColumnElement[bool],
    ) -> list[UnitSummary]:
        on = self.today()
        subjects = await self._load_subjects(
            Semester.start_date <= on,
            or_(Semester.end_date.is_(None), Semester.end_date >= on),
            *criteria,
        )
        progress = [self._progress(subject, on) for subject in subjects]
        logger.debug(f"Aggregating {len(progress)} ongoing subjects into {len(units)} {level} units")
        return aggregate(progress, units, level, threshold=self.lag_threshold)

    def _progress(self, subject: Subject, on: date) -> SubjectProgress:
        division = subject.semester.division
        school = division.batch.school
        sub_topics = [st for m in subject.modules for t in m.topics for st in t.sub_topics]
        return SubjectProgress(
            subject_id=subject.id,
            subject_name=subject.name,
            subject_code=subject.code,
            teacher_id=subject.teacher_id,
            teacher_name=subject.teacher.name,
            batch_code=batch_code(subject),
            center_id=school.center_id,
            school_id=school.id,
            division_id=division.id,
            snapshot=calculate_progress(sub_topics, on),
        )

    async def _load_subjects(self, *criteria) -> list[Subject]:  # type: ignore[no-untyped-def]
        """Subjects matching `criteria` with hierarchy and curriculum loaded."""
        query = (
            select(Subject)
            .join(Subject.semester)
            .where(*criteria)
            .options(
                selectinload(Subject.teacher),
                selectinload(Subject.semester)
                .selectinload(Semester.division)
                .selectinload(Division.batch)
                .selectinload(Batch.school)
                .selectinload(School.center),
                selectinload(Subject.modules)
                .selectinload(CurriculumModule.topics)
                .selectinload(CurriculumTopic.sub_topics),
            )
            .order_by(Subject.name)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _load_units(self, level: OrgLevel, unit_id: UUID | None = None) -> list[OrgUnitRef]:
        model = _UNIT_MODELS[level]
        label = model.code if model is Division else model.name
        query = select(model.id, label).order_by(label)
        if unit_id is not None:
            query = query.where(model.id == unit_id)

        result = await self.db.execute(query)
        return [OrgUnitRef(id=row[0], name=str(row[1]), level=level) for row in result.all()]
