"""
Timetable Service

Creates, edits, deletes and lists class sessions. Every mutation writes the
sessions and recomputes the subject's planned dates in one transaction;
calendar sync runs only after that transaction has committed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from cprtrack.core.clock import Clock, SystemClock, ensure_utc
from cprtrack.core.database import atomic
from cprtrack.core.lookups import get_class_session, get_room, get_subject
from cprtrack.core.models import ClassSession
from cprtrack.core.validation import ValidationError, validate_lecture_number, validate_timezone
from cprtrack.curriculum.planned_dates import recompute_planned_dates
from cprtrack.integrations.calendar import CalendarSyncClient, notify_safely
from cprtrack.scheduling.conflicts import ConflictDetector
from cprtrack.scheduling.generator import WeeklySchedule, parse_template_items
from cprtrack.scheduling.intervals import TimeRange

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeeklyScheduleRequest:
    """Recurring weekly template to expand over a date range.

    `items` are raw mappings with day_of_week, start_time, end_time and
    lecture_number; malformed ones are skipped.
    """

    subject_id: UUID
    range_start: date
    range_end: date
    items: Sequence[Mapping[str, Any]]
    room_id: UUID | None = None
    time_zone: str | None = None
    allow_past: bool | None = None


@dataclass(frozen=True)
class SessionChanges:
    """Fields to change on one session. None means unchanged."""

    start_at: datetime | None = None
    end_at: datetime | None = None
    room_id: UUID | None = None
    clear_room: bool = False
    lecture_number: int | str | None = None


@dataclass(frozen=True)
class SessionFilters:
    subject_id: UUID | None = None
    teacher_id: UUID | None = None
    division_id: UUID | None = None
    room_id: UUID | None = None
    start_from: datetime | None = None
    start_before: datetime | None = None


@dataclass
class ScheduleResult:
    sessions: list[ClassSession] = field(default_factory=list)
    time_zone: str = ""


class TimetableService:
    """Timetable mutations that keep planned dates in step."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        tz: tzinfo,
        clock: Clock | None = None,
        calendar: CalendarSyncClient | None = None,
        allow_past_default: bool = False,
    ):
        """Initialize service.

        Args:
            db: Database session
            tz: Default zone for schedules; also the zone planned dates are taken in
            clock: Time source for the past-session policy (default: system clock)
            calendar: Calendar sync client; None disables sync
            allow_past_default: Keep generated sessions that start in the past
        """
        self.db = db
        self.tz = tz
        self.clock = clock or SystemClock()
        self.calendar = calendar
        self.allow_past_default = allow_past_default

    async def schedule_weekly(self, request: WeeklyScheduleRequest) -> ScheduleResult:
        """Expand a weekly template and book every resulting session.

        The whole batch is rejected if any session would double-book the room
        or the subject's teacher. When the template yields no session in the
        range nothing is written and an empty result is returned.

        Raises:
            NotFoundError: If the subject or room does not exist
            ValidationError: If the template or range is unusable
            SchedulingConflictError: On the first double-booking
        """
        subject = await get_subject(self.db, request.subject_id, with_semester=True)
        if request.room_id is not None:
            await get_room(self.db, request.room_id)

        tz = validate_timezone(request.time_zone) if request.time_zone else self.tz
        allow_past = self.allow_past_default if request.allow_past is None else request.allow_past

        schedule = WeeklySchedule(
            range_start=request.range_start,
            range_end=request.range_end,
            time_zone=tz,
            items=parse_template_items(request.items),
            allow_past=allow_past,
            now=self.clock.now(),
        )
        candidates = list(schedule)
        result = ScheduleResult(time_zone=str(tz))
        if not candidates:
            logger.info(
                f"No sessions generated for subject {subject.id} between "
                f"{request.range_start} and {request.range_end}"
            )
            return result

        detector = ConflictDetector(self.db, tz=tz)
        async with atomic(self.db):
            await detector.ensure_no_conflicts(
                candidates, teacher_id=subject.teacher_id, room_id=request.room_id
            )
            result.sessions = [
                ClassSession(
                    subject_id=subject.id,
                    division_id=subject.semester.division_id,
                    teacher_id=subject.teacher_id,
                    room_id=request.room_id,
                    start_at=candidate.start_at,
                    end_at=candidate.end_at,
                    lecture_number=str(candidate.lecture_number),
                )
                for candidate in candidates
            ]
            self.db.add_all(result.sessions)
            await self.db.flush()
            await recompute_planned_dates(self.db, subject.id, self.tz)

        logger.info(f"Scheduled {len(result.sessions)} sessions for subject {subject.id}")
        await self._sync_created(result.sessions)
        return result

    async def update_session(self, session_id: UUID, changes: SessionChanges) -> ClassSession:
        """Move, re-room or relabel one session.

        Conflicts are re-checked (ignoring the session itself) when the time
        or room changes.

        Raises:
            NotFoundError: If the session or new room does not exist
            ValidationError: If the new end is not after the new start
            SchedulingConflictError: If the new slot double-books
        """
        class_session = await get_class_session(self.db, session_id)

        start_at = ensure_utc(changes.start_at or class_session.start_at)
        end_at = ensure_utc(changes.end_at or class_session.end_at)
        if end_at <= start_at:
            raise ValidationError("Session end must be after its start")

        if changes.clear_room:
            room_id = None
        elif changes.room_id is not None:
            room_id = (await get_room(self.db, changes.room_id)).id
        else:
            room_id = class_session.room_id

        lecture_number = (
            str(validate_lecture_number(changes.lecture_number))
            if changes.lecture_number is not None
            else class_session.lecture_number
        )

        moved = (
            start_at != ensure_utc(class_session.start_at)
            or end_at != ensure_utc(class_session.end_at)
            or room_id != class_session.room_id
        )

        async with atomic(self.db):
            if moved:
                await ConflictDetector(self.db, tz=self.tz).ensure_no_conflicts(
                    [TimeRange(start_at, end_at)],
                    teacher_id=class_session.teacher_id,
                    room_id=room_id,
                    exclude_session_id=class_session.id,
                )
            class_session.start_at = start_at
            class_session.end_at = end_at
            class_session.room_id = room_id
            class_session.lecture_number = lecture_number
            await self.db.flush()
            await recompute_planned_dates(self.db, class_session.subject_id, self.tz)

        if self.calendar is not None:
            await notify_safely(
                self.calendar.session_updated(class_session),
                action=f"update session {class_session.id}",
            )
        return class_session

    async def delete_session(self, session_id: UUID) -> None:
        """Delete one session and recompute its subject's planned dates.

        Raises:
            NotFoundError: If the session does not exist
        """
        class_session = await get_class_session(self.db, session_id)
        subject_id = class_session.subject_id
        calendar_event_id = class_session.calendar_event_id

        async with atomic(self.db):
            await self.db.delete(class_session)
            await self.db.flush()
            await recompute_planned_dates(self.db, subject_id, self.tz)

        logger.info(f"Deleted session {session_id} of subject {subject_id}")
        if self.calendar is not None:
            await notify_safely(
                self.calendar.session_deleted(session_id, calendar_event_id),
                action=f"delete session {session_id}",
            )

    async def list_sessions(self, filters: SessionFilters | None = None) -> list[ClassSession]:
        """Sessions matching every given filter, earliest first."""
        filters = filters or SessionFilters()
        query = select(ClassSession).order_by(ClassSession.start_at)

        if filters.subject_id is not None:
            query = query.where(ClassSession.subject_id == filters.subject_id)
        if filters.teacher_id is not None:
            query = query.where(ClassSession.teacher_id == filters.teacher_id)
        if filters.division_id is not None:
            query = query.where(ClassSession.division_id == filters.division_id)
        if filters.room_id is not None:
            query = query.where(ClassSession.room_id == filters.room_id)
        if filters.start_from is not None:
            query = query.where(ClassSession.start_at >= ensure_utc(filters.start_from))
        if filters.start_before is not None:
            query = query.where(ClassSession.start_at < ensure_utc(filters.start_before))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _sync_created(self, sessions: list[ClassSession]) -> None:
        """Create calendar events and remember their ids. Never raises."""
        if self.calendar is None:
            return

        recorded = False
        for class_session in sessions:
            event_id = await notify_safely(
                self.calendar.session_created(class_session),
                action=f"create session {class_session.id}",
            )
            if event_id:
                class_session.calendar_event_id = event_id
                recorded = True

        if not recorded:
            return
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"Could not store calendar event ids: {e}")
