"""
Room and Teacher Conflict Detection

Checks candidate sessions against already booked sessions (and against each
other) for double-booking. This is a read-then-decide check: it holds no lock
between the check and the caller's write, so two concurrent requests for the
same room or teacher can both pass.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Literal

from sqlalchemy import ColumnElement, select

from cprtrack.core.clock import ensure_utc
from cprtrack.core.exceptions import SchedulingConflictError
from cprtrack.core.models import ClassSession
from cprtrack.scheduling.intervals import Interval, TimeRange, overlaps

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

Resource = Literal["room", "teacher"]


@dataclass(frozen=True)
class Conflict:
    """First double-booking found for a batch."""

    resource: Resource
    candidate: TimeRange
    existing_session_id: UUID | None  # None when two candidates in the batch collide

    def describe(self, tz: tzinfo) -> str:
        """Human-readable message with the slot in local time."""
        slot = format_slot(self.candidate.start, tz)
        if self.resource == "room":
            return f"Room conflict on {slot}"
        return f"Teacher has a conflict on {slot}"


def format_slot(instant: datetime, tz: tzinfo) -> str:
    """Format an instant like 'Monday, 05 Jan 2026 10:00' in `tz`."""
    return ensure_utc(instant).astimezone(tz).strftime("%A, %d %b %Y %H:%M")


class ConflictDetector:
    """Finds room/teacher double-bookings for a batch of candidate sessions."""

    def __init__(self, db: AsyncSession, *, tz: tzinfo):
        """Initialize detector.

        Args:
            db: Database session used for lookups
            tz: Zone used to render conflict timestamps
        """
        self.db = db
        self.tz = tz

    async def find_conflict(
        self,
        candidates: Iterable[Interval],
        *,
        teacher_id: UUID,
        room_id: UUID | None = None,
        exclude_session_id: UUID | None = None,
    ) -> Conflict | None:
        """Return the first conflict in candidate order, or None.

        Each candidate is checked against existing sessions in the same room
        (when a room is given), then against existing sessions of the same
        teacher, then against earlier candidates of the same batch.

        Args:
            candidates: Proposed sessions (anything with start/end)
            teacher_id: Teacher who would teach every candidate
            room_id: Room every candidate would use, if any
            exclude_session_id: Session being edited (never conflicts with itself)
        """
        accepted: list[TimeRange] = []

        for raw in candidates:
            candidate = TimeRange(ensure_utc(raw.start), ensure_utc(raw.end))

            if room_id is not None:
                clash = await self._first_overlap(
                    ClassSession.room_id == room_id, candidate, exclude_session_id
                )
                if clash is not None:
                    return Conflict("room", candidate, clash.id)

            clash = await self._first_overlap(
                ClassSession.teacher_id == teacher_id, candidate, exclude_session_id
            )
            if clash is not None:
                return Conflict("teacher", candidate, clash.id)

            if any(overlaps(prior, candidate) for prior in accepted):
                return Conflict("teacher", candidate, None)

            accepted.append(candidate)

        return None

    async def ensure_no_conflicts(
        self,
        candidates: Iterable[Interval],
        *,
        teacher_id: UUID,
        room_id: UUID | None = None,
        exclude_session_id: UUID | None = None,
    ) -> None:
        """Raise for the first conflict in the batch.

        Raises:
            SchedulingConflictError: If any candidate double-books the room or teacher
        """
        conflict = await self.find_conflict(
            candidates,
            teacher_id=teacher_id,
            room_id=room_id,
            exclude_session_id=exclude_session_id,
        )
        if conflict is None:
            return

        message = conflict.describe(self.tz)
        logger.info(f"Rejecting schedule batch: {message}")
        raise SchedulingConflictError(
            message, resource=conflict.resource, start_at=conflict.candidate.start
        )

    async def _first_overlap(
        self,
        resource_filter: ColumnElement[bool],
        candidate: TimeRange,
        exclude_session_id: UUID | None,
    ) -> ClassSession | None:
        query = (
            select(ClassSession)
            .where(
                resource_filter,
                ClassSession.start_at < candidate.end,
                ClassSession.end_at > candidate.start,
            )
            .order_by(ClassSession.start_at)
        )
        if exclude_session_id is not None:
            query = query.where(ClassSession.id != exclude_session_id)

        result = await self.db.execute(query)
        for existing in result.scalars():
            booked = TimeRange(ensure_utc(existing.start_at), ensure_utc(existing.end_at))
            if overlaps(booked, candidate):
                return existing
        return None
