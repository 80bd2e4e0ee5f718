"""
Entity lookups shared by services. Each raises NotFoundError when missing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from cprtrack.core.exceptions import NotFoundError
from cprtrack.core.models import ClassSession, Room, Semester, Subject

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


async def get_subject(db: AsyncSession, subject_id: UUID, *, with_semester: bool = False) -> Subject:
    """Load a subject, optionally with its semester and division."""
    query = select(Subject).where(Subject.id == subject_id)
    if with_semester:
        query = query.options(
            selectinload(Subject.semester).selectinload(Semester.division),
            selectinload(Subject.teacher),
        )

    result = await db.execute(query)
    subject = result.scalar_one_or_none()
    if subject is None:
        raise NotFoundError(f"Subject not found with ID: {subject_id}")
    return subject


async def get_room(db: AsyncSession, room_id: UUID) -> Room:
    result = await db.execute(select(Room).where(Room.id == room_id))
    room = result.scalar_one_or_none()
    if room is None:
        raise NotFoundError(f"Room not found with ID: {room_id}")
    return room


async def get_class_session(db: AsyncSession, session_id: UUID) -> ClassSession:
    result = await db.execute(select(ClassSession).where(ClassSession.id == session_id))
    class_session = result.scalar_one_or_none()
    if class_session is None:
        raise NotFoundError(f"Class session not found with ID: {session_id}")
    return class_session
