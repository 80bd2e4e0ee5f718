"""
Timetable Models

Concrete, time-zone-resolved class sessions. Instants are stored in UTC.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .organization import Division, Room, Subject, Teacher

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin


class ClassSession(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One scheduled lecture of a subject.

    Booking uniqueness on (room, time) and (teacher, time) is enforced by the
    application-level conflict check, not by the database.
    """

    __tablename__ = "class_sessions"
    __table_args__ = (
        CheckConstraint("end_at > start_at", name="check_session_time_order"),
        Index("idx_class_sessions_room_start", "room_id", "start_at"),
        Index("idx_class_sessions_teacher_start", "teacher_id", "start_at"),
    )

    subject_id: Mapped[UUID] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    division_id: Mapped[UUID] = mapped_column(ForeignKey("divisions.id"), nullable=False)
    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("teachers.id"), nullable=False)
    room_id: Mapped[UUID | None] = mapped_column(ForeignKey("rooms.id"), nullable=True)

    start_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    end_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    lecture_number: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="Matches CurriculumSubTopic.lecture_number"
    )

    calendar_event_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="External calendar event id (best effort)"
    )

    # Relationships
    subject: Mapped[Subject] = relationship(back_populates="sessions")
    division: Mapped[Division] = relationship()
    teacher: Mapped[Teacher] = relationship()
    room: Mapped[Room | None] = relationship()
