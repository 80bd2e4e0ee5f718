"""
Organization Models

Center → School → Batch → Division → Semester → Subject hierarchy, plus the
teachers and rooms that sessions are booked against. The curriculum core only
reads these tables.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .curriculum import CurriculumModule
    from .timetable import ClassSession

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Center(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A physical campus."""

    __tablename__ = "centers"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[int] = mapped_column(
        Integer, unique=True, nullable=False, comment="Numeric center code used in batch codes"
    )

    # Relationships
    schools: Mapped[list[School]] = relationship(
        back_populates="center", cascade="all, delete-orphan"
    )


class School(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A school within a center (e.g., SOT, SOM, SOH)."""

    __tablename__ = "schools"
    __table_args__ = (UniqueConstraint("center_id", "name"),)

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    center_id: Mapped[UUID] = mapped_column(ForeignKey("centers.id"), nullable=False, index=True)

    # Relationships
    center: Mapped[Center] = relationship(back_populates="schools")
    batches: Mapped[list[Batch]] = relationship(
        back_populates="school", cascade="all, delete-orphan"
    )


class Batch(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """An intake year within a school."""

    __tablename__ = "batches"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    school_id: Mapped[UUID] = mapped_column(ForeignKey("schools.id"), nullable=False, index=True)

    # Relationships
    school: Mapped[School] = relationship(back_populates="batches")
    divisions: Mapped[list[Division]] = relationship(
        back_populates="batch", cascade="all, delete-orphan"
    )


class Division(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A class section within a batch."""

    __tablename__ = "divisions"
    __table_args__ = (UniqueConstraint("batch_id", "code"),)

    code: Mapped[str] = mapped_column(String(20), nullable=False)
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id"), nullable=False, index=True)

    # Relationships
    batch: Mapped[Batch] = relationship(back_populates="divisions")
    semesters: Mapped[list[Semester]] = relationship(
        back_populates="division", cascade="all, delete-orphan"
    )


class Semester(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A teaching term for one division. A null end date means open-ended."""

    __tablename__ = "semesters"

    number: Mapped[int] = mapped_column(Integer, nullable=False)
    division_id: Mapped[UUID] = mapped_column(
        ForeignKey("divisions.id"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    division: Mapped[Division] = relationship(back_populates="semesters")
    subjects: Mapped[list[Subject]] = relationship(
        back_populates="semester", cascade="all, delete-orphan"
    )


class Teacher(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A teacher who owns subjects and is booked into sessions."""

    __tablename__ = "teachers"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)

    # Relationships
    subjects: Mapped[list[Subject]] = relationship(back_populates="teacher")


class Room(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A bookable room."""

    __tablename__ = "rooms"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class Subject(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A subject taught to one division in one semester by one teacher."""

    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    semester_id: Mapped[UUID] = mapped_column(
        ForeignKey("semesters.id"), nullable=False, index=True
    )
    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("teachers.id"), nullable=False, index=True)

    # Relationships
    semester: Mapped[Semester] = relationship(back_populates="subjects")
    teacher: Mapped[Teacher] = relationship(back_populates="subjects")
    modules: Mapped[list[CurriculumModule]] = relationship(
        back_populates="subject",
        cascade="all, delete-orphan",
        order_by="CurriculumModule.order",
    )
    sessions: Mapped[list[ClassSession]] = relationship(
        back_populates="subject", cascade="all, delete-orphan"
    )
