"""
Curriculum Models

The course plan (CPR) of a subject: modules → topics → sub-topics. Each
sub-topic is tied to the timetable by its lecture number; its planned dates
are derived from class sessions and never edited by hand.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .organization import Subject

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, OrderedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class SubTopicStatus(StrEnum):
    """Teaching status of a sub-topic."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class CurriculumModule(Base, UUIDPrimaryKeyMixin, OrderedMixin, TimestampMixin):
    """Top level of a subject's curriculum."""

    __tablename__ = "curriculum_modules"
    __table_args__ = (UniqueConstraint("subject_id", "order"),)

    subject_id: Mapped[UUID] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)

    # Relationships
    subject: Mapped[Subject] = relationship(back_populates="modules")
    topics: Mapped[list[CurriculumTopic]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CurriculumTopic.order",
    )


class CurriculumTopic(Base, UUIDPrimaryKeyMixin, OrderedMixin, TimestampMixin):
    """Topic within a module."""

    __tablename__ = "curriculum_topics"
    __table_args__ = (UniqueConstraint("module_id", "order"),)

    module_id: Mapped[UUID] = mapped_column(
        ForeignKey("curriculum_modules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)

    # Relationships
    module: Mapped[CurriculumModule] = relationship(back_populates="topics")
    sub_topics: Mapped[list[CurriculumSubTopic]] = relationship(
        back_populates="topic",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CurriculumSubTopic.order",
    )


class CurriculumSubTopic(Base, UUIDPrimaryKeyMixin, OrderedMixin, TimestampMixin):
    """Smallest teachable unit, joined to the timetable by lecture number.

    Many sub-topics may share a lecture number. Planned start and end are
    always equal (single-day lectures) or both null.
    """

    __tablename__ = "curriculum_sub_topics"
    __table_args__ = (
        UniqueConstraint("topic_id", "order"),
        CheckConstraint("lecture_number >= 1", name="check_lecture_number_positive"),
        CheckConstraint(
            "status IN ('PENDING', 'IN_PROGRESS', 'COMPLETED')", name="check_sub_topic_status"
        ),
    )

    topic_id: Mapped[UUID] = mapped_column(
        ForeignKey("curriculum_topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    lecture_number: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True, comment="Join key to ClassSession.lecture_number"
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubTopicStatus.PENDING.value
    )

    planned_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    planned_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    actual_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    actual_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    topic: Mapped[CurriculumTopic] = relationship(back_populates="sub_topics")
