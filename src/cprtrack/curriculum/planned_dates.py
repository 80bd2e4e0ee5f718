"""
Planned Date Recomputation

Derives sub-topic planned dates from the subject's current timetable. Runs
inside the transaction of whatever changed the timetable or the curriculum,
so no stale planned date is ever committed.
"""

from __future__ import annotations

import logging
from datetime import date, tzinfo
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from cprtrack.core.clock import local_date
from cprtrack.core.models import ClassSession, CurriculumModule, CurriculumSubTopic, CurriculumTopic
from cprtrack.core.validation import parse_lecture_number

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def lecture_anchor_dates(db: AsyncSession, subject_id: UUID, tz: tzinfo) -> dict[int, date]:
    """Earliest session date per lecture number for a subject.

    Session labels that do not parse as a positive lecture number are ignored.
    """
    result = await db.execute(
        select(ClassSession.lecture_number, func.min(ClassSession.start_at))
        .where(ClassSession.subject_id == subject_id)
        .group_by(ClassSession.lecture_number)
    )

    anchors: dict[int, date] = {}
    for label, earliest in result.all():
        lecture = parse_lecture_number(label)
        if lecture is None:
            continue
        day = local_date(earliest, tz)
        if lecture not in anchors or day < anchors[lecture]:
            anchors[lecture] = day
    return anchors


async def recompute_planned_dates(db: AsyncSession, subject_id: UUID, tz: tzinfo) -> int:
    """Rebuild planned dates for every sub-topic of a subject.

    All planned dates are cleared first, then each sub-topic whose lecture
    number has at least one session gets that lecture's earliest session date
    as both planned start and planned end. Sub-topics without a session stay
    null. Calling it twice without a timetable change is a no-op.

    Must be called inside the caller's transaction; it never commits.

    Returns:
        Number of distinct lectures that received a planned date
    """
    topic_ids = (
        select(CurriculumTopic.id)
        .join(CurriculumModule, CurriculumTopic.module_id == CurriculumModule.id)
        .where(CurriculumModule.subject_id == subject_id)
    )

    await db.execute(
        update(CurriculumSubTopic)
        .where(CurriculumSubTopic.topic_id.in_(topic_ids))
        .values(planned_start_date=None, planned_end_date=None)
        .execution_options(synchronize_session="fetch")
    )

    anchors = await lecture_anchor_dates(db, subject_id, tz)
    for lecture, anchor in anchors.items():
        await db.execute(
            update(CurriculumSubTopic)
            .where(
                CurriculumSubTopic.topic_id.in_(topic_ids),
                CurriculumSubTopic.lecture_number == lecture,
            )
            .values(planned_start_date=anchor, planned_end_date=anchor)
            .execution_options(synchronize_session="fetch")
        )

    logger.debug(f"Recomputed planned dates for subject {subject_id}: {len(anchors)} lectures")
    return len(anchors)
