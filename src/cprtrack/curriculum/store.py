"""
Curriculum Store

Owns each subject's module → topic → sub-topic tree. Imports replace the
whole tree (delete then recreate) and recompute planned dates in the same
transaction; there is no incremental patching.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import tzinfo
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from cprtrack.core.clock import Clock, SystemClock, today
from cprtrack.core.database import atomic
from cprtrack.core.exceptions import NotFoundError
from cprtrack.core.lookups import get_subject
from cprtrack.core.models import (
    CurriculumModule,
    CurriculumSubTopic,
    CurriculumTopic,
    Subject,
    SubTopicStatus,
)
from cprtrack.core.validation import ValidationError
from cprtrack.curriculum.importer import CurriculumRow, parse_rows
from cprtrack.curriculum.planned_dates import recompute_planned_dates
from cprtrack.progress.calculator import completion_percentage

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    """Counts from a curriculum replace."""

    modules: int
    topics: int
    sub_topics: int
    skipped_rows: int
    planned_lectures: int


@dataclass(frozen=True)
class CurriculumSummary:
    total_modules: int
    total_topics: int
    total_sub_topics: int
    total_lectures: int
    completed_sub_topics: int
    in_progress_sub_topics: int
    pending_sub_topics: int
    completion_percentage: int


@dataclass(frozen=True)
class CurriculumTree:
    subject: Subject
    modules: list[CurriculumModule]
    summary: CurriculumSummary


def summarize(modules: list[CurriculumModule]) -> CurriculumSummary:
    """Status counts and completion for a loaded tree."""
    sub_topics = [st for m in modules for t in m.topics for st in t.sub_topics]
    completed = sum(1 for st in sub_topics if st.status == SubTopicStatus.COMPLETED)
    in_progress = sum(1 for st in sub_topics if st.status == SubTopicStatus.IN_PROGRESS)

    return CurriculumSummary(
        total_modules=len(modules),
        total_topics=sum(len(m.topics) for m in modules),
        total_sub_topics=len(sub_topics),
        total_lectures=max((st.lecture_number for st in sub_topics), default=0),
        completed_sub_topics=completed,
        in_progress_sub_topics=in_progress,
        pending_sub_topics=len(sub_topics) - completed - in_progress,
        completion_percentage=completion_percentage(completed, len(sub_topics)),
    )


class CurriculumStore:
    """Reads and replaces subject curricula."""

    def __init__(self, db: AsyncSession, *, tz: tzinfo, clock: Clock | None = None):
        """Initialize store.

        Args:
            db: Database session
            tz: Zone whose calendar dates planned and actual dates use
            clock: Time source for status changes (default: system clock)
        """
        self.db = db
        self.tz = tz
        self.clock = clock or SystemClock()

    async def replace(
        self, subject_id: UUID, rows: Iterable[CurriculumRow | Mapping[str, Any]]
    ) -> ImportResult:
        """Replace a subject's curriculum with the tree built from `rows`.

        Existing modules, topics and sub-topics (with their statuses and
        actual dates) are discarded. Orders are 1-based in first-seen order at
        each level. Planned dates are recomputed before commit.

        Raises:
            NotFoundError: If the subject does not exist
            ValidationError: If no well-formed row is present
        """
        parsed = parse_rows(rows)

        async with atomic(self.db):
            await get_subject(self.db, subject_id)

            if parsed.is_empty:
                raise ValidationError(
                    f"Curriculum import has no valid rows ({parsed.skipped_rows} skipped)"
                )

            await self._delete_tree(subject_id)

            topic_count = 0
            for module_order, parsed_module in enumerate(parsed.modules.values(), start=1):
                module = CurriculumModule(
                    subject_id=subject_id, name=parsed_module.name, order=module_order
                )
                self.db.add(module)

                for topic_order, parsed_topic in enumerate(parsed_module.topics.values(), start=1):
                    topic = CurriculumTopic(
                        module_id=module.id, name=parsed_topic.name, order=topic_order
                    )
                    self.db.add(topic)
                    topic_count += 1

                    for sub_order, parsed_sub in enumerate(parsed_topic.sub_topics, start=1):
                        self.db.add(
                            CurriculumSubTopic(
                                topic_id=topic.id,
                                name=parsed_sub.name,
                                order=sub_order,
                                lecture_number=parsed_sub.lecture_number,
                                status=SubTopicStatus.PENDING.value,
                            )
                        )

            await self.db.flush()
            planned = await recompute_planned_dates(self.db, subject_id, self.tz)

        result = ImportResult(
            modules=len(parsed.modules),
            topics=topic_count,
            sub_topics=parsed.sub_topic_count,
            skipped_rows=parsed.skipped_rows,
            planned_lectures=planned,
        )
        logger.info(f"Replaced curriculum for subject {subject_id}: {result}")
        return result

    async def get_tree(self, subject_id: UUID) -> CurriculumTree:
        """Load the ordered tree and its summary.

        Raises:
            NotFoundError: If the subject does not exist
        """
        subject = await get_subject(self.db, subject_id)
        result = await self.db.execute(
            select(CurriculumModule)
            .where(CurriculumModule.subject_id == subject_id)
            .options(selectinload(CurriculumModule.topics).selectinload(CurriculumTopic.sub_topics))
            .order_by(CurriculumModule.order)
            .execution_options(populate_existing=True)
        )
        modules = list(result.scalars().all())
        return CurriculumTree(subject=subject, modules=modules, summary=summarize(modules))

    async def delete(self, subject_id: UUID) -> int:
        """Delete a subject's whole curriculum.

        Returns:
            Number of modules deleted

        Raises:
            NotFoundError: If the subject does not exist or has no curriculum
        """
        async with atomic(self.db):
            await get_subject(self.db, subject_id)
            count = await self.db.scalar(
                select(func.count())
                .select_from(CurriculumModule)
                .where(CurriculumModule.subject_id == subject_id)
            )
            if not count:
                raise NotFoundError(f"No curriculum found for subject {subject_id}")
            await self._delete_tree(subject_id)

        logger.info(f"Deleted curriculum for subject {subject_id} ({count} modules)")
        return int(count)

    async def update_sub_topic_status(
        self, sub_topic_id: UUID, status: str | SubTopicStatus
    ) -> CurriculumSubTopic:
        """Record teaching progress on one sub-topic.

        IN_PROGRESS stamps the actual start date if unset. COMPLETED stamps
        the actual start (if unset) and the actual end with today. PENDING
        clears both actual dates.

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the sub-topic does not exist
        """
        try:
            new_status = SubTopicStatus(status)
        except ValueError as e:
            raise ValidationError(f"Invalid status: {status!r}") from e

        async with atomic(self.db):
            sub_topic = await self.db.get(CurriculumSubTopic, sub_topic_id)
            if sub_topic is None:
                raise NotFoundError(f"Sub-topic not found with ID: {sub_topic_id}")

            day = today(self.clock, self.tz)
            if new_status == SubTopicStatus.PENDING:
                sub_topic.actual_start_date = None
                sub_topic.actual_end_date = None
            else:
                if sub_topic.actual_start_date is None:
                    sub_topic.actual_start_date = day
                if new_status == SubTopicStatus.COMPLETED:
                    sub_topic.actual_end_date = day
                else:
                    sub_topic.actual_end_date = None
            sub_topic.status = new_status.value

        return sub_topic

    async def _delete_tree(self, subject_id: UUID) -> None:
        """Delete sub-topics, topics and modules of a subject, leaves first."""
        module_ids = select(CurriculumModule.id).where(CurriculumModule.subject_id == subject_id)
        topic_ids = select(CurriculumTopic.id).where(CurriculumTopic.module_id.in_(module_ids))

        await self.db.execute(
            delete(CurriculumSubTopic)
            .where(CurriculumSubTopic.topic_id.in_(topic_ids))
            .execution_options(synchronize_session="fetch")
        )
        await self.db.execute(
            delete(CurriculumTopic)
            .where(CurriculumTopic.module_id.in_(module_ids))
            .execution_options(synchronize_session="fetch")
        )
        await self.db.execute(
            delete(CurriculumModule)
            .where(CurriculumModule.subject_id == subject_id)
            .execution_options(synchronize_session="fetch")
        )
