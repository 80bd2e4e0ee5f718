"""
Integration Tests for the Curriculum Store

Replace semantics, tree reads, deletion and sub-topic status marking.
"""

from datetime import UTC, date, datetime
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cprtrack.core.clock import FixedClock
from cprtrack.core.exceptions import NotFoundError
from cprtrack.core.models import (
    CurriculumModule,
    CurriculumSubTopic,
    CurriculumTopic,
    SubTopicStatus,
)
from cprtrack.core.validation import ValidationError
from cprtrack.curriculum import CurriculumStore
from factories import Org, add_session


def row(module: str, topic: str, sub_topic: str, lecture: int | str) -> dict:
    return {
        "module_name": module,
        "topic_name": topic,
        "sub_topic_name": sub_topic,
        "lecture_number": lecture,
    }


ROWS = [
    row("Basics", "Arrays", "Indexing", 1),
    row("Basics", "Arrays", "Slicing", 1),
    row("Basics", "Strings", "Encoding", 2),
    row("Trees", "BST", "Insert", 3),
    row("", "BST", "Broken", 4),
]


@pytest.fixture
def store(db_session: AsyncSession, ist, clock: FixedClock) -> CurriculumStore:
    return CurriculumStore(db_session, tz=ist, clock=clock)


async def count(db: AsyncSession, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


async def sub_topic_named(db: AsyncSession, name: str) -> CurriculumSubTopic:
    result = await db.execute(select(CurriculumSubTopic).where(CurriculumSubTopic.name == name))
    return result.scalar_one()


class TestReplace:
    async def test_builds_ordered_tree(self, store: CurriculumStore, org: Org):
        result = await store.replace(org.subject.id, ROWS)

        assert (result.modules, result.topics, result.sub_topics) == (2, 3, 4)
        assert result.skipped_rows == 1

        tree = await store.get_tree(org.subject.id)
        assert [(m.order, m.name) for m in tree.modules] == [(1, "Basics"), (2, "Trees")]
        basics = tree.modules[0]
        assert [(t.order, t.name) for t in basics.topics] == [(1, "Arrays"), (2, "Strings")]
        assert [(s.order, s.name) for s in basics.topics[0].sub_topics] == [
            (1, "Indexing"),
            (2, "Slicing"),
        ]
        assert all(
            s.status == SubTopicStatus.PENDING
            for m in tree.modules
            for t in m.topics
            for s in t.sub_topics
        )

    async def test_reimport_wipes_previous_tree_and_progress(
        self, store: CurriculumStore, org: Org, db_session: AsyncSession
    ):
        await store.replace(org.subject.id, ROWS)
        old = await sub_topic_named(db_session, "Indexing")
        old_id = old.id
        await store.update_sub_topic_status(old_id, SubTopicStatus.COMPLETED)

        await store.replace(org.subject.id, ROWS[:2])

        assert await count(db_session, CurriculumModule) == 1
        assert await count(db_session, CurriculumTopic) == 1
        assert await count(db_session, CurriculumSubTopic) == 2
        fresh = await sub_topic_named(db_session, "Indexing")
        assert fresh.id != old_id
        assert fresh.status == SubTopicStatus.PENDING
        assert fresh.actual_start_date is None
        assert await db_session.get(CurriculumSubTopic, old_id) is None

    async def test_recomputes_planned_dates_from_timetable(
        self, store: CurriculumStore, org: Org, db_session: AsyncSession
    ):
        start = datetime(2026, 1, 13, 4, 30, tzinfo=UTC)
        await add_session(db_session, org, start, start.replace(hour=5), "2")

        result = await store.replace(org.subject.id, ROWS)

        assert result.planned_lectures == 1
        encoding = await sub_topic_named(db_session, "Encoding")
        assert encoding.planned_start_date == date(2026, 1, 13)
        assert encoding.planned_end_date == date(2026, 1, 13)

    async def test_oversized_lecture_number_is_skipped(
        self, store: CurriculumStore, org: Org, db_session: AsyncSession
    ):
        rows = [*ROWS[:2], row("Trees", "BST", "Huge", "1" + "0" * 20)]

        result = await store.replace(org.subject.id, rows)

        assert result.sub_topics == 2
        assert result.skipped_rows == 1
        assert await count(db_session, CurriculumSubTopic) == 2

    async def test_unknown_subject(self, store: CurriculumStore):
        with pytest.raises(NotFoundError, match="Subject not found"):
            await store.replace(uuid4(), ROWS)

    async def test_no_valid_rows_keeps_existing_tree(
        self, store: CurriculumStore, org: Org, db_session: AsyncSession
    ):
        await store.replace(org.subject.id, ROWS)

        with pytest.raises(ValidationError, match="no valid rows"):
            await store.replace(org.subject.id, [ROWS[-1]])

        assert await count(db_session, CurriculumSubTopic) == 4

    async def test_failure_mid_replace_rolls_back(
        self, store: CurriculumStore, org: Org, db_session: AsyncSession
    ):
        subject_id = org.subject.id
        await store.replace(subject_id, ROWS)

        with patch(
            "cprtrack.curriculum.store.recompute_planned_dates",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(RuntimeError):
                await store.replace(subject_id, ROWS[:1])

        tree = await store.get_tree(subject_id)
        assert tree.summary.total_sub_topics == 4


class TestTreeAndDelete:
    async def test_summary_counts(self, store: CurriculumStore, org: Org, db_session: AsyncSession):
        await store.replace(org.subject.id, ROWS)
        await store.update_sub_topic_status(
            (await sub_topic_named(db_session, "Indexing")).id, SubTopicStatus.COMPLETED
        )
        await store.update_sub_topic_status(
            (await sub_topic_named(db_session, "Insert")).id, SubTopicStatus.IN_PROGRESS
        )

        summary = (await store.get_tree(org.subject.id)).summary

        assert summary.total_modules == 2
        assert summary.total_topics == 3
        assert summary.total_sub_topics == 4
        assert summary.total_lectures == 3
        assert summary.completed_sub_topics == 1
        assert summary.in_progress_sub_topics == 1
        assert summary.pending_sub_topics == 2
        assert summary.completion_percentage == 25

    async def test_empty_tree(self, store: CurriculumStore, org: Org):
        tree = await store.get_tree(org.subject.id)

        assert tree.modules == []
        assert tree.summary.total_sub_topics == 0
        assert tree.summary.completion_percentage == 0

    async def test_delete(self, store: CurriculumStore, org: Org, db_session: AsyncSession):
        await store.replace(org.subject.id, ROWS)

        deleted = await store.delete(org.subject.id)

        assert deleted == 2
        assert await count(db_session, CurriculumSubTopic) == 0
        assert await count(db_session, CurriculumTopic) == 0

    async def test_delete_without_curriculum(self, store: CurriculumStore, org: Org):
        with pytest.raises(NotFoundError, match="No curriculum found"):
            await store.delete(org.subject.id)


class TestStatusUpdates:
    async def test_status_transitions_stamp_actual_dates(
        self, org: Org, db_session: AsyncSession, ist
    ):
        clock = FixedClock(datetime(2026, 1, 5, 6, tzinfo=UTC))
        store = CurriculumStore(db_session, tz=ist, clock=clock)
        await store.replace(org.subject.id, ROWS)
        sub_topic_id = (await sub_topic_named(db_session, "Indexing")).id

        started = await store.update_sub_topic_status(sub_topic_id, "IN_PROGRESS")
        assert started.actual_start_date == date(2026, 1, 5)
        assert started.actual_end_date is None

        store.clock = FixedClock(datetime(2026, 1, 8, 6, tzinfo=UTC))
        completed = await store.update_sub_topic_status(sub_topic_id, "COMPLETED")
        assert completed.status == SubTopicStatus.COMPLETED
        assert completed.actual_start_date == date(2026, 1, 5)
        assert completed.actual_end_date == date(2026, 1, 8)

        reset = await store.update_sub_topic_status(sub_topic_id, "PENDING")
        assert reset.actual_start_date is None
        assert reset.actual_end_date is None

    async def test_completing_unstarted_topic_sets_both_dates(
        self, store: CurriculumStore, org: Org, db_session: AsyncSession
    ):
        await store.replace(org.subject.id, ROWS)
        sub_topic_id = (await sub_topic_named(db_session, "Slicing")).id

        completed = await store.update_sub_topic_status(sub_topic_id, SubTopicStatus.COMPLETED)

        # Clock is 12:00 IST on 10 Jan 2026
        assert completed.actual_start_date == date(2026, 1, 10)
        assert completed.actual_end_date == date(2026, 1, 10)

    async def test_invalid_status(self, store: CurriculumStore):
        with pytest.raises(ValidationError, match="Invalid status"):
            await store.update_sub_topic_status(uuid4(), "DONE")

    async def test_unknown_sub_topic(self, store: CurriculumStore):
        with pytest.raises(NotFoundError, match="Sub-topic not found"):
            await store.update_sub_topic_status(uuid4(), "COMPLETED")
