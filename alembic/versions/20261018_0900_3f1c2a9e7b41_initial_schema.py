"""Initial schema: organization, curriculum and timetable

Revision ID: 3f1c2a9e7b41
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9e7b41"  # pragma: allowlist secret
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True, comment="UUID primary key")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            comment="Creation timestamp (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            comment="Last update timestamp (UTC)",
        ),
    ]


def upgrade() -> None:
    # Organization hierarchy
    op.create_table(
        "centers",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.Integer(), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        "schools",
        _id(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("center_id", sa.Uuid(), sa.ForeignKey("centers.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("center_id", "name"),
    )
    op.create_index("ix_schools_center_id", "schools", ["center_id"])

    op.create_table(
        "batches",
        _id(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("school_id", sa.Uuid(), sa.ForeignKey("schools.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_batches_school_id", "batches", ["school_id"])

    op.create_table(
        "divisions",
        _id(),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("batch_id", sa.Uuid(), sa.ForeignKey("batches.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("batch_id", "code"),
    )
    op.create_index("ix_divisions_batch_id", "divisions", ["batch_id"])

    op.create_table(
        "semesters",
        _id(),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("division_id", sa.Uuid(), sa.ForeignKey("divisions.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_semesters_division_id", "semesters", ["division_id"])

    op.create_table(
        "teachers",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_table(
        "rooms",
        _id(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        "subjects",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("semester_id", sa.Uuid(), sa.ForeignKey("semesters.id"), nullable=False),
        sa.Column("teacher_id", sa.Uuid(), sa.ForeignKey("teachers.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_subjects_semester_id", "subjects", ["semester_id"])
    op.create_index("ix_subjects_teacher_id", "subjects", ["teacher_id"])

    # Curriculum tree
    op.create_table(
        "curriculum_modules",
        _id(),
        sa.Column(
            "subject_id",
            sa.Uuid(),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, comment="1-based position"),
        *_timestamps(),
        sa.UniqueConstraint("subject_id", "order"),
    )
    op.create_index("ix_curriculum_modules_subject_id", "curriculum_modules", ["subject_id"])

    op.create_table(
        "curriculum_topics",
        _id(),
        sa.Column(
            "module_id",
            sa.Uuid(),
            sa.ForeignKey("curriculum_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, comment="1-based position"),
        *_timestamps(),
        sa.UniqueConstraint("module_id", "order"),
    )
    op.create_index("ix_curriculum_topics_module_id", "curriculum_topics", ["module_id"])

    op.create_table(
        "curriculum_sub_topics",
        _id(),
        sa.Column(
            "topic_id",
            sa.Uuid(),
            sa.ForeignKey("curriculum_topics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, comment="1-based position"),
        sa.Column(
            "lecture_number",
            sa.Integer(),
            nullable=False,
            comment="Join key to ClassSession.lecture_number",
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("planned_start_date", sa.Date(), nullable=True),
        sa.Column("planned_end_date", sa.Date(), nullable=True),
        sa.Column("actual_start_date", sa.Date(), nullable=True),
        sa.Column("actual_end_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("topic_id", "order"),
        sa.CheckConstraint("lecture_number >= 1", name="check_lecture_number_positive"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'IN_PROGRESS', 'COMPLETED')", name="check_sub_topic_status"
        ),
    )
    op.create_index("ix_curriculum_sub_topics_topic_id", "curriculum_sub_topics", ["topic_id"])
    op.create_index(
        "ix_curriculum_sub_topics_lecture_number", "curriculum_sub_topics", ["lecture_number"]
    )

    # Timetable
    op.create_table(
        "class_sessions",
        _id(),
        sa.Column(
            "subject_id",
            sa.Uuid(),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("division_id", sa.Uuid(), sa.ForeignKey("divisions.id"), nullable=False),
        sa.Column("teacher_id", sa.Uuid(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("room_id", sa.Uuid(), sa.ForeignKey("rooms.id"), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "lecture_number",
            sa.String(20),
            nullable=False,
            comment="Matches CurriculumSubTopic.lecture_number",
        ),
        sa.Column(
            "calendar_event_id",
            sa.String(255),
            nullable=True,
            comment="External calendar event id (best effort)",
        ),
        *_timestamps(),
        sa.CheckConstraint("end_at > start_at", name="check_session_time_order"),
    )
    op.create_index("ix_class_sessions_subject_id", "class_sessions", ["subject_id"])
    op.create_index("idx_class_sessions_room_start", "class_sessions", ["room_id", "start_at"])
    op.create_index(
        "idx_class_sessions_teacher_start", "class_sessions", ["teacher_id", "start_at"]
    )


def downgrade() -> None:
    op.drop_table("class_sessions")
    op.drop_table("curriculum_sub_topics")
    op.drop_table("curriculum_topics")
    op.drop_table("curriculum_modules")
    op.drop_table("subjects")
    op.drop_table("rooms")
    op.drop_table("teachers")
    op.drop_table("semesters")
    op.drop_table("divisions")
    op.drop_table("batches")
    op.drop_table("schools")
    op.drop_table("centers")
