"""
SQLAlchemy Base Model, Column Types and Mixins

Every instant is stored and returned as a timezone-aware UTC datetime,
whatever the backing database does with offsets.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, event, func
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from cprtrack.core.clock import ensure_utc


class UTCDateTime(TypeDecorator[datetime]):
    """DateTime(timezone=True) that normalizes values to aware UTC.

    SQLite drops offsets and hands back naive values; those are read as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        return None if value is None else ensure_utc(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        return None if value is None else ensure_utc(value)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin for UUID primary key.

    Ids are assigned at construction so parent and child rows can be linked
    before the first flush.
    """

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4, comment="UUID primary key")


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Last update timestamp (UTC)",
    )


class OrderedMixin:
    """1-based position among siblings, in first-seen import order."""

    order: Mapped[int] = mapped_column(Integer, nullable=False, comment="1-based position")


@event.listens_for(UUIDPrimaryKeyMixin, "init", propagate=True)
def assign_id(target, args, kwargs):  # type: ignore[no-untyped-def]
    if "id" not in kwargs:
        target.id = uuid4()


@event.listens_for(TimestampMixin, "init", propagate=True)
def stamp_created(target, args, kwargs):  # type: ignore[no-untyped-def]
    now = datetime.now(UTC)
    target.created_at = kwargs.get("created_at", now)
    target.updated_at = kwargs.get("updated_at", now)
