"""
CPRTrack SQLAlchemy Models
"""

from .base import Base, OrderedMixin, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin
from .curriculum import CurriculumModule, CurriculumSubTopic, CurriculumTopic, SubTopicStatus
from .organization import Batch, Center, Division, Room, School, Semester, Subject, Teacher
from .timetable import ClassSession

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    "OrderedMixin",
    "UTCDateTime",
    # Organization
    "Center",
    "School",
    "Batch",
    "Division",
    "Semester",
    "Teacher",
    "Room",
    "Subject",
    # Curriculum
    "CurriculumModule",
    "CurriculumTopic",
    "CurriculumSubTopic",
    "SubTopicStatus",
    # Timetable
    "ClassSession",
]
