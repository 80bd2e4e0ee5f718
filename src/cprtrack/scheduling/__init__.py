"""
Scheduling Module

Weekly schedule generation, room/teacher conflict detection and timetable edits.
"""

from .conflicts import Conflict, ConflictDetector
from .generator import ScheduleCandidate, ScheduleTemplateItem, WeeklySchedule
from .intervals import TimeRange, overlaps
from .service import SessionChanges, SessionFilters, TimetableService, WeeklyScheduleRequest

__all__ = [
    "Conflict",
    "ConflictDetector",
    "ScheduleCandidate",
    "ScheduleTemplateItem",
    "SessionChanges",
    "SessionFilters",
    "TimeRange",
    "TimetableService",
    "WeeklySchedule",
    "WeeklyScheduleRequest",
    "overlaps",
]
