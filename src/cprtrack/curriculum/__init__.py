"""
Curriculum Module

Curriculum import, storage and planned-date derivation from the timetable.
"""

from .importer import CurriculumRow, parse_rows
from .planned_dates import recompute_planned_dates
from .store import CurriculumStore, CurriculumSummary, CurriculumTree, ImportResult

__all__ = [
    "CurriculumRow",
    "CurriculumStore",
    "CurriculumSummary",
    "CurriculumTree",
    "ImportResult",
    "parse_rows",
    "recompute_planned_dates",
]
