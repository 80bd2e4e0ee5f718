"""
Progress Module

Per-subject progress snapshots and their roll-up across the organization.
"""

from .aggregator import OrgLevel, ProgressBucket, UnitSummary, aggregate, classify
from .calculator import ProgressSnapshot, WindowProgress, calculate_progress, window_progress
from .service import DivisionWindow, ProgressService, SubjectWindow

__all__ = [
    "DivisionWindow",
    "OrgLevel",
    "ProgressBucket",
    "ProgressService",
    "ProgressSnapshot",
    "SubjectWindow",
    "UnitSummary",
    "WindowProgress",
    "aggregate",
    "calculate_progress",
    "classify",
    "window_progress",
]
