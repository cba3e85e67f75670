"""Scheduling - live schedule draft/publish cycle and the draft sandbox."""

from coopreg.scheduling.manager import ScheduleManager
from coopreg.scheduling.models import (
    DraftDetail,
    DraftSummary,
    ScheduleConflict,
    ScheduledClass,
    ScheduleView,
    SlotAssignment,
)

__all__ = [
    "DraftDetail",
    "DraftSummary",
    "ScheduleConflict",
    "ScheduleManager",
    "ScheduleView",
    "ScheduledClass",
    "SlotAssignment",
]
