"""Data models for schedule planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coopreg.store.models import (
        Classroom,
        ClassTeachingRequest,
        Schedule,
        ScheduleDraft,
        ScheduleDraftEntry,
    )


@dataclass(frozen=True)
class SlotAssignment:
    """A class placed in a classroom for a period (live or draft)."""

    class_teaching_request_id: str
    classroom_id: str
    period: str


@dataclass
class ScheduledClass:
    """A live schedule row with the details an admin needs to see."""

    schedule: Schedule
    class_name: str
    classroom_name: str
    teacher_name: str


@dataclass
class ScheduleView:
    """Everything needed to plan a session's schedule.

    Attributes:
        entries: Live schedule rows with class, room and teacher detail
        approved_classes: Approved class requests that can be placed
        classrooms: Every classroom
    """

    session_id: str
    entries: list[ScheduledClass] = field(default_factory=list)
    approved_classes: list[ClassTeachingRequest] = field(default_factory=list)
    classrooms: list[Classroom] = field(default_factory=list)


@dataclass
class DraftSummary:
    """A schedule draft with its entry count."""

    draft: ScheduleDraft
    entry_count: int


@dataclass
class DraftDetail:
    """A schedule draft with all its entries."""

    draft: ScheduleDraft
    entries: list[ScheduleDraftEntry] = field(default_factory=list)


@dataclass(frozen=True)
class ScheduleConflict:
    """A classroom and period claimed by more than one class.

    Attributes:
        classroom_id: The double-booked classroom
        period: The double-booked period
        class_teaching_request_ids: The competing classes
        draft_ids: Drafts containing the competing entries
    """

    classroom_id: str
    period: str
    class_teaching_request_ids: tuple[str, ...]
    draft_ids: tuple[str, ...]
