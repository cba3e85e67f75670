"""Data models for registration batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ConflictType(StrEnum):
    """Why a batch item was rejected."""

    CLASS_FULL = "class_full"
    VOLUNTEER_FULL = "volunteer_full"
    CHILD_CONFLICT = "child_conflict"
    GUARDIAN_CONFLICT = "guardian_conflict"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ClassRequest:
    """Register a child into a schedule entry."""

    child_id: str
    schedule_id: str


@dataclass(frozen=True)
class VolunteerRequest:
    """Commit a guardian as a volunteer.

    Class-based types (teacher, helper, co_teacher) name a schedule_id and
    take its period. Volunteer jobs name a volunteer_job_id; period-based
    jobs also name the period, non-period jobs do not.
    """

    guardian_id: str
    volunteer_type: str
    schedule_id: str | None = None
    volunteer_job_id: str | None = None
    period: str | None = None


@dataclass
class RegistrationRequest:
    """One family's batch of registrations for a session.

    Attributes:
        session_id: Session (term) to register for
        submitted_by: Guardian submitting the batch
        classes: Child-to-class pairings
        volunteers: Guardian volunteer commitments
        request_override: Ask an admin to accept the batch when volunteer
            hours are short
    """

    session_id: str
    submitted_by: str
    classes: list[ClassRequest] = field(default_factory=list)
    volunteers: list[VolunteerRequest] = field(default_factory=list)
    request_override: bool = False


@dataclass(frozen=True)
class Conflict:
    """A single rejected batch item."""

    type: ConflictType
    message: str
    child_id: str | None = None
    guardian_id: str | None = None
    schedule_id: str | None = None


@dataclass
class RegistrationResult:
    """Outcome of a committed batch."""

    family_id: str
    session_id: str
    status: str
    registration_ids: list[str] = field(default_factory=list)
    assignment_ids: list[str] = field(default_factory=list)
    required_hours: int = 0
    fulfilled_hours: int = 0
    pending_override: bool = False


@dataclass(frozen=True)
class ClassAvailability:
    """A published class as families see it when registering."""

    schedule_id: str
    class_teaching_request_id: str
    class_name: str
    description: str
    grade_range: str
    period: str
    classroom_name: str
    teacher_name: str
    max_students: int
    registered_count: int
    helpers_needed: int
    helper_count: int
    fee_amount: float

    @property
    def seats_available(self) -> int:
        return max(0, self.max_students - self.registered_count)

    @property
    def helper_spots_available(self) -> int:
        return max(0, self.helpers_needed - self.helper_count)
