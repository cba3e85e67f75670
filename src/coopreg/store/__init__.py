"""Record store - persistent storage for families, sessions, schedules and fees."""

from coopreg.store.database import Database
from coopreg.store.events import CalendarEntry
from coopreg.store.exceptions import (
    ChildNotFoundError,
    ClassroomNotFoundError,
    DraftNotFoundError,
    EventNotFoundError,
    FamilyFeeNotFoundError,
    FamilyNotFoundError,
    FeeConfigNotFoundError,
    GuardianExistsError,
    GuardianNotFoundError,
    NotFoundError,
    RegistrationStatusNotFoundError,
    ScheduleNotFoundError,
    SessionNotFoundError,
    StateConflictError,
    StoreError,
    TeachingRequestNotFoundError,
    ValidationError,
    VolunteerJobNotFoundError,
)
from coopreg.store.models import (
    NON_PERIOD,
    AssignmentStatus,
    Child,
    ClassRegistration,
    Classroom,
    ClassTeachingRequest,
    CoopSession,
    Event,
    EventType,
    Family,
    FamilyRegistrationStatus,
    FamilySessionFee,
    FamilyStatus,
    FeePayment,
    FeeStatus,
    Guardian,
    JobType,
    PaymentMethod,
    Period,
    RegistrationStatus,
    RequestStatus,
    Schedule,
    ScheduleComment,
    ScheduleDraft,
    ScheduleDraftEntry,
    ScheduleStatus,
    SessionFeeConfig,
    SessionVolunteerJob,
    VolunteerAssignment,
    VolunteerJob,
    VolunteerType,
)
from coopreg.store.store import CoopStore

__all__ = [
    "NON_PERIOD",
    "AssignmentStatus",
    "CalendarEntry",
    "Child",
    "ChildNotFoundError",
    "ClassRegistration",
    "ClassTeachingRequest",
    "Classroom",
    "ClassroomNotFoundError",
    "CoopSession",
    "CoopStore",
    "Database",
    "DraftNotFoundError",
    "Event",
    "EventNotFoundError",
    "EventType",
    "Family",
    "FamilyFeeNotFoundError",
    "FamilyNotFoundError",
    "FamilyRegistrationStatus",
    "FamilySessionFee",
    "FamilyStatus",
    "FeeConfigNotFoundError",
    "FeePayment",
    "FeeStatus",
    "Guardian",
    "GuardianExistsError",
    "GuardianNotFoundError",
    "JobType",
    "NotFoundError",
    "PaymentMethod",
    "Period",
    "RegistrationStatus",
    "RegistrationStatusNotFoundError",
    "RequestStatus",
    "Schedule",
    "ScheduleComment",
    "ScheduleDraft",
    "ScheduleDraftEntry",
    "ScheduleNotFoundError",
    "ScheduleStatus",
    "SessionFeeConfig",
    "SessionNotFoundError",
    "SessionVolunteerJob",
    "StateConflictError",
    "StoreError",
    "TeachingRequestNotFoundError",
    "ValidationError",
    "VolunteerAssignment",
    "VolunteerJob",
    "VolunteerType",
]
