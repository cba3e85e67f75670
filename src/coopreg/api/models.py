"""Pydantic models for REST API."""

from datetime import date, datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from coopreg.fees import FeeSummary
from coopreg.store.models import EventType, JobType, PaymentMethod, Period, VolunteerType

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Auth proxy models


class AccountRegister(BaseModel):
    """Request model for creating an account at the identity provider."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=255)
    confirm_password: str
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @model_validator(mode="after")
    def passwords_match(self) -> "AccountRegister":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ForgotPassword(BaseModel):
    """Request model for starting a password reset."""

    email: str = Field(..., min_length=3, max_length=255)


class ResetPassword(BaseModel):
    """Request model for completing a password reset."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=255)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPassword":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class RoleResponse(BaseModel):
    """Response model for the caller's role."""

    user_id: str
    role: str


class RoleUpdate(BaseModel):
    """Request model for changing a user's role."""

    role: Literal["user", "member", "moderator", "admin"]


# Family models


class ChildCreate(BaseModel):
    """Request model for adding a child."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date | None = None
    grade: str | None = Field(default=None, max_length=20)
    allergies: str | None = None
    medical_notes: str | None = None


class ChildUpdate(BaseModel):
    """Request model for updating a child (partial update)."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    date_of_birth: date | None = None
    grade: str | None = Field(default=None, max_length=20)
    allergies: str | None = None
    medical_notes: str | None = None


class ChildResponse(BaseModel):
    """Response model for a child."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    family_id: str
    first_name: str
    last_name: str
    date_of_birth: date | None
    grade: str | None
    allergies: str | None
    medical_notes: str | None


class GuardianInfo(BaseModel):
    """The registering guardian's own details."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str | None = Field(default=None, max_length=50)


class FamilyInfo(BaseModel):
    """Household contact details."""

    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)


class FamilyCreate(BaseModel):
    """Request model for registering a family."""

    family: FamilyInfo
    guardian: GuardianInfo
    children: list[ChildCreate] = Field(default_factory=list)


class FamilyUpdate(BaseModel):
    """Request model for updating family contact details (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    phone: str | None = Field(default=None, min_length=1, max_length=50)
    email: str | None = Field(default=None, min_length=3, max_length=255)


class FamilyJoin(BaseModel):
    """Request model for joining a family by sharing code."""

    sharing_code: str = Field(..., min_length=6, max_length=6)
    guardian: GuardianInfo


class GuardianResponse(BaseModel):
    """Response model for a guardian."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    family_id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_main_contact: bool
    phone: str | None


class FamilyResponse(BaseModel):
    """Response model for a family with its guardians and children."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str
    phone: str
    email: str
    sharing_code: str
    guardians: list[GuardianResponse] = Field(default_factory=list)
    children: list[ChildResponse] = Field(default_factory=list)


def family_to_response(
    family: Any, guardians: list[Any] | None = None, children: list[Any] | None = None
) -> FamilyResponse:
    """Convert a Family model and its members to FamilyResponse."""
    return FamilyResponse(
        id=family.id,
        name=family.name,
        address=family.address,
        phone=family.phone,
        email=family.email,
        sharing_code=family.sharing_code,
        guardians=[GuardianResponse.model_validate(g) for g in guardians or []],
        children=[ChildResponse.model_validate(c) for c in children or []],
    )


# Session models


class SessionCreate(BaseModel):
    """Request model for creating a session."""

    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    registration_start_date: date
    registration_end_date: date
    teacher_registration_start_date: date | None = None
    description: str | None = None
    is_active: bool = False


class SessionUpdate(BaseModel):
    """Request model for updating a session (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    start_date: date | None = None
    end_date: date | None = None
    registration_start_date: date | None = None
    registration_end_date: date | None = None
    teacher_registration_start_date: date | None = None
    description: str | None = None
    is_active: bool | None = None


class SessionResponse(BaseModel):
    """Response model for a session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    start_date: date
    end_date: date
    registration_start_date: date
    registration_end_date: date
    teacher_registration_start_date: date | None
    description: str | None
    is_active: bool


# Classroom models


class ClassroomCreate(BaseModel):
    """Request model for creating a classroom."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class ClassroomUpdate(BaseModel):
    """Request model for updating a classroom (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class ClassroomResponse(BaseModel):
    """Response model for a classroom."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None


# Class teaching request models


class TeachingRequestCreate(BaseModel):
    """Request model for proposing a class."""

    class_name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    grade_range: str = Field(..., min_length=1, max_length=50)
    max_students: int = Field(default=20, ge=1, le=100)
    helpers_needed: int = Field(default=1, ge=0, le=20)
    co_teacher: str | None = Field(default=None, max_length=255)
    classroom_needs: str | None = None
    requires_fee: bool = False
    fee_amount: float | None = Field(default=None, ge=0)
    scheduling_requirements: str | None = None


class TeachingRequestUpdate(BaseModel):
    """Request model for editing or reviewing a class request (partial update)."""

    class_name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    grade_range: str | None = Field(default=None, min_length=1, max_length=50)
    max_students: int | None = Field(default=None, ge=1, le=100)
    helpers_needed: int | None = Field(default=None, ge=0, le=20)
    co_teacher: str | None = Field(default=None, max_length=255)
    classroom_needs: str | None = None
    requires_fee: bool | None = None
    fee_amount: float | None = Field(default=None, ge=0)
    scheduling_requirements: str | None = None
    status: Literal["approved", "rejected"] | None = None
    review_notes: str | None = None


class TeachingRequestResponse(BaseModel):
    """Response model for a class teaching request."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    guardian_id: str
    class_name: str
    description: str
    grade_range: str
    max_students: int
    helpers_needed: int
    co_teacher: str | None
    classroom_needs: str | None
    requires_fee: bool
    fee_amount: float | None
    scheduling_requirements: str | None
    status: str
    reviewed_by: str | None
    reviewed_at: datetime | None
    review_notes: str | None
    created_at: datetime


# Schedule models


class SlotRequest(BaseModel):
    """A class placement in a classroom and period."""

    class_teaching_request_id: str
    classroom_id: str
    period: Period


class ScheduleSave(BaseModel):
    """Request model for replacing a session's whole schedule."""

    entries: list[SlotRequest] = Field(default_factory=list)


class ScheduleResponse(BaseModel):
    """Response model for a live schedule row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    class_teaching_request_id: str
    classroom_id: str
    period: str
    status: str


class ScheduledClassResponse(ScheduleResponse):
    """Response model for a live schedule row with display detail."""

    class_name: str
    classroom_name: str
    teacher_name: str


class ScheduleViewResponse(BaseModel):
    """Response model for a session's schedule planning view."""

    session_id: str
    entries: list[ScheduledClassResponse]
    approved_classes: list[TeachingRequestResponse]
    classrooms: list[ClassroomResponse]


def schedule_view_to_response(view: Any) -> ScheduleViewResponse:
    """Convert a ScheduleView to ScheduleViewResponse."""
    return ScheduleViewResponse(
        session_id=view.session_id,
        entries=[
            ScheduledClassResponse(
                **ScheduleResponse.model_validate(e.schedule).model_dump(),
                class_name=e.class_name,
                classroom_name=e.classroom_name,
                teacher_name=e.teacher_name,
            )
            for e in view.entries
        ],
        approved_classes=[TeachingRequestResponse.model_validate(r) for r in view.approved_classes],
        classrooms=[ClassroomResponse.model_validate(c) for c in view.classrooms],
    )


class StatusChangeResponse(BaseModel):
    """Response model for publish/pullback."""

    session_id: str
    status: str
    updated: int


class DraftCreate(BaseModel):
    """Request model for creating a schedule draft."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    entries: list[SlotRequest] = Field(default_factory=list)


class DraftUpdate(BaseModel):
    """Request model for updating a schedule draft (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    entries: list[SlotRequest] | None = None
    is_active: bool | None = None


class DraftEntryResponse(BaseModel):
    """Response model for a schedule draft entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    class_teaching_request_id: str
    classroom_id: str
    period: str


class DraftResponse(BaseModel):
    """Response model for a schedule draft."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    created_by: str
    name: str
    description: str | None
    is_active: bool
    created_at: datetime
    entry_count: int | None = None
    entries: list[DraftEntryResponse] | None = None


class ScheduleConflictResponse(BaseModel):
    """Response model for a double-booked classroom and period."""

    classroom_id: str
    period: str
    class_teaching_request_ids: list[str]
    draft_ids: list[str]


class DraftListResponse(BaseModel):
    """Response model for a session's drafts with advisory conflicts."""

    drafts: list[DraftResponse]
    conflicts: list[ScheduleConflictResponse]


def draft_to_response(
    draft: Any, entry_count: int | None = None, entries: list[Any] | None = None
) -> DraftResponse:
    """Convert a ScheduleDraft model to DraftResponse."""
    response = DraftResponse.model_validate(draft)
    response.entry_count = entry_count
    if entries is not None:
        response.entries = [DraftEntryResponse.model_validate(e) for e in entries]
        response.entry_count = len(entries)
    return response


def conflict_to_response(conflict: Any) -> ScheduleConflictResponse:
    """Convert a ScheduleConflict to ScheduleConflictResponse."""
    return ScheduleConflictResponse(
        classroom_id=conflict.classroom_id,
        period=conflict.period,
        class_teaching_request_ids=list(conflict.class_teaching_request_ids),
        draft_ids=list(conflict.draft_ids),
    )


# Registration models


class ClassRegistrationItem(BaseModel):
    """A child to register into a published class."""

    child_id: str
    schedule_id: str


class VolunteerItem(BaseModel):
    """A guardian volunteer commitment."""

    guardian_id: str
    volunteer_type: VolunteerType
    schedule_id: str | None = None
    volunteer_job_id: str | None = None
    period: Period | None = None


class BatchRegistration(BaseModel):
    """Request model for a family's registration batch."""

    session_id: str
    registrations: list[ClassRegistrationItem] = Field(default_factory=list)
    volunteer_assignments: list[VolunteerItem] = Field(default_factory=list)
    request_admin_override: bool = False


class RegistrationResultResponse(BaseModel):
    """Response model for a committed registration batch."""

    family_id: str
    session_id: str
    status: str
    registration_ids: list[str]
    assignment_ids: list[str]
    required_hours: int
    fulfilled_hours: int
    pending_override: bool


class ClassAvailabilityResponse(BaseModel):
    """Response model for a published class open for registration."""

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
    seats_available: int
    helpers_needed: int
    helper_count: int
    helper_spots_available: int
    fee_amount: float


def availability_to_response(item: Any) -> ClassAvailabilityResponse:
    """Convert a ClassAvailability to ClassAvailabilityResponse."""
    return ClassAvailabilityResponse(
        schedule_id=item.schedule_id,
        class_teaching_request_id=item.class_teaching_request_id,
        class_name=item.class_name,
        description=item.description,
        grade_range=item.grade_range,
        period=item.period,
        classroom_name=item.classroom_name,
        teacher_name=item.teacher_name,
        max_students=item.max_students,
        registered_count=item.registered_count,
        seats_available=item.seats_available,
        helpers_needed=item.helpers_needed,
        helper_count=item.helper_count,
        helper_spots_available=item.helper_spots_available,
        fee_amount=item.fee_amount,
    )


class ClassRegistrationResponse(BaseModel):
    """Response model for a class registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    schedule_id: str
    child_id: str
    period: str
    status: str


class AssignmentResponse(BaseModel):
    """Response model for a volunteer assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    guardian_id: str
    period: str
    volunteer_type: str
    schedule_id: str | None
    volunteer_job_id: str | None
    status: str


class FamilyStatusResponse(BaseModel):
    """Response model for a family's registration progress in a session."""

    family_id: str
    session_id: str
    status: str
    volunteer_requirements_met: bool = False
    admin_override: bool = False
    admin_override_reason: str | None = None
    registrations: list[ClassRegistrationResponse] = Field(default_factory=list)
    assignments: list[AssignmentResponse] = Field(default_factory=list)


class OverrideDecision(BaseModel):
    """Request model for resolving an override request."""

    action: Literal["approve", "deny"]
    reason: str | None = None


class RegistrationStatusResponse(BaseModel):
    """Response model for a family registration status record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    family_id: str
    session_id: str
    status: str
    volunteer_requirements_met: bool
    admin_override: bool
    admin_override_reason: str | None
    overridden_by: str | None
    overridden_at: datetime | None
    completed_at: datetime | None


class PendingOverrideResponse(RegistrationStatusResponse):
    """Response model for an override awaiting a decision."""

    family_name: str
    session_name: str


# Fee models


class FeeConfigUpdate(BaseModel):
    """Request model for setting a session's fees."""

    first_child_fee: float = Field(..., ge=0)
    additional_child_fee: float = Field(..., ge=0)
    due_date: date


class FeeConfigResponse(BaseModel):
    """Response model for a session's fee configuration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    first_child_fee: float
    additional_child_fee: float
    due_date: date


class FamilyFeeResponse(BaseModel):
    """Response model for a family's session fee."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    family_id: str
    registration_fee: float
    class_fees: float
    total_fee: float
    paid_amount: float
    remaining_amount: float = 0.0
    is_overdue: bool = False
    status: str
    due_date: date
    calculated_at: datetime


def fee_to_response(fee: Any, today: date) -> FamilyFeeResponse:
    """Convert a FamilySessionFee model to FamilyFeeResponse.

    Args:
        fee: The stored fee snapshot
        today: Date the overdue flag is judged against
    """
    summary = FeeSummary(
        total_fee=fee.total_fee,
        paid_amount=fee.paid_amount,
        due_date=fee.due_date,
        status=fee.status,
    )
    response = FamilyFeeResponse.model_validate(fee)
    response.remaining_amount = summary.remaining_amount
    response.is_overdue = summary.is_overdue(today)
    return response


class RecalculateRequest(BaseModel):
    """Request model for recalculating fees."""

    session_id: str
    family_id: str | None = None


class PaymentCreate(BaseModel):
    """Request model for recording a payment."""

    family_id: str
    session_id: str | None = None
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod
    payment_date: date | None = None
    notes: str | None = None


class PaymentResponse(BaseModel):
    """Response model for a payment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    family_id: str
    session_id: str | None
    family_session_fee_id: str | None
    amount: float
    payment_date: date
    payment_method: str
    notes: str | None
    created_at: datetime


# Volunteer job models


class VolunteerJobCreate(BaseModel):
    """Request model for creating a volunteer job."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    quantity_available: int = Field(default=1, ge=1)
    job_type: JobType = JobType.NON_PERIOD
    is_active: bool = True
    session_id: str | None = None


class VolunteerJobUpdate(BaseModel):
    """Request model for updating a volunteer job (partial update)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    quantity_available: int | None = Field(default=None, ge=1)
    job_type: JobType | None = None
    is_active: bool | None = None


class VolunteerJobResponse(BaseModel):
    """Response model for a volunteer job."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    quantity_available: int
    job_type: str
    is_active: bool
    created_by: str


class SessionJobOffer(BaseModel):
    """Request model for offering a volunteer job in a session."""

    quantity_available: int | None = Field(default=None, ge=1)
    is_active: bool = True


class SessionJobResponse(BaseModel):
    """Response model for a volunteer job as offered in one session."""

    volunteer_job_id: str
    session_id: str
    title: str
    description: str
    job_type: str
    quantity_available: int
    is_active: bool


def session_job_to_response(offer: Any) -> SessionJobResponse:
    """Convert a SessionVolunteerJob with its job loaded to SessionJobResponse."""
    return SessionJobResponse(
        volunteer_job_id=offer.volunteer_job_id,
        session_id=offer.session_id,
        title=offer.job.title,
        description=offer.job.description,
        job_type=offer.job.job_type,
        quantity_available=offer.quantity_available,
        is_active=offer.is_active,
    )


# Schedule comment models


class ScheduleCommentCreate(BaseModel):
    """Request model for commenting on a session's schedule."""

    comment: str = Field(..., min_length=1)
    is_public: bool = False


class ScheduleCommentResponse(BaseModel):
    """Response model for a schedule comment with its author's name."""

    id: str
    session_id: str
    guardian_id: str
    author_name: str
    comment: str
    is_public: bool
    created_at: datetime


def comment_to_response(comment: Any) -> ScheduleCommentResponse:
    """Convert a ScheduleComment with its author loaded to ScheduleCommentResponse."""
    return ScheduleCommentResponse(
        id=comment.id,
        session_id=comment.session_id,
        guardian_id=comment.guardian_id,
        author_name=f"{comment.author.first_name} {comment.author.last_name}",
        comment=comment.comment,
        is_public=comment.is_public,
        created_at=comment.created_at,
    )


# Event models


class EventCreate(BaseModel):
    """Request model for creating an event."""

    title: str = Field(..., min_length=1, max_length=255)
    start_date: date
    description: str | None = None
    end_date: date | None = None
    start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    is_all_day: bool = False
    event_type: EventType = EventType.GENERAL
    session_id: str | None = None
    location: str | None = Field(default=None, max_length=255)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    is_public: bool = True


class EventUpdate(BaseModel):
    """Request model for updating an event (partial update)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    start_date: date | None = None
    description: str | None = None
    end_date: date | None = None
    start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    is_all_day: bool | None = None
    event_type: EventType | None = None
    session_id: str | None = None
    location: str | None = Field(default=None, max_length=255)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    is_public: bool | None = None


class EventResponse(BaseModel):
    """Response model for a stored event."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    start_date: date
    end_date: date | None
    start_time: str | None
    end_time: str | None
    is_all_day: bool
    event_type: str
    session_id: str | None
    location: str | None
    color: str
    is_public: bool
    created_by: str


class CalendarEntryResponse(BaseModel):
    """Response model for one calendar entry, stored or derived from a session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    start_date: date
    end_date: date | None
    start_time: str | None
    end_time: str | None
    is_all_day: bool
    event_type: str
    session_id: str | None
    location: str | None
    color: str
    created_by: str | None


# Admin listing models


class UserListResponse(BaseModel):
    """Response model for a page of identity provider users."""

    users: list[dict[str, Any]]
    pagination: dict[str, Any] | None = None
