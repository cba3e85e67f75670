"""SQLAlchemy models for the record store."""

from __future__ import annotations

import secrets
import string
import uuid
from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

from coopreg.fees.models import FeeStatus


class Period(StrEnum):
    """Daily time slots a class can occupy."""

    FIRST = "first"
    SECOND = "second"
    LUNCH = "lunch"
    THIRD = "third"


# Volunteer assignments for jobs that are not tied to a class period
NON_PERIOD = "non_period"


class RequestStatus(StrEnum):
    """Review state of a class teaching request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ScheduleStatus(StrEnum):
    """Publication state of a schedule entry."""

    DRAFT = "draft"
    PUBLISHED = "published"


class RegistrationStatus(StrEnum):
    """State of a child's class registration."""

    REGISTERED = "registered"
    PENDING = "pending"


class AssignmentStatus(StrEnum):
    """State of a guardian's volunteer assignment."""

    ASSIGNED = "assigned"
    PENDING = "pending"


class VolunteerType(StrEnum):
    """Kind of volunteer commitment."""

    TEACHER = "teacher"
    HELPER = "helper"
    CO_TEACHER = "co_teacher"
    VOLUNTEER_JOB = "volunteer_job"


class JobType(StrEnum):
    """Whether a volunteer job occupies a class period."""

    PERIOD_BASED = "period_based"
    NON_PERIOD = "non_period"


class FamilyStatus(StrEnum):
    """Overall registration progress of a family in a session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ADMIN_OVERRIDE = "admin_override"
    DENIED = "denied"


class PaymentMethod(StrEnum):
    """How a payment was made."""

    CASH = "cash"
    CHECK = "check"
    ONLINE = "online"


class EventType(StrEnum):
    """Kind of co-op calendar event."""

    GENERAL = "general"
    SESSION = "session"
    REGISTRATION = "registration"
    DEADLINE = "deadline"
    HOLIDAY = "holiday"


DEFAULT_EVENT_COLOR = "#3b82f6"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def generate_sharing_code(length: int = 6) -> str:
    """Generate an uppercase alphanumeric family sharing code."""
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """created_at/updated_at columns maintained by the database."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Family(TimestampMixin, Base):
    """Family model - a household sharing one fee ledger."""

    __tablename__ = "families"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    sharing_code: Mapped[str] = mapped_column(String(12), nullable=False, unique=True)

    # Relationships
    guardians: Mapped[list[Guardian]] = relationship(
        "Guardian", back_populates="family", cascade="all, delete-orphan", passive_deletes=True
    )
    children: Mapped[list[Child]] = relationship(
        "Child", back_populates="family", cascade="all, delete-orphan", passive_deletes=True
    )

    def __init__(
        self,
        name: str,
        address: str,
        phone: str,
        email: str,
        id: str | None = None,
        sharing_code: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.address = address
        self.phone = phone
        self.email = email
        self.sharing_code = sharing_code if sharing_code is not None else generate_sharing_code()

    def __repr__(self) -> str:
        return f"<Family(id={self.id!r}, name={self.name!r})>"


class Guardian(TimestampMixin, Base):
    """Guardian model - an adult account; id matches the identity provider user id."""

    __tablename__ = "guardians"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_main_contact: Mapped[bool] = mapped_column(Boolean, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Relationships
    family: Mapped[Family] = relationship("Family", back_populates="guardians")

    def __init__(
        self,
        id: str,
        family_id: str,
        email: str,
        first_name: str,
        last_name: str,
        role: str = "user",
        is_main_contact: bool = False,
        phone: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id
        self.family_id = family_id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.role = role
        self.is_main_contact = is_main_contact
        self.phone = phone

    def __repr__(self) -> str:
        return f"<Guardian(id={self.id!r}, family_id={self.family_id!r}, role={self.role!r})>"


class Child(TimestampMixin, Base):
    """Child model - a student belonging to a family."""

    __tablename__ = "children"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    allergies: Mapped[str | None] = mapped_column(Text, nullable=True)
    medical_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    family: Mapped[Family] = relationship("Family", back_populates="children")

    def __init__(
        self,
        family_id: str,
        first_name: str,
        last_name: str,
        id: str | None = None,
        date_of_birth: date | None = None,
        grade: str | None = None,
        allergies: str | None = None,
        medical_notes: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.family_id = family_id
        self.first_name = first_name
        self.last_name = last_name
        self.date_of_birth = date_of_birth
        self.grade = grade
        self.allergies = allergies
        self.medical_notes = medical_notes

    def __repr__(self) -> str:
        return f"<Child(id={self.id!r}, family_id={self.family_id!r})>"


class CoopSession(TimestampMixin, Base):
    """Session model - a school term with its own registration window."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    registration_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    registration_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    teacher_registration_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __init__(
        self,
        name: str,
        start_date: date,
        end_date: date,
        registration_start_date: date,
        registration_end_date: date,
        id: str | None = None,
        teacher_registration_start_date: date | None = None,
        description: str | None = None,
        is_active: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.start_date = start_date
        self.end_date = end_date
        self.registration_start_date = registration_start_date
        self.registration_end_date = registration_end_date
        self.teacher_registration_start_date = teacher_registration_start_date
        self.description = description
        self.is_active = is_active

    def __repr__(self) -> str:
        return f"<CoopSession(id={self.id!r}, name={self.name!r}, is_active={self.is_active!r})>"


class Classroom(TimestampMixin, Base):
    """Classroom model - a physical room, independent of sessions."""

    __tablename__ = "classrooms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __init__(
        self,
        name: str,
        id: str | None = None,
        description: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.description = description

    def __repr__(self) -> str:
        return f"<Classroom(id={self.id!r}, name={self.name!r})>"


class ClassTeachingRequest(TimestampMixin, Base):
    """A guardian's proposal to teach a class in a session."""

    __tablename__ = "class_teaching_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    guardian_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("guardians.id", ondelete="CASCADE"), nullable=False
    )
    class_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    grade_range: Mapped[str] = mapped_column(String(50), nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    helpers_needed: Mapped[int] = mapped_column(Integer, nullable=False)
    co_teacher: Mapped[str | None] = mapped_column(String(255), nullable=True)
    classroom_needs: Mapped[str | None] = mapped_column(Text, nullable=True)
    requires_fee: Mapped[bool] = mapped_column(Boolean, nullable=False)
    fee_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    scheduling_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __init__(
        self,
        session_id: str,
        guardian_id: str,
        class_name: str,
        description: str,
        grade_range: str,
        id: str | None = None,
        max_students: int = 20,
        helpers_needed: int = 1,
        co_teacher: str | None = None,
        classroom_needs: str | None = None,
        requires_fee: bool = False,
        fee_amount: float | None = None,
        scheduling_requirements: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.guardian_id = guardian_id
        self.class_name = class_name
        self.description = description
        self.grade_range = grade_range
        self.max_students = max_students
        self.helpers_needed = helpers_needed
        self.co_teacher = co_teacher
        self.classroom_needs = classroom_needs
        self.requires_fee = requires_fee
        self.fee_amount = fee_amount
        self.scheduling_requirements = scheduling_requirements
        self.status = status if status is not None else RequestStatus.PENDING.value
        self.reviewed_by = None
        self.reviewed_at = None
        self.review_notes = None

    @property
    def effective_fee(self) -> float:
        """Fee charged per registered child (0 when the class is free)."""
        if not self.requires_fee or self.fee_amount is None:
            return 0.0
        return float(self.fee_amount)

    def __repr__(self) -> str:
        return (
            f"<ClassTeachingRequest(id={self.id!r}, class_name={self.class_name!r}, "
            f"status={self.status!r})>"
        )


class Schedule(TimestampMixin, Base):
    """Binds a class teaching request to a classroom and period in a session."""

    __tablename__ = "schedules"
    __table_args__ = (
        UniqueConstraint("session_id", "classroom_id", "period", name="uq_schedule_slot"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    class_teaching_request_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("class_teaching_requests.id", ondelete="CASCADE"), nullable=False
    )
    classroom_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False
    )
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    def __init__(
        self,
        session_id: str,
        class_teaching_request_id: str,
        classroom_id: str,
        period: str,
        id: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.class_teaching_request_id = class_teaching_request_id
        self.classroom_id = classroom_id
        self.period = period
        self.status = status if status is not None else ScheduleStatus.DRAFT.value

    def __repr__(self) -> str:
        return (
            f"<Schedule(id={self.id!r}, classroom_id={self.classroom_id!r}, "
            f"period={self.period!r}, status={self.status!r})>"
        )


class ScheduleDraft(TimestampMixin, Base):
    """A named, user-owned scratch copy of prospective schedule rows."""

    __tablename__ = "schedule_drafts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __init__(
        self,
        session_id: str,
        created_by: str,
        name: str,
        id: str | None = None,
        description: str | None = None,
        is_active: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.created_by = created_by
        self.name = name
        self.description = description
        self.is_active = is_active

    def __repr__(self) -> str:
        return f"<ScheduleDraft(id={self.id!r}, name={self.name!r}, is_active={self.is_active!r})>"


class ScheduleDraftEntry(TimestampMixin, Base):
    """One class placement inside a schedule draft."""

    __tablename__ = "schedule_draft_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    draft_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schedule_drafts.id", ondelete="CASCADE"), nullable=False
    )
    class_teaching_request_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("class_teaching_requests.id", ondelete="CASCADE"), nullable=False
    )
    classroom_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False
    )
    period: Mapped[str] = mapped_column(String(20), nullable=False)

    def __init__(
        self,
        draft_id: str,
        class_teaching_request_id: str,
        classroom_id: str,
        period: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.draft_id = draft_id
        self.class_teaching_request_id = class_teaching_request_id
        self.classroom_id = classroom_id
        self.period = period


class ScheduleComment(TimestampMixin, Base):
    """Teacher feedback on a session's schedule.

    Private comments are visible to their author and to moderators and
    admins; public ones to every teacher.
    """

    __tablename__ = "schedule_comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    guardian_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("guardians.id", ondelete="CASCADE"), nullable=False
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False)

    author: Mapped[Guardian] = relationship("Guardian", lazy="joined")

    def __init__(
        self,
        session_id: str,
        guardian_id: str,
        comment: str,
        id: str | None = None,
        is_public: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.guardian_id = guardian_id
        self.comment = comment
        self.is_public = is_public


class VolunteerJob(TimestampMixin, Base):
    """An admin-defined volunteer opportunity that persists across sessions."""

    __tablename__ = "volunteer_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False)
    job_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)

    def __init__(
        self,
        title: str,
        description: str,
        created_by: str,
        id: str | None = None,
        quantity_available: int = 1,
        job_type: str | None = None,
        is_active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.title = title
        self.description = description
        self.created_by = created_by
        self.quantity_available = quantity_available
        self.job_type = job_type if job_type is not None else JobType.NON_PERIOD.value
        self.is_active = is_active


class SessionVolunteerJob(TimestampMixin, Base):
    """A volunteer job offered in one session, with that session's headcount."""

    __tablename__ = "session_volunteer_jobs"
    __table_args__ = (
        UniqueConstraint("session_id", "volunteer_job_id", name="uq_session_volunteer_job"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    volunteer_job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("volunteer_jobs.id", ondelete="CASCADE"), nullable=False
    )
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)

    job: Mapped[VolunteerJob] = relationship("VolunteerJob", lazy="joined")

    def __init__(
        self,
        session_id: str,
        volunteer_job_id: str,
        quantity_available: int,
        id: str | None = None,
        is_active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.volunteer_job_id = volunteer_job_id
        self.quantity_available = quantity_available
        self.is_active = is_active


class ClassRegistration(TimestampMixin, Base):
    """A child registered into a schedule entry."""

    __tablename__ = "class_registrations"
    __table_args__ = (
        UniqueConstraint("child_id", "session_id", "period", name="uq_child_session_period"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    schedule_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False
    )
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False
    )
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    registered_by: Mapped[str] = mapped_column(String(64), nullable=False)
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    def __init__(
        self,
        session_id: str,
        schedule_id: str,
        child_id: str,
        family_id: str,
        registered_by: str,
        period: str,
        id: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.schedule_id = schedule_id
        self.child_id = child_id
        self.family_id = family_id
        self.registered_by = registered_by
        self.period = period
        self.status = status if status is not None else RegistrationStatus.REGISTERED.value

    def __repr__(self) -> str:
        return (
            f"<ClassRegistration(id={self.id!r}, child_id={self.child_id!r}, "
            f"schedule_id={self.schedule_id!r}, status={self.status!r})>"
        )


class VolunteerAssignment(TimestampMixin, Base):
    """A guardian committed as teacher, helper or job volunteer for a period."""

    __tablename__ = "volunteer_assignments"
    __table_args__ = (
        UniqueConstraint("guardian_id", "session_id", "period", name="uq_guardian_session_period"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    guardian_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("guardians.id", ondelete="CASCADE"), nullable=False
    )
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    volunteer_type: Mapped[str] = mapped_column(String(20), nullable=False)
    schedule_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=True
    )
    volunteer_job_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("volunteer_jobs.id", ondelete="CASCADE"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    def __init__(
        self,
        session_id: str,
        guardian_id: str,
        family_id: str,
        period: str,
        volunteer_type: str,
        id: str | None = None,
        schedule_id: str | None = None,
        volunteer_job_id: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.guardian_id = guardian_id
        self.family_id = family_id
        self.period = period
        self.volunteer_type = volunteer_type
        self.schedule_id = schedule_id
        self.volunteer_job_id = volunteer_job_id
        self.status = status if status is not None else AssignmentStatus.ASSIGNED.value

    def __repr__(self) -> str:
        return (
            f"<VolunteerAssignment(id={self.id!r}, guardian_id={self.guardian_id!r}, "
            f"period={self.period!r}, volunteer_type={self.volunteer_type!r})>"
        )


class FamilyRegistrationStatus(TimestampMixin, Base):
    """Per (family, session) registration progress, including admin overrides."""

    __tablename__ = "family_registration_status"
    __table_args__ = (UniqueConstraint("family_id", "session_id", name="uq_family_session_status"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    volunteer_requirements_met: Mapped[bool] = mapped_column(Boolean, nullable=False)
    admin_override: Mapped[bool] = mapped_column(Boolean, nullable=False)
    admin_override_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    overridden_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    overridden_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __init__(
        self,
        session_id: str,
        family_id: str,
        id: str | None = None,
        status: str | None = None,
        volunteer_requirements_met: bool = False,
        admin_override: bool = False,
        admin_override_reason: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.family_id = family_id
        self.status = status if status is not None else FamilyStatus.IN_PROGRESS.value
        self.volunteer_requirements_met = volunteer_requirements_met
        self.admin_override = admin_override
        self.admin_override_reason = admin_override_reason
        self.overridden_by = None
        self.overridden_at = None
        self.completed_at = None

    @property
    def has_approved_override(self) -> bool:
        """An admin approved this family despite unmet volunteer hours."""
        return self.admin_override and self.status == FamilyStatus.COMPLETED.value

    def __repr__(self) -> str:
        return (
            f"<FamilyRegistrationStatus(id={self.id!r}, family_id={self.family_id!r}, "
            f"status={self.status!r})>"
        )


class SessionFeeConfig(TimestampMixin, Base):
    """Per-session fee schedule."""

    __tablename__ = "session_fee_configs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    first_child_fee: Mapped[float] = mapped_column(Float, nullable=False)
    additional_child_fee: Mapped[float] = mapped_column(Float, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    def __init__(
        self,
        session_id: str,
        due_date: date,
        id: str | None = None,
        first_child_fee: float = 0.0,
        additional_child_fee: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.due_date = due_date
        self.first_child_fee = first_child_fee
        self.additional_child_fee = additional_child_fee


class FamilySessionFee(TimestampMixin, Base):
    """Calculated fee snapshot for one family in one session."""

    __tablename__ = "family_session_fees"
    __table_args__ = (UniqueConstraint("family_id", "session_id", name="uq_family_session_fee"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    registration_fee: Mapped[float] = mapped_column(Float, nullable=False)
    class_fees: Mapped[float] = mapped_column(Float, nullable=False)
    total_fee: Mapped[float] = mapped_column(Float, nullable=False)
    paid_amount: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        session_id: str,
        family_id: str,
        due_date: date,
        calculated_at: datetime,
        id: str | None = None,
        registration_fee: float = 0.0,
        class_fees: float = 0.0,
        total_fee: float = 0.0,
        paid_amount: float = 0.0,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.session_id = session_id
        self.family_id = family_id
        self.due_date = due_date
        self.calculated_at = calculated_at
        self.registration_fee = registration_fee
        self.class_fees = class_fees
        self.total_fee = total_fee
        self.paid_amount = paid_amount
        self.status = status if status is not None else FeeStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<FamilySessionFee(id={self.id!r}, total_fee={self.total_fee!r}, "
            f"paid_amount={self.paid_amount!r}, status={self.status!r})>"
        )


class FeePayment(Base):
    """Append-only payment record."""

    __tablename__ = "fee_payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    family_session_fee_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("family_session_fees.id", ondelete="CASCADE"), nullable=True
    )
    family_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    session_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=True
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        family_id: str,
        amount: float,
        payment_date: date,
        payment_method: str,
        id: str | None = None,
        family_session_fee_id: str | None = None,
        session_id: str | None = None,
        notes: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.family_id = family_id
        self.amount = amount
        self.payment_date = payment_date
        self.payment_method = payment_method
        self.family_session_fee_id = family_session_fee_id
        self.session_id = session_id
        self.notes = notes

    def __repr__(self) -> str:
        return f"<FeePayment(id={self.id!r}, family_id={self.family_id!r}, amount={self.amount!r})>"


class Event(TimestampMixin, Base):
    """A dated co-op event: field trip, holiday, deadline and the like."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    is_all_day: Mapped[bool] = mapped_column(Boolean, nullable=False)
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    session_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=True
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)

    def __init__(
        self,
        title: str,
        start_date: date,
        created_by: str,
        id: str | None = None,
        description: str | None = None,
        end_date: date | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        is_all_day: bool = False,
        event_type: str | None = None,
        session_id: str | None = None,
        location: str | None = None,
        color: str | None = None,
        is_public: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.title = title
        self.start_date = start_date
        self.created_by = created_by
        self.description = description
        self.end_date = end_date
        self.start_time = start_time
        self.end_time = end_time
        self.is_all_day = is_all_day
        self.event_type = event_type if event_type is not None else EventType.GENERAL.value
        self.session_id = session_id
        self.location = location
        self.color = color if color is not None else DEFAULT_EVENT_COLOR
        self.is_public = is_public

    def __repr__(self) -> str:
        return f"<Event(id={self.id!r}, title={self.title!r}, start_date={self.start_date!r})>"
