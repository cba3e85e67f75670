"""RegistrationManager - Commits a family's registration batch atomically."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from coopreg.logging import get_logger
from coopreg.registration.exceptions import (
    RegistrationClosedError,
    RegistrationConflictError,
    RegistrationRejectedError,
    VolunteerRequirementError,
)
from coopreg.registration.models import ClassAvailability, RegistrationResult
from coopreg.registration.validator import CapacityValidator
from coopreg.store.exceptions import (
    FamilyNotFoundError,
    SessionNotFoundError,
    StateConflictError,
    StoreError,
    ValidationError,
)
from coopreg.store.fees import recalculate_family_fee
from coopreg.store.models import (
    AssignmentStatus,
    Child,
    ClassRegistration,
    Classroom,
    ClassTeachingRequest,
    CoopSession,
    FamilyRegistrationStatus,
    FamilyStatus,
    Guardian,
    Period,
    RegistrationStatus,
    Schedule,
    ScheduleStatus,
    VolunteerAssignment,
    VolunteerType,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.orm import Session

    from coopreg.registration.models import RegistrationRequest
    from coopreg.store.database import Database

logger = get_logger("registration")


def teaching_periods(session: Session, session_id: str, family_id: str) -> list[str]:
    """Periods of the session's published classes taught by the family's guardians.

    Pulled-back rows are left out: they neither open early registration
    nor count as volunteer hours.
    """
    stmt = (
        select(Schedule.period)
        .join(ClassTeachingRequest, ClassTeachingRequest.id == Schedule.class_teaching_request_id)
        .join(Guardian, Guardian.id == ClassTeachingRequest.guardian_id)
        .where(
            Schedule.session_id == session_id,
            Schedule.status == ScheduleStatus.PUBLISHED.value,
            Guardian.family_id == family_id,
        )
    )
    return list(session.execute(stmt).scalars().all())


def committed_hours(session: Session, session_id: str, family_id: str) -> tuple[set[str], int]:
    """Hours a family already holds in a session from earlier batches.

    Returns:
        The non-lunch periods of its registered classes and the number of
        its assigned volunteer slots
    """
    periods = set(
        session.execute(
            select(ClassRegistration.period).where(
                ClassRegistration.session_id == session_id,
                ClassRegistration.family_id == family_id,
                ClassRegistration.status == RegistrationStatus.REGISTERED.value,
                ClassRegistration.period != Period.LUNCH.value,
            )
        ).scalars()
    )
    assigned = session.execute(
        select(func.count())
        .select_from(VolunteerAssignment)
        .where(
            VolunteerAssignment.session_id == session_id,
            VolunteerAssignment.family_id == family_id,
            VolunteerAssignment.status == AssignmentStatus.ASSIGNED.value,
        )
    ).scalar_one()
    return periods, int(assigned)


def check_registration_window(
    coop_session: CoopSession, today: date, is_teacher: bool
) -> None:
    """Check that the family may register today.

    Regular registration runs from registration_start_date through
    registration_end_date. Families teaching a class in the session may
    start at teacher_registration_start_date.

    Raises:
        RegistrationClosedError: If the window is not open for the family
    """
    start = coop_session.registration_start_date
    end = coop_session.registration_end_date
    teacher_start = coop_session.teacher_registration_start_date

    if start <= today <= end:
        return
    if is_teacher and teacher_start is not None and teacher_start <= today < start:
        return

    if today > end:
        raise RegistrationClosedError(f"Registration closed on {end.isoformat()}")
    if is_teacher and teacher_start is not None:
        raise RegistrationClosedError(
            f"Teacher early registration opens on {teacher_start.isoformat()}"
        )
    raise RegistrationClosedError(f"Registration opens on {start.isoformat()}")


class RegistrationManager:
    """Registers children into classes and guardians as volunteers.

    A batch is validated and inserted inside one BEGIN IMMEDIATE
    transaction: either every item commits or none does.
    """

    def __init__(self, database: Database, today: Callable[[], date] | None = None) -> None:
        """Initialize the manager.

        Args:
            database: Database shared with the record store
            today: Clock returning the current date (for tests)
        """
        self._db = database
        self._today = today or date.today

    def submit(self, request: RegistrationRequest) -> RegistrationResult:
        """Validate and commit a registration batch.

        Args:
            request: The family's batch

        Returns:
            RegistrationResult with created ids and the resulting family status

        Raises:
            FamilyNotFoundError: If the submitter has no family
            SessionNotFoundError: If the session doesn't exist
            RegistrationClosedError: If the registration window is closed
            ValidationError: If the batch is empty or references another family
            StateConflictError: If an override request is still under review
            RegistrationRejectedError: If any item conflicts (nothing committed)
            VolunteerRequirementError: If volunteer hours are short and no
                override was requested (nothing committed)
            RegistrationConflictError: If a concurrent submission won the race
        """
        if not request.classes and not request.volunteers:
            raise ValidationError("Registration batch is empty")

        with self._db.transaction() as session:
            guardian = session.get(Guardian, request.submitted_by)
            if guardian is None:
                raise FamilyNotFoundError(
                    f"No family registered for user '{request.submitted_by}'"
                )
            family_id = guardian.family_id

            coop_session = session.get(CoopSession, request.session_id)
            if coop_session is None:
                raise SessionNotFoundError(f"Session with id '{request.session_id}' not found")

            teaching = teaching_periods(session, request.session_id, family_id)
            check_registration_window(coop_session, self._today(), is_teacher=bool(teaching))

            self._check_ownership(session, family_id, request)

            status = session.execute(
                select(FamilyRegistrationStatus).where(
                    FamilyRegistrationStatus.family_id == family_id,
                    FamilyRegistrationStatus.session_id == request.session_id,
                )
            ).scalar_one_or_none()
            if status is not None and status.status == FamilyStatus.ADMIN_OVERRIDE.value:
                raise StateConflictError(
                    "A registration for this session is awaiting admin review"
                )

            validator = CapacityValidator(session, request.session_id)
            conflicts = validator.validate(request)
            if conflicts:
                logger.warning(
                    "Rejected batch from family %s for session %s: %s",
                    family_id,
                    request.session_id,
                    "; ".join(c.message for c in conflicts),
                )
                raise RegistrationRejectedError(conflicts)

            class_periods = [validator.class_period(item) for item in request.classes]
            # Hours accumulate over every batch the family commits in the session
            held_periods, held_assignments = committed_hours(
                session, request.session_id, family_id
            )
            required = len(held_periods | {p for p in class_periods if p != Period.LUNCH.value})
            fulfilled = (
                held_assignments
                + len(request.volunteers)
                + sum(1 for p in teaching if p != Period.LUNCH.value)
            )
            exempt = status is not None and status.has_approved_override
            met = exempt or fulfilled >= required

            if not met and not request.request_override:
                logger.warning(
                    "Family %s short on volunteer hours for session %s: %d/%d",
                    family_id,
                    request.session_id,
                    fulfilled,
                    required,
                )
                raise VolunteerRequirementError(required, fulfilled)

            pending = not met
            result = RegistrationResult(
                family_id=family_id,
                session_id=request.session_id,
                status="",
                required_hours=required,
                fulfilled_hours=fulfilled,
                pending_override=pending,
            )

            for item, period in zip(request.classes, class_periods, strict=True):
                registration = ClassRegistration(
                    session_id=request.session_id,
                    schedule_id=item.schedule_id,
                    child_id=item.child_id,
                    family_id=family_id,
                    registered_by=request.submitted_by,
                    period=period,
                    status=(
                        RegistrationStatus.PENDING.value
                        if pending
                        else RegistrationStatus.REGISTERED.value
                    ),
                )
                session.add(registration)
                result.registration_ids.append(registration.id)

            for volunteer in request.volunteers:
                period = validator.volunteer_period(volunteer)
                if period is None:
                    raise StoreError(f"No period resolved for volunteer {volunteer.guardian_id}")
                is_job = volunteer.volunteer_type == VolunteerType.VOLUNTEER_JOB
                assignment = VolunteerAssignment(
                    session_id=request.session_id,
                    guardian_id=volunteer.guardian_id,
                    family_id=family_id,
                    period=period,
                    volunteer_type=str(volunteer.volunteer_type),
                    schedule_id=None if is_job else volunteer.schedule_id,
                    volunteer_job_id=volunteer.volunteer_job_id if is_job else None,
                    status=(
                        AssignmentStatus.PENDING.value
                        if pending
                        else AssignmentStatus.ASSIGNED.value
                    ),
                )
                session.add(assignment)
                result.assignment_ids.append(assignment.id)

            try:
                session.flush()
            except IntegrityError as e:
                logger.warning("Concurrent registration conflict for family %s: %s", family_id, e)
                raise RegistrationConflictError(
                    "Another registration claimed the same period; please resubmit"
                ) from e

            status = self._update_status(
                session, status, family_id, request, pending, required, fulfilled
            )
            result.status = status.status

            recalculate_family_fee(session, request.session_id, family_id)

        logger.info(
            "Family %s registered for session %s: %d classes, %d volunteer slots, status=%s",
            family_id,
            request.session_id,
            len(result.registration_ids),
            len(result.assignment_ids),
            result.status,
        )
        return result

    def _check_ownership(
        self, session: Session, family_id: str, request: RegistrationRequest
    ) -> None:
        child_ids = set(
            session.execute(select(Child.id).where(Child.family_id == family_id)).scalars()
        )
        guardian_ids = set(
            session.execute(select(Guardian.id).where(Guardian.family_id == family_id)).scalars()
        )
        for item in request.classes:
            if item.child_id not in child_ids:
                raise ValidationError(f"Child '{item.child_id}' does not belong to your family")
        for volunteer in request.volunteers:
            if volunteer.guardian_id not in guardian_ids:
                raise ValidationError(
                    f"Guardian '{volunteer.guardian_id}' does not belong to your family"
                )

    def _update_status(
        self,
        session: Session,
        status: FamilyRegistrationStatus | None,
        family_id: str,
        request: RegistrationRequest,
        pending: bool,
        required: int,
        fulfilled: int,
    ) -> FamilyRegistrationStatus:
        if status is None:
            status = FamilyRegistrationStatus(session_id=request.session_id, family_id=family_id)
            session.add(status)

        now = datetime.now(UTC)
        if pending:
            status.status = FamilyStatus.ADMIN_OVERRIDE.value
            status.volunteer_requirements_met = False
            status.admin_override = True
            status.admin_override_reason = (
                f"Volunteer hours not met: {fulfilled}/{required} hours fulfilled"
            )
            status.overridden_by = None
            status.overridden_at = None
            logger.info(
                "Family %s requested an override for session %s (%d/%d hours)",
                family_id,
                request.session_id,
                fulfilled,
                required,
            )
        else:
            completed = bool(request.classes) or status.status == FamilyStatus.COMPLETED.value
            status.volunteer_requirements_met = True
            if completed:
                if status.status != FamilyStatus.COMPLETED.value:
                    status.completed_at = now
                status.status = FamilyStatus.COMPLETED.value
            else:
                status.status = FamilyStatus.IN_PROGRESS.value
            if not status.has_approved_override:
                status.admin_override = False
        session.flush()
        return status

    def available_classes(self, session_id: str) -> list[ClassAvailability]:
        """List a session's published classes with their seat and helper counts.

        Raises:
            SessionNotFoundError: If the session doesn't exist
        """
        session = self._db.get_session()
        try:
            if session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")

            seats = (
                select(ClassRegistration.schedule_id, func.count().label("n"))
                .group_by(ClassRegistration.schedule_id)
                .subquery()
            )
            helpers = (
                select(VolunteerAssignment.schedule_id, func.count().label("n"))
                .where(VolunteerAssignment.volunteer_type == VolunteerType.HELPER.value)
                .group_by(VolunteerAssignment.schedule_id)
                .subquery()
            )
            stmt = (
                select(
                    Schedule,
                    ClassTeachingRequest,
                    Classroom.name,
                    Guardian.first_name,
                    Guardian.last_name,
                    func.coalesce(seats.c.n, 0),
                    func.coalesce(helpers.c.n, 0),
                )
                .join(
                    ClassTeachingRequest,
                    ClassTeachingRequest.id == Schedule.class_teaching_request_id,
                )
                .join(Classroom, Classroom.id == Schedule.classroom_id)
                .join(Guardian, Guardian.id == ClassTeachingRequest.guardian_id)
                .outerjoin(seats, seats.c.schedule_id == Schedule.id)
                .outerjoin(helpers, helpers.c.schedule_id == Schedule.id)
                .where(
                    Schedule.session_id == session_id,
                    Schedule.status == ScheduleStatus.PUBLISHED.value,
                )
                .order_by(Schedule.period, ClassTeachingRequest.class_name)
            )

            return [
                ClassAvailability(
                    schedule_id=schedule.id,
                    class_teaching_request_id=request.id,
                    class_name=request.class_name,
                    description=request.description,
                    grade_range=request.grade_range,
                    period=schedule.period,
                    classroom_name=classroom_name,
                    teacher_name=f"{first} {last}".strip(),
                    max_students=request.max_students,
                    registered_count=int(registered),
                    helpers_needed=request.helpers_needed,
                    helper_count=int(helper_count),
                    fee_amount=request.effective_fee,
                )
                for (
                    schedule,
                    request,
                    classroom_name,
                    first,
                    last,
                    registered,
                    helper_count,
                ) in session.execute(stmt)
            ]
        finally:
            session.close()
