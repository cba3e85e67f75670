"""Capacity/Conflict Validator - checks registration batch items against live rows."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from coopreg.registration.models import Conflict, ConflictType
from coopreg.store.exceptions import StoreError
from coopreg.store.models import (
    NON_PERIOD,
    ClassRegistration,
    ClassTeachingRequest,
    JobType,
    Period,
    Schedule,
    ScheduleStatus,
    SessionVolunteerJob,
    VolunteerAssignment,
    VolunteerJob,
    VolunteerType,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coopreg.registration.models import ClassRequest, RegistrationRequest, VolunteerRequest

CLASS_BASED_TYPES = frozenset(
    {VolunteerType.TEACHER, VolunteerType.HELPER, VolunteerType.CO_TEACHER}
)


def period_label(period: str) -> str:
    """Human-readable period name for messages."""
    return period.replace("_", "-")


class CapacityValidator:
    """Validates registration batch items inside an open transaction.

    Every check queries the current rows through the given session, so it
    must run in the same transaction that inserts the batch. Items that pass
    are remembered and count against later items of the same batch.
    """

    def __init__(self, session: Session, session_id: str) -> None:
        """Initialize the validator.

        Args:
            session: Open ORM session bound to the registration transaction
            session_id: Session (term) the batch registers for
        """
        self._session = session
        self.session_id = session_id
        self._child_periods: set[tuple[str, str]] = set()
        self._guardian_periods: set[tuple[str, str]] = set()
        self._seats: Counter[str] = Counter()
        self._helpers: Counter[str] = Counter()
        self._offers: dict[str, bool] | None = None

    def _published_schedule(self, schedule_id: str | None) -> Schedule | None:
        if schedule_id is None:
            return None
        schedule = self._session.get(Schedule, schedule_id)
        if schedule is None or schedule.session_id != self.session_id:
            return None
        if schedule.status != ScheduleStatus.PUBLISHED.value:
            return None
        return schedule

    def _class_for(self, schedule: Schedule) -> ClassTeachingRequest:
        request = self._session.get(ClassTeachingRequest, schedule.class_teaching_request_id)
        if request is None:
            raise StoreError(f"Schedule {schedule.id} has no class teaching request")
        return request

    def class_period(self, item: ClassRequest) -> str:
        """Period of a class request that passed validation.

        Raises:
            StoreError: If the schedule row is gone
        """
        schedule = self._session.get(Schedule, item.schedule_id)
        if schedule is None:
            raise StoreError(f"Schedule {item.schedule_id} vanished during registration")
        return schedule.period

    def registration_count(self, schedule_id: str) -> int:
        """Count stored registrations for a schedule, pending ones included."""
        stmt = select(func.count(ClassRegistration.id)).where(
            ClassRegistration.schedule_id == schedule_id
        )
        return int(self._session.execute(stmt).scalar_one())

    def helper_count(self, schedule_id: str) -> int:
        """Count stored helper assignments for a schedule, pending ones included."""
        stmt = select(func.count(VolunteerAssignment.id)).where(
            VolunteerAssignment.schedule_id == schedule_id,
            VolunteerAssignment.volunteer_type == VolunteerType.HELPER.value,
        )
        return int(self._session.execute(stmt).scalar_one())

    def _child_has_period(self, child_id: str, period: str) -> bool:
        if (child_id, period) in self._child_periods:
            return True
        stmt = select(ClassRegistration.id).where(
            ClassRegistration.child_id == child_id,
            ClassRegistration.session_id == self.session_id,
            ClassRegistration.period == period,
        )
        return self._session.execute(stmt).first() is not None

    def _guardian_has_period(self, guardian_id: str, period: str) -> bool:
        if (guardian_id, period) in self._guardian_periods:
            return True
        stmt = select(VolunteerAssignment.id).where(
            VolunteerAssignment.guardian_id == guardian_id,
            VolunteerAssignment.session_id == self.session_id,
            VolunteerAssignment.period == period,
        )
        return self._session.execute(stmt).first() is not None

    def check_class(self, item: ClassRequest) -> Conflict | None:
        """Check one child-to-class pairing.

        Returns:
            The conflict, or None if the item fits (it then holds its seat)
        """
        schedule = self._published_schedule(item.schedule_id)
        if schedule is None:
            return Conflict(
                type=ConflictType.UNAVAILABLE,
                message="Class is not open for registration",
                child_id=item.child_id,
                schedule_id=item.schedule_id,
            )

        if self._child_has_period(item.child_id, schedule.period):
            return Conflict(
                type=ConflictType.CHILD_CONFLICT,
                message=(
                    "Child is already registered for a class in the "
                    f"{period_label(schedule.period)} period"
                ),
                child_id=item.child_id,
                schedule_id=schedule.id,
            )

        request = self._class_for(schedule)
        taken = self.registration_count(schedule.id) + self._seats[schedule.id]
        if taken >= request.max_students:
            return Conflict(
                type=ConflictType.CLASS_FULL,
                message=f'Class "{request.class_name}" is full ({taken}/{request.max_students})',
                child_id=item.child_id,
                schedule_id=schedule.id,
            )

        self._child_periods.add((item.child_id, schedule.period))
        self._seats[schedule.id] += 1
        return None

    def _offered(self, job_id: str) -> bool:
        """Whether the session accepts sign-ups for the job.

        A session that offers no jobs accepts every active one.
        """
        if self._offers is None:
            stmt = select(SessionVolunteerJob).where(
                SessionVolunteerJob.session_id == self.session_id
            )
            self._offers = {
                offer.volunteer_job_id: offer.is_active
                for offer in self._session.execute(stmt).scalars()
            }
        if not self._offers:
            return True
        return self._offers.get(job_id, False)

    def volunteer_period(self, item: VolunteerRequest) -> str | None:
        """Resolve the period a volunteer request occupies.

        Returns:
            The period, or None if the request names nothing usable
        """
        if item.volunteer_type in CLASS_BASED_TYPES:
            schedule = self._published_schedule(item.schedule_id)
            return schedule.period if schedule is not None else None

        if item.volunteer_type == VolunteerType.VOLUNTEER_JOB:
            if item.volunteer_job_id is None:
                return None
            job = self._session.get(VolunteerJob, item.volunteer_job_id)
            if job is None or not job.is_active or not self._offered(job.id):
                return None
            if job.job_type == JobType.NON_PERIOD.value:
                return NON_PERIOD
            if item.period in {p.value for p in Period}:
                return item.period
        return None

    def check_volunteer(self, item: VolunteerRequest) -> Conflict | None:
        """Check one volunteer commitment.

        Non-period volunteer jobs have no quota; only the guardian's own
        period uniqueness applies to them.

        Returns:
            The conflict, or None if the item fits (it then holds its spot)
        """
        period = self.volunteer_period(item)
        if period is None:
            return Conflict(
                type=ConflictType.UNAVAILABLE,
                message="Volunteer opportunity is not available",
                guardian_id=item.guardian_id,
                schedule_id=item.schedule_id,
            )

        if self._guardian_has_period(item.guardian_id, period):
            return Conflict(
                type=ConflictType.GUARDIAN_CONFLICT,
                message=(
                    "Guardian is already assigned as a volunteer for the "
                    f"{period_label(period)} period"
                ),
                guardian_id=item.guardian_id,
                schedule_id=item.schedule_id,
            )

        if item.volunteer_type == VolunteerType.HELPER and item.schedule_id is not None:
            schedule = self._published_schedule(item.schedule_id)
            if schedule is None:
                raise StoreError(f"Schedule {item.schedule_id} vanished during registration")
            request = self._class_for(schedule)
            helpers = self.helper_count(schedule.id) + self._helpers[schedule.id]
            if helpers >= request.helpers_needed:
                return Conflict(
                    type=ConflictType.VOLUNTEER_FULL,
                    message=(
                        f'No helper spots available for "{request.class_name}" '
                        f"({helpers}/{request.helpers_needed})"
                    ),
                    guardian_id=item.guardian_id,
                    schedule_id=schedule.id,
                )
            self._helpers[schedule.id] += 1

        self._guardian_periods.add((item.guardian_id, period))
        return None

    def validate(self, request: RegistrationRequest) -> list[Conflict]:
        """Check every item of a batch.

        Returns:
            All conflicts found; empty if the whole batch fits
        """
        conflicts = []
        for class_item in request.classes:
            conflict = self.check_class(class_item)
            if conflict is not None:
                conflicts.append(conflict)
        for volunteer_item in request.volunteers:
            conflict = self.check_volunteer(volunteer_item)
            if conflict is not None:
                conflicts.append(conflict)
        return conflicts
