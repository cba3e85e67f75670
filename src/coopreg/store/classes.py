"""Class teaching request, volunteer job and schedule comment operations for the record store."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select

from coopreg.logging import get_logger
from coopreg.store.exceptions import (
    GuardianNotFoundError,
    SessionNotFoundError,
    TeachingRequestNotFoundError,
    ValidationError,
    VolunteerJobNotFoundError,
)
from coopreg.store.models import (
    ClassTeachingRequest,
    CoopSession,
    Guardian,
    JobType,
    RequestStatus,
    ScheduleComment,
    SessionVolunteerJob,
    VolunteerJob,
)

if TYPE_CHECKING:
    from coopreg.store.database import Database

logger = get_logger("store")

MIN_STUDENTS = 1
MAX_STUDENTS = 100

_REQUEST_FIELDS = (
    "class_name",
    "description",
    "grade_range",
    "max_students",
    "helpers_needed",
    "co_teacher",
    "classroom_needs",
    "requires_fee",
    "fee_amount",
    "scheduling_requirements",
)
_JOB_FIELDS = ("title", "description", "quantity_available", "job_type", "is_active")


def validate_class_limits(max_students: int, helpers_needed: int, fee_amount: float | None) -> None:
    """Check the numeric limits of a class teaching request.

    Raises:
        ValidationError: If a limit is out of range
    """
    if not MIN_STUDENTS <= max_students <= MAX_STUDENTS:
        raise ValidationError(
            f"Maximum students must be between {MIN_STUDENTS} and {MAX_STUDENTS}"
        )
    if helpers_needed < 0:
        raise ValidationError("Helpers needed cannot be negative")
    if fee_amount is not None and fee_amount < 0:
        raise ValidationError("Fee amount cannot be negative")


class ClassOperations:
    """Class teaching requests and volunteer jobs."""

    _db: Database

    # --- Class Teaching Request Operations ---

    def create_teaching_request(
        self,
        session_id: str,
        guardian_id: str,
        class_name: str,
        description: str,
        grade_range: str,
        max_students: int = 20,
        helpers_needed: int = 1,
        co_teacher: str | None = None,
        classroom_needs: str | None = None,
        requires_fee: bool = False,
        fee_amount: float | None = None,
        scheduling_requirements: str | None = None,
    ) -> ClassTeachingRequest:
        """Create a pending class teaching request.

        Raises:
            ValidationError: If a numeric limit is out of range
            SessionNotFoundError: If session doesn't exist
            GuardianNotFoundError: If guardian doesn't exist
        """
        validate_class_limits(max_students, helpers_needed, fee_amount)

        session = self._db.get_session()
        try:
            if session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            if session.get(Guardian, guardian_id) is None:
                raise GuardianNotFoundError(f"Guardian with id '{guardian_id}' not found")

            request = ClassTeachingRequest(
                session_id=session_id,
                guardian_id=guardian_id,
                class_name=class_name,
                description=description,
                grade_range=grade_range,
                max_students=max_students,
                helpers_needed=helpers_needed,
                co_teacher=co_teacher,
                classroom_needs=classroom_needs,
                requires_fee=requires_fee,
                fee_amount=fee_amount if requires_fee else None,
                scheduling_requirements=scheduling_requirements,
            )
            session.add(request)
            session.commit()
            session.refresh(request)
        finally:
            session.close()

        logger.info("Class teaching request %s created by %s", request.id, guardian_id)
        return request

    def propose_class(self, guardian_id: str, today: date, **fields: Any) -> ClassTeachingRequest:
        """Submit a class proposal for the active session.

        Proposals are only accepted before the active session opens regular
        registration.

        Args:
            guardian_id: Proposing guardian
            today: The current date
            **fields: Remaining create_teaching_request arguments

        Raises:
            ValidationError: If no session is active or registration already opened
        """
        session = self._db.get_session()
        try:
            stmt = select(CoopSession).where(CoopSession.is_active.is_(True))
            active = session.execute(stmt).scalars().first()
        finally:
            session.close()

        if active is None:
            raise ValidationError("No active session is accepting class proposals")
        if today >= active.registration_start_date:
            raise ValidationError(
                "Class teaching registration closed when session registration opened"
            )

        return self.create_teaching_request(
            session_id=active.id, guardian_id=guardian_id, **fields
        )

    def get_teaching_request(self, request_id: str) -> ClassTeachingRequest:
        """Get class teaching request by ID.

        Raises:
            TeachingRequestNotFoundError: If request doesn't exist
        """
        session = self._db.get_session()
        try:
            request = session.get(ClassTeachingRequest, request_id)
            if request is None:
                raise TeachingRequestNotFoundError(
                    f"Class teaching request with id '{request_id}' not found"
                )
            return request
        finally:
            session.close()

    def list_teaching_requests(
        self,
        session_id: str | None = None,
        guardian_id: str | None = None,
        status: RequestStatus | str | None = None,
    ) -> list[ClassTeachingRequest]:
        """List class teaching requests with optional filters, newest first."""
        session = self._db.get_session()
        try:
            stmt = select(ClassTeachingRequest)
            if session_id is not None:
                stmt = stmt.where(ClassTeachingRequest.session_id == session_id)
            if guardian_id is not None:
                stmt = stmt.where(ClassTeachingRequest.guardian_id == guardian_id)
            if status is not None:
                stmt = stmt.where(ClassTeachingRequest.status == str(status))
            stmt = stmt.order_by(ClassTeachingRequest.created_at.desc())
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_teaching_request(self, request_id: str, **fields: Any) -> ClassTeachingRequest:
        """Update request fields. Only provided, non-None fields are updated.

        Raises:
            TeachingRequestNotFoundError: If request doesn't exist
            ValidationError: If a numeric limit is out of range
        """
        session = self._db.get_session()
        try:
            request = session.get(ClassTeachingRequest, request_id)
            if request is None:
                raise TeachingRequestNotFoundError(
                    f"Class teaching request with id '{request_id}' not found"
                )

            for key in _REQUEST_FIELDS:
                if fields.get(key) is not None:
                    setattr(request, key, fields[key])
            validate_class_limits(request.max_students, request.helpers_needed, request.fee_amount)

            session.commit()
            session.refresh(request)
            return request
        finally:
            session.close()

    def review_teaching_request(
        self,
        request_id: str,
        reviewer_id: str,
        status: RequestStatus | str,
        notes: str | None = None,
    ) -> ClassTeachingRequest:
        """Approve or reject a class teaching request.

        Raises:
            ValidationError: If status is not approved/rejected
            TeachingRequestNotFoundError: If request doesn't exist
        """
        try:
            new_status = RequestStatus(status)
        except ValueError as e:
            raise ValidationError(f"Invalid review status '{status}'") from e
        if new_status == RequestStatus.PENDING:
            raise ValidationError("A review must approve or reject the request")

        session = self._db.get_session()
        try:
            request = session.get(ClassTeachingRequest, request_id)
            if request is None:
                raise TeachingRequestNotFoundError(
                    f"Class teaching request with id '{request_id}' not found"
                )

            request.status = new_status.value
            request.reviewed_by = reviewer_id
            request.reviewed_at = datetime.now(UTC)
            request.review_notes = notes
            session.commit()
            session.refresh(request)
        finally:
            session.close()

        logger.info("Class teaching request %s %s by %s", request_id, new_status, reviewer_id)
        return request

    def delete_teaching_request(self, request_id: str) -> None:
        """Delete a class teaching request and its schedule placements.

        Raises:
            TeachingRequestNotFoundError: If request doesn't exist
        """
        session = self._db.get_session()
        try:
            request = session.get(ClassTeachingRequest, request_id)
            if request is None:
                raise TeachingRequestNotFoundError(
                    f"Class teaching request with id '{request_id}' not found"
                )
            session.delete(request)
            session.commit()
        finally:
            session.close()

    # --- Volunteer Job Operations ---

    def create_volunteer_job(
        self,
        title: str,
        description: str,
        created_by: str,
        quantity_available: int = 1,
        job_type: JobType | str = JobType.NON_PERIOD,
        is_active: bool = True,
        session_id: str | None = None,
    ) -> VolunteerJob:
        """Create a volunteer job.

        Args:
            session_id: Also offer the job in this session, with the same headcount

        Raises:
            ValidationError: If quantity or job type is invalid
            SessionNotFoundError: If session_id names no session
        """
        if quantity_available < 1:
            raise ValidationError("Quantity available must be at least 1")
        try:
            job_type = JobType(job_type)
        except ValueError as e:
            raise ValidationError(f"Invalid job type '{job_type}'") from e

        with self._db.transaction() as session:
            if session_id is not None and session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            job = VolunteerJob(
                title=title,
                description=description,
                created_by=created_by,
                quantity_available=quantity_available,
                job_type=job_type.value,
                is_active=is_active,
            )
            session.add(job)
            if session_id is not None:
                session.flush()
                session.add(
                    SessionVolunteerJob(
                        session_id=session_id,
                        volunteer_job_id=job.id,
                        quantity_available=quantity_available,
                    )
                )
            session.flush()
            session.refresh(job)
            return job

    def get_volunteer_job(self, job_id: str) -> VolunteerJob:
        """Get volunteer job by ID.

        Raises:
            VolunteerJobNotFoundError: If job doesn't exist
        """
        session = self._db.get_session()
        try:
            job = session.get(VolunteerJob, job_id)
            if job is None:
                raise VolunteerJobNotFoundError(f"Volunteer job with id '{job_id}' not found")
            return job
        finally:
            session.close()

    def list_volunteer_jobs(self, active_only: bool = False) -> list[VolunteerJob]:
        """List volunteer jobs, ordered by title."""
        session = self._db.get_session()
        try:
            stmt = select(VolunteerJob)
            if active_only:
                stmt = stmt.where(VolunteerJob.is_active.is_(True))
            stmt = stmt.order_by(VolunteerJob.title)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_volunteer_job(self, job_id: str, **fields: Any) -> VolunteerJob:
        """Update volunteer job fields. Only provided, non-None fields are updated.

        Raises:
            VolunteerJobNotFoundError: If job doesn't exist
            ValidationError: If quantity or job type is invalid
        """
        if fields.get("quantity_available") is not None and fields["quantity_available"] < 1:
            raise ValidationError("Quantity available must be at least 1")
        if fields.get("job_type") is not None:
            try:
                fields["job_type"] = JobType(fields["job_type"]).value
            except ValueError as e:
                raise ValidationError(f"Invalid job type '{fields['job_type']}'") from e

        session = self._db.get_session()
        try:
            job = session.get(VolunteerJob, job_id)
            if job is None:
                raise VolunteerJobNotFoundError(f"Volunteer job with id '{job_id}' not found")

            for key in _JOB_FIELDS:
                if fields.get(key) is not None:
                    setattr(job, key, fields[key])

            session.commit()
            session.refresh(job)
            return job
        finally:
            session.close()

    def delete_volunteer_job(self, job_id: str) -> None:
        """Delete a volunteer job.

        Raises:
            VolunteerJobNotFoundError: If job doesn't exist
        """
        session = self._db.get_session()
        try:
            job = session.get(VolunteerJob, job_id)
            if job is None:
                raise VolunteerJobNotFoundError(f"Volunteer job with id '{job_id}' not found")
            session.delete(job)
            session.commit()
        finally:
            session.close()

    # --- Session Volunteer Job Operations ---

    def offer_volunteer_job(
        self,
        session_id: str,
        job_id: str,
        quantity_available: int | None = None,
        is_active: bool = True,
    ) -> SessionVolunteerJob:
        """Offer a volunteer job in a session, or change an existing offer.

        Once a session offers any job, registration for it only accepts its
        active offers; a session offering none accepts every active job.

        Args:
            session_id: Session to offer the job in
            job_id: Volunteer job to offer
            quantity_available: Headcount for this session; defaults to the job's
            is_active: Whether families can sign up for it

        Raises:
            SessionNotFoundError: If session doesn't exist
            VolunteerJobNotFoundError: If job doesn't exist
            ValidationError: If quantity is below 1
        """
        if quantity_available is not None and quantity_available < 1:
            raise ValidationError("Quantity available must be at least 1")

        with self._db.transaction() as session:
            if session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            job = session.get(VolunteerJob, job_id)
            if job is None:
                raise VolunteerJobNotFoundError(f"Volunteer job with id '{job_id}' not found")

            offer = session.execute(
                select(SessionVolunteerJob).where(
                    SessionVolunteerJob.session_id == session_id,
                    SessionVolunteerJob.volunteer_job_id == job_id,
                )
            ).scalar_one_or_none()
            if offer is None:
                offer = SessionVolunteerJob(
                    session_id=session_id,
                    volunteer_job_id=job_id,
                    quantity_available=quantity_available or job.quantity_available,
                    is_active=is_active,
                )
                session.add(offer)
            else:
                if quantity_available is not None:
                    offer.quantity_available = quantity_available
                offer.is_active = is_active

            session.flush()
            session.refresh(offer)

        logger.info("Session %s offers volunteer job %s", session_id, job_id)
        return offer

    def list_session_volunteer_jobs(
        self, session_id: str, active_only: bool = False
    ) -> list[SessionVolunteerJob]:
        """List a session's job offers with their jobs loaded, ordered by job title."""
        session = self._db.get_session()
        try:
            stmt = (
                select(SessionVolunteerJob)
                .join(VolunteerJob, SessionVolunteerJob.volunteer_job_id == VolunteerJob.id)
                .where(SessionVolunteerJob.session_id == session_id)
            )
            if active_only:
                stmt = stmt.where(
                    SessionVolunteerJob.is_active.is_(True), VolunteerJob.is_active.is_(True)
                )
            stmt = stmt.order_by(VolunteerJob.title)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def available_volunteer_jobs(self, session_id: str) -> list[SessionVolunteerJob]:
        """Jobs families can sign up for in a session, ordered by title.

        A session that offers no jobs falls back to every active job; those
        come back as unsaved offers carrying the job's own headcount.
        """
        if self.list_session_volunteer_jobs(session_id):
            return self.list_session_volunteer_jobs(session_id, active_only=True)

        offers = []
        for job in self.list_volunteer_jobs(active_only=True):
            offer = SessionVolunteerJob(
                session_id=session_id,
                volunteer_job_id=job.id,
                quantity_available=job.quantity_available,
            )
            offer.job = job
            offers.append(offer)
        return offers

    def withdraw_volunteer_job(self, session_id: str, job_id: str) -> None:
        """Stop offering a job in a session. The job itself is kept.

        Raises:
            VolunteerJobNotFoundError: If the session does not offer the job
        """
        session = self._db.get_session()
        try:
            offer = session.execute(
                select(SessionVolunteerJob).where(
                    SessionVolunteerJob.session_id == session_id,
                    SessionVolunteerJob.volunteer_job_id == job_id,
                )
            ).scalar_one_or_none()
            if offer is None:
                raise VolunteerJobNotFoundError(
                    f"Volunteer job '{job_id}' is not offered in session '{session_id}'"
                )
            session.delete(offer)
            session.commit()
        finally:
            session.close()

    # --- Schedule Comment Operations ---

    def is_approved_teacher(self, guardian_id: str) -> bool:
        """Whether the guardian has had any class teaching request approved."""
        session = self._db.get_session()
        try:
            stmt = (
                select(ClassTeachingRequest.id)
                .where(
                    ClassTeachingRequest.guardian_id == guardian_id,
                    ClassTeachingRequest.status == RequestStatus.APPROVED.value,
                )
                .limit(1)
            )
            return session.execute(stmt).first() is not None
        finally:
            session.close()

    def create_schedule_comment(
        self, session_id: str, guardian_id: str, comment: str, is_public: bool = False
    ) -> ScheduleComment:
        """Record a teacher's comment on a session's schedule.

        Raises:
            ValidationError: If the comment is blank
            SessionNotFoundError: If session doesn't exist
            GuardianNotFoundError: If guardian doesn't exist
        """
        text = (comment or "").strip()
        if not text:
            raise ValidationError("Comment is required")

        with self._db.transaction() as session:
            if session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            if session.get(Guardian, guardian_id) is None:
                raise GuardianNotFoundError(f"Guardian with id '{guardian_id}' not found")

            schedule_comment = ScheduleComment(
                session_id=session_id,
                guardian_id=guardian_id,
                comment=text,
                is_public=is_public,
            )
            session.add(schedule_comment)
            session.flush()
            session.refresh(schedule_comment)

        return schedule_comment

    def list_schedule_comments(
        self, session_id: str, viewer_id: str, include_private: bool = False
    ) -> list[ScheduleComment]:
        """List the comments on a session's schedule that a viewer may read, newest first.

        Args:
            session_id: Session whose schedule the comments are on
            viewer_id: Guardian reading; always sees their own private comments
            include_private: Show every private comment (moderators and admins)
        """
        session = self._db.get_session()
        try:
            stmt = select(ScheduleComment).where(ScheduleComment.session_id == session_id)
            if not include_private:
                stmt = stmt.where(
                    or_(
                        ScheduleComment.is_public.is_(True),
                        ScheduleComment.guardian_id == viewer_id,
                    )
                )
            stmt = stmt.order_by(ScheduleComment.created_at.desc())
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()
