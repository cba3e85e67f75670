"""ScheduleManager - Draft/publish state machine for a session's schedule."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select, update

from coopreg.identity.exceptions import AuthorizationError
from coopreg.logging import get_logger
from coopreg.scheduling.models import (
    DraftDetail,
    DraftSummary,
    ScheduleConflict,
    ScheduledClass,
    ScheduleView,
)
from coopreg.store.exceptions import (
    ClassroomNotFoundError,
    DraftNotFoundError,
    ScheduleNotFoundError,
    SessionNotFoundError,
    StateConflictError,
    TeachingRequestNotFoundError,
    ValidationError,
)
from coopreg.store.models import (
    ClassRegistration,
    Classroom,
    ClassTeachingRequest,
    CoopSession,
    Guardian,
    Period,
    RequestStatus,
    Schedule,
    ScheduleDraft,
    ScheduleDraftEntry,
    ScheduleStatus,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

    from coopreg.identity.models import AuthenticatedUser
    from coopreg.scheduling.models import SlotAssignment
    from coopreg.store.database import Database

logger = get_logger("scheduling")

PERIODS = frozenset(p.value for p in Period)


def _require_session(session: Session, session_id: str) -> None:
    if session.get(CoopSession, session_id) is None:
        raise SessionNotFoundError(f"Session with id '{session_id}' not found")


def _check_slot(session: Session, session_id: str, slot: SlotAssignment) -> None:
    """Check that a slot names an approved class of the session and a real room.

    Raises:
        ValidationError: If the period is unknown or the class is not placeable
        TeachingRequestNotFoundError: If the class request doesn't exist
        ClassroomNotFoundError: If the classroom doesn't exist
    """
    if slot.period not in PERIODS:
        raise ValidationError(f"Invalid period '{slot.period}'")

    request = session.get(ClassTeachingRequest, slot.class_teaching_request_id)
    if request is None:
        raise TeachingRequestNotFoundError(
            f"Class teaching request with id '{slot.class_teaching_request_id}' not found"
        )
    if request.session_id != session_id:
        raise ValidationError(f'Class "{request.class_name}" belongs to another session')
    if request.status != RequestStatus.APPROVED.value:
        raise ValidationError(f'Class "{request.class_name}" has not been approved')

    if session.get(Classroom, slot.classroom_id) is None:
        raise ClassroomNotFoundError(f"Classroom with id '{slot.classroom_id}' not found")


def _check_unique_slots(slots: Sequence[SlotAssignment]) -> None:
    seen: set[tuple[str, str]] = set()
    for slot in slots:
        key = (slot.classroom_id, slot.period)
        if key in seen:
            raise ValidationError(
                f"Classroom '{slot.classroom_id}' is booked twice in the {slot.period} period"
            )
        seen.add(key)


def _registration_count(session: Session, *conditions: object) -> int:
    stmt = (
        select(func.count(ClassRegistration.id))
        .join(Schedule, Schedule.id == ClassRegistration.schedule_id)
        .where(*conditions)  # type: ignore[arg-type]
    )
    return int(session.execute(stmt).scalar_one())


class ScheduleManager:
    """Manages live schedule rows and the per-user draft sandbox.

    Live rows move between draft and published for a whole session at once.
    Schedule drafts are separate scratch copies that publish and pullback
    never touch.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the manager.

        Args:
            database: Database shared with the record store
        """
        self._db = database

    # --- Live Schedule ---

    def view(self, session_id: str) -> ScheduleView:
        """Get a session's schedule with everything needed to edit it.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        session = self._db.get_session()
        try:
            _require_session(session, session_id)

            stmt = (
                select(
                    Schedule,
                    ClassTeachingRequest.class_name,
                    Classroom.name,
                    Guardian.first_name,
                    Guardian.last_name,
                )
                .join(
                    ClassTeachingRequest,
                    ClassTeachingRequest.id == Schedule.class_teaching_request_id,
                )
                .join(Classroom, Classroom.id == Schedule.classroom_id)
                .join(Guardian, Guardian.id == ClassTeachingRequest.guardian_id)
                .where(Schedule.session_id == session_id)
                .order_by(Schedule.period, Classroom.name)
            )
            entries = [
                ScheduledClass(
                    schedule=schedule,
                    class_name=class_name,
                    classroom_name=classroom_name,
                    teacher_name=f"{first} {last}".strip(),
                )
                for schedule, class_name, classroom_name, first, last in session.execute(stmt)
            ]

            approved = session.execute(
                select(ClassTeachingRequest)
                .where(
                    ClassTeachingRequest.session_id == session_id,
                    ClassTeachingRequest.status == RequestStatus.APPROVED.value,
                )
                .order_by(ClassTeachingRequest.class_name)
            ).scalars()
            classrooms = session.execute(select(Classroom).order_by(Classroom.name)).scalars()

            return ScheduleView(
                session_id=session_id,
                entries=entries,
                approved_classes=list(approved),
                classrooms=list(classrooms),
            )
        finally:
            session.close()

    def place(self, session_id: str, slot: SlotAssignment) -> Schedule:
        """Put a class in a classroom and period, replacing whatever was there.

        The new row starts as a draft.

        Raises:
            SessionNotFoundError: If session doesn't exist
            ValidationError: If the slot is not placeable
            StateConflictError: If the replaced row already has registrations
        """
        with self._db.transaction() as session:
            _require_session(session, session_id)
            _check_slot(session, session_id, slot)

            in_slot = (
                Schedule.session_id == session_id,
                Schedule.classroom_id == slot.classroom_id,
                Schedule.period == slot.period,
            )
            if _registration_count(session, *in_slot):
                raise StateConflictError(
                    "The class in this slot already has registrations; remove them first"
                )
            session.execute(delete(Schedule).where(*in_slot))

            schedule = Schedule(
                session_id=session_id,
                class_teaching_request_id=slot.class_teaching_request_id,
                classroom_id=slot.classroom_id,
                period=slot.period,
            )
            session.add(schedule)
            session.flush()
            session.refresh(schedule)

        logger.info(
            "Placed class %s in classroom %s (%s period) for session %s",
            slot.class_teaching_request_id,
            slot.classroom_id,
            slot.period,
            session_id,
        )
        return schedule

    def remove(self, session_id: str, classroom_id: str, period: str) -> None:
        """Clear a classroom and period.

        Raises:
            ScheduleNotFoundError: If the slot is empty
            StateConflictError: If the row has registrations
        """
        with self._db.transaction() as session:
            schedule = session.execute(
                select(Schedule).where(
                    Schedule.session_id == session_id,
                    Schedule.classroom_id == classroom_id,
                    Schedule.period == period,
                )
            ).scalar_one_or_none()
            if schedule is None:
                raise ScheduleNotFoundError(
                    f"No class in classroom '{classroom_id}' for the {period} period"
                )
            if _registration_count(session, Schedule.id == schedule.id):
                raise StateConflictError(
                    "The class in this slot already has registrations; remove them first"
                )
            session.delete(schedule)

        logger.info(
            "Removed classroom %s (%s period) from session %s", classroom_id, period, session_id
        )

    def save(self, session_id: str, slots: Sequence[SlotAssignment]) -> list[Schedule]:
        """Replace a session's whole schedule with the given slots, as drafts.

        Raises:
            SessionNotFoundError: If session doesn't exist
            ValidationError: If a slot is not placeable or booked twice
            StateConflictError: If families already registered against the schedule
        """
        _check_unique_slots(slots)

        with self._db.transaction() as session:
            _require_session(session, session_id)
            for slot in slots:
                _check_slot(session, session_id, slot)

            if _registration_count(session, Schedule.session_id == session_id):
                raise StateConflictError(
                    "Families have registered against this schedule; it cannot be replaced"
                )

            session.execute(delete(Schedule).where(Schedule.session_id == session_id))
            schedules = [
                Schedule(
                    session_id=session_id,
                    class_teaching_request_id=slot.class_teaching_request_id,
                    classroom_id=slot.classroom_id,
                    period=slot.period,
                )
                for slot in slots
            ]
            session.add_all(schedules)
            session.flush()
            for schedule in schedules:
                session.refresh(schedule)

        logger.info("Saved schedule for session %s (%d entries)", session_id, len(schedules))
        return schedules

    def _set_status(self, session_id: str, status: ScheduleStatus) -> int:
        with self._db.transaction() as session:
            _require_session(session, session_id)
            result = session.execute(
                update(Schedule)
                .where(Schedule.session_id == session_id)
                .values(status=status.value)
            )
            count = int(result.rowcount)  # type: ignore[attr-defined]
        return count

    def publish(self, session_id: str) -> int:
        """Make every schedule row of the session visible to families.

        Returns:
            Number of rows now published

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        count = self._set_status(session_id, ScheduleStatus.PUBLISHED)
        logger.info("Published %d schedule entries for session %s", count, session_id)
        return count

    def pullback(self, session_id: str) -> int:
        """Return every schedule row of the session to draft.

        Row ids and bindings are unchanged; families can no longer register
        against the rows until they are published again.

        Returns:
            Number of rows now in draft

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        count = self._set_status(session_id, ScheduleStatus.DRAFT)
        logger.info("Pulled back %d schedule entries for session %s", count, session_id)
        return count

    # --- Draft Sandbox ---

    @staticmethod
    def _load_draft(session: Session, session_id: str, draft_id: str) -> ScheduleDraft:
        draft = session.get(ScheduleDraft, draft_id)
        if draft is None or draft.session_id != session_id:
            raise DraftNotFoundError(f"Schedule draft with id '{draft_id}' not found")
        return draft

    @staticmethod
    def _require_owner(draft: ScheduleDraft, actor: AuthenticatedUser) -> None:
        if draft.created_by != actor.user_id and not actor.is_admin:
            raise AuthorizationError("Only the draft's creator or an admin can change it")

    @staticmethod
    def _activate(session: Session, draft: ScheduleDraft) -> None:
        session.execute(
            update(ScheduleDraft)
            .where(
                ScheduleDraft.session_id == draft.session_id,
                ScheduleDraft.created_by == draft.created_by,
                ScheduleDraft.id != draft.id,
            )
            .values(is_active=False)
        )
        draft.is_active = True

    @staticmethod
    def _replace_entries(
        session: Session, draft: ScheduleDraft, slots: Sequence[SlotAssignment]
    ) -> None:
        for slot in slots:
            _check_slot(session, draft.session_id, slot)
        session.execute(delete(ScheduleDraftEntry).where(ScheduleDraftEntry.draft_id == draft.id))
        session.add_all(
            ScheduleDraftEntry(
                draft_id=draft.id,
                class_teaching_request_id=slot.class_teaching_request_id,
                classroom_id=slot.classroom_id,
                period=slot.period,
            )
            for slot in slots
        )

    def create_draft(
        self,
        session_id: str,
        actor: AuthenticatedUser,
        name: str,
        description: str | None = None,
        slots: Sequence[SlotAssignment] = (),
    ) -> ScheduleDraft:
        """Create a draft; it becomes the creator's active draft for the session.

        Raises:
            SessionNotFoundError: If session doesn't exist
            ValidationError: If the name is blank or a slot is not placeable
        """
        if not name.strip():
            raise ValidationError("Draft name is required")

        with self._db.transaction() as session:
            _require_session(session, session_id)
            draft = ScheduleDraft(
                session_id=session_id,
                created_by=actor.user_id,
                name=name.strip(),
                description=description,
            )
            session.add(draft)
            session.flush()
            self._activate(session, draft)
            self._replace_entries(session, draft, slots)
            session.flush()
            session.refresh(draft)

        logger.info("Draft %s created for session %s by %s", draft.id, session_id, actor.user_id)
        return draft

    def list_drafts(self, session_id: str, created_by: str | None = None) -> list[DraftSummary]:
        """List a session's drafts with entry counts, newest first."""
        session = self._db.get_session()
        try:
            counts = (
                select(ScheduleDraftEntry.draft_id, func.count().label("n"))
                .group_by(ScheduleDraftEntry.draft_id)
                .subquery()
            )
            stmt = (
                select(ScheduleDraft, func.coalesce(counts.c.n, 0))
                .outerjoin(counts, counts.c.draft_id == ScheduleDraft.id)
                .where(ScheduleDraft.session_id == session_id)
                .order_by(ScheduleDraft.created_at.desc())
            )
            if created_by is not None:
                stmt = stmt.where(ScheduleDraft.created_by == created_by)
            return [
                DraftSummary(draft=draft, entry_count=int(n)) for draft, n in session.execute(stmt)
            ]
        finally:
            session.close()

    def get_draft(self, session_id: str, draft_id: str) -> DraftDetail:
        """Get a draft with its entries.

        Raises:
            DraftNotFoundError: If the draft doesn't exist in the session
        """
        session = self._db.get_session()
        try:
            draft = self._load_draft(session, session_id, draft_id)
            entries = session.execute(
                select(ScheduleDraftEntry)
                .where(ScheduleDraftEntry.draft_id == draft_id)
                .order_by(ScheduleDraftEntry.period, ScheduleDraftEntry.classroom_id)
            ).scalars()
            return DraftDetail(draft=draft, entries=list(entries))
        finally:
            session.close()

    def update_draft(
        self,
        session_id: str,
        draft_id: str,
        actor: AuthenticatedUser,
        name: str | None = None,
        description: str | None = None,
        slots: Sequence[SlotAssignment] | None = None,
        is_active: bool | None = None,
    ) -> ScheduleDraft:
        """Rename, re-describe, replace the entries of, or (de)activate a draft.

        Activating a draft deactivates its creator's other drafts in the session.

        Raises:
            DraftNotFoundError: If the draft doesn't exist in the session
            AuthorizationError: If the actor is neither the creator nor an admin
            ValidationError: If a slot is not placeable
        """
        with self._db.transaction() as session:
            draft = self._load_draft(session, session_id, draft_id)
            self._require_owner(draft, actor)

            if name is not None:
                if not name.strip():
                    raise ValidationError("Draft name is required")
                draft.name = name.strip()
            if description is not None:
                draft.description = description
            if slots is not None:
                self._replace_entries(session, draft, slots)
            if is_active is True:
                self._activate(session, draft)
            elif is_active is False:
                draft.is_active = False

            session.flush()
            session.refresh(draft)

        logger.info("Draft %s updated by %s", draft_id, actor.user_id)
        return draft

    def set_active_draft(
        self, session_id: str, draft_id: str, actor: AuthenticatedUser
    ) -> ScheduleDraft:
        """Make a draft its creator's active draft for the session."""
        return self.update_draft(session_id, draft_id, actor, is_active=True)

    def delete_draft(self, session_id: str, draft_id: str, actor: AuthenticatedUser) -> None:
        """Delete a draft and its entries.

        Raises:
            DraftNotFoundError: If the draft doesn't exist in the session
            AuthorizationError: If the actor is neither the creator nor an admin
        """
        with self._db.transaction() as session:
            draft = self._load_draft(session, session_id, draft_id)
            self._require_owner(draft, actor)
            session.delete(draft)

        logger.info("Draft %s deleted by %s", draft_id, actor.user_id)

    def detect_conflicts(self, session_id: str) -> list[ScheduleConflict]:
        """Find classroom/period slots claimed by different classes across drafts.

        The result is advisory: drafts with conflicts can still be saved.
        """
        session = self._db.get_session()
        try:
            stmt = (
                select(ScheduleDraftEntry)
                .join(ScheduleDraft, ScheduleDraft.id == ScheduleDraftEntry.draft_id)
                .where(ScheduleDraft.session_id == session_id)
            )
            groups: dict[tuple[str, str], list[ScheduleDraftEntry]] = defaultdict(list)
            for entry in session.execute(stmt).scalars():
                groups[(entry.classroom_id, entry.period)].append(entry)
        finally:
            session.close()

        conflicts = []
        for (classroom_id, period), entries in sorted(groups.items()):
            request_ids = sorted({e.class_teaching_request_id for e in entries})
            if len(request_ids) < 2:
                continue
            conflicts.append(
                ScheduleConflict(
                    classroom_id=classroom_id,
                    period=period,
                    class_teaching_request_ids=tuple(request_ids),
                    draft_ids=tuple(sorted({e.draft_id for e in entries})),
                )
            )
        return conflicts
