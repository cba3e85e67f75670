"""Session and classroom operations for the record store."""

from __future__ import annotations

from datetime import date  # noqa: TC003 - used at runtime in signatures
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update

from coopreg.logging import get_logger
from coopreg.store.exceptions import (
    ClassroomNotFoundError,
    SessionNotFoundError,
    ValidationError,
)
from coopreg.store.models import Classroom, CoopSession

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coopreg.store.database import Database

logger = get_logger("store")

_SESSION_FIELDS = (
    "name",
    "start_date",
    "end_date",
    "registration_start_date",
    "registration_end_date",
    "teacher_registration_start_date",
    "description",
)


def validate_session_dates(coop_session: CoopSession) -> None:
    """Check that a session's date ranges are ordered.

    Raises:
        ValidationError: If an end date precedes its start date or the early
            teacher window opens after regular registration
    """
    if coop_session.end_date < coop_session.start_date:
        raise ValidationError("Session end date must be on or after its start date")
    if coop_session.registration_end_date < coop_session.registration_start_date:
        raise ValidationError("Registration end date must be on or after registration start date")
    teacher_start = coop_session.teacher_registration_start_date
    if teacher_start is not None and teacher_start > coop_session.registration_start_date:
        raise ValidationError(
            "Teacher registration must open on or before regular registration"
        )


def deactivate_other_sessions(session: Session, session_id: str) -> None:
    """Clear the active flag on every session except session_id."""
    session.execute(
        update(CoopSession)
        .where(CoopSession.id != session_id, CoopSession.is_active.is_(True))
        .values(is_active=False)
    )


class SessionOperations:
    """Sessions (terms) and classrooms."""

    _db: Database

    # --- Session Operations ---

    def create_session(
        self,
        name: str,
        start_date: date,
        end_date: date,
        registration_start_date: date,
        registration_end_date: date,
        teacher_registration_start_date: date | None = None,
        description: str | None = None,
        is_active: bool = False,
    ) -> CoopSession:
        """Create a session. Creating it active deactivates every other session.

        Raises:
            ValidationError: If the date ranges are out of order
        """
        coop_session = CoopSession(
            name=name,
            start_date=start_date,
            end_date=end_date,
            registration_start_date=registration_start_date,
            registration_end_date=registration_end_date,
            teacher_registration_start_date=teacher_registration_start_date,
            description=description,
            is_active=is_active,
        )
        validate_session_dates(coop_session)

        with self._db.transaction() as session:
            session.add(coop_session)
            session.flush()
            if is_active:
                deactivate_other_sessions(session, coop_session.id)
            session.refresh(coop_session)

        logger.info("Created session %s (%s, active=%s)", coop_session.id, name, is_active)
        return coop_session

    def get_session(self, session_id: str) -> CoopSession:
        """Get session by ID.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        session = self._db.get_session()
        try:
            coop_session = session.get(CoopSession, session_id)
            if coop_session is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            return coop_session
        finally:
            session.close()

    def get_active_session(self) -> CoopSession:
        """Get the single active session.

        Raises:
            SessionNotFoundError: If no session is active
        """
        session = self._db.get_session()
        try:
            stmt = select(CoopSession).where(CoopSession.is_active.is_(True))
            coop_session = session.execute(stmt).scalars().first()
            if coop_session is None:
                raise SessionNotFoundError("No active session")
            return coop_session
        finally:
            session.close()

    def list_sessions(self) -> list[CoopSession]:
        """List all sessions, newest first."""
        session = self._db.get_session()
        try:
            stmt = select(CoopSession).order_by(CoopSession.start_date.desc())
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_session(self, session_id: str, **fields: Any) -> CoopSession:
        """Update session fields. Only provided, non-None fields are updated.

        Passing is_active=True activates the session; is_active=False clears it.

        Raises:
            SessionNotFoundError: If session doesn't exist
            ValidationError: If the resulting date ranges are out of order
        """
        with self._db.transaction() as session:
            coop_session = session.get(CoopSession, session_id)
            if coop_session is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")

            for key in _SESSION_FIELDS:
                if fields.get(key) is not None:
                    setattr(coop_session, key, fields[key])
            validate_session_dates(coop_session)

            is_active = fields.get("is_active")
            if is_active is not None:
                coop_session.is_active = is_active
                if is_active:
                    deactivate_other_sessions(session, session_id)

            session.flush()
            session.refresh(coop_session)
            return coop_session

    def set_active_session(self, session_id: str) -> CoopSession:
        """Make a session the only active one.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        with self._db.transaction() as session:
            coop_session = session.get(CoopSession, session_id)
            if coop_session is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")

            deactivate_other_sessions(session, session_id)
            coop_session.is_active = True
            session.flush()
            session.refresh(coop_session)

        logger.info("Activated session %s", session_id)
        return coop_session

    def delete_session(self, session_id: str) -> None:
        """Delete a session and everything scheduled or registered in it.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        session = self._db.get_session()
        try:
            coop_session = session.get(CoopSession, session_id)
            if coop_session is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            session.delete(coop_session)
            session.commit()
        finally:
            session.close()

        logger.info("Deleted session %s", session_id)

    # --- Classroom Operations ---

    def create_classroom(self, name: str, description: str | None = None) -> Classroom:
        """Create a classroom."""
        session = self._db.get_session()
        try:
            classroom = Classroom(name=name, description=description)
            session.add(classroom)
            session.commit()
            session.refresh(classroom)
            return classroom
        finally:
            session.close()

    def get_classroom(self, classroom_id: str) -> Classroom:
        """Get classroom by ID.

        Raises:
            ClassroomNotFoundError: If classroom doesn't exist
        """
        session = self._db.get_session()
        try:
            classroom = session.get(Classroom, classroom_id)
            if classroom is None:
                raise ClassroomNotFoundError(f"Classroom with id '{classroom_id}' not found")
            return classroom
        finally:
            session.close()

    def list_classrooms(self) -> list[Classroom]:
        """List all classrooms, ordered by name."""
        session = self._db.get_session()
        try:
            stmt = select(Classroom).order_by(Classroom.name)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_classroom(
        self,
        classroom_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Classroom:
        """Update classroom fields. Only provided fields are updated.

        Raises:
            ClassroomNotFoundError: If classroom doesn't exist
        """
        session = self._db.get_session()
        try:
            classroom = session.get(Classroom, classroom_id)
            if classroom is None:
                raise ClassroomNotFoundError(f"Classroom with id '{classroom_id}' not found")

            if name is not None:
                classroom.name = name
            if description is not None:
                classroom.description = description

            session.commit()
            session.refresh(classroom)
            return classroom
        finally:
            session.close()

    def delete_classroom(self, classroom_id: str) -> None:
        """Delete a classroom.

        Raises:
            ClassroomNotFoundError: If classroom doesn't exist
        """
        session = self._db.get_session()
        try:
            classroom = session.get(Classroom, classroom_id)
            if classroom is None:
                raise ClassroomNotFoundError(f"Classroom with id '{classroom_id}' not found")
            session.delete(classroom)
            session.commit()
        finally:
            session.close()
