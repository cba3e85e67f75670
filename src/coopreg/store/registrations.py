"""Read-side registration queries for the record store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from coopreg.store.models import (
    ClassRegistration,
    FamilyRegistrationStatus,
    VolunteerAssignment,
)

if TYPE_CHECKING:
    from coopreg.store.database import Database


class RegistrationQueries:
    """Class registrations, volunteer assignments and family statuses."""

    _db: Database

    def list_family_registrations(
        self, family_id: str, session_id: str
    ) -> list[ClassRegistration]:
        """List a family's class registrations in a session, by period."""
        session = self._db.get_session()
        try:
            stmt = (
                select(ClassRegistration)
                .where(
                    ClassRegistration.family_id == family_id,
                    ClassRegistration.session_id == session_id,
                )
                .order_by(ClassRegistration.period, ClassRegistration.child_id)
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def list_family_assignments(
        self, family_id: str, session_id: str
    ) -> list[VolunteerAssignment]:
        """List a family's volunteer assignments in a session, by period."""
        session = self._db.get_session()
        try:
            stmt = (
                select(VolunteerAssignment)
                .where(
                    VolunteerAssignment.family_id == family_id,
                    VolunteerAssignment.session_id == session_id,
                )
                .order_by(VolunteerAssignment.period, VolunteerAssignment.guardian_id)
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def get_registration_status(
        self, family_id: str, session_id: str
    ) -> FamilyRegistrationStatus | None:
        """Get a family's registration status for a session.

        Returns:
            The status record, or None if the family has not started
        """
        session = self._db.get_session()
        try:
            stmt = select(FamilyRegistrationStatus).where(
                FamilyRegistrationStatus.family_id == family_id,
                FamilyRegistrationStatus.session_id == session_id,
            )
            return session.execute(stmt).scalar_one_or_none()
        finally:
            session.close()
