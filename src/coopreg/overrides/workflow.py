"""OverrideWorkflow - Admin decisions on registrations short of volunteer hours."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from coopreg.identity.exceptions import AuthorizationError
from coopreg.logging import get_logger
from coopreg.store.exceptions import RegistrationStatusNotFoundError
from coopreg.store.fees import recalculate_family_fee
from coopreg.store.models import (
    AssignmentStatus,
    ClassRegistration,
    CoopSession,
    Family,
    FamilyRegistrationStatus,
    FamilyStatus,
    RegistrationStatus,
    VolunteerAssignment,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coopreg.identity.models import AuthenticatedUser
    from coopreg.store.database import Database

logger = get_logger("overrides")

DEFAULT_DENY_REASON = "Admin denied the override request"
DEFAULT_APPROVE_REASON = "Admin approved the override request"


@dataclass
class PendingOverride:
    """An override request awaiting an admin, with family and session names."""

    status: FamilyRegistrationStatus
    family_name: str
    session_name: str


class OverrideWorkflow:
    """Resolves family registration statuses parked in admin_override.

    Approving turns the family's pending rows into real registrations and
    assignments; denying deletes them. Either way the status records who
    decided and when.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the workflow.

        Args:
            database: Database shared with the record store
        """
        self._db = database

    def list_pending(self) -> list[PendingOverride]:
        """List statuses awaiting an override decision, oldest first."""
        session = self._db.get_session()
        try:
            stmt = (
                select(FamilyRegistrationStatus, Family.name, CoopSession.name)
                .join(Family, Family.id == FamilyRegistrationStatus.family_id)
                .join(CoopSession, CoopSession.id == FamilyRegistrationStatus.session_id)
                .where(FamilyRegistrationStatus.status == FamilyStatus.ADMIN_OVERRIDE.value)
                .order_by(FamilyRegistrationStatus.created_at)
            )
            return [
                PendingOverride(status=status, family_name=family_name, session_name=session_name)
                for status, family_name, session_name in session.execute(stmt)
            ]
        finally:
            session.close()

    @staticmethod
    def _load_pending(
        session: Session, status_id: str, actor: AuthenticatedUser
    ) -> FamilyRegistrationStatus:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can resolve registration overrides")
        status = session.get(FamilyRegistrationStatus, status_id)
        if status is None or status.status != FamilyStatus.ADMIN_OVERRIDE.value:
            raise RegistrationStatusNotFoundError(
                f"No pending override with id '{status_id}'"
            )
        return status

    def approve(
        self, status_id: str, actor: AuthenticatedUser, reason: str | None = None
    ) -> FamilyRegistrationStatus:
        """Accept a family's pending registrations despite short volunteer hours.

        Pending registrations become registered, pending assignments become
        assigned, the status becomes completed and the family's fee is
        recalculated, all in one transaction.

        Args:
            status_id: FamilyRegistrationStatus ID
            actor: The deciding user (must be an admin)
            reason: Note stored on the status

        Returns:
            The completed status

        Raises:
            AuthorizationError: If the actor is not an admin
            RegistrationStatusNotFoundError: If no pending override has the ID
        """
        with self._db.transaction() as session:
            status = self._load_pending(session, status_id, actor)
            now = datetime.now(UTC)

            session.execute(
                update(ClassRegistration)
                .where(
                    ClassRegistration.family_id == status.family_id,
                    ClassRegistration.session_id == status.session_id,
                    ClassRegistration.status == RegistrationStatus.PENDING.value,
                )
                .values(status=RegistrationStatus.REGISTERED.value)
            )
            session.execute(
                update(VolunteerAssignment)
                .where(
                    VolunteerAssignment.family_id == status.family_id,
                    VolunteerAssignment.session_id == status.session_id,
                    VolunteerAssignment.status == AssignmentStatus.PENDING.value,
                )
                .values(status=AssignmentStatus.ASSIGNED.value)
            )

            status.status = FamilyStatus.COMPLETED.value
            status.volunteer_requirements_met = True
            status.admin_override = True
            status.admin_override_reason = reason or DEFAULT_APPROVE_REASON
            status.overridden_by = actor.user_id
            status.overridden_at = now
            status.completed_at = now
            session.flush()

            recalculate_family_fee(session, status.session_id, status.family_id)
            session.refresh(status)

        logger.info(
            "Override %s approved by %s (family %s, session %s)",
            status_id,
            actor.user_id,
            status.family_id,
            status.session_id,
        )
        return status

    def deny(
        self, status_id: str, actor: AuthenticatedUser, reason: str | None = None
    ) -> FamilyRegistrationStatus:
        """Reject a family's pending registrations.

        The family's pending registrations and assignments for the session
        are deleted and the status becomes denied, in one transaction.

        Args:
            status_id: FamilyRegistrationStatus ID
            actor: The deciding user (must be an admin)
            reason: Note stored on the status

        Returns:
            The denied status

        Raises:
            AuthorizationError: If the actor is not an admin
            RegistrationStatusNotFoundError: If no pending override has the ID
        """
        with self._db.transaction() as session:
            status = self._load_pending(session, status_id, actor)

            session.execute(
                delete(ClassRegistration).where(
                    ClassRegistration.family_id == status.family_id,
                    ClassRegistration.session_id == status.session_id,
                    ClassRegistration.status == RegistrationStatus.PENDING.value,
                )
            )
            session.execute(
                delete(VolunteerAssignment).where(
                    VolunteerAssignment.family_id == status.family_id,
                    VolunteerAssignment.session_id == status.session_id,
                    VolunteerAssignment.status == AssignmentStatus.PENDING.value,
                )
            )

            status.status = FamilyStatus.DENIED.value
            status.admin_override_reason = reason or DEFAULT_DENY_REASON
            status.overridden_by = actor.user_id
            status.overridden_at = datetime.now(UTC)
            session.flush()
            session.refresh(status)

        logger.info(
            "Override %s denied by %s (family %s, session %s)",
            status_id,
            actor.user_id,
            status.family_id,
            status.session_id,
        )
        return status
