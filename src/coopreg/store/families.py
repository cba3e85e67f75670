"""Family, guardian and child operations for the record store."""

from __future__ import annotations

from datetime import date  # noqa: TC003 - used at runtime in signatures
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from coopreg.store.exceptions import (
    ChildNotFoundError,
    FamilyNotFoundError,
    GuardianExistsError,
    GuardianNotFoundError,
    ValidationError,
)
from coopreg.store.models import Child, Family, Guardian, generate_sharing_code

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coopreg.store.database import Database

GUARDIAN_ROLES = ("user", "member", "moderator", "admin")

_FAMILY_FIELDS = ("name", "address", "phone", "email")
_CHILD_FIELDS = (
    "first_name",
    "last_name",
    "date_of_birth",
    "grade",
    "allergies",
    "medical_notes",
)


def _unique_sharing_code(session: Session) -> str:
    while True:
        code = generate_sharing_code()
        stmt = select(Family.id).where(Family.sharing_code == code)
        if session.execute(stmt).first() is None:
            return code


def _require_guardian_free(session: Session, guardian_id: str) -> None:
    if session.get(Guardian, guardian_id) is not None:
        raise GuardianExistsError(f"Guardian '{guardian_id}' already belongs to a family")


class FamilyOperations:
    """Families, their guardians and their children."""

    _db: Database

    # --- Family Operations ---

    def create_family(
        self,
        guardian_id: str,
        guardian_email: str,
        first_name: str,
        last_name: str,
        name: str,
        address: str,
        phone: str,
        email: str,
        guardian_phone: str | None = None,
        children: list[dict[str, Any]] | None = None,
    ) -> Family:
        """Register a new family with the caller as its main contact.

        Args:
            guardian_id: Identity provider user id of the registering guardian
            guardian_email: Guardian's email
            first_name: Guardian's first name
            last_name: Guardian's last name
            name: Family name
            address: Household address
            phone: Household phone
            email: Household email
            guardian_phone: Guardian's own phone (optional)
            children: Child field mappings to create with the family

        Returns:
            The created Family with a fresh sharing code

        Raises:
            GuardianExistsError: If the guardian already belongs to a family
        """
        with self._db.transaction() as session:
            _require_guardian_free(session, guardian_id)

            family = Family(
                name=name,
                address=address,
                phone=phone,
                email=email,
                sharing_code=_unique_sharing_code(session),
            )
            family.guardians.append(
                Guardian(
                    id=guardian_id,
                    family_id=family.id,
                    email=guardian_email,
                    first_name=first_name,
                    last_name=last_name,
                    is_main_contact=True,
                    phone=guardian_phone,
                )
            )
            family.children.extend(Child(family_id=family.id, **child) for child in children or [])
            session.add(family)
            session.flush()
            session.refresh(family)
            return family

    def join_family(
        self,
        sharing_code: str,
        guardian_id: str,
        email: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
    ) -> Guardian:
        """Add a guardian to an existing family by its sharing code.

        Raises:
            FamilyNotFoundError: If no family has the sharing code
            GuardianExistsError: If the guardian already belongs to a family
        """
        code = sharing_code.strip().upper()
        with self._db.transaction() as session:
            _require_guardian_free(session, guardian_id)

            stmt = select(Family).where(Family.sharing_code == code)
            family = session.execute(stmt).scalar_one_or_none()
            if family is None:
                raise FamilyNotFoundError(f"No family with sharing code '{code}'")

            guardian = Guardian(
                id=guardian_id,
                family_id=family.id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                is_main_contact=False,
                phone=phone,
            )
            session.add(guardian)
            session.flush()
            session.refresh(guardian)
            return guardian

    def get_family(self, family_id: str) -> Family:
        """Get family by ID.

        Raises:
            FamilyNotFoundError: If family doesn't exist
        """
        session = self._db.get_session()
        try:
            family = session.get(Family, family_id)
            if family is None:
                raise FamilyNotFoundError(f"Family with id '{family_id}' not found")
            return family
        finally:
            session.close()

    def get_family_for_guardian(self, guardian_id: str) -> Family:
        """Get the family a guardian belongs to.

        Raises:
            FamilyNotFoundError: If the guardian has not registered or joined a family
        """
        session = self._db.get_session()
        try:
            stmt = select(Family).join(Guardian, Guardian.family_id == Family.id).where(
                Guardian.id == guardian_id
            )
            family = session.execute(stmt).scalar_one_or_none()
            if family is None:
                raise FamilyNotFoundError(f"No family registered for user '{guardian_id}'")
            return family
        finally:
            session.close()

    def list_families(self) -> list[Family]:
        """List all families with their guardians and children loaded, ordered by name."""
        session = self._db.get_session()
        try:
            stmt = (
                select(Family)
                .options(selectinload(Family.guardians), selectinload(Family.children))
                .order_by(Family.name)
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_family(self, family_id: str, **fields: Any) -> Family:
        """Update family contact fields. Only provided, non-None fields are updated.

        Raises:
            FamilyNotFoundError: If family doesn't exist
        """
        session = self._db.get_session()
        try:
            family = session.get(Family, family_id)
            if family is None:
                raise FamilyNotFoundError(f"Family with id '{family_id}' not found")

            for key in _FAMILY_FIELDS:
                if fields.get(key) is not None:
                    setattr(family, key, fields[key])

            session.commit()
            session.refresh(family)
            return family
        finally:
            session.close()

    # --- Guardian Operations ---

    def get_guardian(self, guardian_id: str) -> Guardian:
        """Get guardian by ID.

        Raises:
            GuardianNotFoundError: If guardian doesn't exist
        """
        session = self._db.get_session()
        try:
            guardian = session.get(Guardian, guardian_id)
            if guardian is None:
                raise GuardianNotFoundError(f"Guardian with id '{guardian_id}' not found")
            return guardian
        finally:
            session.close()

    def list_guardians(self, family_id: str) -> list[Guardian]:
        """List a family's guardians, main contact first."""
        session = self._db.get_session()
        try:
            stmt = (
                select(Guardian)
                .where(Guardian.family_id == family_id)
                .order_by(Guardian.is_main_contact.desc(), Guardian.last_name)
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_guardian_role(self, guardian_id: str, role: str) -> Guardian:
        """Mirror a guardian's identity provider role locally.

        Raises:
            ValidationError: If role is not a known role
            GuardianNotFoundError: If guardian doesn't exist
        """
        if role not in GUARDIAN_ROLES:
            raise ValidationError(f"Invalid role '{role}'")

        session = self._db.get_session()
        try:
            guardian = session.get(Guardian, guardian_id)
            if guardian is None:
                raise GuardianNotFoundError(f"Guardian with id '{guardian_id}' not found")
            guardian.role = role
            session.commit()
            session.refresh(guardian)
            return guardian
        finally:
            session.close()

    # --- Child Operations ---

    def create_child(
        self,
        family_id: str,
        first_name: str,
        last_name: str,
        date_of_birth: date | None = None,
        grade: str | None = None,
        allergies: str | None = None,
        medical_notes: str | None = None,
    ) -> Child:
        """Add a child to a family.

        Raises:
            FamilyNotFoundError: If family doesn't exist
        """
        session = self._db.get_session()
        try:
            if session.get(Family, family_id) is None:
                raise FamilyNotFoundError(f"Family with id '{family_id}' not found")

            child = Child(
                family_id=family_id,
                first_name=first_name,
                last_name=last_name,
                date_of_birth=date_of_birth,
                grade=grade,
                allergies=allergies,
                medical_notes=medical_notes,
            )
            session.add(child)
            session.commit()
            session.refresh(child)
            return child
        finally:
            session.close()

    def list_children(self, family_id: str) -> list[Child]:
        """List a family's children, ordered by first name."""
        session = self._db.get_session()
        try:
            stmt = select(Child).where(Child.family_id == family_id).order_by(Child.first_name)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def get_child(self, family_id: str, child_id: str) -> Child:
        """Get a child of the given family.

        Raises:
            ChildNotFoundError: If the child doesn't exist in the family
        """
        session = self._db.get_session()
        try:
            child = session.get(Child, child_id)
            if child is None or child.family_id != family_id:
                raise ChildNotFoundError(f"Child with id '{child_id}' not found")
            return child
        finally:
            session.close()

    def update_child(self, family_id: str, child_id: str, **fields: Any) -> Child:
        """Update child fields. Only provided, non-None fields are updated.

        Raises:
            ChildNotFoundError: If the child doesn't exist in the family
        """
        session = self._db.get_session()
        try:
            child = session.get(Child, child_id)
            if child is None or child.family_id != family_id:
                raise ChildNotFoundError(f"Child with id '{child_id}' not found")

            for key in _CHILD_FIELDS:
                if fields.get(key) is not None:
                    setattr(child, key, fields[key])

            session.commit()
            session.refresh(child)
            return child
        finally:
            session.close()

    def delete_child(self, family_id: str, child_id: str) -> None:
        """Delete a child along with its class registrations.

        Raises:
            ChildNotFoundError: If the child doesn't exist in the family
        """
        session = self._db.get_session()
        try:
            child = session.get(Child, child_id)
            if child is None or child.family_id != family_id:
                raise ChildNotFoundError(f"Child with id '{child_id}' not found")
            session.delete(child)
            session.commit()
        finally:
            session.close()
