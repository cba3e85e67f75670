"""Custom exceptions for family registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coopreg.registration.models import Conflict


class RegistrationError(Exception):
    """Base exception for registration errors."""


class RegistrationRejectedError(RegistrationError):
    """One or more batch items failed validation; nothing was committed.

    Attributes:
        conflicts: Every conflict found in the batch
    """

    def __init__(self, conflicts: list[Conflict]) -> None:
        self.conflicts = conflicts
        message = "; ".join(c.message for c in conflicts) or "Registration rejected"
        super().__init__(message)


class VolunteerRequirementError(RegistrationError):
    """The batch does not cover the family's volunteer hours.

    Attributes:
        required_hours: Volunteer hours the batch requires
        fulfilled_hours: Volunteer hours the batch provides
    """

    def __init__(self, required_hours: int, fulfilled_hours: int) -> None:
        self.required_hours = required_hours
        self.fulfilled_hours = fulfilled_hours
        super().__init__(
            f"Volunteer requirement not met: {fulfilled_hours}/{required_hours} hours fulfilled. "
            "Add volunteer assignments or request an admin override."
        )


class RegistrationClosedError(RegistrationError):
    """The session's registration window is not open for this family."""


class RegistrationConflictError(RegistrationError):
    """A concurrent submission claimed the same period first."""
