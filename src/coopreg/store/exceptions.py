"""Custom exceptions for the record store."""


class StoreError(Exception):
    """Base exception for store errors."""


class NotFoundError(StoreError):
    """Referenced record does not exist."""

    entity = "Record"


class FamilyNotFoundError(NotFoundError):
    """Family with given ID or sharing code does not exist."""

    entity = "Family"


class GuardianNotFoundError(NotFoundError):
    """Guardian with given ID does not exist."""

    entity = "Guardian"


class ChildNotFoundError(NotFoundError):
    """Child with given ID does not exist in the family."""

    entity = "Child"


class SessionNotFoundError(NotFoundError):
    """Session with given ID does not exist."""

    entity = "Session"


class ClassroomNotFoundError(NotFoundError):
    """Classroom with given ID does not exist."""

    entity = "Classroom"


class TeachingRequestNotFoundError(NotFoundError):
    """Class teaching request with given ID does not exist."""

    entity = "Class teaching request"


class ScheduleNotFoundError(NotFoundError):
    """No schedule entry for the given slot or ID."""

    entity = "Schedule entry"


class DraftNotFoundError(NotFoundError):
    """Schedule draft with given ID does not exist."""

    entity = "Schedule draft"


class FeeConfigNotFoundError(NotFoundError):
    """Session has no fee configuration."""

    entity = "Fee configuration"


class VolunteerJobNotFoundError(NotFoundError):
    """Volunteer job with given ID does not exist."""

    entity = "Volunteer job"


class EventNotFoundError(NotFoundError):
    """Event with given ID does not exist."""

    entity = "Event"


class FamilyFeeNotFoundError(NotFoundError):
    """Family has no calculated fee for the session."""

    entity = "Family session fee"


class RegistrationStatusNotFoundError(NotFoundError):
    """Family registration status record does not exist."""

    entity = "Registration status"


class ValidationError(StoreError):
    """A business rule rejected the input. The message is safe to show users."""


class StateConflictError(StoreError):
    """Operation conflicts with the current state of stored records."""


class GuardianExistsError(StateConflictError):
    """Guardian already belongs to a family."""
