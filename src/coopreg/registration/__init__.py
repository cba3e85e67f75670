"""Registration - validated, atomic class and volunteer registration batches."""

from coopreg.registration.exceptions import (
    RegistrationClosedError,
    RegistrationConflictError,
    RegistrationError,
    RegistrationRejectedError,
    VolunteerRequirementError,
)
from coopreg.registration.manager import RegistrationManager
from coopreg.registration.models import (
    ClassAvailability,
    ClassRequest,
    Conflict,
    ConflictType,
    RegistrationRequest,
    RegistrationResult,
    VolunteerRequest,
)
from coopreg.registration.validator import CapacityValidator

__all__ = [
    "CapacityValidator",
    "ClassAvailability",
    "ClassRequest",
    "Conflict",
    "ConflictType",
    "RegistrationClosedError",
    "RegistrationConflictError",
    "RegistrationError",
    "RegistrationManager",
    "RegistrationRejectedError",
    "RegistrationRequest",
    "RegistrationResult",
    "VolunteerRequest",
    "VolunteerRequirementError",
]
