"""Identity - external identity provider client and role tiers."""

from coopreg.identity.client import IdentityClient
from coopreg.identity.exceptions import (
    AuthenticationError,
    AuthorizationError,
    IdentityError,
    IdentityRequestError,
    IdentityServiceError,
    IdentityTimeoutError,
    RoleLookupError,
)
from coopreg.identity.models import AuthenticatedUser, Role

__all__ = [
    "AuthenticatedUser",
    "AuthenticationError",
    "AuthorizationError",
    "IdentityClient",
    "IdentityError",
    "IdentityRequestError",
    "IdentityServiceError",
    "IdentityTimeoutError",
    "Role",
    "RoleLookupError",
]
