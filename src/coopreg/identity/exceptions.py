"""Custom exceptions for the identity provider client and authorization."""


class IdentityError(Exception):
    """Base exception for identity errors."""


class AuthenticationError(IdentityError):
    """Caller did not present a usable session."""


class AuthorizationError(IdentityError):
    """Caller's role is below what the operation requires."""


class RoleLookupError(AuthorizationError):
    """Identity provider refused or failed the role lookup."""


class IdentityRequestError(IdentityError):
    """Identity provider rejected a proxied request.

    Attributes:
        status_code: HTTP status returned by the provider
    """

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class IdentityServiceError(IdentityError):
    """Identity provider is unreachable or misconfigured."""


class IdentityTimeoutError(IdentityServiceError):
    """Identity provider did not answer in time."""
