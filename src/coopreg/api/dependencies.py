"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Callable, Generator  # noqa: TC003
from dataclasses import replace
from datetime import date
from typing import Annotated

from fastapi import Depends, Header

from coopreg.config import IdentityConfig
from coopreg.identity import AuthenticatedUser, AuthenticationError, AuthorizationError, Role
from coopreg.identity.client import IdentityClient
from coopreg.logging import get_logger
from coopreg.overrides import OverrideWorkflow
from coopreg.registration import RegistrationManager
from coopreg.scheduling import ScheduleManager
from coopreg.store import CoopStore, Family

logger = get_logger("api")

# Global CoopStore instance (initialized on app startup)
_store: CoopStore | None = None


def init_store(db_path: str = "coopreg.db") -> CoopStore:
    """Initialize the global CoopStore instance."""
    global _store  # noqa: PLW0603
    _store = CoopStore(db_path)
    return _store


def close_store() -> None:
    """Close the global CoopStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[CoopStore, None, None]:
    """Dependency that provides the CoopStore instance."""
    if _store is None:
        raise RuntimeError("CoopStore not initialized. Call init_store() first.")
    yield _store


# Type alias for dependency injection
StoreDep = Annotated[CoopStore, Depends(get_store)]

# Global IdentityClient instance (initialized on app startup)
_identity: IdentityClient | None = None


def init_identity_client(config: IdentityConfig) -> IdentityClient:
    """Initialize the global IdentityClient instance."""
    global _identity  # noqa: PLW0603
    _identity = IdentityClient(config)
    return _identity


def close_identity_client() -> None:
    """Close the global IdentityClient instance."""
    global _identity  # noqa: PLW0603
    if _identity is not None:
        _identity.close()
        _identity = None


def get_identity_client() -> Generator[IdentityClient, None, None]:
    """Dependency that provides the IdentityClient instance."""
    if _identity is None:
        raise RuntimeError("IdentityClient not initialized. Call init_identity_client() first.")
    yield _identity


IdentityDep = Annotated[IdentityClient, Depends(get_identity_client)]


def get_today() -> date:
    """Dependency that provides the current date."""
    return date.today()


TodayDep = Annotated[date, Depends(get_today)]


def get_registration_manager(store: StoreDep, today: TodayDep) -> RegistrationManager:
    """Dependency that provides a RegistrationManager over the store's database."""
    return RegistrationManager(store.database, today=lambda: today)


RegistrationManagerDep = Annotated[RegistrationManager, Depends(get_registration_manager)]


def get_schedule_manager(store: StoreDep) -> ScheduleManager:
    """Dependency that provides a ScheduleManager over the store's database."""
    return ScheduleManager(store.database)


ScheduleManagerDep = Annotated[ScheduleManager, Depends(get_schedule_manager)]


def get_override_workflow(store: StoreDep) -> OverrideWorkflow:
    """Dependency that provides an OverrideWorkflow over the store's database."""
    return OverrideWorkflow(store.database)


OverrideWorkflowDep = Annotated[OverrideWorkflow, Depends(get_override_workflow)]


# --- Caller identity ---


def get_credentials(
    authorization: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> AuthenticatedUser:
    """Dependency that reads the caller's claimed identity from the request headers.

    Raises:
        AuthenticationError: If the bearer token or user id is missing
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Missing bearer token")
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Missing user id")
    return AuthenticatedUser(user_id=x_user_id.strip(), token=token.strip())


CredentialsDep = Annotated[AuthenticatedUser, Depends(get_credentials)]


def get_caller(credentials: CredentialsDep, identity: IdentityDep) -> AuthenticatedUser:
    """Dependency that verifies the caller's token with the identity provider.

    The role lookup doubles as the token check: the provider only answers
    it for a live session belonging to the claimed user.

    Raises:
        AuthenticationError: If the provider rejects the token
        RoleLookupError: If the provider refuses the lookup for another reason
    """
    role = identity.get_role(credentials.user_id, credentials.token)
    return replace(credentials, role=role)


CallerDep = Annotated[AuthenticatedUser, Depends(get_caller)]


def require_role(min_role: Role) -> Callable[..., AuthenticatedUser]:
    """Build a dependency that admits callers holding at least min_role.

    Args:
        min_role: Lowest role tier allowed through

    Returns:
        Dependency returning the verified caller
    """

    def dependency(caller: CallerDep) -> AuthenticatedUser:
        if caller.role < min_role:
            logger.warning(
                "User %s (%s) denied: requires %s",
                caller.user_id,
                caller.role.label,
                min_role.label,
            )
            raise AuthorizationError(f"Requires {min_role.label} role")
        return caller

    return dependency


ModeratorDep = Annotated[AuthenticatedUser, Depends(require_role(Role.MODERATOR))]
AdminDep = Annotated[AuthenticatedUser, Depends(require_role(Role.ADMIN))]


def get_caller_family(caller: CallerDep, store: StoreDep) -> Family:
    """Dependency that provides the caller's family.

    Raises:
        FamilyNotFoundError: If the caller has not registered or joined a family
    """
    return store.get_family_for_guardian(caller.user_id)


FamilyDep = Annotated[Family, Depends(get_caller_family)]
