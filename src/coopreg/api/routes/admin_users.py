"""Admin user listing and role endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Query

from coopreg.api.dependencies import AdminDep, IdentityDep, StoreDep
from coopreg.api.models import APIResponse, RoleResponse, RoleUpdate, UserListResponse
from coopreg.identity import Role
from coopreg.logging import get_logger
from coopreg.store import GuardianNotFoundError

router = APIRouter(prefix="/admin/users", tags=["admin"])

logger = get_logger("api")


@router.get("", response_model=APIResponse[UserListResponse])
def list_users(
    admin: AdminDep,
    identity: IdentityDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    role: Literal["user", "member", "moderator", "admin"] | None = None,
) -> APIResponse[UserListResponse]:
    """List the application's users at the identity provider, optionally by role."""
    listing = identity.list_users(
        admin.token,
        page=page,
        limit=limit,
        role=Role.from_label(role) if role is not None else None,
    )
    return APIResponse(data=UserListResponse(**listing))


@router.patch("/{guardian_id}/role", response_model=APIResponse[RoleResponse])
def update_user_role(
    guardian_id: str,
    body: RoleUpdate,
    admin: AdminDep,
    identity: IdentityDep,
    store: StoreDep,
) -> APIResponse[RoleResponse]:
    """Change a user's role at the identity provider and mirror it locally."""
    role = Role.from_label(body.role)
    identity.set_role(guardian_id, role, admin.token)
    try:
        store.update_guardian_role(guardian_id, role.label)
    except GuardianNotFoundError:
        # Users without a family have no guardian row to mirror onto.
        logger.info("Role of %s changed with no local guardian record", guardian_id)
    return APIResponse(data=RoleResponse(user_id=guardian_id, role=role.label))
