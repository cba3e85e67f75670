"""Endpoints about the calling user."""

from fastapi import APIRouter

from coopreg.api.dependencies import CallerDep
from coopreg.api.models import APIResponse, RoleResponse

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/role", response_model=APIResponse[RoleResponse])
def get_my_role(caller: CallerDep) -> APIResponse[RoleResponse]:
    """Get the caller's role tier."""
    return APIResponse(data=RoleResponse(user_id=caller.user_id, role=caller.role.label))
