"""Admin family directory endpoint."""

from fastapi import APIRouter

from coopreg.api.dependencies import ModeratorDep, StoreDep
from coopreg.api.models import APIResponse, FamilyResponse, family_to_response

router = APIRouter(prefix="/admin/families", tags=["admin"])


@router.get("", response_model=APIResponse[list[FamilyResponse]])
def list_families(_admin: ModeratorDep, store: StoreDep) -> APIResponse[list[FamilyResponse]]:
    """List every family with its guardians and children, ordered by name."""
    families = store.list_families()
    return APIResponse(
        data=[family_to_response(f, guardians=f.guardians, children=f.children) for f in families]
    )
