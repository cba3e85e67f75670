"""Admin endpoints for registration override requests."""

from fastapi import APIRouter

from coopreg.api.dependencies import AdminDep, ModeratorDep, OverrideWorkflowDep
from coopreg.api.models import (
    APIResponse,
    OverrideDecision,
    PendingOverrideResponse,
    RegistrationStatusResponse,
)

router = APIRouter(prefix="/admin/registration-overrides", tags=["admin"])


@router.get("", response_model=APIResponse[list[PendingOverrideResponse]])
def list_pending_overrides(
    _admin: ModeratorDep, workflow: OverrideWorkflowDep
) -> APIResponse[list[PendingOverrideResponse]]:
    """List registrations waiting for an override decision."""
    pending = workflow.list_pending()
    return APIResponse(
        data=[
            PendingOverrideResponse(
                **RegistrationStatusResponse.model_validate(p.status).model_dump(),
                family_name=p.family_name,
                session_name=p.session_name,
            )
            for p in pending
        ]
    )


@router.patch("/{status_id}", response_model=APIResponse[RegistrationStatusResponse])
def decide_override(
    status_id: str, body: OverrideDecision, admin: AdminDep, workflow: OverrideWorkflowDep
) -> APIResponse[RegistrationStatusResponse]:
    """Approve or deny a family's override request."""
    if body.action == "approve":
        decided = workflow.approve(status_id, admin, reason=body.reason)
    else:
        decided = workflow.deny(status_id, admin, reason=body.reason)
    return APIResponse(data=RegistrationStatusResponse.model_validate(decided))
