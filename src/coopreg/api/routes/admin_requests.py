"""Admin class teaching request endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from coopreg.api.dependencies import ModeratorDep, StoreDep
from coopreg.api.models import APIResponse, TeachingRequestResponse, TeachingRequestUpdate

router = APIRouter(prefix="/admin/class-teaching-requests", tags=["admin"])


@router.get("", response_model=APIResponse[list[TeachingRequestResponse]])
def list_requests(
    _admin: ModeratorDep,
    store: StoreDep,
    session_id: str | None = None,
    request_status: Annotated[str | None, Query(alias="status")] = None,
) -> APIResponse[list[TeachingRequestResponse]]:
    """List class teaching requests, optionally by session and status."""
    requests = store.list_teaching_requests(session_id=session_id, status=request_status)
    return APIResponse(data=[TeachingRequestResponse.model_validate(r) for r in requests])


@router.get("/{request_id}", response_model=APIResponse[TeachingRequestResponse])
def get_request(
    request_id: str, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[TeachingRequestResponse]:
    """Get a class teaching request by ID."""
    request = store.get_teaching_request(request_id)
    return APIResponse(data=TeachingRequestResponse.model_validate(request))


@router.patch("/{request_id}", response_model=APIResponse[TeachingRequestResponse])
def update_request(
    request_id: str, body: TeachingRequestUpdate, admin: ModeratorDep, store: StoreDep
) -> APIResponse[TeachingRequestResponse]:
    """Edit a class teaching request, or approve/reject it when a status is given."""
    fields = body.model_dump(exclude_unset=True, exclude={"status", "review_notes"})
    request = store.get_teaching_request(request_id)
    if fields:
        request = store.update_teaching_request(request_id, **fields)
    if body.status is not None:
        request = store.review_teaching_request(
            request_id, reviewer_id=admin.user_id, status=body.status, notes=body.review_notes
        )
    return APIResponse(data=TeachingRequestResponse.model_validate(request))


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(request_id: str, _admin: ModeratorDep, store: StoreDep) -> None:
    """Delete a class teaching request and its schedule placements."""
    store.delete_teaching_request(request_id)
