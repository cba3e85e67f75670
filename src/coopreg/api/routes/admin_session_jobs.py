"""Admin endpoints for the volunteer jobs offered in a session."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import ModeratorDep, StoreDep
from coopreg.api.models import (
    APIResponse,
    SessionJobOffer,
    SessionJobResponse,
    session_job_to_response,
)

router = APIRouter(prefix="/admin/sessions/{session_id}/volunteer-jobs", tags=["admin"])


@router.get("", response_model=APIResponse[list[SessionJobResponse]])
def list_offers(
    session_id: str, _admin: ModeratorDep, store: StoreDep, active_only: bool = False
) -> APIResponse[list[SessionJobResponse]]:
    """List the jobs offered in a session with their session headcount."""
    offers = store.list_session_volunteer_jobs(session_id, active_only=active_only)
    return APIResponse(data=[session_job_to_response(o) for o in offers])


@router.put("/{job_id}", response_model=APIResponse[SessionJobResponse])
def offer_job(
    session_id: str, job_id: str, body: SessionJobOffer, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[SessionJobResponse]:
    """Offer a job in the session, or change its session headcount or availability."""
    offer = store.offer_volunteer_job(
        session_id, job_id, quantity_available=body.quantity_available, is_active=body.is_active
    )
    return APIResponse(data=session_job_to_response(offer))


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def withdraw_job(session_id: str, job_id: str, _admin: ModeratorDep, store: StoreDep) -> None:
    """Stop offering a job in the session."""
    store.withdraw_volunteer_job(session_id, job_id)
