"""Session lookup endpoints for families."""

from fastapi import APIRouter

from coopreg.api.dependencies import CallerDep, StoreDep
from coopreg.api.models import APIResponse, SessionResponse

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/active", response_model=APIResponse[SessionResponse])
def get_active_session(_caller: CallerDep, store: StoreDep) -> APIResponse[SessionResponse]:
    """Get the session currently open to families."""
    coop_session = store.get_active_session()
    return APIResponse(data=SessionResponse.model_validate(coop_session))


@router.get("/{session_id}", response_model=APIResponse[SessionResponse])
def get_session(
    session_id: str, _caller: CallerDep, store: StoreDep
) -> APIResponse[SessionResponse]:
    """Get a session by ID."""
    coop_session = store.get_session(session_id)
    return APIResponse(data=SessionResponse.model_validate(coop_session))
