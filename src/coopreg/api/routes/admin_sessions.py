"""Admin session endpoints, including activation and fee configuration."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import ModeratorDep, StoreDep
from coopreg.api.models import (
    APIResponse,
    FeeConfigResponse,
    FeeConfigUpdate,
    SessionCreate,
    SessionResponse,
    SessionUpdate,
)

router = APIRouter(prefix="/admin/sessions", tags=["admin"])


@router.get("", response_model=APIResponse[list[SessionResponse]])
def list_sessions(_admin: ModeratorDep, store: StoreDep) -> APIResponse[list[SessionResponse]]:
    """List all sessions."""
    sessions = store.list_sessions()
    return APIResponse(data=[SessionResponse.model_validate(s) for s in sessions])


@router.post(
    "",
    response_model=APIResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    body: SessionCreate, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[SessionResponse]:
    """Create a session. Creating it active deactivates every other session."""
    created = store.create_session(**body.model_dump())
    return APIResponse(data=SessionResponse.model_validate(created))


@router.get("/{session_id}", response_model=APIResponse[SessionResponse])
def get_session(
    session_id: str, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[SessionResponse]:
    """Get a session by ID."""
    return APIResponse(data=SessionResponse.model_validate(store.get_session(session_id)))


@router.patch("/{session_id}", response_model=APIResponse[SessionResponse])
def update_session(
    session_id: str, body: SessionUpdate, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[SessionResponse]:
    """Update a session (partial update)."""
    updated = store.update_session(session_id, **body.model_dump(exclude_unset=True))
    return APIResponse(data=SessionResponse.model_validate(updated))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, _admin: ModeratorDep, store: StoreDep) -> None:
    """Delete a session and everything scheduled or registered in it."""
    store.delete_session(session_id)


@router.post("/{session_id}/activate", response_model=APIResponse[SessionResponse])
def activate_session(
    session_id: str, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[SessionResponse]:
    """Make a session the only active one."""
    activated = store.set_active_session(session_id)
    return APIResponse(data=SessionResponse.model_validate(activated))


@router.get("/{session_id}/fees", response_model=APIResponse[FeeConfigResponse])
def get_fee_config(
    session_id: str, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[FeeConfigResponse]:
    """Get a session's fee configuration."""
    config = store.get_fee_config(session_id)
    return APIResponse(data=FeeConfigResponse.model_validate(config))


@router.put("/{session_id}/fees", response_model=APIResponse[FeeConfigResponse])
def set_fee_config(
    session_id: str, body: FeeConfigUpdate, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[FeeConfigResponse]:
    """Create or replace a session's fee configuration."""
    config = store.upsert_fee_config(
        session_id,
        first_child_fee=body.first_child_fee,
        additional_child_fee=body.additional_child_fee,
        due_date=body.due_date,
    )
    return APIResponse(data=FeeConfigResponse.model_validate(config))
