"""Admin co-op event endpoints."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import AdminDep, StoreDep
from coopreg.api.models import APIResponse, EventCreate, EventResponse, EventUpdate

router = APIRouter(prefix="/admin/events", tags=["admin"])


@router.get("", response_model=APIResponse[list[EventResponse]])
def list_events(
    _admin: AdminDep, store: StoreDep, session_id: str | None = None
) -> APIResponse[list[EventResponse]]:
    """List every event, private ones included, latest first."""
    events = store.list_events(session_id=session_id)
    return APIResponse(data=[EventResponse.model_validate(e) for e in events])


@router.post(
    "",
    response_model=APIResponse[EventResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_event(body: EventCreate, admin: AdminDep, store: StoreDep) -> APIResponse[EventResponse]:
    """Create an event."""
    fields = body.model_dump(exclude={"title", "start_date"})
    fields["event_type"] = body.event_type.value
    event = store.create_event(body.title, body.start_date, created_by=admin.user_id, **fields)
    return APIResponse(data=EventResponse.model_validate(event))


@router.get("/{event_id}", response_model=APIResponse[EventResponse])
def get_event(event_id: str, _admin: AdminDep, store: StoreDep) -> APIResponse[EventResponse]:
    """Get an event."""
    return APIResponse(data=EventResponse.model_validate(store.get_event(event_id)))


@router.patch("/{event_id}", response_model=APIResponse[EventResponse])
def update_event(
    event_id: str, body: EventUpdate, _admin: AdminDep, store: StoreDep
) -> APIResponse[EventResponse]:
    """Update an event (partial update)."""
    fields = body.model_dump(exclude_unset=True)
    if body.event_type is not None:
        fields["event_type"] = body.event_type.value
    event = store.update_event(event_id, **fields)
    return APIResponse(data=EventResponse.model_validate(event))


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, _admin: AdminDep, store: StoreDep) -> None:
    """Delete an event."""
    store.delete_event(event_id)
