"""Co-op calendar endpoint."""

from fastapi import APIRouter

from coopreg.api.dependencies import CallerDep, StoreDep
from coopreg.api.models import APIResponse, CalendarEntryResponse

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=APIResponse[list[CalendarEntryResponse]])
def list_calendar(_caller: CallerDep, store: StoreDep) -> APIResponse[list[CalendarEntryResponse]]:
    """List public events together with every session's term and registration dates."""
    entries = store.list_calendar()
    return APIResponse(data=[CalendarEntryResponse.model_validate(e) for e in entries])
