"""Admin schedule endpoints: live schedule and schedule drafts."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import ModeratorDep, ScheduleManagerDep
from coopreg.api.models import (
    APIResponse,
    DraftCreate,
    DraftListResponse,
    DraftResponse,
    DraftUpdate,
    ScheduleResponse,
    ScheduleSave,
    ScheduleViewResponse,
    SlotRequest,
    StatusChangeResponse,
    conflict_to_response,
    draft_to_response,
    schedule_view_to_response,
)
from coopreg.scheduling import SlotAssignment
from coopreg.store import Period, ScheduleStatus

router = APIRouter(prefix="/admin/schedule", tags=["admin"])


def _slot(request: SlotRequest) -> SlotAssignment:
    return SlotAssignment(
        class_teaching_request_id=request.class_teaching_request_id,
        classroom_id=request.classroom_id,
        period=request.period.value,
    )


# --- Live Schedule ---


@router.get("/{session_id}", response_model=APIResponse[ScheduleViewResponse])
def get_schedule(
    session_id: str, _admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[ScheduleViewResponse]:
    """Get a session's schedule with its approved classes and classrooms."""
    return APIResponse(data=schedule_view_to_response(manager.view(session_id)))


@router.post(
    "/{session_id}",
    response_model=APIResponse[ScheduleResponse],
    status_code=status.HTTP_201_CREATED,
)
def place_class(
    session_id: str, body: SlotRequest, _admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[ScheduleResponse]:
    """Put a class in a classroom and period, replacing whatever was there."""
    schedule = manager.place(session_id, _slot(body))
    return APIResponse(data=ScheduleResponse.model_validate(schedule))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_class(
    session_id: str,
    classroom_id: str,
    period: Period,
    _admin: ModeratorDep,
    manager: ScheduleManagerDep,
) -> None:
    """Clear a classroom and period."""
    manager.remove(session_id, classroom_id, period.value)


@router.put("/{session_id}", response_model=APIResponse[list[ScheduleResponse]])
def save_schedule(
    session_id: str, body: ScheduleSave, _admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[list[ScheduleResponse]]:
    """Replace a session's whole schedule."""
    schedules = manager.save(session_id, [_slot(entry) for entry in body.entries])
    return APIResponse(data=[ScheduleResponse.model_validate(s) for s in schedules])


@router.post("/{session_id}/publish", response_model=APIResponse[StatusChangeResponse])
def publish_schedule(
    session_id: str, _admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[StatusChangeResponse]:
    """Open every class of the session for registration."""
    count = manager.publish(session_id)
    return APIResponse(
        data=StatusChangeResponse(
            session_id=session_id, status=ScheduleStatus.PUBLISHED.value, updated=count
        )
    )


@router.post("/{session_id}/pullback", response_model=APIResponse[StatusChangeResponse])
def pullback_schedule(
    session_id: str, _admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[StatusChangeResponse]:
    """Return every class of the session to draft."""
    count = manager.pullback(session_id)
    return APIResponse(
        data=StatusChangeResponse(
            session_id=session_id, status=ScheduleStatus.DRAFT.value, updated=count
        )
    )


# --- Drafts ---


@router.get("/{session_id}/drafts", response_model=APIResponse[DraftListResponse])
def list_drafts(
    session_id: str,
    _admin: ModeratorDep,
    manager: ScheduleManagerDep,
    created_by: str | None = None,
) -> APIResponse[DraftListResponse]:
    """List a session's drafts with conflicts between them."""
    summaries = manager.list_drafts(session_id, created_by=created_by)
    conflicts = manager.detect_conflicts(session_id)
    return APIResponse(
        data=DraftListResponse(
            drafts=[draft_to_response(s.draft, entry_count=s.entry_count) for s in summaries],
            conflicts=[conflict_to_response(c) for c in conflicts],
        )
    )


@router.post(
    "/{session_id}/drafts",
    response_model=APIResponse[DraftResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_draft(
    session_id: str, body: DraftCreate, admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[DraftResponse]:
    """Create a draft; it becomes the caller's active draft."""
    draft = manager.create_draft(
        session_id,
        admin,
        name=body.name,
        description=body.description,
        slots=[_slot(entry) for entry in body.entries],
    )
    detail = manager.get_draft(session_id, draft.id)
    return APIResponse(data=draft_to_response(detail.draft, entries=detail.entries))


@router.get("/{session_id}/drafts/{draft_id}", response_model=APIResponse[DraftResponse])
def get_draft(
    session_id: str, draft_id: str, _admin: ModeratorDep, manager: ScheduleManagerDep
) -> APIResponse[DraftResponse]:
    """Get a draft with its entries."""
    detail = manager.get_draft(session_id, draft_id)
    return APIResponse(data=draft_to_response(detail.draft, entries=detail.entries))


@router.put("/{session_id}/drafts/{draft_id}", response_model=APIResponse[DraftResponse])
def update_draft(
    session_id: str,
    draft_id: str,
    body: DraftUpdate,
    admin: ModeratorDep,
    manager: ScheduleManagerDep,
) -> APIResponse[DraftResponse]:
    """Update a draft's name, description, entries or active flag."""
    manager.update_draft(
        session_id,
        draft_id,
        admin,
        name=body.name,
        description=body.description,
        slots=[_slot(entry) for entry in body.entries] if body.entries is not None else None,
        is_active=body.is_active,
    )
    detail = manager.get_draft(session_id, draft_id)
    return APIResponse(data=draft_to_response(detail.draft, entries=detail.entries))


@router.delete("/{session_id}/drafts/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_draft(
    session_id: str, draft_id: str, admin: ModeratorDep, manager: ScheduleManagerDep
) -> None:
    """Delete a draft."""
    manager.delete_draft(session_id, draft_id, admin)
