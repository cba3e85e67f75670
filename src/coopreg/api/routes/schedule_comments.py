"""Teacher feedback on a session's schedule."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import CallerDep, StoreDep
from coopreg.api.models import (
    APIResponse,
    ScheduleCommentCreate,
    ScheduleCommentResponse,
    comment_to_response,
)
from coopreg.identity import AuthenticatedUser, AuthorizationError, Role
from coopreg.store import CoopStore

router = APIRouter(prefix="/teaching/schedule", tags=["teaching"])


def _require_teacher(caller: AuthenticatedUser, store: CoopStore) -> None:
    """Admit approved teachers, moderators and admins."""
    if caller.role >= Role.MODERATOR or store.is_approved_teacher(caller.user_id):
        return
    raise AuthorizationError("Only approved teachers can comment on the schedule")


@router.get(
    "/{session_id}/comments",
    response_model=APIResponse[list[ScheduleCommentResponse]],
)
def list_comments(
    session_id: str, caller: CallerDep, store: StoreDep
) -> APIResponse[list[ScheduleCommentResponse]]:
    """List public comments and the caller's own; moderators see every comment."""
    _require_teacher(caller, store)
    comments = store.list_schedule_comments(
        session_id, viewer_id=caller.user_id, include_private=caller.role >= Role.MODERATOR
    )
    return APIResponse(data=[comment_to_response(c) for c in comments])


@router.post(
    "/{session_id}/comments",
    response_model=APIResponse[ScheduleCommentResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    session_id: str, body: ScheduleCommentCreate, caller: CallerDep, store: StoreDep
) -> APIResponse[ScheduleCommentResponse]:
    """Comment on a session's schedule, privately unless is_public is set."""
    _require_teacher(caller, store)
    comment = store.create_schedule_comment(
        session_id, caller.user_id, body.comment, is_public=body.is_public
    )
    return APIResponse(data=comment_to_response(comment))
