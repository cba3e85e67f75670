"""Endpoints for guardians proposing classes to teach."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import CallerDep, StoreDep, TodayDep
from coopreg.api.models import APIResponse, TeachingRequestCreate, TeachingRequestResponse

router = APIRouter(prefix="/class-teaching-requests", tags=["class-teaching-requests"])


@router.get("", response_model=APIResponse[list[TeachingRequestResponse]])
def list_my_requests(
    caller: CallerDep, store: StoreDep, session_id: str | None = None
) -> APIResponse[list[TeachingRequestResponse]]:
    """List the caller's own class proposals."""
    requests = store.list_teaching_requests(session_id=session_id, guardian_id=caller.user_id)
    return APIResponse(data=[TeachingRequestResponse.model_validate(r) for r in requests])


@router.post(
    "",
    response_model=APIResponse[TeachingRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
def propose_class(
    body: TeachingRequestCreate, caller: CallerDep, store: StoreDep, today: TodayDep
) -> APIResponse[TeachingRequestResponse]:
    """Propose a class for the active session.

    The caller must belong to a family; proposals close when the session
    opens regular registration.
    """
    store.get_family_for_guardian(caller.user_id)
    request = store.propose_class(caller.user_id, today, **body.model_dump())
    return APIResponse(data=TeachingRequestResponse.model_validate(request))
