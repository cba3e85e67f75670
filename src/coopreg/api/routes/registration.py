"""Family registration endpoints."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import CallerDep, FamilyDep, RegistrationManagerDep, StoreDep
from coopreg.api.models import (
    APIResponse,
    AssignmentResponse,
    BatchRegistration,
    ClassAvailabilityResponse,
    ClassRegistrationResponse,
    FamilyStatusResponse,
    RegistrationResultResponse,
    SessionJobResponse,
    availability_to_response,
    session_job_to_response,
)
from coopreg.registration import ClassRequest, RegistrationRequest, VolunteerRequest
from coopreg.store import FamilyStatus

router = APIRouter(prefix="/registration", tags=["registration"])


@router.get(
    "/{session_id}/schedules",
    response_model=APIResponse[list[ClassAvailabilityResponse]],
)
def list_available_classes(
    session_id: str, _caller: CallerDep, manager: RegistrationManagerDep
) -> APIResponse[list[ClassAvailabilityResponse]]:
    """List the session's published classes with seat and helper counts."""
    classes = manager.available_classes(session_id)
    return APIResponse(data=[availability_to_response(c) for c in classes])


@router.get(
    "/{session_id}/volunteer-jobs",
    response_model=APIResponse[list[SessionJobResponse]],
)
def list_available_jobs(
    session_id: str, _caller: CallerDep, store: StoreDep
) -> APIResponse[list[SessionJobResponse]]:
    """List the volunteer jobs families can sign up for in the session."""
    offers = store.available_volunteer_jobs(session_id)
    return APIResponse(data=[session_job_to_response(o) for o in offers])


@router.post(
    "/batch",
    response_model=APIResponse[RegistrationResultResponse],
    status_code=status.HTTP_201_CREATED,
)
def submit_batch(
    body: BatchRegistration, caller: CallerDep, manager: RegistrationManagerDep
) -> APIResponse[RegistrationResultResponse]:
    """Register children into classes and guardians as volunteers, all or nothing."""
    request = RegistrationRequest(
        session_id=body.session_id,
        submitted_by=caller.user_id,
        classes=[
            ClassRequest(child_id=item.child_id, schedule_id=item.schedule_id)
            for item in body.registrations
        ],
        volunteers=[
            VolunteerRequest(
                guardian_id=item.guardian_id,
                volunteer_type=item.volunteer_type.value,
                schedule_id=item.schedule_id,
                volunteer_job_id=item.volunteer_job_id,
                period=item.period.value if item.period is not None else None,
            )
            for item in body.volunteer_assignments
        ],
        request_override=body.request_admin_override,
    )
    result = manager.submit(request)
    return APIResponse(
        data=RegistrationResultResponse(
            family_id=result.family_id,
            session_id=result.session_id,
            status=result.status,
            registration_ids=result.registration_ids,
            assignment_ids=result.assignment_ids,
            required_hours=result.required_hours,
            fulfilled_hours=result.fulfilled_hours,
            pending_override=result.pending_override,
        )
    )


@router.get("/{session_id}/status", response_model=APIResponse[FamilyStatusResponse])
def get_registration_status(
    session_id: str, family: FamilyDep, store: StoreDep
) -> APIResponse[FamilyStatusResponse]:
    """Get the caller's family registration progress for a session."""
    store.get_session(session_id)
    record = store.get_registration_status(family.id, session_id)
    registrations = store.list_family_registrations(family.id, session_id)
    assignments = store.list_family_assignments(family.id, session_id)

    response = FamilyStatusResponse(
        family_id=family.id,
        session_id=session_id,
        status=FamilyStatus.NOT_STARTED.value,
        registrations=[ClassRegistrationResponse.model_validate(r) for r in registrations],
        assignments=[AssignmentResponse.model_validate(a) for a in assignments],
    )
    if record is not None:
        response.status = record.status
        response.volunteer_requirements_met = record.volunteer_requirements_met
        response.admin_override = record.admin_override
        response.admin_override_reason = record.admin_override_reason
    return APIResponse(data=response)
