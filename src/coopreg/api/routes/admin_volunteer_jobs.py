"""Admin volunteer job endpoints."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import ModeratorDep, StoreDep
from coopreg.api.models import (
    APIResponse,
    VolunteerJobCreate,
    VolunteerJobResponse,
    VolunteerJobUpdate,
)

router = APIRouter(prefix="/admin/volunteer-jobs", tags=["admin"])


@router.get("", response_model=APIResponse[list[VolunteerJobResponse]])
def list_jobs(
    _admin: ModeratorDep, store: StoreDep, active_only: bool = False
) -> APIResponse[list[VolunteerJobResponse]]:
    """List volunteer jobs."""
    jobs = store.list_volunteer_jobs(active_only=active_only)
    return APIResponse(data=[VolunteerJobResponse.model_validate(j) for j in jobs])


@router.post(
    "",
    response_model=APIResponse[VolunteerJobResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_job(
    body: VolunteerJobCreate, admin: ModeratorDep, store: StoreDep
) -> APIResponse[VolunteerJobResponse]:
    """Create a volunteer job, offering it in session_id when one is given."""
    job = store.create_volunteer_job(
        title=body.title,
        description=body.description,
        created_by=admin.user_id,
        quantity_available=body.quantity_available,
        job_type=body.job_type.value,
        is_active=body.is_active,
        session_id=body.session_id,
    )
    return APIResponse(data=VolunteerJobResponse.model_validate(job))


@router.patch("/{job_id}", response_model=APIResponse[VolunteerJobResponse])
def update_job(
    job_id: str, body: VolunteerJobUpdate, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[VolunteerJobResponse]:
    """Update a volunteer job (partial update)."""
    job = store.update_volunteer_job(job_id, **body.model_dump(exclude_unset=True))
    return APIResponse(data=VolunteerJobResponse.model_validate(job))


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(job_id: str, _admin: ModeratorDep, store: StoreDep) -> None:
    """Delete a volunteer job."""
    store.delete_volunteer_job(job_id)
