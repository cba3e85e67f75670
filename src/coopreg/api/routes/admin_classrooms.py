"""Admin classroom endpoints."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import ModeratorDep, StoreDep
from coopreg.api.models import APIResponse, ClassroomCreate, ClassroomResponse, ClassroomUpdate

router = APIRouter(prefix="/admin/classrooms", tags=["admin"])


@router.get("", response_model=APIResponse[list[ClassroomResponse]])
def list_classrooms(
    _admin: ModeratorDep, store: StoreDep
) -> APIResponse[list[ClassroomResponse]]:
    """List all classrooms."""
    classrooms = store.list_classrooms()
    return APIResponse(data=[ClassroomResponse.model_validate(c) for c in classrooms])


@router.post(
    "",
    response_model=APIResponse[ClassroomResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_classroom(
    body: ClassroomCreate, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[ClassroomResponse]:
    """Create a classroom."""
    created = store.create_classroom(name=body.name, description=body.description)
    return APIResponse(data=ClassroomResponse.model_validate(created))


@router.patch("/{classroom_id}", response_model=APIResponse[ClassroomResponse])
def update_classroom(
    classroom_id: str, body: ClassroomUpdate, _admin: ModeratorDep, store: StoreDep
) -> APIResponse[ClassroomResponse]:
    """Update a classroom (partial update)."""
    updated = store.update_classroom(
        classroom_id, name=body.name, description=body.description
    )
    return APIResponse(data=ClassroomResponse.model_validate(updated))


@router.delete("/{classroom_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_classroom(classroom_id: str, _admin: ModeratorDep, store: StoreDep) -> None:
    """Delete a classroom."""
    store.delete_classroom(classroom_id)
