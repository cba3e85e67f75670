"""Endpoints for the caller's own family."""

from fastapi import APIRouter, status

from coopreg.api.dependencies import CallerDep, FamilyDep, StoreDep, TodayDep
from coopreg.api.models import (
    APIResponse,
    ChildCreate,
    ChildResponse,
    ChildUpdate,
    FamilyCreate,
    FamilyFeeResponse,
    FamilyJoin,
    FamilyResponse,
    FamilyUpdate,
    PaymentResponse,
    family_to_response,
    fee_to_response,
)
from coopreg.store import CoopStore, Family

router = APIRouter(prefix="/family", tags=["family"])


def _family_response(store: CoopStore, family: Family) -> FamilyResponse:
    return family_to_response(
        family,
        guardians=store.list_guardians(family.id),
        children=store.list_children(family.id),
    )


@router.post(
    "",
    response_model=APIResponse[FamilyResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_family(
    body: FamilyCreate, caller: CallerDep, store: StoreDep
) -> APIResponse[FamilyResponse]:
    """Register a family with the caller as its main contact."""
    family = store.create_family(
        guardian_id=caller.user_id,
        guardian_email=body.guardian.email,
        first_name=body.guardian.first_name,
        last_name=body.guardian.last_name,
        guardian_phone=body.guardian.phone,
        name=body.family.name,
        address=body.family.address,
        phone=body.family.phone,
        email=body.family.email,
        children=[child.model_dump() for child in body.children],
    )
    return APIResponse(data=_family_response(store, family))


@router.post("/join", response_model=APIResponse[FamilyResponse])
def join_family(
    body: FamilyJoin, caller: CallerDep, store: StoreDep
) -> APIResponse[FamilyResponse]:
    """Join an existing family using its sharing code."""
    guardian = store.join_family(
        sharing_code=body.sharing_code,
        guardian_id=caller.user_id,
        email=body.guardian.email,
        first_name=body.guardian.first_name,
        last_name=body.guardian.last_name,
        phone=body.guardian.phone,
    )
    family = store.get_family(guardian.family_id)
    return APIResponse(data=_family_response(store, family))


@router.get("", response_model=APIResponse[FamilyResponse])
def get_family(family: FamilyDep, store: StoreDep) -> APIResponse[FamilyResponse]:
    """Get the caller's family with its guardians and children."""
    return APIResponse(data=_family_response(store, family))


@router.patch("", response_model=APIResponse[FamilyResponse])
def update_family(
    body: FamilyUpdate, family: FamilyDep, store: StoreDep
) -> APIResponse[FamilyResponse]:
    """Update the caller's family contact details (partial update)."""
    updated = store.update_family(family.id, **body.model_dump(exclude_unset=True))
    return APIResponse(data=_family_response(store, updated))


@router.get("/children", response_model=APIResponse[list[ChildResponse]])
def list_children(family: FamilyDep, store: StoreDep) -> APIResponse[list[ChildResponse]]:
    """List the caller's children."""
    children = store.list_children(family.id)
    return APIResponse(data=[ChildResponse.model_validate(c) for c in children])


@router.post(
    "/children",
    response_model=APIResponse[ChildResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_child(body: ChildCreate, family: FamilyDep, store: StoreDep) -> APIResponse[ChildResponse]:
    """Add a child to the caller's family."""
    child = store.create_child(family.id, **body.model_dump())
    return APIResponse(data=ChildResponse.model_validate(child))


@router.patch("/children/{child_id}", response_model=APIResponse[ChildResponse])
def update_child(
    child_id: str, body: ChildUpdate, family: FamilyDep, store: StoreDep
) -> APIResponse[ChildResponse]:
    """Update one of the caller's children (partial update)."""
    child = store.update_child(family.id, child_id, **body.model_dump(exclude_unset=True))
    return APIResponse(data=ChildResponse.model_validate(child))


@router.delete("/children/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_child(child_id: str, family: FamilyDep, store: StoreDep) -> None:
    """Remove one of the caller's children."""
    store.delete_child(family.id, child_id)


@router.get("/fees", response_model=APIResponse[list[FamilyFeeResponse]])
def list_family_fees(
    family: FamilyDep, store: StoreDep, today: TodayDep
) -> APIResponse[list[FamilyFeeResponse]]:
    """List the caller's session fees with the balance still owed."""
    fees = store.list_family_fees(family.id)
    return APIResponse(data=[fee_to_response(f, today) for f in fees])


@router.get("/payments", response_model=APIResponse[list[PaymentResponse]])
def list_family_payments(
    family: FamilyDep, store: StoreDep
) -> APIResponse[list[PaymentResponse]]:
    """List the caller's payments."""
    payments = store.list_payments(family_id=family.id)
    return APIResponse(data=[PaymentResponse.model_validate(p) for p in payments])
