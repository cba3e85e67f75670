"""Admin fee and payment endpoints."""

from datetime import date

from fastapi import APIRouter, status

from coopreg.api.dependencies import ModeratorDep, StoreDep, TodayDep
from coopreg.api.models import (
    APIResponse,
    FamilyFeeResponse,
    PaymentCreate,
    PaymentResponse,
    RecalculateRequest,
    fee_to_response,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/payments", response_model=APIResponse[list[PaymentResponse]])
def list_payments(
    _admin: ModeratorDep,
    store: StoreDep,
    family_id: str | None = None,
    session_id: str | None = None,
) -> APIResponse[list[PaymentResponse]]:
    """List payments, optionally by family or session."""
    payments = store.list_payments(family_id=family_id, session_id=session_id)
    return APIResponse(data=[PaymentResponse.model_validate(p) for p in payments])


@router.post(
    "/payments",
    response_model=APIResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
def record_payment(
    body: PaymentCreate, _admin: ModeratorDep, store: StoreDep, today: TodayDep
) -> APIResponse[PaymentResponse]:
    """Record a payment against a family's session fee."""
    payment_date: date = body.payment_date or today
    payment = store.record_payment(
        family_id=body.family_id,
        amount=body.amount,
        payment_method=body.payment_method.value,
        payment_date=payment_date,
        session_id=body.session_id,
        notes=body.notes,
    )
    return APIResponse(data=PaymentResponse.model_validate(payment))


@router.get("/fees", response_model=APIResponse[list[FamilyFeeResponse]])
def list_fees(
    _admin: ModeratorDep, store: StoreDep, today: TodayDep, session_id: str | None = None
) -> APIResponse[list[FamilyFeeResponse]]:
    """List family fees, optionally for one session."""
    fees = store.list_fees(session_id=session_id)
    return APIResponse(data=[fee_to_response(f, today) for f in fees])


@router.post("/fees/recalculate", response_model=APIResponse[list[FamilyFeeResponse]])
def recalculate_fees(
    body: RecalculateRequest, _admin: ModeratorDep, store: StoreDep, today: TodayDep
) -> APIResponse[list[FamilyFeeResponse]]:
    """Recalculate fees for one family or every registered family in a session."""
    fees = store.recalculate_fees(body.session_id, family_id=body.family_id)
    return APIResponse(data=[fee_to_response(f, today) for f in fees])
