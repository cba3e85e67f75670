"""Fee ledger operations for the record store.

The module-level functions work on an open ORM session so callers can run
them inside their own transaction (registration, override approval).
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select

from coopreg.fees import (
    ChargeLine,
    FeeConfig,
    calculate_fees,
    derive_fee_status,
    round_money,
)
from coopreg.logging import get_logger
from coopreg.store.exceptions import (
    FamilyFeeNotFoundError,
    FamilyNotFoundError,
    FeeConfigNotFoundError,
    SessionNotFoundError,
    ValidationError,
)
from coopreg.store.models import (
    ClassRegistration,
    ClassTeachingRequest,
    CoopSession,
    Family,
    FamilySessionFee,
    FeePayment,
    PaymentMethod,
    RegistrationStatus,
    Schedule,
    SessionFeeConfig,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coopreg.store.database import Database

logger = get_logger("fees")


def _charge_lines(session: Session, session_id: str, family_id: str) -> list[ChargeLine]:
    stmt = (
        select(
            ClassRegistration.child_id,
            ClassTeachingRequest.id,
            ClassTeachingRequest.requires_fee,
            ClassTeachingRequest.fee_amount,
        )
        .join(Schedule, Schedule.id == ClassRegistration.schedule_id)
        .join(ClassTeachingRequest, ClassTeachingRequest.id == Schedule.class_teaching_request_id)
        .where(
            ClassRegistration.session_id == session_id,
            ClassRegistration.family_id == family_id,
            ClassRegistration.status == RegistrationStatus.REGISTERED.value,
        )
    )
    return [
        ChargeLine(
            child_id=child_id,
            class_id=class_id,
            fee_amount=fee_amount if requires_fee else None,
        )
        for child_id, class_id, requires_fee, fee_amount in session.execute(stmt)
    ]


def recalculate_family_fee(
    session: Session, session_id: str, family_id: str
) -> FamilySessionFee | None:
    """Recompute a family's session fee from its registered classes.

    The fee is rebuilt from scratch; the amount already paid is kept and the
    status is derived again from it.

    Args:
        session: Open ORM session; the caller owns the transaction
        session_id: Session (term) ID
        family_id: Family ID

    Returns:
        The updated fee, or None if the session has no fee configuration or
        the family has nothing to pay for
    """
    config = session.execute(
        select(SessionFeeConfig).where(SessionFeeConfig.session_id == session_id)
    ).scalar_one_or_none()
    if config is None:
        logger.warning("No fee configuration for session %s; skipping fee update", session_id)
        return None

    calculation = calculate_fees(
        FeeConfig(
            first_child_fee=config.first_child_fee,
            additional_child_fee=config.additional_child_fee,
            due_date=config.due_date,
        ),
        _charge_lines(session, session_id, family_id),
    )

    fee = session.execute(
        select(FamilySessionFee).where(
            FamilySessionFee.session_id == session_id,
            FamilySessionFee.family_id == family_id,
        )
    ).scalar_one_or_none()
    now = datetime.now(UTC)

    if fee is None:
        if calculation.children_count == 0:
            return None
        fee = FamilySessionFee(
            session_id=session_id,
            family_id=family_id,
            due_date=config.due_date,
            calculated_at=now,
        )
        session.add(fee)

    fee.registration_fee = calculation.registration_fee
    fee.class_fees = calculation.class_fees
    fee.total_fee = calculation.total_fee
    fee.due_date = config.due_date
    fee.calculated_at = now
    fee.status = derive_fee_status(fee.paid_amount, fee.total_fee).value
    session.flush()
    session.refresh(fee)

    logger.info(
        "Fee for family %s in session %s: %.2f (%d children, status=%s)",
        family_id,
        session_id,
        fee.total_fee,
        calculation.children_count,
        fee.status,
    )
    return fee


def apply_payment(fee: FamilySessionFee, amount: float) -> None:
    """Add a payment to a fee's running total and re-derive its status."""
    fee.paid_amount = round_money(fee.paid_amount + amount)
    fee.status = derive_fee_status(fee.paid_amount, fee.total_fee).value


class FeeOperations:
    """Fee configuration, family fees and payments."""

    _db: Database

    # --- Fee Configuration Operations ---

    def get_fee_config(self, session_id: str) -> SessionFeeConfig:
        """Get a session's fee configuration.

        Raises:
            FeeConfigNotFoundError: If the session has none
        """
        session = self._db.get_session()
        try:
            stmt = select(SessionFeeConfig).where(SessionFeeConfig.session_id == session_id)
            config = session.execute(stmt).scalar_one_or_none()
            if config is None:
                raise FeeConfigNotFoundError(
                    f"No fee configuration for session '{session_id}'"
                )
            return config
        finally:
            session.close()

    def upsert_fee_config(
        self,
        session_id: str,
        first_child_fee: float,
        additional_child_fee: float,
        due_date: date,
    ) -> SessionFeeConfig:
        """Create or replace a session's fee configuration.

        Raises:
            ValidationError: If a fee is negative
            SessionNotFoundError: If session doesn't exist
        """
        if first_child_fee < 0 or additional_child_fee < 0:
            raise ValidationError("Fees cannot be negative")

        with self._db.transaction() as session:
            if session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")

            stmt = select(SessionFeeConfig).where(SessionFeeConfig.session_id == session_id)
            config = session.execute(stmt).scalar_one_or_none()
            if config is None:
                config = SessionFeeConfig(session_id=session_id, due_date=due_date)
                session.add(config)

            config.first_child_fee = round_money(first_child_fee)
            config.additional_child_fee = round_money(additional_child_fee)
            config.due_date = due_date
            session.flush()
            session.refresh(config)

        logger.info(
            "Fee configuration for session %s: first=%.2f additional=%.2f due=%s",
            session_id,
            config.first_child_fee,
            config.additional_child_fee,
            due_date,
        )
        return config

    # --- Family Fee Operations ---

    def get_family_fee(self, family_id: str, session_id: str) -> FamilySessionFee:
        """Get a family's calculated fee for a session.

        Raises:
            FamilyFeeNotFoundError: If no fee has been calculated
        """
        session = self._db.get_session()
        try:
            stmt = select(FamilySessionFee).where(
                FamilySessionFee.family_id == family_id,
                FamilySessionFee.session_id == session_id,
            )
            fee = session.execute(stmt).scalar_one_or_none()
            if fee is None:
                raise FamilyFeeNotFoundError(
                    f"No fee for family '{family_id}' in session '{session_id}'"
                )
            return fee
        finally:
            session.close()

    def list_family_fees(self, family_id: str) -> list[FamilySessionFee]:
        """List a family's fees across sessions, newest first."""
        session = self._db.get_session()
        try:
            stmt = (
                select(FamilySessionFee)
                .where(FamilySessionFee.family_id == family_id)
                .order_by(FamilySessionFee.calculated_at.desc())
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def list_fees(self, session_id: str | None = None) -> list[FamilySessionFee]:
        """List all family fees, optionally for a single session."""
        session = self._db.get_session()
        try:
            stmt = select(FamilySessionFee)
            if session_id is not None:
                stmt = stmt.where(FamilySessionFee.session_id == session_id)
            stmt = stmt.order_by(FamilySessionFee.due_date, FamilySessionFee.family_id)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def recalculate_fees(
        self, session_id: str, family_id: str | None = None
    ) -> list[FamilySessionFee]:
        """Recalculate fees for one family or every family in a session.

        Raises:
            SessionNotFoundError: If session doesn't exist
            FeeConfigNotFoundError: If the session has no fee configuration
        """
        with self._db.transaction() as session:
            if session.get(CoopSession, session_id) is None:
                raise SessionNotFoundError(f"Session with id '{session_id}' not found")
            config_stmt = select(SessionFeeConfig.id).where(
                SessionFeeConfig.session_id == session_id
            )
            if session.execute(config_stmt).first() is None:
                raise FeeConfigNotFoundError(
                    f"No fee configuration for session '{session_id}'"
                )

            if family_id is not None:
                family_ids = {family_id}
            else:
                registered = select(ClassRegistration.family_id).where(
                    ClassRegistration.session_id == session_id
                )
                billed = select(FamilySessionFee.family_id).where(
                    FamilySessionFee.session_id == session_id
                )
                family_ids = set(session.execute(registered).scalars()) | set(
                    session.execute(billed).scalars()
                )

            fees = []
            for fid in sorted(family_ids):
                fee = recalculate_family_fee(session, session_id, fid)
                if fee is not None:
                    fees.append(fee)
            return fees

    # --- Payment Operations ---

    def record_payment(
        self,
        family_id: str,
        amount: float,
        payment_method: PaymentMethod | str,
        payment_date: date,
        session_id: str | None = None,
        notes: str | None = None,
    ) -> FeePayment:
        """Record a payment and apply it to the family's session fee.

        The payment is linked to the family's fee for the session when one
        exists; the fee's paid amount and status change in the same transaction.

        Raises:
            ValidationError: If amount is not positive or the method is unknown
            FamilyNotFoundError: If family doesn't exist
        """
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        try:
            method = PaymentMethod(payment_method)
        except ValueError as e:
            raise ValidationError(f"Invalid payment method '{payment_method}'") from e

        with self._db.transaction() as session:
            if session.get(Family, family_id) is None:
                raise FamilyNotFoundError(f"Family with id '{family_id}' not found")

            fee = None
            if session_id is not None:
                fee = session.execute(
                    select(FamilySessionFee).where(
                        FamilySessionFee.family_id == family_id,
                        FamilySessionFee.session_id == session_id,
                    )
                ).scalar_one_or_none()

            payment = FeePayment(
                family_id=family_id,
                amount=round_money(amount),
                payment_date=payment_date,
                payment_method=method.value,
                family_session_fee_id=fee.id if fee is not None else None,
                session_id=session_id,
                notes=notes,
            )
            session.add(payment)
            if fee is not None:
                apply_payment(fee, payment.amount)
            session.flush()
            session.refresh(payment)

        logger.info(
            "Recorded %s payment of %.2f for family %s", method, payment.amount, family_id
        )
        return payment

    def list_payments(
        self, family_id: str | None = None, session_id: str | None = None
    ) -> list[FeePayment]:
        """List payments, newest first, optionally filtered by family or session."""
        session = self._db.get_session()
        try:
            stmt = select(FeePayment)
            if family_id is not None:
                stmt = stmt.where(FeePayment.family_id == family_id)
            if session_id is not None:
                stmt = stmt.where(FeePayment.session_id == session_id)
            stmt = stmt.order_by(FeePayment.payment_date.desc(), FeePayment.created_at.desc())
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()
