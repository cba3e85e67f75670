"""Fee Calculator - computes a family's session fee from its registrations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from coopreg.fees.models import FeeCalculation, FeeStatus, round_money

if TYPE_CHECKING:
    from collections.abc import Iterable

    from coopreg.fees.models import ChargeLine, FeeConfig


def calculate_fees(config: FeeConfig, charges: Iterable[ChargeLine]) -> FeeCalculation:
    """Calculate the fee owed for a set of registrations.

    The first registered child pays first_child_fee and every further child
    pays additional_child_fee. Each distinct (child, class) pairing adds the
    class's own fee, where a missing fee counts as zero.

    Args:
        config: The session's fee configuration
        charges: Registered (child, class) pairings

    Returns:
        FeeCalculation with the registration, class and total fee
    """
    children: set[str] = set()
    class_fees = 0.0
    seen: set[tuple[str, str]] = set()

    for line in charges:
        children.add(line.child_id)
        key = (line.child_id, line.class_id)
        if key in seen:
            continue
        seen.add(key)
        class_fees += float(line.fee_amount or 0)

    children_count = len(children)
    if children_count == 0:
        registration_fee = 0.0
    else:
        registration_fee = float(config.first_child_fee) + (children_count - 1) * float(
            config.additional_child_fee
        )

    registration_fee = round_money(registration_fee)
    class_fees = round_money(class_fees)

    return FeeCalculation(
        children_count=children_count,
        registration_fee=registration_fee,
        class_fees=class_fees,
        total_fee=round_money(registration_fee + class_fees),
    )


def derive_fee_status(paid_amount: float, total_fee: float) -> FeeStatus:
    """Derive the payment status from what was paid against what is owed."""
    if paid_amount >= total_fee:
        return FeeStatus.PAID
    if paid_amount > 0:
        return FeeStatus.PARTIAL
    return FeeStatus.PENDING
