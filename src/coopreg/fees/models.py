"""Data models for fee calculation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date  # noqa: TC003 - used at runtime in dataclass fields
from enum import StrEnum


class FeeStatus(StrEnum):
    """Payment state of a family session fee."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


def round_money(value: float) -> float:
    """Round a monetary amount to cents."""
    return round(float(value), 2)


@dataclass(frozen=True)
class FeeConfig:
    """A session's fee schedule.

    Attributes:
        first_child_fee: Registration fee for the first registered child
        additional_child_fee: Registration fee for each further child
        due_date: Date the family's balance is due
    """

    first_child_fee: float
    additional_child_fee: float
    due_date: date


@dataclass(frozen=True)
class ChargeLine:
    """One registered (child, class) pairing that may carry a class fee."""

    child_id: str
    class_id: str
    fee_amount: float | None = None


@dataclass(frozen=True)
class FeeCalculation:
    """Result of a fee calculation.

    Attributes:
        children_count: Number of distinct registered children
        registration_fee: Per-family registration fee
        class_fees: Sum of per-class fees
        total_fee: registration_fee + class_fees
    """

    children_count: int
    registration_fee: float
    class_fees: float
    total_fee: float


@dataclass(frozen=True)
class FeeSummary:
    """Reporting view over a family's session fee."""

    total_fee: float
    paid_amount: float
    due_date: date
    status: str

    @property
    def remaining_amount(self) -> float:
        return round_money(max(0.0, self.total_fee - self.paid_amount))

    def is_overdue(self, today: date) -> bool:
        """Check whether the balance is past due.

        Args:
            today: The current date

        Returns:
            True if the due date has passed and money is still owed
        """
        return today > self.due_date and self.remaining_amount > 0
