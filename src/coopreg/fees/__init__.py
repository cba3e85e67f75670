"""Fee Calculator - session fee arithmetic for families."""

from coopreg.fees.calculator import calculate_fees, derive_fee_status
from coopreg.fees.models import (
    ChargeLine,
    FeeCalculation,
    FeeConfig,
    FeeStatus,
    FeeSummary,
    round_money,
)

__all__ = [
    "ChargeLine",
    "FeeCalculation",
    "FeeConfig",
    "FeeStatus",
    "FeeSummary",
    "calculate_fees",
    "derive_fee_status",
    "round_money",
]
