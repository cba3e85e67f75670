"""Overrides - admin approval or denial of registrations short of volunteer hours."""

from coopreg.overrides.workflow import (
    DEFAULT_APPROVE_REASON,
    DEFAULT_DENY_REASON,
    OverrideWorkflow,
    PendingOverride,
)

__all__ = [
    "DEFAULT_APPROVE_REASON",
    "DEFAULT_DENY_REASON",
    "OverrideWorkflow",
    "PendingOverride",
]
