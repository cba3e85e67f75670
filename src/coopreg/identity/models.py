"""Data models for caller identity and role tiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Role(IntEnum):
    """Role tiers, ordered so that a higher value grants more access."""

    USER = 0
    MEMBER = 1
    MODERATOR = 2
    ADMIN = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str | None) -> Role:
        """Parse a role name from the identity provider.

        Unknown or missing names map to USER.
        """
        if not label:
            return cls.USER
        try:
            return cls[label.strip().upper()]
        except KeyError:
            return cls.USER


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller of an API request.

    Attributes:
        user_id: Identity provider user id (also the guardian id)
        token: Bearer token forwarded to the identity provider
        role: Role tier resolved from the identity provider
    """

    user_id: str
    token: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role >= Role.ADMIN

    def has_role(self, min_role: Role) -> bool:
        """Check whether the caller meets a minimum role tier."""
        return self.role >= min_role
