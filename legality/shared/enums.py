"""Shared enumerations for the Legality portal.

Cross-cutting enums used by application and infrastructure (e.g. identity
provider notifications). Domain-specific enums (e.g. ProfileRole) live in
legality.domain.enums.
"""

from enum import Enum


class AuthChangeEvent(str, Enum):
    """Identity provider change notifications (same names as GoTrue clients emit)."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]
