"""DTOs for identity, session and router status (no dependency on the provider SDK)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from legality.domain.enums import ProfileRole, RouterState

if TYPE_CHECKING:
    from legality.application.dtos.profile import Profile


@dataclass(frozen=True)
class Identity:
    """Identity provider user record. Read-only to the portal."""

    id: str
    email: str
    user_metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass(frozen=True)
class Session:
    """Authenticated session: tokens plus the identity they belong to."""

    access_token: str
    user: Identity
    refresh_token: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class SignUpResult:
    """Result of a sign-up. session is None when email confirmation is pending."""

    user: Identity
    session: Session | None = None


@dataclass(frozen=True)
class RouterStatus:
    """Snapshot of the role router's state."""

    state: RouterState
    role: ProfileRole | None = None
    error: str | None = None
    landing_path: str | None = None


# Typed outcomes of the post sign-in bounded poll.


@dataclass(frozen=True)
class Resolved:
    """The profile appeared within the polling budget."""

    profile: "Profile"
    attempts: int


@dataclass(frozen=True)
class TimedOut:
    """Attempts exhausted; profile comes from one forced resolution (may be a fallback)."""

    profile: "Profile | None"
    attempts: int


@dataclass(frozen=True)
class Cancelled:
    """Polling stopped by its owner before a terminal condition."""

    attempts: int


PollOutcome = Resolved | TimedOut | Cancelled
