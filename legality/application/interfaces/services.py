"""Service interfaces (ports) for the application layer.

Protocols define contracts for the identity provider and the navigation
target the role router drives (DIP).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

from legality.shared.enums import AuthChangeEvent

if TYPE_CHECKING:
    from legality.application.dtos.session import Session, SignUpResult

AuthChangeCallback = Callable[[AuthChangeEvent, "Session | None"], Awaitable[None]]


class ISubscription(Protocol):
    """Handle returned by on_auth_state_change."""

    def unsubscribe(self) -> None: ...


# Identity provider interface
class IIdentityProvider(Protocol):
    """Protocol for the external identity/session provider."""

    async def get_session(self) -> Session | None:
        """Return the current session or None. Transport errors propagate."""

    async def refresh_session(self, refresh_token: str | None = None) -> Session | None:
        """Exchange refresh_token (or the current session's) for a new session.

        Returns None when there is nothing to refresh; raises
        AuthenticationException when the provider rejects the token.
        """

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Raise AuthenticationException on bad credentials."""

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> SignUpResult: ...

    async def sign_in_with_oauth(self, provider: str, redirect_to: str | None = None) -> str:
        """Return the provider authorization URL the browser must visit."""

    async def sign_out(self) -> None: ...

    def on_auth_state_change(self, callback: AuthChangeCallback) -> ISubscription:
        """Register callback for session changes; returns a handle to unsubscribe."""


# Navigator interface
class INavigator(Protocol):
    """Protocol for the view the role router redirects."""

    @property
    def current_path(self) -> str: ...

    def navigate(self, path: str, replace: bool = True) -> None: ...
