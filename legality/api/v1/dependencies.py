"""Presentation-layer dependency injection (composition root).

Every request gets its own Portal: a forked identity client holding the
caller's token (Authorization: Bearer, or the session cookie set at login),
a PostgREST client acting as that user, and a fresh SessionStore. The router
is bootstrapped before the endpoint runs, so routes only read its outcome.
"""

from __future__ import annotations

from typing import Annotated, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from legality.application.dtos.profile import Profile
from legality.application.dtos.result import OperationResult
from legality.application.portal import Portal, build_portal
from legality.core.config import get_settings
from legality.domain.enums import RouterState
from legality.domain.exceptions import (
    AuthenticationException,
    LegalityException,
    StoreUnavailableException,
)
from legality.infrastructure.supabase import supabase_repositories

T = TypeVar("T")

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"

_bearer = HTTPBearer(auto_error=False)


class RequestNavigator:
    """Navigator for one HTTP request: remembers the last redirect the router asked for."""

    def __init__(self, current_path: str) -> None:
        self._path = current_path
        self.redirect_to: str | None = None

    @property
    def current_path(self) -> str:
        return self._path

    def navigate(self, path: str, replace: bool = True) -> None:
        self.redirect_to = path
        self._path = path


async def get_portal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> Portal:
    """Build and bootstrap the caller's Portal."""
    settings = get_settings()
    gotrue = request.app.state.gotrue.fork()
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        gotrue.use_access_token(token, request.cookies.get(REFRESH_TOKEN_COOKIE))
    rest = request.app.state.postgrest.with_token(lambda: gotrue.access_token)
    portal = build_portal(
        gotrue,
        supabase_repositories(rest),
        RequestNavigator(request.url.path),
        settings,
    )
    await portal.router.bootstrap()
    return portal


PortalDep = Annotated[Portal, Depends(get_portal)]


async def get_current_profile(portal: PortalDep) -> Profile:
    """Profile of the authenticated caller (pending profiles included).

    Raises:
        StoreUnavailableException: The router could not bootstrap (503).
        AuthenticationException: No valid session (401).
    """
    status = portal.router.status
    if status.state is RouterState.ERROR:
        raise StoreUnavailableException(status.error or "Identity provider unavailable")
    profile = portal.store.get_profile()
    if profile is None or not portal.store.is_authenticated:
        raise AuthenticationException("Not authenticated")
    return profile


CurrentProfile = Annotated[Profile, Depends(get_current_profile)]


def unwrap(result: OperationResult[T]) -> T:
    """Value of a successful result; a failure is re-raised for the exception handlers."""
    if not result.ok:
        if result.exception is not None:
            raise result.exception
        raise LegalityException(result.error or "Operation failed", result.error_code)
    return result.value  # type: ignore[return-value]
