"""Auth API: sign-in, sign-up, OAuth, sign-out and the current profile.

All routes run through the per-request Portal (get_portal); the role router
owns the outcome of every sign-in. Tokens are returned in the body and also
set as httponly cookies so browser page requests carry the session.
"""

from fastapi import APIRouter, Request, Response

from legality.api.v1.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    CurrentProfile,
    PortalDep,
    unwrap,
)
from legality.application.portal import Portal
from legality.core.config import get_settings
from legality.core.limiter import (
    check_auth_rate_per_email,
    limit_auth,
    limit_signup,
    limit_writes,
)
from legality.domain.exceptions import AuthenticationException
from legality.schemas.auth import (
    LoginRequest,
    OAuthRequest,
    OAuthResponse,
    RefreshRequest,
    RouterStatusResponse,
    SessionResponse,
    SignUpRequest,
    SignUpResponse,
)
from legality.schemas.profile import ProfileResponse, ProfileUpdate

router = APIRouter()


def _status_response(portal: Portal) -> RouterStatusResponse:
    return RouterStatusResponse.from_status(portal.router.status)


def _session_response(portal: Portal, response: Response) -> SessionResponse:
    session = portal.store.session
    profile = portal.store.get_profile()
    if session is None or profile is None:
        raise AuthenticationException("Not authenticated")
    secure = not get_settings().debug
    response.set_cookie(
        ACCESS_TOKEN_COOKIE, session.access_token, httponly=True, samesite="lax", secure=secure
    )
    if session.refresh_token:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            session.refresh_token,
            httponly=True,
            samesite="lax",
            secure=secure,
        )
    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        profile=ProfileResponse.model_validate(profile),
        status=_status_response(portal),
    )


@router.post("/login", response_model=SessionResponse)
@limit_auth
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    portal: PortalDep,
):
    """Sign in with email and password; waits (bounded) for the profile to appear."""
    check_auth_rate_per_email(body.email)
    unwrap(await portal.router.sign_in(body.email, body.password))
    return _session_response(portal, response)


@router.post("/signup", response_model=SignUpResponse, status_code=201)
@limit_signup
async def signup(
    request: Request,
    response: Response,
    body: SignUpRequest,
    portal: PortalDep,
):
    """Register; when the provider requires email confirmation no session is returned."""
    check_auth_rate_per_email(body.email)
    profile = unwrap(await portal.router.sign_up(body.email, body.password, body.full_name))
    if profile is None:
        return SignUpResponse(confirmation_required=True)
    return SignUpResponse(
        confirmation_required=False, session=_session_response(portal, response)
    )


@router.post("/oauth", response_model=OAuthResponse)
@limit_auth
async def oauth(request: Request, body: OAuthRequest, portal: PortalDep):
    """Authorization URL for a third-party provider (default google)."""
    return OAuthResponse(url=unwrap(await portal.router.sign_in_with_oauth(body.provider)))


@router.post("/logout", status_code=204)
async def logout(response: Response, portal: PortalDep):
    """Sign out; local session and cookies are cleared even if the provider call fails."""
    await portal.router.sign_out()
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)


@router.get("/session", response_model=RouterStatusResponse)
async def get_session_status(portal: PortalDep):
    """Router status for the caller (state, role and landing path)."""
    return _status_response(portal)


@router.get("/me", response_model=ProfileResponse)
async def get_me(profile: CurrentProfile):
    return ProfileResponse.model_validate(profile)


@router.put("/me", response_model=ProfileResponse)
@limit_writes
async def update_me(
    request: Request,
    body: ProfileUpdate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Update the caller's own full_name (the role is never self-assignable)."""
    updated = unwrap(await portal.admin.update_own_profile(body.model_dump()))
    return ProfileResponse.model_validate(updated)


@router.post("/refresh-profile", response_model=RouterStatusResponse)
async def refresh_profile(profile: CurrentProfile, portal: PortalDep):
    """Re-read the caller's profile (e.g. after an admin approved it) and re-route."""
    unwrap(await portal.router.refresh())
    return _status_response(portal)


@router.post("/refresh", response_model=SessionResponse)
@limit_auth
async def refresh_session(
    request: Request,
    response: Response,
    portal: PortalDep,
    body: RefreshRequest | None = None,
):
    """Exchange a refresh token (body or cookie) for a new session and new cookies."""
    refresh_token = (body.refresh_token if body else None) or request.cookies.get(
        REFRESH_TOKEN_COOKIE
    )
    if not refresh_token and portal.store.session is None:
        raise AuthenticationException("No refresh token")
    unwrap(await portal.router.refresh_session(refresh_token))
    return _session_response(portal, response)
