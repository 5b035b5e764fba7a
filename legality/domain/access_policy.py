"""Role access policy.

Pure functions that map a role (or a profile carrying one) to capability
checks and to the canonical landing path. Unrecognised or missing roles
behave exactly like pending: they land on the pending-authorization screen
and pass no capability check.
"""

from __future__ import annotations

from typing import Protocol

from legality.domain.enums import ProfileRole

LOGIN_PATH = "/login"
PENDING_PATH = "/pending"
ADMIN_DASHBOARD = "/admin/dashboard"
ANALISTA_DASHBOARD = "/analista/dashboard"
ABOGADO_DASHBOARD = "/abogado/dashboard"
CLIENTE_DASHBOARD = "/cliente/dashboard"

_LANDING: dict[ProfileRole, str] = {
    ProfileRole.ADMIN: ADMIN_DASHBOARD,
    ProfileRole.ANALISTA: ANALISTA_DASHBOARD,
    ProfileRole.ABOGADO: ABOGADO_DASHBOARD,
    ProfileRole.CLIENTE: CLIENTE_DASHBOARD,
}

# Guarded route prefixes and the roles allowed on them.
_GUARDS: dict[str, frozenset[ProfileRole]] = {
    "/admin": frozenset({ProfileRole.ADMIN}),
    "/analista": frozenset({ProfileRole.ANALISTA}),
    "/abogado": frozenset({ProfileRole.ABOGADO}),
    "/cliente": frozenset({ProfileRole.CLIENTE}),
}

# Old bookmarks; None means "the caller's landing path".
_ALIASES: dict[str, str | None] = {
    "/admin": ADMIN_DASHBOARD,
    "/professional": None,
    "/client": CLIENTE_DASHBOARD,
}


class _HasRole(Protocol):
    role: ProfileRole


RoleLike = ProfileRole | str | _HasRole | None


def role_of(subject: RoleLike) -> ProfileRole:
    """Normalise a role, role string or profile to a ProfileRole (never raises)."""
    if subject is None or isinstance(subject, (ProfileRole, str)):
        return ProfileRole.parse(subject)
    return ProfileRole.parse(getattr(subject, "role", None))


def is_admin(subject: RoleLike) -> bool:
    return role_of(subject) is ProfileRole.ADMIN


def is_pending(subject: RoleLike) -> bool:
    """True for pending and for any role this portal does not recognise."""
    return role_of(subject) in (ProfileRole.PENDING, ProfileRole.UNKNOWN)


def is_client_facing(subject: RoleLike) -> bool:
    return role_of(subject) is ProfileRole.CLIENTE


def is_professional(subject: RoleLike) -> bool:
    """Analista or abogado; admin passes as an override."""
    return role_of(subject) in (
        ProfileRole.ANALISTA,
        ProfileRole.ABOGADO,
        ProfileRole.ADMIN,
    )


def can_access_admin_panel(subject: RoleLike) -> bool:
    return is_admin(subject)


def can_access_professional_panel(subject: RoleLike) -> bool:
    return role_of(subject) in (ProfileRole.ANALISTA, ProfileRole.ABOGADO)


def can_access_client_panel(subject: RoleLike) -> bool:
    return is_client_facing(subject)


def landing_path(subject: RoleLike) -> str:
    """Canonical route for a role; pending and unknown roles get the pending screen."""
    return _LANDING.get(role_of(subject), PENDING_PATH)


def normalize_path(path: str) -> str:
    path = (path or "/").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def allowed_roles_for(path: str) -> frozenset[ProfileRole] | None:
    """Roles allowed on a guarded path, or None when the path is not guarded."""
    path = normalize_path(path)
    for prefix, roles in _GUARDS.items():
        if _matches(path, prefix):
            return roles
    return None


def redirect_for(path: str, subject: RoleLike, *, authenticated: bool = True) -> str | None:
    """Return where a visitor on path must be sent, or None to stay.

    Unauthenticated visitors go to the login screen. Pending (and unknown)
    roles only ever see the pending screen. Authenticated users are kept on
    any sub-route of a guarded prefix their role allows; everything else,
    including guarded routes of other roles, redirects to their own landing
    path rather than a fixed default.
    """
    path = normalize_path(path)
    if not authenticated:
        return None if path == LOGIN_PATH else LOGIN_PATH

    if is_pending(subject):
        return None if path == PENDING_PATH else PENDING_PATH

    landing = landing_path(subject)
    target = path
    if path in _ALIASES:
        # An alias to another role's dashboard still goes through the guard.
        target = _ALIASES[path] or landing
    roles = allowed_roles_for(target)
    if roles is not None and role_of(subject) in roles:
        return None if target == path else target
    return landing
