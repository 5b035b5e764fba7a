"""Unit tests for the role predicates, landing paths and route guard."""

import pytest

from legality.domain import access_policy
from legality.domain.enums import ProfileRole
from tests.fakes import InMemoryDatabase


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        (ProfileRole.ADMIN, "/admin/dashboard"),
        (ProfileRole.ANALISTA, "/analista/dashboard"),
        (ProfileRole.ABOGADO, "/abogado/dashboard"),
        (ProfileRole.CLIENTE, "/cliente/dashboard"),
        (ProfileRole.PENDING, "/pending"),
        (ProfileRole.UNKNOWN, "/pending"),
        (None, "/pending"),
        ("colaborador", "/pending"),
    ],
)
def test_landing_path_per_role(role, expected) -> None:
    assert access_policy.landing_path(role) == expected


def test_unknown_role_has_no_capabilities() -> None:
    """An unrecognised role behaves exactly like pending."""
    for check in (
        access_policy.is_admin,
        access_policy.is_client_facing,
        access_policy.is_professional,
        access_policy.can_access_admin_panel,
        access_policy.can_access_professional_panel,
        access_policy.can_access_client_panel,
    ):
        assert check("superuser") is False
        assert check(ProfileRole.PENDING) is False
    assert access_policy.is_pending("superuser") is True


def test_admin_is_professional_but_not_on_professional_panel() -> None:
    assert access_policy.is_professional(ProfileRole.ADMIN) is True
    assert access_policy.can_access_professional_panel(ProfileRole.ADMIN) is False
    assert access_policy.can_access_professional_panel(ProfileRole.ABOGADO) is True


def test_predicates_accept_profiles() -> None:
    profile = InMemoryDatabase().add_profile("u1", "cliente")
    assert access_policy.is_client_facing(profile) is True
    assert access_policy.role_of(profile) is ProfileRole.CLIENTE


def test_unauthenticated_visitor_goes_to_login() -> None:
    assert access_policy.redirect_for("/admin/dashboard", None, authenticated=False) == "/login"
    assert access_policy.redirect_for("/login", None, authenticated=False) is None


def test_pending_profile_only_sees_pending_screen() -> None:
    assert access_policy.redirect_for("/cliente/dashboard", ProfileRole.PENDING) == "/pending"
    assert access_policy.redirect_for("/pending", ProfileRole.PENDING) is None
    assert access_policy.redirect_for("/login", "unexpected-role") == "/pending"


def test_foreign_route_redirects_to_own_landing() -> None:
    """Unauthorised access goes to the caller's landing path, not a fixed default."""
    assert access_policy.redirect_for("/admin/users", ProfileRole.ANALISTA) == "/analista/dashboard"
    assert access_policy.redirect_for("/cliente/dashboard", ProfileRole.ABOGADO) == "/abogado/dashboard"


def test_sub_routes_of_allowed_prefix_are_kept() -> None:
    assert access_policy.redirect_for("/admin/users", ProfileRole.ADMIN) is None
    assert access_policy.redirect_for("/analista/casos/42/", ProfileRole.ANALISTA) is None


def test_root_login_and_unknown_paths_redirect_to_landing() -> None:
    assert access_policy.redirect_for("/", ProfileRole.CLIENTE) == "/cliente/dashboard"
    assert access_policy.redirect_for("/login", ProfileRole.ADMIN) == "/admin/dashboard"
    assert access_policy.redirect_for("/nowhere", ProfileRole.ABOGADO) == "/abogado/dashboard"


def test_legacy_aliases() -> None:
    assert access_policy.redirect_for("/admin", ProfileRole.ADMIN) == "/admin/dashboard"
    assert access_policy.redirect_for("/professional", ProfileRole.ANALISTA) == "/analista/dashboard"
    assert access_policy.redirect_for("/client", ProfileRole.CLIENTE) == "/cliente/dashboard"
    # An alias into another role's area still lands on the caller's own dashboard.
    assert access_policy.redirect_for("/client", ProfileRole.ABOGADO) == "/abogado/dashboard"


def test_allowed_roles_for_guarded_and_open_paths() -> None:
    assert access_policy.allowed_roles_for("/admin/dashboard") == frozenset({ProfileRole.ADMIN})
    assert access_policy.allowed_roles_for("/administrator") is None
    assert access_policy.allowed_roles_for("/login") is None


def test_normalize_path_strips_query_and_trailing_slash() -> None:
    assert access_policy.normalize_path("admin/dashboard/?tab=1") == "/admin/dashboard"
    assert access_policy.normalize_path("") == "/"
