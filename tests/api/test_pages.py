"""Route guard tests: redirects, rendered views and the bootstrap error screen."""

import pytest
from httpx import AsyncClient

from tests.fakes import make_identity, unreachable


async def test_unauthenticated_root_redirects_to_login(api: AsyncClient) -> None:
    response = await api.get("/")
    assert response.status_code == 307
    assert response.headers["location"] == "/login"


async def test_login_view_renders_for_visitors(api: AsyncClient) -> None:
    response = await api.get("/login")

    assert response.status_code == 200
    data = response.json()
    assert data["view"] == "login"
    assert data["status"]["state"] == "unauthenticated"
    assert data["profile"] is None


async def test_signed_in_user_on_login_goes_to_landing(api: AsyncClient, db, provider) -> None:
    db.add_profile("cli", "cliente")
    provider.sign_in_as(make_identity("cli"))

    response = await api.get("/login")

    assert response.status_code == 307
    assert response.headers["location"] == "/cliente/dashboard"


async def test_foreign_dashboard_redirects_to_own_landing(api: AsyncClient, db, provider) -> None:
    """An analista asking for the admin panel lands on the analista dashboard."""
    db.add_profile("ana", "analista")
    provider.sign_in_as(make_identity("ana"))

    response = await api.get("/admin/dashboard")

    assert response.status_code == 307
    assert response.headers["location"] == "/analista/dashboard"


@pytest.mark.parametrize(
    "role,path,view",
    [
        ("admin", "/admin/dashboard/usuarios", "admin_panel"),
        ("analista", "/analista/dashboard", "professional_panel"),
        ("abogado", "/abogado/dashboard/casos", "professional_panel"),
        ("cliente", "/cliente/dashboard", "client_panel"),
        ("pending", "/pending", "pending_authorization"),
    ],
)
async def test_own_routes_render(api: AsyncClient, db, provider, role, path, view) -> None:
    db.add_profile("u1", role)
    provider.sign_in_as(make_identity("u1"))

    response = await api.get(path)

    assert response.status_code == 200
    assert response.json()["view"] == view
    assert response.json()["profile"]["role"] == role


async def test_pending_user_is_kept_on_pending_screen(api: AsyncClient, db, provider) -> None:
    db.add_profile("p1", "pending")
    provider.sign_in_as(make_identity("p1"))

    response = await api.get("/cliente/dashboard")

    assert response.status_code == 307
    assert response.headers["location"] == "/pending"


async def test_unknown_role_is_treated_as_pending(api: AsyncClient, db, provider) -> None:
    db.add_profile("x1", "colaborador")
    provider.sign_in_as(make_identity("x1"))

    response = await api.get("/abogado/dashboard")

    assert response.headers["location"] == "/pending"


async def test_legacy_alias_resolves_to_landing(api: AsyncClient, db, provider) -> None:
    db.add_profile("abo", "abogado")
    provider.sign_in_as(make_identity("abo"))

    response = await api.get("/professional")

    assert response.status_code == 307
    assert response.headers["location"] == "/abogado/dashboard"


async def test_bootstrap_failure_shows_error_screen(api: AsyncClient, provider) -> None:
    """An unreachable identity provider yields the error view, not a redirect."""
    provider.get_session_error = unreachable()

    response = await api.get("/cliente/dashboard")

    assert response.status_code == 503
    data = response.json()
    assert data["view"] == "error"
    assert data["action"] == "reload"


async def test_unguarded_unknown_page_redirects_to_landing(api: AsyncClient, db, provider) -> None:
    db.add_profile("admin", "admin")
    provider.sign_in_as(make_identity("admin"))

    response = await api.get("/nowhere")

    assert response.status_code == 307
    assert response.headers["location"] == "/admin/dashboard"
