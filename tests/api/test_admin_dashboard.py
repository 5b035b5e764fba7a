"""Admin, dashboard and solicitudes-horas endpoint tests."""

from httpx import AsyncClient

from legality.domain.enums import AssignmentRole, ProfileRole
from legality.domain.exceptions import StoreRequestException
from tests.fakes import make_identity, unreachable


def _act_as(db, provider, user_id: str, role: str) -> None:
    db.add_profile(user_id, role)
    provider.sign_in_as(make_identity(user_id))


async def test_dashboard_counters(api: AsyncClient, db, provider) -> None:
    """GET /api/v1/dashboard returns every counter; mis_tareas_pendientes is the caller's."""
    _act_as(db, provider, "admin", "admin")
    db.add_profile("p1", "pending")
    caso = db.add_caso(None)
    db.add_tarea(caso.id, "admin")
    db.add_tarea(caso.id, "otro")

    response = await api.get("/api/v1/dashboard")

    assert response.status_code == 200
    assert response.json() == {
        "total_usuarios": 2,
        "usuarios_pendientes": 1,
        "total_empresas": 1,
        "total_casos": 1,
        "casos_activos": 1,
        "total_tareas": 2,
        "tareas_pendientes": 2,
        "mis_tareas_pendientes": 1,
    }


async def test_dashboard_failed_counter_reads_zero(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "ana", "analista")
    db.add_caso(None)
    db.cases.fail["count"] = unreachable()

    response = await api.get("/api/v1/dashboard")

    assert response.status_code == 200
    assert response.json()["total_casos"] == 0
    assert response.json()["total_empresas"] == 1


async def test_dashboard_forbidden_for_pending(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "p1", "pending")
    response = await api.get("/api/v1/dashboard")
    assert response.status_code == 403


async def test_admin_approves_pending_user(api: AsyncClient, db, provider) -> None:
    """PUT /api/v1/admin/profiles/{id}/role moves a pending user into a role."""
    _act_as(db, provider, "admin", "admin")
    db.add_profile("p1", "pending")

    pending = await api.get("/api/v1/admin/profiles/pending")
    assert [p["id"] for p in pending.json()] == ["p1"]

    response = await api.put("/api/v1/admin/profiles/p1/role", json={"role": "abogado"})

    assert response.status_code == 200
    assert response.json()["role"] == "abogado"
    assert db.profiles_by_id["p1"].role is ProfileRole.ABOGADO


async def test_invalid_role_returns_400(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "admin", "admin")
    db.add_profile("p1", "pending")
    response = await api.put("/api/v1/admin/profiles/p1/role", json={"role": "colaborador"})
    assert response.status_code == 400


async def test_role_change_forbidden_for_non_admin(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "abo", "abogado")
    db.add_profile("p1", "pending")
    response = await api.put("/api/v1/admin/profiles/p1/role", json={"role": "abogado"})
    assert response.status_code == 403


async def test_profiles_with_pending_task_counts(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "admin", "admin")
    db.add_profile("ana", "analista")
    caso = db.add_caso(None)
    db.add_tarea(caso.id, "ana")

    response = await api.get("/api/v1/admin/profiles")

    assert response.status_code == 200
    loads = {row["profile"]["id"]: row["tareas_pendientes"] for row in response.json()}
    assert loads == {"admin": 0, "ana": 1}


async def test_empresa_lifecycle(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "admin", "admin")

    created = await api.post("/api/v1/admin/empresas", json={"nombre": "Acme"})
    assert created.status_code == 201
    empresa_id = created.json()["id"]

    renamed = await api.put(f"/api/v1/admin/empresas/{empresa_id}", json={"nombre": "Acme SA"})
    assert renamed.json()["nombre"] == "Acme SA"

    listed = await api.get("/api/v1/admin/empresas")
    assert [e["nombre"] for e in listed.json()] == ["Acme SA"]

    deleted = await api.delete(f"/api/v1/admin/empresas/{empresa_id}")
    assert deleted.status_code == 204


async def test_hours_request_flow(api: AsyncClient, db, provider) -> None:
    """An assigned abogado requests hours; the owning cliente approves them."""
    db.add_profile("cli", "cliente")
    _act_as(db, provider, "abo", "abogado")
    caso = db.add_caso("cli", assigned={"abo": AssignmentRole.ABOGADO})

    created = await api.post(
        "/api/v1/solicitudes-horas", json={"caso_id": caso.id, "horas_abogado": 4}
    )
    assert created.status_code == 201
    solicitud_id = created.json()["id"]

    provider.sign_in_as(make_identity("cli"))
    listed = await api.get("/api/v1/solicitudes-horas")
    assert [s["id"] for s in listed.json()] == [solicitud_id]

    approved = await api.post(f"/api/v1/solicitudes-horas/{solicitud_id}/aprobar")
    assert approved.status_code == 200
    assert approved.json()["estado"] == "aprobado"

    again = await api.post(f"/api/v1/solicitudes-horas/{solicitud_id}/rechazar")
    assert again.status_code == 400


async def test_hours_request_without_hours_returns_400(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "abo", "abogado")
    caso = db.add_caso(None, assigned={"abo": AssignmentRole.ABOGADO})
    response = await api.post("/api/v1/solicitudes-horas", json={"caso_id": caso.id})
    assert response.status_code == 400


async def test_store_constraint_violation_returns_409(api: AsyncClient, db, provider) -> None:
    """A unique violation from the store keeps its code through the result and maps to 409."""
    _act_as(db, provider, "admin", "admin")
    db.empresas.fail["create"] = StoreRequestException(
        "duplicate key value violates unique constraint", code="23505", status_code=409
    )

    response = await api.post("/api/v1/admin/empresas", json={"nombre": "Acme"})

    assert response.status_code == 409
    assert response.json()["details"]["code"] == "23505"


async def test_store_outage_returns_503(api: AsyncClient, db, provider) -> None:
    _act_as(db, provider, "admin", "admin")
    db.empresas.fail["list_all"] = unreachable()

    response = await api.get("/api/v1/admin/empresas")

    assert response.status_code == 503
    assert response.json()["error"] == "STORE_UNAVAILABLE"
