"""Unit tests for CaseTaskQueryEngine: visibility, mutations, guards and cascade delete."""

import pytest

from legality.application.dtos.caso import CaseBudget
from legality.domain.enums import AssignmentRole, CaseStatus, ProfileRole, TaskStatus
from tests.fakes import (
    FakeIdentityProvider,
    InMemoryDatabase,
    make_identity,
    make_portal,
    unreachable,
)


async def _portal_as(db: InMemoryDatabase, user_id: str):
    provider = FakeIdentityProvider()
    provider.sign_in_as(make_identity(user_id))
    portal = make_portal(provider, db)
    await portal.router.bootstrap()
    return portal


@pytest.fixture
def db() -> InMemoryDatabase:
    db = InMemoryDatabase()
    db.add_profile("admin", "admin")
    db.add_profile("cli-1", "cliente")
    db.add_profile("cli-2", "cliente")
    db.add_profile("ana", "analista")
    db.add_profile("abo", "abogado")
    db.add_profile("pend", "pending")
    return db


async def test_cliente_sees_exactly_own_cases(db) -> None:
    own = db.add_caso("cli-1", titulo="Propio")
    db.add_caso("cli-2", titulo="Ajeno")
    portal = await _portal_as(db, "cli-1")

    result = await portal.cases.cases_visible_to()

    assert result.ok is True
    assert [d.id for d in result.value] == [own.id]
    assert result.value[0].cliente.id == "cli-1"


async def test_professional_without_assignments_sees_nothing(db) -> None:
    db.add_caso("cli-1")
    portal = await _portal_as(db, "ana")

    result = await portal.cases.cases_visible_to()

    assert result.ok is True
    assert result.value == []


async def test_professional_sees_assigned_cases_with_assignees(db) -> None:
    assigned = db.add_caso("cli-1", assigned={"abo": AssignmentRole.ABOGADO})
    db.add_caso("cli-2")
    portal = await _portal_as(db, "abo")

    result = await portal.cases.cases_visible_to()

    assert [d.id for d in result.value] == [assigned.id]
    assert result.value[0].is_assigned_to("abo")
    assert result.value[0].asignaciones[0].usuario.role is ProfileRole.ABOGADO


async def test_admin_sees_all_and_pending_sees_none(db) -> None:
    db.add_caso("cli-1")
    db.add_caso("cli-2")
    admin = await _portal_as(db, "admin")
    pending = await _portal_as(db, "pend")

    assert len((await admin.cases.cases_visible_to()).value) == 2
    assert (await pending.cases.cases_visible_to()).value == []


async def test_case_by_id_hides_foreign_cases(db) -> None:
    foreign = db.add_caso("cli-2")
    portal = await _portal_as(db, "cli-1")

    result = await portal.cases.case_by_id(foreign.id)

    assert result.ok is False
    assert result.error_code == "RESOURCE_NOT_FOUND"


async def test_all_cases_with_details_counts_tasks_for_admin_only(db) -> None:
    caso = db.add_caso("cli-1")
    db.add_tarea(caso.id, "ana")
    db.add_tarea(caso.id, "ana", estado=TaskStatus.COMPLETADA)

    admin = await _portal_as(db, "admin")
    detail = (await admin.cases.all_cases_with_details()).value[0]
    assert (detail.tareas_count, detail.tareas_pendientes) == (2, 1)

    analista = await _portal_as(db, "ana")
    denied = await analista.cases.all_cases_with_details()
    assert denied.error_code == "PERMISSION_DENIED"


async def test_tasks_assigned_to_include_case_title(db) -> None:
    caso = db.add_caso("cli-1", titulo="Demanda laboral", assigned={"ana": AssignmentRole.ANALISTA})
    db.add_tarea(caso.id, "ana", titulo="Revisar contrato")
    db.add_tarea(caso.id, "abo")
    portal = await _portal_as(db, "ana")

    result = await portal.cases.tasks_assigned_to()

    assert [t.titulo for t in result.value] == ["Revisar contrato"]
    assert result.value[0].caso_titulo == "Demanda laboral"


async def test_create_case_by_analista_auto_assigns_creator(db) -> None:
    empresa = db.add_empresa("Acme")
    portal = await _portal_as(db, "ana")

    result = await portal.cases.create_case(
        empresa.id, "cli-1", "  Nuevo caso ", CaseBudget(horas_analista=10, tarifa_analista=50)
    )

    assert result.ok is True
    caso = result.value
    assert caso.estado is CaseStatus.ACTIVO
    assert caso.titulo == "Nuevo caso"
    assert caso.budget.horas_analista == 10
    assert caso.id in await db.assignments.case_ids_for_user("ana")
    assert [d.id for d in (await portal.cases.cases_visible_to()).value] == [caso.id]


async def test_failed_creator_assignment_keeps_case_and_refreshes_counters(db) -> None:
    empresa = db.add_empresa("Acme")
    portal = await _portal_as(db, "abo")
    before = await portal.stats.compute()
    db.assignments.fail["create"] = unreachable()

    result = await portal.cases.create_case(empresa.id, "cli-1", "Sin asignar")

    assert result.ok is False
    assert result.error_code == "STORE_UNAVAILABLE"
    assert [c.titulo for c in db.casos_by_id.values()] == ["Sin asignar"]
    assert (await portal.stats.compute()).total_casos == before.total_casos + 1


async def test_cliente_cannot_create_case(db) -> None:
    empresa = db.add_empresa()
    portal = await _portal_as(db, "cli-1")

    result = await portal.cases.create_case(empresa.id, "cli-1", "Mi caso")

    assert result.ok is False
    assert result.error_code == "PERMISSION_DENIED"
    assert db.casos_by_id == {}


async def test_create_case_rejects_blank_title(db) -> None:
    portal = await _portal_as(db, "admin")
    result = await portal.cases.create_case(db.add_empresa().id, "cli-1", "   ")
    assert result.error_code == "VALIDATION_ERROR"


async def test_status_overwrite_is_permissive_across_legal_values(db) -> None:
    caso = db.add_caso("cli-1", assigned={"ana": AssignmentRole.ANALISTA})
    tarea = db.add_tarea(caso.id, "ana")
    portal = await _portal_as(db, "ana")

    assert (await portal.cases.set_task_state(tarea.id, "completada")).value.estado is TaskStatus.COMPLETADA
    reverted = await portal.cases.set_task_state(tarea.id, TaskStatus.PENDIENTE)
    assert reverted.value.estado is TaskStatus.PENDIENTE

    closed = await portal.cases.set_case_state(caso.id, "cerrado")
    assert closed.value.estado is CaseStatus.CERRADO
    assert (await portal.cases.set_case_state(caso.id, "activo")).value.estado is CaseStatus.ACTIVO


async def test_invalid_estado_is_rejected_without_touching_the_store(db) -> None:
    caso = db.add_caso("cli-1")
    tarea = db.add_tarea(caso.id, "ana")
    portal = await _portal_as(db, "admin")

    result = await portal.cases.set_task_state(tarea.id, "archivada")

    assert result.ok is False
    assert result.error_code == "VALIDATION_ERROR"
    assert "update" not in db.tasks.calls
    assert db.tareas_by_id[tarea.id].estado is TaskStatus.PENDIENTE


async def test_task_state_guard(db) -> None:
    caso = db.add_caso("cli-1", assigned={"abo": AssignmentRole.ABOGADO})
    tarea = db.add_tarea(caso.id, "ana")

    assignee = await _portal_as(db, "ana")
    assert (await assignee.cases.set_task_state(tarea.id, "en_progreso")).ok is True

    case_professional = await _portal_as(db, "abo")
    assert (await case_professional.cases.set_task_state(tarea.id, "completada")).ok is True

    cliente = await _portal_as(db, "cli-1")
    denied = await cliente.cases.set_task_state(tarea.id, "pendiente")
    assert denied.error_code == "PERMISSION_DENIED"


async def test_delete_case_cascades_to_tasks_and_assignments(db) -> None:
    caso = db.add_caso("cli-1", assigned={"ana": AssignmentRole.ANALISTA})
    for _ in range(3):
        db.add_tarea(caso.id, "ana")
    other = db.add_caso("cli-2")
    kept = db.add_tarea(other.id)
    portal = await _portal_as(db, "admin")

    result = await portal.cases.delete_case(caso.id)

    assert result.ok is True
    assert caso.id not in db.casos_by_id
    assert [t for t in db.tareas_by_id.values() if t.caso_id == caso.id] == []
    assert list(db.tareas_by_id) == [kept.id]
    assert await db.assignments.case_ids_for_user("ana") == []


async def test_delete_case_failure_after_task_delete_is_reported(db) -> None:
    """The steps are not atomic: tasks are gone even though the case survives."""
    caso = db.add_caso("cli-1")
    db.add_tarea(caso.id)
    db.cases.fail["delete"] = unreachable()
    portal = await _portal_as(db, "admin")

    result = await portal.cases.delete_case(caso.id)

    assert result.ok is False
    assert result.error_code == "STORE_UNAVAILABLE"
    assert caso.id in db.casos_by_id
    assert db.tareas_by_id == {}


async def test_update_case_and_task_patches(db) -> None:
    caso = db.add_caso("cli-1")
    tarea = db.add_tarea(caso.id)
    portal = await _portal_as(db, "admin")

    updated = await portal.cases.update_case(
        caso.id, {"titulo": "Renombrado", "estado": "cerrado", "budget": CaseBudget(bono_exito=500)}
    )
    assert updated.value.titulo == "Renombrado"
    # estado only changes through set_case_state.
    assert updated.value.estado is CaseStatus.ACTIVO
    assert updated.value.budget.bono_exito == 500

    task = await portal.cases.update_task(tarea.id, {"descripcion": "Detalle", "asignado_a": "abo"})
    assert (task.value.descripcion, task.value.asignado_a) == ("Detalle", "abo")

    empty = await portal.cases.update_task(tarea.id, {"estado": "completada"})
    assert empty.error_code == "VALIDATION_ERROR"


async def test_assign_and_unassign(db) -> None:
    caso = db.add_caso("cli-1")
    portal = await _portal_as(db, "admin")

    asignacion = (await portal.cases.assign(caso.id, "abo", "abogado")).value
    assert caso.id in await db.assignments.case_ids_for_user("abo")

    bad_role = await portal.cases.assign(caso.id, "abo", "cliente")
    assert bad_role.error_code == "VALIDATION_ERROR"

    assert (await portal.cases.unassign(asignacion.id)).ok is True
    assert await db.assignments.case_ids_for_user("abo") == []


async def test_create_and_delete_task(db) -> None:
    caso = db.add_caso("cli-1", assigned={"abo": AssignmentRole.ABOGADO})
    portal = await _portal_as(db, "abo")

    created = await portal.cases.create_task(caso.id, "ana", "Preparar escrito", "  ")
    assert created.value.estado is TaskStatus.PENDIENTE
    assert created.value.descripcion is None

    assert (await portal.cases.delete_task(created.value.id)).ok is True
    assert db.tareas_by_id == {}


async def test_store_failure_becomes_failure_result(db) -> None:
    db.assignments.fail["case_ids_for_user"] = unreachable()
    portal = await _portal_as(db, "ana")

    result = await portal.cases.cases_visible_to()

    assert result.ok is False
    assert result.error_code == "STORE_UNAVAILABLE"


async def test_mutation_notifies_listeners(db) -> None:
    caso = db.add_caso("cli-1")
    tarea = db.add_tarea(caso.id)
    portal = await _portal_as(db, "admin")
    actions: list[str] = []
    portal.cases.add_listener(actions.append)

    await portal.cases.set_task_state(tarea.id, "completada")
    await portal.cases.set_task_state(tarea.id, "bogus")

    assert actions == ["set_task_state"]
