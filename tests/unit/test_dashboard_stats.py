"""Unit tests for DashboardStatsAggregator (counts, failure isolation, cache)."""

from legality.application.use_cases.analytics import DashboardStatsAggregator
from legality.domain.enums import AssignmentRole, CaseStatus, TaskStatus
from tests.fakes import FakeIdentityProvider, InMemoryDatabase, make_identity, make_portal, unreachable


def _seeded() -> InMemoryDatabase:
    db = InMemoryDatabase()
    db.add_profile("admin", "admin")
    db.add_profile("ana", "analista")
    db.add_profile("p1", "pending")
    db.add_profile("p2", "pending")
    activo = db.add_caso("admin", assigned={"ana": AssignmentRole.ANALISTA})
    db.add_caso("admin", estado=CaseStatus.CERRADO)
    db.add_tarea(activo.id, "ana")
    db.add_tarea(activo.id, "ana", estado=TaskStatus.COMPLETADA)
    db.add_tarea(activo.id, "admin")
    return db


def _aggregator(db: InMemoryDatabase) -> DashboardStatsAggregator:
    return DashboardStatsAggregator(db.profiles, db.empresas, db.cases, db.tasks)


async def test_counts_all_collections() -> None:
    stats = await _aggregator(_seeded()).compute(user_id="ana")

    assert stats.total_usuarios == 4
    assert stats.usuarios_pendientes == 2
    assert stats.total_empresas == 2
    assert stats.total_casos == 2
    assert stats.casos_activos == 1
    assert stats.total_tareas == 3
    assert stats.tareas_pendientes == 2
    assert stats.mis_tareas_pendientes == 1


async def test_subsets_never_exceed_totals() -> None:
    stats = await _aggregator(_seeded()).compute(user_id="ana")

    assert stats.tareas_pendientes <= stats.total_tareas
    assert stats.casos_activos <= stats.total_casos
    assert stats.usuarios_pendientes <= stats.total_usuarios
    assert stats.mis_tareas_pendientes <= stats.tareas_pendientes


async def test_failing_counter_reports_zero_without_failing_others() -> None:
    db = _seeded()
    db.empresas.fail["count"] = unreachable()

    stats = await _aggregator(db).compute()

    assert stats.total_empresas == 0
    assert stats.total_casos == 2
    assert stats.total_tareas == 3
    # Only queried for a specific user.
    assert stats.mis_tareas_pendientes == 0


async def test_cache_is_invalidated_by_engine_mutations() -> None:
    db = _seeded()
    provider = FakeIdentityProvider()
    provider.sign_in_as(make_identity("admin"))
    portal = make_portal(provider, db)
    await portal.router.bootstrap()

    before = await portal.stats.compute(user_id="admin")
    db.add_tarea(next(iter(db.casos_by_id)), "admin")
    assert (await portal.stats.compute(user_id="admin")) == before

    tarea_id = next(t.id for t in db.tareas_by_id.values() if t.estado is TaskStatus.COMPLETADA)
    await portal.cases.set_task_state(tarea_id, "pendiente")
    after = await portal.stats.compute(user_id="admin")

    assert after.total_tareas == before.total_tareas + 1
    assert after.tareas_pendientes == before.tareas_pendientes + 2


async def test_use_cache_false_always_recomputes() -> None:
    db = _seeded()
    aggregator = _aggregator(db)
    await aggregator.compute()
    db.add_empresa("Nueva")

    stats = await aggregator.compute(use_cache=False)

    assert stats.total_empresas == 3
    assert set(stats.to_dict()) == {
        "total_usuarios",
        "usuarios_pendientes",
        "total_empresas",
        "total_casos",
        "casos_activos",
        "total_tareas",
        "tareas_pendientes",
        "mis_tareas_pendientes",
    }
