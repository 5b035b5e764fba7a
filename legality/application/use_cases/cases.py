"""Case and task use cases: role-scoped reads and status mutations.

Visibility: a cliente sees the cases it owns, an analista or abogado sees
the cases it is assigned to, an admin sees everything, and pending or
unknown roles see nothing. Status overwrites are permissive: any legal
estado may follow any other; only values outside the enum are rejected.
Every public operation returns an OperationResult.
"""

from __future__ import annotations

import logging
from typing import Any

from legality.application.dtos.caso import Asignacion, CaseBudget, Caso, CasoDetail
from legality.application.dtos.profile import Profile
from legality.application.dtos.result import OperationResult
from legality.application.dtos.tarea import Tarea
from legality.application.interfaces.repositories import (
    IAssignmentRepository,
    ICaseRepository,
    ITaskRepository,
)
from legality.application.services.session_store import SessionStore
from legality.application.use_cases._common import (
    ChangeNotifier,
    current_actor,
    require_text,
    run_operation,
)
from legality.domain import access_policy
from legality.domain.enums import AssignmentRole, CaseStatus, ProfileRole, TaskStatus
from legality.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)

_CASE_PATCH_FIELDS = frozenset({"titulo", "empresa_id", "cliente_id"})
_TASK_PATCH_FIELDS = frozenset({"titulo", "descripcion", "asignado_a"})


def _parse_estado(enum_cls, value: Any, field: str = "estado"):
    try:
        return enum_cls.parse(value)
    except ValueError:
        raise ValidationException(
            f"Invalid {field} {value!r}; expected one of {enum_cls.values()}", field=field
        ) from None


class CaseTaskQueryEngine(ChangeNotifier):
    """Reads and mutations over casos, tareas and asignaciones for the signed-in profile."""

    def __init__(
        self,
        store: SessionStore,
        cases: ICaseRepository,
        tasks: ITaskRepository,
        assignments: IAssignmentRepository,
    ) -> None:
        super().__init__()
        self._store = store
        self._cases = cases
        self._tasks = tasks
        self._assignments = assignments

    # -- visibility helpers -------------------------------------------------

    async def _visible_case_ids(self, actor: Profile) -> list[str] | None:
        """Ids the actor may see; None means every case (admin)."""
        if access_policy.is_admin(actor):
            return None
        if access_policy.is_client_facing(actor):
            return await self._cases.ids_for_cliente(actor.id)
        if access_policy.can_access_professional_panel(actor):
            return await self._assignments.case_ids_for_user(actor.id)
        return []

    async def _require_visible(self, actor: Profile, case_id: str) -> None:
        ids = await self._visible_case_ids(actor)
        if ids is not None and case_id not in ids:
            raise ResourceNotFoundException("caso", case_id)

    async def _require_case_worker(self, actor: Profile, case_id: str, action: str) -> None:
        """Admin, or an analista/abogado assigned to the case."""
        if access_policy.is_admin(actor):
            return
        if access_policy.can_access_professional_panel(actor):
            if case_id in await self._assignments.case_ids_for_user(actor.id):
                return
        raise AuthorizationException("caso", action)

    async def _require_task_worker(self, actor: Profile, task: Tarea, action: str) -> None:
        """Admin, the task's assignee, or a professional assigned to the parent case."""
        if access_policy.is_admin(actor) or task.asignado_a == actor.id:
            return
        if access_policy.can_access_professional_panel(actor):
            if task.caso_id in await self._assignments.case_ids_for_user(actor.id):
                return
        raise AuthorizationException("tarea", action)

    def _require_staff(self, actor: Profile, resource: str, action: str) -> None:
        if not (access_policy.is_admin(actor) or access_policy.can_access_professional_panel(actor)):
            raise AuthorizationException(resource, action)

    def _require_admin(self, actor: Profile, resource: str, action: str) -> None:
        if not access_policy.is_admin(actor):
            raise AuthorizationException(resource, action)

    async def _get_task(self, task_id: str) -> Tarea:
        task = await self._tasks.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("tarea", task_id)
        return task

    # -- case reads ---------------------------------------------------------

    async def cases_visible_to(
        self, profile: Profile | None = None
    ) -> OperationResult[list[CasoDetail]]:
        """Cases the profile may see, enriched with empresa, cliente and asignaciones."""

        async def call() -> list[CasoDetail]:
            actor = profile or current_actor(self._store)
            role = access_policy.role_of(actor)
            if role is ProfileRole.ADMIN:
                return await self._cases.list_with_details()
            if role is ProfileRole.CLIENTE:
                return await self._cases.list_with_details(cliente_id=actor.id)
            if role in (ProfileRole.ANALISTA, ProfileRole.ABOGADO):
                ids = await self._assignments.case_ids_for_user(actor.id)
                return await self._cases.list_with_details(ids=ids)
            return []

        return await run_operation("cases_visible_to", call)

    async def case_by_id(self, case_id: str) -> OperationResult[CasoDetail]:
        async def call() -> CasoDetail:
            await self._require_visible(current_actor(self._store), case_id)
            detail = await self._cases.get_with_details(case_id)
            if detail is None:
                raise ResourceNotFoundException("caso", case_id)
            return detail

        return await run_operation("case_by_id", call)

    async def cases_by_cliente(self, cliente_id: str) -> OperationResult[list[CasoDetail]]:
        async def call() -> list[CasoDetail]:
            actor = current_actor(self._store)
            if actor.id != cliente_id:
                self._require_staff(actor, "caso", "list")
            details = await self._cases.list_with_details(cliente_id=cliente_id)
            visible = await self._visible_case_ids(actor)
            if visible is None:
                return details
            return [d for d in details if d.id in visible]

        return await run_operation("cases_by_cliente", call)

    async def all_cases_with_details(self) -> OperationResult[list[CasoDetail]]:
        """Every case with tareas_count and tareas_pendientes (admin)."""

        async def call() -> list[CasoDetail]:
            self._require_admin(current_actor(self._store), "caso", "list_all")
            return await self._cases.list_with_details()

        return await run_operation("all_cases_with_details", call)

    # -- task reads ---------------------------------------------------------

    async def tasks_assigned_to(self, user_id: str | None = None) -> OperationResult[list[Tarea]]:
        """Tasks where asignado_a = user_id, with the parent case title."""

        async def call() -> list[Tarea]:
            actor = current_actor(self._store)
            target = user_id or actor.id
            if target != actor.id:
                self._require_admin(actor, "tarea", "list")
            return await self._tasks.list_by_assignee(target)

        return await run_operation("tasks_assigned_to", call)

    async def tasks_by_case(self, case_id: str) -> OperationResult[list[Tarea]]:
        async def call() -> list[Tarea]:
            await self._require_visible(current_actor(self._store), case_id)
            return await self._tasks.list_by_case(case_id)

        return await run_operation("tasks_by_case", call)

    async def all_tasks(self) -> OperationResult[list[Tarea]]:
        async def call() -> list[Tarea]:
            self._require_admin(current_actor(self._store), "tarea", "list_all")
            return await self._tasks.list_all()

        return await run_operation("all_tasks", call)

    # -- case mutations -----------------------------------------------------

    async def create_case(
        self,
        empresa_id: str,
        cliente_id: str,
        titulo: str,
        budget: CaseBudget | None = None,
    ) -> OperationResult[Caso]:
        """Insert a case with estado 'activo'.

        A creating analista or abogado is assigned to the new case so it
        shows up in their own list. If that assignment fails the case row
        is kept (only an admin sees it) and the result is a failure.
        """

        async def call() -> Caso:
            actor = current_actor(self._store)
            self._require_staff(actor, "caso", "create")
            row: dict[str, Any] = {
                "empresa_id": require_text(empresa_id, "empresa_id"),
                "cliente_id": require_text(cliente_id, "cliente_id"),
                "titulo": require_text(titulo, "titulo"),
                "estado": CaseStatus.ACTIVO.value,
            }
            if budget is not None:
                row.update(budget.to_row())
            caso = await self._cases.create(row)
            if access_policy.can_access_professional_panel(actor):
                try:
                    await self._assignments.create(caso.id, actor.id, actor.role.value)
                except Exception:
                    logger.error(
                        "Caso %s was created but assigning it to %s failed; no rollback",
                        caso.id,
                        actor.id,
                    )
                    # The caso row exists, so counters must not serve the old total.
                    self._notify("create_case")
                    raise
            return caso

        return await self._mutate("create_case", call)

    async def update_case(self, case_id: str, patch: dict[str, Any]) -> OperationResult[Caso]:
        """Update titulo, empresa_id, cliente_id or budget columns (not estado)."""

        async def call() -> Caso:
            await self._require_case_worker(current_actor(self._store), case_id, "update")
            row = {k: v for k, v in patch.items() if k in _CASE_PATCH_FIELDS}
            budget = patch.get("budget")
            if isinstance(budget, CaseBudget):
                row.update(budget.to_row())
            if "titulo" in row:
                row["titulo"] = require_text(row["titulo"], "titulo")
            if not row:
                raise ValidationException("Nothing to update")
            return await self._cases.update(case_id, row)

        return await self._mutate("update_case", call)

    async def set_case_state(self, case_id: str, new_state: CaseStatus | str) -> OperationResult[Caso]:
        """Overwrite estado; no transition check between legal values."""

        async def call() -> Caso:
            estado = _parse_estado(CaseStatus, new_state)
            await self._require_case_worker(current_actor(self._store), case_id, "set_state")
            return await self._cases.update(case_id, {"estado": estado.value})

        return await self._mutate("set_case_state", call)

    async def delete_case(self, case_id: str) -> OperationResult[None]:
        """Delete a case after its tareas and asignaciones.

        The steps are sequential with no rollback: if the final delete fails
        the case survives without its tasks.
        """

        async def call() -> None:
            await self._require_case_worker(current_actor(self._store), case_id, "delete")
            await self._tasks.delete_by_case(case_id)
            try:
                await self._assignments.delete_by_case(case_id)
                await self._cases.delete(case_id)
            except Exception:
                logger.error(
                    "Tasks of caso %s were deleted but the caso delete failed; no rollback",
                    case_id,
                )
                raise

        return await self._mutate("delete_case", call)

    async def assign(
        self, case_id: str, usuario_id: str, rol_asignado: AssignmentRole | str
    ) -> OperationResult[Asignacion]:
        async def call() -> Asignacion:
            rol = _parse_estado(AssignmentRole, rol_asignado, "rol_asignado")
            actor = current_actor(self._store)
            self._require_staff(actor, "asignacion", "create")
            if not access_policy.is_admin(actor):
                await self._require_case_worker(actor, case_id, "assign")
            return await self._assignments.create(case_id, require_text(usuario_id, "usuario_id"), rol.value)

        return await self._mutate("assign", call)

    async def unassign(self, asignacion_id: str) -> OperationResult[None]:
        async def call() -> None:
            self._require_staff(current_actor(self._store), "asignacion", "delete")
            await self._assignments.delete(asignacion_id)

        return await self._mutate("unassign", call)

    # -- task mutations -----------------------------------------------------

    async def create_task(
        self,
        caso_id: str,
        asignado_a: str | None,
        titulo: str,
        descripcion: str | None = None,
    ) -> OperationResult[Tarea]:
        """Insert a task with estado 'pendiente' on a case the actor works on."""

        async def call() -> Tarea:
            await self._require_case_worker(current_actor(self._store), caso_id, "create_task")
            row: dict[str, Any] = {
                "caso_id": caso_id,
                "asignado_a": asignado_a or None,
                "titulo": require_text(titulo, "titulo"),
                "estado": TaskStatus.PENDIENTE.value,
            }
            if descripcion and descripcion.strip():
                row["descripcion"] = descripcion.strip()
            return await self._tasks.create(row)

        return await self._mutate("create_task", call)

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> OperationResult[Tarea]:
        async def call() -> Tarea:
            task = await self._get_task(task_id)
            await self._require_task_worker(current_actor(self._store), task, "update")
            row = {k: v for k, v in patch.items() if k in _TASK_PATCH_FIELDS}
            if "titulo" in row:
                row["titulo"] = require_text(row["titulo"], "titulo")
            if not row:
                raise ValidationException("Nothing to update")
            return await self._tasks.update(task_id, row)

        return await self._mutate("update_task", call)

    async def set_task_state(self, task_id: str, new_state: TaskStatus | str) -> OperationResult[Tarea]:
        """Overwrite estado; a completada task may go back to pendiente."""

        async def call() -> Tarea:
            estado = _parse_estado(TaskStatus, new_state)
            task = await self._get_task(task_id)
            await self._require_task_worker(current_actor(self._store), task, "set_state")
            return await self._tasks.update(task_id, {"estado": estado.value})

        return await self._mutate("set_task_state", call)

    async def delete_task(self, task_id: str) -> OperationResult[None]:
        async def call() -> None:
            task = await self._get_task(task_id)
            actor = current_actor(self._store)
            self._require_staff(actor, "tarea", "delete")
            await self._require_task_worker(actor, task, "delete")
            await self._tasks.delete(task_id)

        return await self._mutate("delete_task", call)
