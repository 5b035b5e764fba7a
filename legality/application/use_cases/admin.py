"""Admin directory: profile roles and empresas.

Role changes are not pushed to the affected user's open session; they take
effect on that user's next profile resolution.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from legality.application.dtos.caso import Empresa
from legality.application.dtos.profile import Profile, ProfileTaskLoad
from legality.application.dtos.result import OperationResult
from legality.application.interfaces.repositories import (
    IEmpresaRepository,
    IProfileRepository,
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
from legality.domain.enums import ProfileRole, TaskStatus
from legality.domain.exceptions import (
    AuthorizationException,
    LegalityException,
    ValidationException,
)

logger = logging.getLogger(__name__)

_OWN_PROFILE_FIELDS = frozenset({"full_name"})


def parse_assignable_role(value: Any) -> ProfileRole:
    """Strict role parsing for writes: unknown or blank values are rejected."""
    if isinstance(value, ProfileRole):
        role = value
    else:
        try:
            role = ProfileRole(str(value).strip().lower())
        except ValueError:
            role = ProfileRole.UNKNOWN
    if role not in ProfileRole.assignable():
        raise ValidationException(
            f"Invalid role {value!r}; expected one of {[r.value for r in ProfileRole.assignable()]}",
            field="role",
        )
    return role


class AdminDirectory(ChangeNotifier):
    """Profile and empresa management.

    Role and empresa writes notify listeners so cached dashboard counters
    are recomputed.
    """

    def __init__(
        self,
        store: SessionStore,
        profiles: IProfileRepository,
        empresas: IEmpresaRepository,
        tasks: ITaskRepository,
    ) -> None:
        super().__init__()
        self._store = store
        self._profiles = profiles
        self._empresas = empresas
        self._tasks = tasks

    def _require_admin(self, resource: str, action: str) -> Profile:
        actor = current_actor(self._store)
        if not access_policy.is_admin(actor):
            raise AuthorizationException(resource, action)
        return actor

    def _require_staff(self, resource: str, action: str) -> Profile:
        actor = current_actor(self._store)
        if not access_policy.is_professional(actor):
            raise AuthorizationException(resource, action)
        return actor

    # -- profiles -----------------------------------------------------------

    async def all_profiles(self) -> OperationResult[list[Profile]]:
        async def call() -> list[Profile]:
            self._require_staff("profile", "list")
            return await self._profiles.list_all()

        return await run_operation("all_profiles", call)

    async def pending_profiles(self) -> OperationResult[list[Profile]]:
        async def call() -> list[Profile]:
            self._require_admin("profile", "list_pending")
            return await self._profiles.list_by_role(ProfileRole.PENDING)

        return await run_operation("pending_profiles", call)

    async def _pending_for(self, profile: Profile) -> int:
        try:
            return await self._tasks.count(estado=TaskStatus.PENDIENTE, asignado_a=profile.id)
        except LegalityException:
            logger.warning("Pending task count for %s failed; reporting 0", profile.id)
            return 0

    async def profiles_with_task_counts(self) -> OperationResult[list[ProfileTaskLoad]]:
        """Every profile with its number of pending tasks."""

        async def call() -> list[ProfileTaskLoad]:
            self._require_admin("profile", "list")
            profiles = await self._profiles.list_all()
            counts = await asyncio.gather(*(self._pending_for(p) for p in profiles))
            return [ProfileTaskLoad(profile=p, tareas_pendientes=n) for p, n in zip(profiles, counts)]

        return await run_operation("profiles_with_task_counts", call)

    async def profile_by_id(self, user_id: str) -> OperationResult[Profile]:
        async def call() -> Profile:
            actor = current_actor(self._store)
            if actor.id != user_id and not access_policy.is_professional(actor):
                raise AuthorizationException("profile", "read")
            return await self._profiles.get_by_id(user_id)

        return await run_operation("profile_by_id", call)

    async def update_role(self, user_id: str, role: ProfileRole | str) -> OperationResult[Profile]:
        async def call() -> Profile:
            new_role = parse_assignable_role(role)
            actor = self._require_admin("profile", "update_role")
            updated = await self._profiles.update(user_id, {"role": new_role.value})
            logger.info("Admin %s set role of %s to %s", actor.id, user_id, new_role.value)
            return updated

        return await self._mutate("update_role", call)

    async def update_own_profile(self, patch: dict[str, Any]) -> OperationResult[Profile]:
        """Update the signed-in user's non-role fields."""

        async def call() -> Profile:
            actor = current_actor(self._store)
            if "role" in patch:
                raise ValidationException("Role can only be changed by an admin", field="role")
            row = {k: v for k, v in patch.items() if k in _OWN_PROFILE_FIELDS}
            if not row:
                raise ValidationException("Nothing to update")
            row["full_name"] = require_text(row.get("full_name"), "full_name")
            updated = await self._profiles.update(actor.id, row)
            self._store.set_profile(updated)
            return updated

        return await run_operation("update_own_profile", call)

    # -- empresas -----------------------------------------------------------

    async def all_empresas(self) -> OperationResult[list[Empresa]]:
        async def call() -> list[Empresa]:
            self._require_staff("empresa", "list")
            return await self._empresas.list_all()

        return await run_operation("all_empresas", call)

    async def create_empresa(self, nombre: str) -> OperationResult[Empresa]:
        async def call() -> Empresa:
            self._require_admin("empresa", "create")
            return await self._empresas.create(require_text(nombre, "nombre"))

        return await self._mutate("create_empresa", call)

    async def update_empresa(self, empresa_id: str, nombre: str) -> OperationResult[Empresa]:
        async def call() -> Empresa:
            self._require_admin("empresa", "update")
            return await self._empresas.update(empresa_id, {"nombre": require_text(nombre, "nombre")})

        return await self._mutate("update_empresa", call)

    async def delete_empresa(self, empresa_id: str) -> OperationResult[None]:
        async def call() -> None:
            self._require_admin("empresa", "delete")
            await self._empresas.delete(empresa_id)

        return await self._mutate("delete_empresa", call)
