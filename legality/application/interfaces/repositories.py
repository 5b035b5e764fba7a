"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
Implementations raise domain exceptions (StoreUnavailableException,
StoreRequestException, ProfileNotFoundException); use cases decide whether
to convert them to failure results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from legality.domain.enums import CaseStatus, HoursRequestStatus, ProfileRole, TaskStatus

if TYPE_CHECKING:
    from legality.application.dtos.caso import Asignacion, Caso, CasoDetail, Empresa
    from legality.application.dtos.hours_request import HoursRequest
    from legality.application.dtos.profile import Profile
    from legality.application.dtos.tarea import Tarea


# Profile repository interface
class IProfileRepository(Protocol):
    """Protocol for the profiles table."""

    async def get_by_id(self, user_id: str) -> Profile:
        """Return the profile keyed by the identity id.

        Raises ProfileNotFoundException when the store reports no rows.
        """

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile row; fails on a duplicate id."""

    async def list_all(self) -> list[Profile]:
        """Return every profile, newest first."""

    async def list_by_role(self, role: ProfileRole) -> list[Profile]:
        """Return profiles holding role, newest first."""

    async def update(self, user_id: str, patch: dict[str, Any]) -> Profile:
        """Apply patch and return the updated profile."""

    async def count(self, role: ProfileRole | None = None) -> int:
        """Exact row count, optionally filtered by role."""


# Empresa repository interface
class IEmpresaRepository(Protocol):
    """Protocol for the empresas table."""

    async def list_all(self) -> list[Empresa]:
        """Return every empresa ordered by nombre."""

    async def create(self, nombre: str) -> Empresa: ...

    async def update(self, empresa_id: str, patch: dict[str, Any]) -> Empresa: ...

    async def delete(self, empresa_id: str) -> None: ...

    async def count(self) -> int: ...


# Caso repository interface
class ICaseRepository(Protocol):
    """Protocol for the casos table (joined reads include empresa, cliente, asignaciones)."""

    async def list_with_details(
        self,
        *,
        ids: list[str] | None = None,
        cliente_id: str | None = None,
    ) -> list[CasoDetail]:
        """Return detailed cases, newest first, optionally filtered by id set or cliente."""

    async def get_with_details(self, case_id: str) -> CasoDetail | None: ...

    async def get_by_id(self, case_id: str) -> Caso | None: ...

    async def ids_for_cliente(self, cliente_id: str) -> list[str]: ...

    async def create(self, row: dict[str, Any]) -> Caso: ...

    async def update(self, case_id: str, patch: dict[str, Any]) -> Caso: ...

    async def delete(self, case_id: str) -> None: ...

    async def count(self, estado: CaseStatus | None = None) -> int: ...


# Asignacion repository interface
class IAssignmentRepository(Protocol):
    """Protocol for the asignaciones join table."""

    async def case_ids_for_user(self, usuario_id: str) -> list[str]:
        """Return ids of cases the user is assigned to (empty list when none)."""

    async def create(self, caso_id: str, usuario_id: str, rol_asignado: str) -> Asignacion: ...

    async def delete(self, asignacion_id: str) -> None: ...

    async def delete_by_case(self, caso_id: str) -> None: ...


# Tarea repository interface
class ITaskRepository(Protocol):
    """Protocol for the tareas table."""

    async def list_by_assignee(self, usuario_id: str) -> list[Tarea]:
        """Return tasks assigned to the user, with the parent case title."""

    async def list_by_case(self, caso_id: str) -> list[Tarea]: ...

    async def list_all(self) -> list[Tarea]: ...

    async def get_by_id(self, task_id: str) -> Tarea | None: ...

    async def create(self, row: dict[str, Any]) -> Tarea: ...

    async def update(self, task_id: str, patch: dict[str, Any]) -> Tarea: ...

    async def delete(self, task_id: str) -> None: ...

    async def delete_by_case(self, caso_id: str) -> None: ...

    async def count(
        self,
        estado: TaskStatus | None = None,
        asignado_a: str | None = None,
    ) -> int: ...


# Hours request repository interface
class IHoursRequestRepository(Protocol):
    """Protocol for the solicitudes_horas table."""

    async def create(self, row: dict[str, Any]) -> HoursRequest: ...

    async def get_by_id(self, request_id: str) -> HoursRequest | None: ...

    async def list_by_case_ids(self, caso_ids: list[str]) -> list[HoursRequest]: ...

    async def update_estado(
        self, request_id: str, estado: HoursRequestStatus
    ) -> HoursRequest: ...
