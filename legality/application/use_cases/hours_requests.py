"""Extra-hours requests: professionals ask, the case's cliente approves or rejects."""

from __future__ import annotations

import logging

from legality.application.dtos.hours_request import HoursRequest
from legality.application.dtos.result import OperationResult
from legality.application.interfaces.repositories import (
    IAssignmentRepository,
    ICaseRepository,
    IHoursRequestRepository,
)
from legality.application.services.session_store import SessionStore
from legality.application.use_cases._common import current_actor, require_text, run_operation
from legality.domain import access_policy
from legality.domain.enums import HoursRequestStatus
from legality.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class HoursRequestService:
    def __init__(
        self,
        store: SessionStore,
        requests: IHoursRequestRepository,
        cases: ICaseRepository,
        assignments: IAssignmentRepository,
    ) -> None:
        self._store = store
        self._requests = requests
        self._cases = cases
        self._assignments = assignments

    async def request_hours(
        self,
        caso_id: str,
        horas_abogado: float = 0,
        horas_analista: float = 0,
    ) -> OperationResult[HoursRequest]:
        """File a pending request; at least one quantity must be positive."""

        async def call() -> HoursRequest:
            actor = current_actor(self._store)
            if not access_policy.can_access_professional_panel(actor):
                raise AuthorizationException("solicitud_horas", "create")
            caso_id_ = require_text(caso_id, "caso_id")
            if horas_abogado < 0 or horas_analista < 0:
                raise ValidationException("Hours cannot be negative", field="horas")
            if horas_abogado <= 0 and horas_analista <= 0:
                raise ValidationException(
                    "Debes especificar al menos una cantidad de horas.", field="horas"
                )
            if caso_id_ not in await self._assignments.case_ids_for_user(actor.id):
                raise AuthorizationException("solicitud_horas", "create")
            return await self._requests.create(
                {
                    "caso_id": caso_id_,
                    "solicitante_id": actor.id,
                    "horas_abogado": horas_abogado,
                    "horas_analista": horas_analista,
                    "estado": HoursRequestStatus.PENDIENTE.value,
                }
            )

        return await run_operation("request_hours", call)

    async def requests_for_cliente(
        self, cliente_id: str | None = None
    ) -> OperationResult[list[HoursRequest]]:
        """Requests on every case owned by the cliente (default: the signed-in one)."""

        async def call() -> list[HoursRequest]:
            actor = current_actor(self._store)
            target = cliente_id or actor.id
            if target != actor.id and not access_policy.is_admin(actor):
                raise AuthorizationException("solicitud_horas", "list")
            ids = await self._cases.ids_for_cliente(target)
            return await self._requests.list_by_case_ids(ids)

        return await run_operation("requests_for_cliente", call)

    async def _decide(self, request_id: str, estado: HoursRequestStatus) -> HoursRequest:
        actor = current_actor(self._store)
        request = await self._requests.get_by_id(request_id)
        if request is None:
            raise ResourceNotFoundException("solicitud_horas", request_id)
        if not access_policy.is_admin(actor):
            caso = await self._cases.get_by_id(request.caso_id)
            if caso is None or caso.cliente_id != actor.id:
                raise AuthorizationException("solicitud_horas", "decide")
        if request.estado is not HoursRequestStatus.PENDIENTE:
            raise ValidationException(
                f"Request already {request.estado.value}", field="estado"
            )
        updated = await self._requests.update_estado(request_id, estado)
        logger.info("Hours request %s %s by %s", request_id, estado.value, actor.id)
        return updated

    async def approve(self, request_id: str) -> OperationResult[HoursRequest]:
        return await run_operation(
            "approve_hours", lambda: self._decide(request_id, HoursRequestStatus.APROBADO)
        )

    async def reject(self, request_id: str) -> OperationResult[HoursRequest]:
        return await run_operation(
            "reject_hours", lambda: self._decide(request_id, HoursRequestStatus.RECHAZADO)
        )
