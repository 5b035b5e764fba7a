"""Casos API: role-scoped case lists, case CRUD, estado and asignaciones.

Visibility and permissions are decided by CaseTaskQueryEngine; a failed
OperationResult is re-raised by unwrap() and mapped to a status by the
exception handlers.
"""

from fastapi import APIRouter, Request

from legality.api.v1.dependencies import CurrentProfile, PortalDep, unwrap
from legality.core.limiter import limit_writes
from legality.schemas.caso import (
    AsignacionCreate,
    AsignacionResponse,
    CasoCreate,
    CasoDetailResponse,
    CasoResponse,
    CasoUpdate,
    EstadoUpdate,
)
from legality.schemas.tarea import TareaResponse

router = APIRouter()


@router.get("", response_model=list[CasoDetailResponse])
async def list_my_cases(profile: CurrentProfile, portal: PortalDep):
    """Cases visible to the caller: own (cliente), assigned (analista/abogado) or all (admin)."""
    details = unwrap(await portal.cases.cases_visible_to(profile))
    return [CasoDetailResponse.from_dto(d) for d in details]


@router.get("/all", response_model=list[CasoDetailResponse])
async def list_all_cases(profile: CurrentProfile, portal: PortalDep):
    """Every case with task counts (admin only)."""
    details = unwrap(await portal.cases.all_cases_with_details())
    return [CasoDetailResponse.from_dto(d) for d in details]


@router.get("/cliente/{cliente_id}", response_model=list[CasoDetailResponse])
async def list_cases_by_cliente(cliente_id: str, profile: CurrentProfile, portal: PortalDep):
    details = unwrap(await portal.cases.cases_by_cliente(cliente_id))
    return [CasoDetailResponse.from_dto(d) for d in details]


@router.get("/{caso_id}", response_model=CasoDetailResponse)
async def get_case(caso_id: str, profile: CurrentProfile, portal: PortalDep):
    return CasoDetailResponse.from_dto(unwrap(await portal.cases.case_by_id(caso_id)))


@router.get("/{caso_id}/tareas", response_model=list[TareaResponse])
async def list_case_tasks(caso_id: str, profile: CurrentProfile, portal: PortalDep):
    tareas = unwrap(await portal.cases.tasks_by_case(caso_id))
    return [TareaResponse.model_validate(t) for t in tareas]


@router.post("", response_model=CasoResponse, status_code=201)
@limit_writes
async def create_case(
    request: Request,
    body: CasoCreate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Create a case in estado 'activo' (staff only)."""
    caso = unwrap(
        await portal.cases.create_case(
            body.empresa_id,
            body.cliente_id,
            body.titulo,
            body.budget.to_dto() if body.budget else None,
        )
    )
    return CasoResponse.model_validate(caso)


@router.patch("/{caso_id}", response_model=CasoResponse)
@limit_writes
async def update_case(
    request: Request,
    caso_id: str,
    body: CasoUpdate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    caso = unwrap(await portal.cases.update_case(caso_id, body.to_patch()))
    return CasoResponse.model_validate(caso)


@router.put("/{caso_id}/estado", response_model=CasoResponse)
@limit_writes
async def set_case_state(
    request: Request,
    caso_id: str,
    body: EstadoUpdate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Overwrite estado; activo and cerrado may follow each other freely."""
    caso = unwrap(await portal.cases.set_case_state(caso_id, body.estado))
    return CasoResponse.model_validate(caso)


@router.delete("/{caso_id}", status_code=204)
@limit_writes
async def delete_case(
    request: Request,
    caso_id: str,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Delete the case together with its tareas and asignaciones."""
    unwrap(await portal.cases.delete_case(caso_id))


@router.post("/{caso_id}/asignaciones", response_model=AsignacionResponse, status_code=201)
@limit_writes
async def assign_to_case(
    request: Request,
    caso_id: str,
    body: AsignacionCreate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    asignacion = unwrap(await portal.cases.assign(caso_id, body.usuario_id, body.rol_asignado))
    return AsignacionResponse.model_validate(asignacion)


@router.delete("/asignaciones/{asignacion_id}", status_code=204)
@limit_writes
async def unassign(
    request: Request,
    asignacion_id: str,
    profile: CurrentProfile,
    portal: PortalDep,
):
    unwrap(await portal.cases.unassign(asignacion_id))
