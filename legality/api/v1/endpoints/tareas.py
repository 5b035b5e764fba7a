"""Tareas API: the caller's tasks, all tasks (admin) and task mutations."""

from fastapi import APIRouter, Request

from legality.api.v1.dependencies import CurrentProfile, PortalDep, unwrap
from legality.core.limiter import limit_writes
from legality.schemas.caso import EstadoUpdate
from legality.schemas.tarea import TareaCreate, TareaResponse, TareaUpdate

router = APIRouter()


@router.get("", response_model=list[TareaResponse])
async def list_my_tasks(profile: CurrentProfile, portal: PortalDep):
    """Tasks assigned to the caller, each with its case title."""
    tareas = unwrap(await portal.cases.tasks_assigned_to(profile.id))
    return [TareaResponse.model_validate(t) for t in tareas]


@router.get("/all", response_model=list[TareaResponse])
async def list_all_tasks(profile: CurrentProfile, portal: PortalDep):
    tareas = unwrap(await portal.cases.all_tasks())
    return [TareaResponse.model_validate(t) for t in tareas]


@router.post("", response_model=TareaResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TareaCreate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Create a task in estado 'pendiente' on a case the caller works on."""
    tarea = unwrap(
        await portal.cases.create_task(body.caso_id, body.asignado_a, body.titulo, body.descripcion)
    )
    return TareaResponse.model_validate(tarea)


@router.patch("/{tarea_id}", response_model=TareaResponse)
@limit_writes
async def update_task(
    request: Request,
    tarea_id: str,
    body: TareaUpdate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    tarea = unwrap(
        await portal.cases.update_task(tarea_id, body.model_dump(exclude_unset=True))
    )
    return TareaResponse.model_validate(tarea)


@router.put("/{tarea_id}/estado", response_model=TareaResponse)
@limit_writes
async def set_task_state(
    request: Request,
    tarea_id: str,
    body: EstadoUpdate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Overwrite estado; completada may be reverted to pendiente."""
    tarea = unwrap(await portal.cases.set_task_state(tarea_id, body.estado))
    return TareaResponse.model_validate(tarea)


@router.delete("/{tarea_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    tarea_id: str,
    profile: CurrentProfile,
    portal: PortalDep,
):
    unwrap(await portal.cases.delete_task(tarea_id))
