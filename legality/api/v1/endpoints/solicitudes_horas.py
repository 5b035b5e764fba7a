"""Extra-hours requests API.

Professionals file requests on cases they are assigned to; the owning
cliente (or an admin) approves or rejects them while they are pending.
"""

from fastapi import APIRouter, Request

from legality.api.v1.dependencies import CurrentProfile, PortalDep, unwrap
from legality.core.limiter import limit_writes
from legality.schemas.hours_request import HoursRequestCreate, HoursRequestResponse

router = APIRouter()


@router.post("", response_model=HoursRequestResponse, status_code=201)
@limit_writes
async def request_hours(
    request: Request,
    body: HoursRequestCreate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    solicitud = unwrap(
        await portal.hours.request_hours(body.caso_id, body.horas_abogado, body.horas_analista)
    )
    return HoursRequestResponse.model_validate(solicitud)


@router.get("", response_model=list[HoursRequestResponse])
async def list_requests(
    profile: CurrentProfile,
    portal: PortalDep,
    cliente_id: str | None = None,
):
    """Requests on the caller's cases (admins may pass cliente_id)."""
    solicitudes = unwrap(await portal.hours.requests_for_cliente(cliente_id))
    return [HoursRequestResponse.model_validate(s) for s in solicitudes]


@router.post("/{solicitud_id}/aprobar", response_model=HoursRequestResponse)
@limit_writes
async def approve_request(
    request: Request,
    solicitud_id: str,
    profile: CurrentProfile,
    portal: PortalDep,
):
    return HoursRequestResponse.model_validate(unwrap(await portal.hours.approve(solicitud_id)))


@router.post("/{solicitud_id}/rechazar", response_model=HoursRequestResponse)
@limit_writes
async def reject_request(
    request: Request,
    solicitud_id: str,
    profile: CurrentProfile,
    portal: PortalDep,
):
    return HoursRequestResponse.model_validate(unwrap(await portal.hours.reject(solicitud_id)))
