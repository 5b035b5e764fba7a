"""Admin API: user directory, role approval and empresas.

Permission checks live in AdminDirectory; read lists of profiles and
empresas are open to staff, every mutation is admin only.
"""

from fastapi import APIRouter, Request

from legality.api.v1.dependencies import CurrentProfile, PortalDep, unwrap
from legality.core.limiter import limit_writes
from legality.schemas.caso import EmpresaResponse, EmpresaWrite
from legality.schemas.profile import ProfileResponse, ProfileTaskLoadResponse, RoleUpdate

router = APIRouter()


@router.get("/profiles", response_model=list[ProfileTaskLoadResponse])
async def list_profiles(profile: CurrentProfile, portal: PortalDep):
    """Every profile with its count of pending tasks."""
    loads = unwrap(await portal.admin.profiles_with_task_counts())
    return [
        ProfileTaskLoadResponse(
            profile=ProfileResponse.model_validate(load.profile),
            tareas_pendientes=load.tareas_pendientes,
        )
        for load in loads
    ]


@router.get("/profiles/pending", response_model=list[ProfileResponse])
async def list_pending_profiles(profile: CurrentProfile, portal: PortalDep):
    """Profiles waiting for an admin to assign a role."""
    return [ProfileResponse.model_validate(p) for p in unwrap(await portal.admin.pending_profiles())]


@router.get("/profiles/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: str, profile: CurrentProfile, portal: PortalDep):
    return ProfileResponse.model_validate(unwrap(await portal.admin.profile_by_id(user_id)))


@router.put("/profiles/{user_id}/role", response_model=ProfileResponse)
@limit_writes
async def update_profile_role(
    request: Request,
    user_id: str,
    body: RoleUpdate,
    profile: CurrentProfile,
    portal: PortalDep,
):
    """Assign a role (admin, analista, abogado, cliente or pending) to a user."""
    updated = unwrap(await portal.admin.update_role(user_id, body.role))
    return ProfileResponse.model_validate(updated)


@router.get("/empresas", response_model=list[EmpresaResponse])
async def list_empresas(profile: CurrentProfile, portal: PortalDep):
    return [EmpresaResponse.model_validate(e) for e in unwrap(await portal.admin.all_empresas())]


@router.post("/empresas", response_model=EmpresaResponse, status_code=201)
@limit_writes
async def create_empresa(
    request: Request,
    body: EmpresaWrite,
    profile: CurrentProfile,
    portal: PortalDep,
):
    return EmpresaResponse.model_validate(unwrap(await portal.admin.create_empresa(body.nombre)))


@router.put("/empresas/{empresa_id}", response_model=EmpresaResponse)
@limit_writes
async def update_empresa(
    request: Request,
    empresa_id: str,
    body: EmpresaWrite,
    profile: CurrentProfile,
    portal: PortalDep,
):
    empresa = unwrap(await portal.admin.update_empresa(empresa_id, body.nombre))
    return EmpresaResponse.model_validate(empresa)


@router.delete("/empresas/{empresa_id}", status_code=204)
@limit_writes
async def delete_empresa(
    request: Request,
    empresa_id: str,
    profile: CurrentProfile,
    portal: PortalDep,
):
    unwrap(await portal.admin.delete_empresa(empresa_id))
