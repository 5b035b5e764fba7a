"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from legality.api.v1.dependencies (no manual client or
use case construction).
"""

from fastapi import APIRouter

from legality.api.v1.endpoints import (
    admin,
    auth,
    casos,
    dashboard,
    health,
    solicitudes_horas,
    tareas,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(casos.router, prefix="/casos", tags=["casos"])
api_router.include_router(tareas.router, prefix="/tareas", tags=["tareas"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(
    solicitudes_horas.router, prefix="/solicitudes-horas", tags=["solicitudes-horas"]
)
