"""Analytics/dashboard API schemas."""

from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    """Dashboard counters; a counter whose query failed reads 0."""

    total_usuarios: int
    usuarios_pendientes: int
    total_empresas: int
    total_casos: int
    casos_activos: int
    total_tareas: int
    tareas_pendientes: int
    mis_tareas_pendientes: int
