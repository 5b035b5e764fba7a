"""DTOs for analytics/dashboard (no dependency on the store client)."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class DashboardStats:
    """Dashboard counters. Every field is always present; failed counts read 0."""

    total_usuarios: int = 0
    usuarios_pendientes: int = 0
    total_empresas: int = 0
    total_casos: int = 0
    casos_activos: int = 0
    total_tareas: int = 0
    tareas_pendientes: int = 0
    mis_tareas_pendientes: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)
