"""DTOs for companies, cases and assignments (no dependency on the store client)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from legality.application.dtos.profile import Profile
from legality.domain.enums import AssignmentRole, CaseStatus


@dataclass(frozen=True)
class Empresa:
    """Company referenced by cases."""

    id: str
    nombre: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class CaseBudget:
    """Optional hour budget and fees agreed when a case is opened."""

    horas_abogado: float | None = None
    horas_analista: float | None = None
    tarifa_abogado: float | None = None
    tarifa_analista: float | None = None
    bono_exito: float | None = None

    def to_row(self) -> dict[str, Any]:
        """Columns to write; unset values are omitted."""
        return {
            key: value
            for key, value in (
                ("horas_abogado", self.horas_abogado),
                ("horas_analista", self.horas_analista),
                ("tarifa_abogado", self.tarifa_abogado),
                ("tarifa_analista", self.tarifa_analista),
                ("bono_exito", self.bono_exito),
            )
            if value is not None
        }

    def is_empty(self) -> bool:
        return not self.to_row()


@dataclass(frozen=True)
class Caso:
    """Legal case linked to a company and a client profile."""

    id: str
    empresa_id: str
    cliente_id: str | None
    titulo: str
    estado: CaseStatus
    created_at: datetime | None = None
    budget: CaseBudget | None = None


@dataclass(frozen=True)
class Asignacion:
    """Grants a professional visibility and work rights over a case."""

    id: str
    caso_id: str
    usuario_id: str
    rol_asignado: AssignmentRole
    created_at: datetime | None = None
    usuario: Profile | None = None


@dataclass(frozen=True)
class CasoDetail:
    """Case enriched with its company, client profile, assignments and task counts."""

    caso: Caso
    empresa: Empresa | None = None
    cliente: Profile | None = None
    asignaciones: list[Asignacion] = field(default_factory=list)
    tareas_count: int = 0
    tareas_pendientes: int = 0

    @property
    def id(self) -> str:
        return self.caso.id

    def is_assigned_to(self, user_id: str) -> bool:
        return any(a.usuario_id == user_id for a in self.asignaciones)
