"""Row to DTO mapping for the Supabase repositories."""

from __future__ import annotations

from typing import Any

from legality.application.dtos.caso import Asignacion, CaseBudget, Caso, CasoDetail, Empresa
from legality.application.dtos.hours_request import HoursRequest
from legality.application.dtos.profile import Profile
from legality.application.dtos.tarea import Tarea
from legality.domain.enums import (
    AssignmentRole,
    CaseStatus,
    HoursRequestStatus,
    ProfileRole,
    TaskStatus,
)
from legality.shared.utils.datetime import parse_timestamp

_BUDGET_FIELDS = ("horas_abogado", "horas_analista", "tarifa_abogado", "tarifa_analista", "bono_exito")


def _as_float(value: Any) -> float | None:
    return float(value) if value is not None and value != "" else None


def profile_from_row(row: dict[str, Any]) -> Profile:
    return Profile(
        id=str(row["id"]),
        email=row.get("email") or "",
        full_name=row.get("full_name") or "",
        role=ProfileRole.parse(row.get("role")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def profile_to_row(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "email": profile.email,
        "full_name": profile.full_name,
        "role": profile.role.value,
    }


def empresa_from_row(row: dict[str, Any]) -> Empresa:
    return Empresa(
        id=str(row["id"]),
        nombre=row.get("nombre") or "",
        created_at=parse_timestamp(row.get("created_at")),
    )


def budget_from_row(row: dict[str, Any]) -> CaseBudget | None:
    values = {name: _as_float(row.get(name)) for name in _BUDGET_FIELDS}
    if all(v is None for v in values.values()):
        return None
    return CaseBudget(**values)


def caso_from_row(row: dict[str, Any]) -> Caso:
    return Caso(
        id=str(row["id"]),
        empresa_id=str(row.get("empresa_id") or ""),
        cliente_id=row.get("cliente_id"),
        titulo=row.get("titulo") or "",
        estado=CaseStatus.parse(row.get("estado") or CaseStatus.ACTIVO),
        created_at=parse_timestamp(row.get("created_at")),
        budget=budget_from_row(row),
    )


def asignacion_from_row(row: dict[str, Any]) -> Asignacion:
    usuario = row.get("usuario")
    return Asignacion(
        id=str(row["id"]),
        caso_id=str(row.get("caso_id") or ""),
        usuario_id=str(row.get("usuario_id") or (usuario or {}).get("id") or ""),
        rol_asignado=AssignmentRole.parse(row.get("rol_asignado") or AssignmentRole.ANALISTA),
        created_at=parse_timestamp(row.get("created_at")),
        usuario=profile_from_row(usuario) if usuario else None,
    )


def caso_detail_from_row(row: dict[str, Any]) -> CasoDetail:
    """Map a casos row selected with CASO_DETAIL_SELECT."""
    tareas = row.get("tareas") or []
    empresa = row.get("empresa")
    cliente = row.get("cliente")
    return CasoDetail(
        caso=caso_from_row(row),
        empresa=empresa_from_row(empresa) if empresa else None,
        cliente=profile_from_row(cliente) if cliente else None,
        asignaciones=[asignacion_from_row(a) for a in row.get("asignaciones") or []],
        tareas_count=len(tareas),
        tareas_pendientes=sum(1 for t in tareas if t.get("estado") == TaskStatus.PENDIENTE.value),
    )


def tarea_from_row(row: dict[str, Any]) -> Tarea:
    caso = row.get("caso") or {}
    return Tarea(
        id=str(row["id"]),
        caso_id=str(row.get("caso_id") or ""),
        asignado_a=row.get("asignado_a"),
        titulo=row.get("titulo") or "",
        descripcion=row.get("descripcion"),
        estado=TaskStatus.parse(row.get("estado") or TaskStatus.PENDIENTE),
        created_at=parse_timestamp(row.get("created_at")),
        caso_titulo=caso.get("titulo"),
    )


def hours_request_from_row(row: dict[str, Any]) -> HoursRequest:
    caso = row.get("caso") or {}
    return HoursRequest(
        id=str(row["id"]),
        caso_id=str(row.get("caso_id") or ""),
        solicitante_id=str(row.get("solicitante_id") or ""),
        horas_abogado=_as_float(row.get("horas_abogado")) or 0.0,
        horas_analista=_as_float(row.get("horas_analista")) or 0.0,
        estado=HoursRequestStatus.parse(row.get("estado") or HoursRequestStatus.PENDIENTE),
        created_at=parse_timestamp(row.get("created_at")),
        caso_titulo=caso.get("titulo"),
    )
