"""DTOs for tasks (no dependency on the store client)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from legality.domain.enums import TaskStatus


@dataclass(frozen=True)
class Tarea:
    """Task on a case. caso_titulo is filled when the parent case is joined."""

    id: str
    caso_id: str
    asignado_a: str | None
    titulo: str
    estado: TaskStatus
    descripcion: str | None = None
    created_at: datetime | None = None
    caso_titulo: str | None = None
