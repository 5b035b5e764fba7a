"""DTOs for extra-hours requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from legality.domain.enums import HoursRequestStatus


@dataclass(frozen=True)
class HoursRequest:
    """A professional's request for more budgeted hours on a case, approved by the client."""

    id: str
    caso_id: str
    solicitante_id: str
    horas_abogado: float
    horas_analista: float
    estado: HoursRequestStatus
    created_at: datetime | None = None
    caso_titulo: str | None = None
