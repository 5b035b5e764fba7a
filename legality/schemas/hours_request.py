"""Extra-hours request API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from legality.domain.enums import HoursRequestStatus


class HoursRequestCreate(BaseModel):
    caso_id: str = Field(..., min_length=1)
    horas_abogado: float = Field(default=0, ge=0)
    horas_analista: float = Field(default=0, ge=0)


class HoursRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    caso_id: str
    solicitante_id: str
    horas_abogado: float
    horas_analista: float
    estado: HoursRequestStatus
    created_at: datetime | None = None
    caso_titulo: str | None = None
