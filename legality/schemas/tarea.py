"""Tarea API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from legality.domain.enums import TaskStatus


class TareaCreate(BaseModel):
    caso_id: str = Field(..., min_length=1)
    asignado_a: str | None = None
    titulo: str = Field(..., min_length=1, max_length=300)
    descripcion: str | None = Field(default=None, max_length=5000)


class TareaUpdate(BaseModel):
    """Partial update of non-estado fields."""

    titulo: str | None = Field(default=None, min_length=1, max_length=300)
    descripcion: str | None = Field(default=None, max_length=5000)
    asignado_a: str | None = None


class TareaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    caso_id: str
    asignado_a: str | None = None
    titulo: str
    descripcion: str | None = None
    estado: TaskStatus
    created_at: datetime | None = None
    caso_titulo: str | None = None
