"""Caso, empresa and asignacion API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from legality.application.dtos.caso import CaseBudget, CasoDetail
from legality.domain.enums import AssignmentRole, CaseStatus
from legality.schemas.profile import ProfileResponse


class EmpresaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    nombre: str
    created_at: datetime | None = None


class EmpresaWrite(BaseModel):
    """Request body for creating or renaming an empresa."""

    nombre: str = Field(..., min_length=1, max_length=200)


class CaseBudgetSchema(BaseModel):
    """Optional hour budget and fees; all values optional and non-negative."""

    model_config = ConfigDict(from_attributes=True)

    horas_abogado: float | None = Field(default=None, ge=0)
    horas_analista: float | None = Field(default=None, ge=0)
    tarifa_abogado: float | None = Field(default=None, ge=0)
    tarifa_analista: float | None = Field(default=None, ge=0)
    bono_exito: float | None = Field(default=None, ge=0)

    def to_dto(self) -> CaseBudget:
        return CaseBudget(**self.model_dump())


class CasoCreate(BaseModel):
    empresa_id: str = Field(..., min_length=1)
    cliente_id: str = Field(..., min_length=1)
    titulo: str = Field(..., min_length=1, max_length=300)
    budget: CaseBudgetSchema | None = None


class CasoUpdate(BaseModel):
    """Partial update; estado changes go through the estado endpoint."""

    titulo: str | None = Field(default=None, min_length=1, max_length=300)
    empresa_id: str | None = None
    cliente_id: str | None = None
    budget: CaseBudgetSchema | None = None

    def to_patch(self) -> dict:
        patch = self.model_dump(exclude_none=True, exclude={"budget"})
        if self.budget is not None:
            patch["budget"] = self.budget.to_dto()
        return patch


class EstadoUpdate(BaseModel):
    """New estado; checked against the enum by the use case so bad values read as 400."""

    estado: str = Field(..., min_length=1)


class AsignacionCreate(BaseModel):
    usuario_id: str = Field(..., min_length=1)
    rol_asignado: str = Field(..., min_length=1)


class AsignacionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    caso_id: str
    usuario_id: str
    rol_asignado: AssignmentRole
    created_at: datetime | None = None
    usuario: ProfileResponse | None = None


class CasoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    empresa_id: str
    cliente_id: str | None = None
    titulo: str
    estado: CaseStatus
    created_at: datetime | None = None
    budget: CaseBudgetSchema | None = None


class CasoDetailResponse(CasoResponse):
    """Case with empresa, cliente, asignaciones and task counts."""

    empresa: EmpresaResponse | None = None
    cliente: ProfileResponse | None = None
    asignaciones: list[AsignacionResponse] = Field(default_factory=list)
    tareas_count: int = 0
    tareas_pendientes: int = 0

    @classmethod
    def from_dto(cls, detail: CasoDetail) -> "CasoDetailResponse":
        caso = detail.caso
        return cls(
            id=caso.id,
            empresa_id=caso.empresa_id,
            cliente_id=caso.cliente_id,
            titulo=caso.titulo,
            estado=caso.estado,
            created_at=caso.created_at,
            budget=CaseBudgetSchema.model_validate(caso.budget) if caso.budget else None,
            empresa=EmpresaResponse.model_validate(detail.empresa) if detail.empresa else None,
            cliente=ProfileResponse.model_validate(detail.cliente) if detail.cliente else None,
            asignaciones=[AsignacionResponse.model_validate(a) for a in detail.asignaciones],
            tareas_count=detail.tareas_count,
            tareas_pendientes=detail.tareas_pendientes,
        )
