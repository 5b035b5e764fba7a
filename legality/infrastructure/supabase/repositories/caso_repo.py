"""Supabase-backed case and assignment repositories.

Implements ICaseRepository and IAssignmentRepository. Detailed reads embed
the empresa, the cliente profile, every asignacion with its profile and the
id/estado of each task so per-case task counts come from the same request.
"""

from __future__ import annotations

from typing import Any

from legality.application.dtos.caso import Asignacion, Caso, CasoDetail
from legality.domain.enums import CaseStatus
from legality.domain.exceptions import ResourceNotFoundException, StoreRequestException
from legality.infrastructure.supabase._rest_client import NO_ROWS, PostgrestClient
from legality.infrastructure.supabase.repositories._mappers import (
    asignacion_from_row,
    caso_detail_from_row,
    caso_from_row,
)
from legality.infrastructure.supabase.tables import (
    CASO_DETAIL_SELECT,
    TABLE_ASIGNACIONES,
    TABLE_CASOS,
)


class SupabaseCaseRepository:
    """Casos table over PostgREST."""

    def __init__(self, client: PostgrestClient) -> None:
        self._table = client.table(TABLE_CASOS)

    async def list_with_details(
        self,
        *,
        ids: list[str] | None = None,
        cliente_id: str | None = None,
    ) -> list[CasoDetail]:
        if ids is not None and not ids:
            return []
        query = self._table.select(CASO_DETAIL_SELECT)
        if ids is not None:
            query = query.in_("id", ids)
        if cliente_id is not None:
            query = query.eq("cliente_id", cliente_id)
        result = await query.order("created_at", desc=True).execute()
        return [caso_detail_from_row(row) for row in result.data]

    async def get_with_details(self, case_id: str) -> CasoDetail | None:
        result = await self._table.select(CASO_DETAIL_SELECT).eq("id", case_id).limit(1).execute()
        return caso_detail_from_row(result.data[0]) if result.data else None

    async def get_by_id(self, case_id: str) -> Caso | None:
        result = await self._table.select("*").eq("id", case_id).limit(1).execute()
        return caso_from_row(result.data[0]) if result.data else None

    async def ids_for_cliente(self, cliente_id: str) -> list[str]:
        result = await self._table.select("id").eq("cliente_id", cliente_id).execute()
        return [str(row["id"]) for row in result.data]

    async def create(self, row: dict[str, Any]) -> Caso:
        result = await self._table.insert(row).single().execute()
        return caso_from_row(result.data)

    async def update(self, case_id: str, patch: dict[str, Any]) -> Caso:
        try:
            result = await self._table.update(patch).eq("id", case_id).single().execute()
        except StoreRequestException as exc:
            if exc.code == NO_ROWS:
                raise ResourceNotFoundException("caso", case_id) from exc
            raise
        return caso_from_row(result.data)

    async def delete(self, case_id: str) -> None:
        await self._table.delete().eq("id", case_id).execute()

    async def count(self, estado: CaseStatus | None = None) -> int:
        query = self._table.select("id", count="exact", head=True)
        if estado is not None:
            query = query.eq("estado", estado)
        result = await query.execute()
        return result.count or 0


class SupabaseAssignmentRepository:
    """Asignaciones join table over PostgREST."""

    def __init__(self, client: PostgrestClient) -> None:
        self._table = client.table(TABLE_ASIGNACIONES)

    async def case_ids_for_user(self, usuario_id: str) -> list[str]:
        result = await self._table.select("caso_id").eq("usuario_id", usuario_id).execute()
        return list(dict.fromkeys(str(row["caso_id"]) for row in result.data))

    async def create(self, caso_id: str, usuario_id: str, rol_asignado: str) -> Asignacion:
        row = {"caso_id": caso_id, "usuario_id": usuario_id, "rol_asignado": rol_asignado}
        result = await self._table.insert(row).single().execute()
        return asignacion_from_row(result.data)

    async def delete(self, asignacion_id: str) -> None:
        await self._table.delete().eq("id", asignacion_id).execute()

    async def delete_by_case(self, caso_id: str) -> None:
        await self._table.delete().eq("caso_id", caso_id).execute()
