"""Supabase-backed empresa repository (implements IEmpresaRepository)."""

from __future__ import annotations

from typing import Any

from legality.application.dtos.caso import Empresa
from legality.domain.exceptions import ResourceNotFoundException, StoreRequestException
from legality.infrastructure.supabase._rest_client import NO_ROWS, PostgrestClient
from legality.infrastructure.supabase.repositories._mappers import empresa_from_row
from legality.infrastructure.supabase.tables import TABLE_EMPRESAS


class SupabaseEmpresaRepository:
    """Empresas table over PostgREST."""

    def __init__(self, client: PostgrestClient) -> None:
        self._table = client.table(TABLE_EMPRESAS)

    async def list_all(self) -> list[Empresa]:
        result = await self._table.select("id, nombre, created_at").order("nombre").execute()
        return [empresa_from_row(row) for row in result.data]

    async def create(self, nombre: str) -> Empresa:
        result = await self._table.insert({"nombre": nombre}).single().execute()
        return empresa_from_row(result.data)

    async def update(self, empresa_id: str, patch: dict[str, Any]) -> Empresa:
        try:
            result = await self._table.update(patch).eq("id", empresa_id).single().execute()
        except StoreRequestException as exc:
            if exc.code == NO_ROWS:
                raise ResourceNotFoundException("empresa", empresa_id) from exc
            raise
        return empresa_from_row(result.data)

    async def delete(self, empresa_id: str) -> None:
        await self._table.delete().eq("id", empresa_id).execute()

    async def count(self) -> int:
        result = await self._table.select("id", count="exact", head=True).execute()
        return result.count or 0
