"""Supabase-backed task repository (implements ITaskRepository)."""

from __future__ import annotations

from typing import Any

from legality.application.dtos.tarea import Tarea
from legality.domain.enums import TaskStatus
from legality.domain.exceptions import ResourceNotFoundException, StoreRequestException
from legality.infrastructure.supabase._rest_client import NO_ROWS, PostgrestClient
from legality.infrastructure.supabase.repositories._mappers import tarea_from_row
from legality.infrastructure.supabase.tables import TABLE_TAREAS, TAREA_WITH_CASO_SELECT


class SupabaseTaskRepository:
    """Tareas table over PostgREST."""

    def __init__(self, client: PostgrestClient) -> None:
        self._table = client.table(TABLE_TAREAS)

    async def _list(self, **filters: str) -> list[Tarea]:
        query = self._table.select(TAREA_WITH_CASO_SELECT)
        for column, value in filters.items():
            query = query.eq(column, value)
        result = await query.order("created_at", desc=True).execute()
        return [tarea_from_row(row) for row in result.data]

    async def list_by_assignee(self, usuario_id: str) -> list[Tarea]:
        return await self._list(asignado_a=usuario_id)

    async def list_by_case(self, caso_id: str) -> list[Tarea]:
        return await self._list(caso_id=caso_id)

    async def list_all(self) -> list[Tarea]:
        return await self._list()

    async def get_by_id(self, task_id: str) -> Tarea | None:
        result = await self._table.select(TAREA_WITH_CASO_SELECT).eq("id", task_id).limit(1).execute()
        return tarea_from_row(result.data[0]) if result.data else None

    async def create(self, row: dict[str, Any]) -> Tarea:
        result = await self._table.insert(row).single().execute()
        return tarea_from_row(result.data)

    async def update(self, task_id: str, patch: dict[str, Any]) -> Tarea:
        try:
            result = await self._table.update(patch).eq("id", task_id).single().execute()
        except StoreRequestException as exc:
            if exc.code == NO_ROWS:
                raise ResourceNotFoundException("tarea", task_id) from exc
            raise
        return tarea_from_row(result.data)

    async def delete(self, task_id: str) -> None:
        await self._table.delete().eq("id", task_id).execute()

    async def delete_by_case(self, caso_id: str) -> None:
        await self._table.delete().eq("caso_id", caso_id).execute()

    async def count(
        self,
        estado: TaskStatus | None = None,
        asignado_a: str | None = None,
    ) -> int:
        query = self._table.select("id", count="exact", head=True)
        if estado is not None:
            query = query.eq("estado", estado)
        if asignado_a is not None:
            query = query.eq("asignado_a", asignado_a)
        result = await query.execute()
        return result.count or 0
