"""Supabase-backed extra-hours request repository (implements IHoursRequestRepository)."""

from __future__ import annotations

from typing import Any

from legality.application.dtos.hours_request import HoursRequest
from legality.domain.enums import HoursRequestStatus
from legality.domain.exceptions import ResourceNotFoundException, StoreRequestException
from legality.infrastructure.supabase._rest_client import NO_ROWS, PostgrestClient
from legality.infrastructure.supabase.repositories._mappers import hours_request_from_row
from legality.infrastructure.supabase.tables import TABLE_SOLICITUDES_HORAS

_SELECT = "*, caso:casos(titulo)"


class SupabaseHoursRequestRepository:
    """solicitudes_horas table over PostgREST."""

    def __init__(self, client: PostgrestClient) -> None:
        self._table = client.table(TABLE_SOLICITUDES_HORAS)

    async def create(self, row: dict[str, Any]) -> HoursRequest:
        result = await self._table.insert(row).single().execute()
        return hours_request_from_row(result.data)

    async def get_by_id(self, request_id: str) -> HoursRequest | None:
        result = await self._table.select(_SELECT).eq("id", request_id).limit(1).execute()
        return hours_request_from_row(result.data[0]) if result.data else None

    async def list_by_case_ids(self, caso_ids: list[str]) -> list[HoursRequest]:
        if not caso_ids:
            return []
        result = await (
            self._table.select(_SELECT)
            .in_("caso_id", caso_ids)
            .order("created_at", desc=True)
            .execute()
        )
        return [hours_request_from_row(row) for row in result.data]

    async def update_estado(self, request_id: str, estado: HoursRequestStatus) -> HoursRequest:
        try:
            result = await (
                self._table.update({"estado": estado.value}).eq("id", request_id).single().execute()
            )
        except StoreRequestException as exc:
            if exc.code == NO_ROWS:
                raise ResourceNotFoundException("solicitud_horas", request_id) from exc
            raise
        return hours_request_from_row(result.data)
