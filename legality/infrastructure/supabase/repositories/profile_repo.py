"""Supabase-backed profile repository (implements IProfileRepository)."""

from __future__ import annotations

from typing import Any

from legality.application.dtos.profile import Profile
from legality.domain.enums import ProfileRole
from legality.domain.exceptions import ProfileNotFoundException, StoreRequestException
from legality.infrastructure.supabase._rest_client import NO_ROWS, PostgrestClient
from legality.infrastructure.supabase.repositories._mappers import profile_from_row, profile_to_row
from legality.infrastructure.supabase.tables import PROFILE_COLUMNS, TABLE_PROFILES
from legality.shared.utils.datetime import utc_now


class SupabaseProfileRepository:
    """Profiles table over PostgREST."""

    def __init__(self, client: PostgrestClient) -> None:
        self._table = client.table(TABLE_PROFILES)

    async def get_by_id(self, user_id: str) -> Profile:
        try:
            result = await self._table.select(PROFILE_COLUMNS).eq("id", user_id).single().execute()
        except StoreRequestException as exc:
            if exc.code == NO_ROWS:
                raise ProfileNotFoundException(user_id) from exc
            raise
        return profile_from_row(result.data)

    async def insert(self, profile: Profile) -> Profile:
        result = await self._table.insert(profile_to_row(profile)).single().execute()
        return profile_from_row(result.data)

    async def list_all(self) -> list[Profile]:
        result = await self._table.select(PROFILE_COLUMNS).order("created_at", desc=True).execute()
        return [profile_from_row(row) for row in result.data]

    async def list_by_role(self, role: ProfileRole) -> list[Profile]:
        result = await (
            self._table.select(PROFILE_COLUMNS)
            .eq("role", role)
            .order("created_at", desc=True)
            .execute()
        )
        return [profile_from_row(row) for row in result.data]

    async def update(self, user_id: str, patch: dict[str, Any]) -> Profile:
        row = {**patch, "updated_at": utc_now().isoformat()}
        try:
            result = await self._table.update(row).eq("id", user_id).single().execute()
        except StoreRequestException as exc:
            if exc.code == NO_ROWS:
                raise ProfileNotFoundException(user_id) from exc
            raise
        return profile_from_row(result.data)

    async def count(self, role: ProfileRole | None = None) -> int:
        query = self._table.select("id", count="exact", head=True)
        if role is not None:
            query = query.eq("role", role)
        result = await query.execute()
        return result.count or 0
