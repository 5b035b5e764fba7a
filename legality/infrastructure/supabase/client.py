"""Supabase clients (REST-based, no supabase-py).

Created once at app startup around a shared httpx.AsyncClient. Per-request
code forks the GoTrue client and binds the PostgREST client to the caller's
access token, so row-level rules in the store apply to every query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from legality.core.config import Settings
from legality.infrastructure.supabase._auth_client import GoTrueClient
from legality.infrastructure.supabase._rest_client import PostgrestClient
from legality.infrastructure.supabase.repositories import (
    SupabaseAssignmentRepository,
    SupabaseCaseRepository,
    SupabaseEmpresaRepository,
    SupabaseHoursRequestRepository,
    SupabaseProfileRepository,
    SupabaseTaskRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Repositories:
    """One repository per table, all bound to the same PostgREST client."""

    profiles: SupabaseProfileRepository
    empresas: SupabaseEmpresaRepository
    cases: SupabaseCaseRepository
    assignments: SupabaseAssignmentRepository
    tasks: SupabaseTaskRepository
    hours_requests: SupabaseHoursRequestRepository


def create_supabase_clients(
    settings: Settings, http_client: httpx.AsyncClient
) -> tuple[PostgrestClient, GoTrueClient]:
    """Build the PostgREST and GoTrue clients for the configured project."""
    anon_key = settings.supabase_anon_key.get_secret_value()
    rest = PostgrestClient(settings.rest_url, anon_key, http_client=http_client)
    auth = GoTrueClient(settings.auth_url, anon_key, http_client=http_client)
    logger.info("Supabase clients configured for %s", settings.supabase_url)
    return rest, auth


def supabase_repositories(client: PostgrestClient) -> Repositories:
    return Repositories(
        profiles=SupabaseProfileRepository(client),
        empresas=SupabaseEmpresaRepository(client),
        cases=SupabaseCaseRepository(client),
        assignments=SupabaseAssignmentRepository(client),
        tasks=SupabaseTaskRepository(client),
        hours_requests=SupabaseHoursRequestRepository(client),
    )
