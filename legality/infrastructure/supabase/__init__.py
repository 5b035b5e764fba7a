"""Supabase infrastructure: GoTrue identity provider, PostgREST client and repositories."""

from legality.infrastructure.supabase._auth_client import GoTrueClient
from legality.infrastructure.supabase._rest_client import PostgrestClient
from legality.infrastructure.supabase.client import (
    Repositories,
    create_supabase_clients,
    supabase_repositories,
)

__all__ = [
    "GoTrueClient",
    "PostgrestClient",
    "Repositories",
    "create_supabase_clients",
    "supabase_repositories",
]
