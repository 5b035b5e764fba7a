"""Supabase (PostgREST) repository implementations."""

from legality.infrastructure.supabase.repositories.caso_repo import (
    SupabaseAssignmentRepository,
    SupabaseCaseRepository,
)
from legality.infrastructure.supabase.repositories.empresa_repo import SupabaseEmpresaRepository
from legality.infrastructure.supabase.repositories.hours_request_repo import (
    SupabaseHoursRequestRepository,
)
from legality.infrastructure.supabase.repositories.profile_repo import SupabaseProfileRepository
from legality.infrastructure.supabase.repositories.tarea_repo import SupabaseTaskRepository

__all__ = [
    "SupabaseAssignmentRepository",
    "SupabaseCaseRepository",
    "SupabaseEmpresaRepository",
    "SupabaseHoursRequestRepository",
    "SupabaseProfileRepository",
    "SupabaseTaskRepository",
]
