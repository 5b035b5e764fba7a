"""DTOs for profiles (no dependency on the store client)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from legality.domain.enums import ProfileRole, ProfileStatus

_BLANK_NAME = "Sin nombre"


@dataclass(frozen=True)
class Profile:
    """Durable per-user record keyed by the identity id.

    persisted is False only for the in-memory fallback built when the store
    cannot be reached; such a profile is never written back.
    """

    id: str
    email: str
    full_name: str
    role: ProfileRole
    created_at: datetime | None = None
    updated_at: datetime | None = None
    persisted: bool = True

    @property
    def status(self) -> ProfileStatus:
        if self.role in (ProfileRole.PENDING, ProfileRole.UNKNOWN):
            return ProfileStatus.PENDING
        return ProfileStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return self.full_name if self.full_name and self.full_name.strip() else _BLANK_NAME


@dataclass(frozen=True)
class ProfileTaskLoad:
    """Profile with its count of pending tasks (admin user list)."""

    profile: Profile
    tareas_pendientes: int
