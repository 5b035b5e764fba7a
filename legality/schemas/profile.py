"""Profile API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from legality.domain.enums import ProfileRole, ProfileStatus


class ProfileResponse(BaseModel):
    """Profile as shown to the portal (status and display_name are derived)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    display_name: str
    role: ProfileRole
    status: ProfileStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    persisted: bool = True


class ProfileTaskLoadResponse(BaseModel):
    """Admin user list row: profile plus pending task count."""

    profile: ProfileResponse
    tareas_pendientes: int


class ProfileUpdate(BaseModel):
    """Request body for updating the signed-in user's own profile."""

    full_name: str = Field(..., min_length=1, max_length=200)


class RoleUpdate(BaseModel):
    """Request body for an admin role change (validated against the role set by the use case)."""

    role: str = Field(..., min_length=1)
