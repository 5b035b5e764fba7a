"""Session services: store, profile resolution and role routing."""

from legality.application.services.profile_resolver import ProfilePoller, ProfileResolver
from legality.application.services.role_router import RoleRouter
from legality.application.services.session_store import SessionStore

__all__ = ["ProfilePoller", "ProfileResolver", "RoleRouter", "SessionStore"]
