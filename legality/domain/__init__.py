"""Domain layer: roles, statuses, access policy and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from legality.domain.enums import (
    AssignmentRole,
    CaseStatus,
    HoursRequestStatus,
    ProfileRole,
    ProfileStatus,
    RouterState,
    TaskStatus,
)
from legality.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    LegalityException,
    ProfileNotFoundException,
    ResourceNotFoundException,
    StoreRequestException,
    StoreUnavailableException,
    ValidationException,
)

__all__ = [
    "AssignmentRole",
    "AuthenticationException",
    "AuthorizationException",
    "CaseStatus",
    "HoursRequestStatus",
    "LegalityException",
    "ProfileNotFoundException",
    "ProfileRole",
    "ProfileStatus",
    "ResourceNotFoundException",
    "RouterState",
    "StoreRequestException",
    "StoreUnavailableException",
    "TaskStatus",
    "ValidationException",
]
