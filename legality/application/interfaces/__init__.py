"""Ports implemented by infrastructure (repositories, identity provider, navigator)."""

from legality.application.interfaces.repositories import (
    IAssignmentRepository,
    ICaseRepository,
    IEmpresaRepository,
    IHoursRequestRepository,
    IProfileRepository,
    ITaskRepository,
)
from legality.application.interfaces.services import (
    AuthChangeCallback,
    IIdentityProvider,
    INavigator,
    ISubscription,
)

__all__ = [
    "AuthChangeCallback",
    "IAssignmentRepository",
    "ICaseRepository",
    "IEmpresaRepository",
    "IHoursRequestRepository",
    "IIdentityProvider",
    "INavigator",
    "IProfileRepository",
    "ISubscription",
    "ITaskRepository",
]
