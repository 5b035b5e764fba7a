"""Data transfer objects passed between the application layer and its callers."""

from legality.application.dtos.analytics import DashboardStats
from legality.application.dtos.caso import Asignacion, CaseBudget, Caso, CasoDetail, Empresa
from legality.application.dtos.hours_request import HoursRequest
from legality.application.dtos.profile import Profile, ProfileTaskLoad
from legality.application.dtos.result import OperationResult
from legality.application.dtos.session import (
    Cancelled,
    Identity,
    PollOutcome,
    Resolved,
    RouterStatus,
    Session,
    SignUpResult,
    TimedOut,
)
from legality.application.dtos.tarea import Tarea

__all__ = [
    "Asignacion",
    "Cancelled",
    "CaseBudget",
    "Caso",
    "CasoDetail",
    "DashboardStats",
    "Empresa",
    "HoursRequest",
    "Identity",
    "OperationResult",
    "PollOutcome",
    "Profile",
    "ProfileTaskLoad",
    "Resolved",
    "RouterStatus",
    "Session",
    "SignUpResult",
    "Tarea",
    "TimedOut",
]
