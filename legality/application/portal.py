"""Portal: one signed-in session's components wired around a single SessionStore."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from legality.application.interfaces.repositories import (
    IAssignmentRepository,
    ICaseRepository,
    IEmpresaRepository,
    IHoursRequestRepository,
    IProfileRepository,
    ITaskRepository,
)
from legality.application.interfaces.services import IIdentityProvider, INavigator
from legality.application.services.profile_resolver import ProfileResolver
from legality.application.services.role_router import RoleRouter
from legality.application.services.session_store import SessionStore
from legality.application.use_cases.admin import AdminDirectory
from legality.application.use_cases.analytics import DashboardStatsAggregator
from legality.application.use_cases.cases import CaseTaskQueryEngine
from legality.application.use_cases.hours_requests import HoursRequestService
from legality.core.config import Settings
from legality.domain.enums import ProfileRole


class PortalRepositories(Protocol):
    profiles: IProfileRepository
    empresas: IEmpresaRepository
    cases: ICaseRepository
    assignments: IAssignmentRepository
    tasks: ITaskRepository
    hours_requests: IHoursRequestRepository


@dataclass
class Portal:
    store: SessionStore
    resolver: ProfileResolver
    router: RoleRouter
    cases: CaseTaskQueryEngine
    stats: DashboardStatsAggregator
    admin: AdminDirectory
    hours: HoursRequestService


def build_portal(
    provider: IIdentityProvider,
    repositories: PortalRepositories,
    navigator: INavigator,
    settings: Settings,
) -> Portal:
    """Wire every component for one session. Nothing here is shared between portals."""
    store = SessionStore(provider)
    resolver = ProfileResolver(
        repositories.profiles,
        store,
        default_role=ProfileRole(settings.default_profile_role),
    )
    router = RoleRouter(
        store,
        resolver,
        navigator,
        poll_interval=settings.profile_poll_interval_seconds,
        poll_max_attempts=settings.profile_poll_max_attempts,
        oauth_redirect_url=settings.oauth_redirect_url,
    )
    cases = CaseTaskQueryEngine(
        store, repositories.cases, repositories.tasks, repositories.assignments
    )
    stats = DashboardStatsAggregator(
        repositories.profiles, repositories.empresas, repositories.cases, repositories.tasks
    )
    admin = AdminDirectory(store, repositories.profiles, repositories.empresas, repositories.tasks)
    stats.attach(cases)
    stats.attach(admin)
    return Portal(
        store=store,
        resolver=resolver,
        router=router,
        cases=cases,
        stats=stats,
        admin=admin,
        hours=HoursRequestService(
            store, repositories.hours_requests, repositories.cases, repositories.assignments
        ),
    )
