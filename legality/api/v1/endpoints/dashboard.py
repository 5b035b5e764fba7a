"""Dashboard API: aggregate counters for the caller's landing view."""

from fastapi import APIRouter

from legality.api.v1.dependencies import CurrentProfile, PortalDep
from legality.domain import access_policy
from legality.domain.exceptions import AuthorizationException
from legality.schemas.analytics import DashboardStatsResponse

router = APIRouter()


@router.get("", response_model=DashboardStatsResponse)
async def get_dashboard_stats(profile: CurrentProfile, portal: PortalDep):
    """Counters for the dashboard; mis_tareas_pendientes is scoped to the caller.

    A counter whose query failed reads 0 instead of failing the request.
    """
    if access_policy.is_pending(profile):
        raise AuthorizationException("dashboard", "read")
    stats = await portal.stats.compute(user_id=profile.id)
    return DashboardStatsResponse(**stats.to_dict())
