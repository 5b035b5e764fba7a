"""Route guard for portal pages.

Every non-API path goes through the caller's role router: a visitor who may
not stay is redirected (307) to the login, pending or landing route of the
resolved role; otherwise the view to render is returned as JSON for the
portal shell. A bootstrap failure answers 503 with the error screen instead
of redirecting.
"""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, RedirectResponse

from legality.api.v1.dependencies import PortalDep
from legality.domain import access_policy
from legality.domain.enums import RouterState
from legality.schemas.auth import RouterStatusResponse
from legality.schemas.pages import PageError, PageView
from legality.schemas.profile import ProfileResponse

logger = logging.getLogger(__name__)

router = APIRouter()

# First path segment -> screen rendered by the shell.
_VIEWS: dict[str, str] = {
    "login": "login",
    "pending": "pending_authorization",
    "admin": "admin_panel",
    "analista": "professional_panel",
    "abogado": "professional_panel",
    "cliente": "client_panel",
}


def view_for(path: str) -> str | None:
    segment = access_policy.normalize_path(path).strip("/").split("/", 1)[0]
    return _VIEWS.get(segment)


@router.get("/{full_path:path}", response_model=PageView, include_in_schema=False)
async def render_page(full_path: str, portal: PortalDep):
    path = access_policy.normalize_path(full_path)
    if path == "/api" or path.startswith("/api/"):
        raise HTTPException(status_code=404, detail="Not Found")

    status = portal.router.status
    if status.state is RouterState.ERROR:
        return JSONResponse(
            status_code=503,
            content=PageError(message=status.error or "Error").model_dump(),
        )

    target = portal.router.guard(path)
    if target is not None:
        logger.debug("Guard redirect %s -> %s", path, target)
        return RedirectResponse(url=target, status_code=307)

    view = view_for(path)
    if view is None:
        raise HTTPException(status_code=404, detail="Not Found")
    profile = portal.store.get_profile()
    return PageView(
        view=view,
        path=path,
        status=RouterStatusResponse.from_status(status),
        profile=ProfileResponse.model_validate(profile) if profile else None,
    )
