"""Health check endpoint. Liveness has no dependencies; readiness pings the identity provider."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from legality.domain.exceptions import LegalityException
from legality.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Identity provider unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 if the Supabase auth service answers its health endpoint, else 503."""
    try:
        await request.app.state.gotrue.health()
    except LegalityException as exc:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message=exc.message).model_dump(),
        )
    return ReadinessResponse()
