"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (shared HTTP client,
Supabase REST clients, logging).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from legality.core.config import get_settings
from legality.infrastructure.supabase import create_supabase_clients
from legality.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, one shared httpx.AsyncClient (connection reuse for
    every store and identity call), the PostgREST and GoTrue clients built
    on it. Shutdown: close the shared client.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.http_client = httpx.AsyncClient(timeout=settings.supabase_timeout_seconds)
    app.state.postgrest, app.state.gotrue = create_supabase_clients(
        settings, app.state.http_client
    )
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Shared HTTP client closed")
