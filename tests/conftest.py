"""Pytest configuration and fixtures for legality.

Uses legality.main:app for HTTP tests. The Supabase settings are pointed at
a placeholder project before the app is imported; no test talks to a real
store: API tests replace get_portal with a Portal wired to the in-memory
fakes from tests.fakes.
"""

import os

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

import pytest  # noqa: E402
from fastapi import Request  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from legality.api.v1.dependencies import RequestNavigator, get_portal  # noqa: E402
from legality.application.portal import Portal  # noqa: E402
from legality.core.config import get_settings  # noqa: E402
from legality.core.limiter import limiter, reset_auth_attempts  # noqa: E402

get_settings.cache_clear()

from legality.main import app  # noqa: E402
from tests.fakes import FakeIdentityProvider, InMemoryDatabase, make_portal  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Rate limit counters are process-wide; start every test from zero."""
    limiter.reset()
    reset_auth_attempts()
    yield


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def portals() -> list[Portal]:
    """Every Portal built by the overridden dependency, in request order."""
    return []


@pytest.fixture
async def api(
    client: AsyncClient,
    db: InMemoryDatabase,
    provider: FakeIdentityProvider,
    portals: list[Portal],
) -> AsyncClient:
    """HTTP client whose requests run against the in-memory store and identity provider.

    The provider's session plays the role of the caller's token: set
    provider.session (or sign in through the API) to act as a user.
    """

    async def override_get_portal(request: Request) -> Portal:
        portal = make_portal(provider, db, navigator=RequestNavigator(request.url.path))
        await portal.router.bootstrap()
        portals.append(portal)
        return portal

    app.dependency_overrides[get_portal] = override_get_portal
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_portal, None)
