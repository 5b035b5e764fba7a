"""Portal page guard (non-API routes)."""

from legality.pages.views import router as pages_router

__all__ = ["pages_router"]
