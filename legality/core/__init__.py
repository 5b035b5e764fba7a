"""Core: config, rate limits, exception handlers and application lifespan.

Single place for settings and process-wide wiring.
"""

from legality.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
