"""Shared telemetry: logging setup."""

from legality.shared.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
