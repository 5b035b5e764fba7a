"""Shared utilities: enums, telemetry and datetime helpers. No business logic."""
