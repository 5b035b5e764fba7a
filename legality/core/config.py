"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (SUPABASE_URL, SUPABASE_ANON_KEY) are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Roles a freshly provisioned profile may start with.
_PROVISIONING_ROLES = ("pending", "cliente")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (supabase_url, supabase_anon_key, default_profile_role).
    """

    # App
    app_name: str = "legality"
    app_version: str = "1.0.0"
    debug: bool = False

    # Supabase: PostgREST under /rest/v1, GoTrue under /auth/v1
    supabase_url: str = ""
    supabase_anon_key: SecretStr = SecretStr("")
    supabase_timeout_seconds: float = 30.0
    # Where the OAuth provider sends the browser back after consent.
    oauth_redirect_url: str | None = None

    # Profile provisioning and post sign-in polling
    default_profile_role: str = "pending"
    profile_poll_interval_seconds: float = 0.5
    profile_poll_max_attempts: int = 10

    # CORS
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate Supabase connection settings and provisioning defaults."""
        if not self.supabase_url:
            raise ValueError(
                "SUPABASE_URL is required (e.g. https://<project>.supabase.co). "
                "Set in environment or .env file."
            )
        if not self.supabase_anon_key.get_secret_value():
            raise ValueError(
                "SUPABASE_ANON_KEY is required. Copy it from the project's API settings."
            )
        if self.default_profile_role not in _PROVISIONING_ROLES:
            raise ValueError(
                f"default_profile_role must be one of {_PROVISIONING_ROLES}, "
                f"got: {self.default_profile_role!r}"
            )
        if self.profile_poll_max_attempts < 1:
            raise ValueError("profile_poll_max_attempts must be at least 1")
        if self.profile_poll_interval_seconds < 0:
            raise ValueError("profile_poll_interval_seconds must not be negative")
        return self

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
