"""Auth API schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from legality.application.dtos.session import RouterStatus
from legality.domain.enums import ProfileRole, RouterState
from legality.schemas.profile import ProfileResponse


class LoginRequest(BaseModel):
    """Request body for email/password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class SignUpRequest(BaseModel):
    """Request body for registration; full_name lands in the identity metadata."""

    email: EmailStr
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    full_name: str = Field(..., min_length=1, max_length=200)


class RefreshRequest(BaseModel):
    """Refresh token; the session cookie is used when it is omitted."""

    refresh_token: str | None = None


class OAuthRequest(BaseModel):
    provider: str = Field(default="google", min_length=1)


class OAuthResponse(BaseModel):
    """Authorization URL the browser must be sent to."""

    url: str


class RouterStatusResponse(BaseModel):
    """Where the role router stands for the caller."""

    state: RouterState
    role: ProfileRole | None = None
    error: str | None = None
    landing_path: str | None = None

    @classmethod
    def from_status(cls, status: RouterStatus) -> "RouterStatusResponse":
        return cls(
            state=status.state,
            role=status.role,
            error=status.error,
            landing_path=status.landing_path,
        )


class SessionResponse(BaseModel):
    """Tokens plus the resolved profile and its landing path."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_at: datetime | None = None
    profile: ProfileResponse
    status: RouterStatusResponse


class SignUpResponse(BaseModel):
    """confirmation_required is True when the provider waits for email confirmation."""

    confirmation_required: bool
    session: SessionResponse | None = None
