"""Thin GoTrue (Supabase Auth) client.

Implements IIdentityProvider over the /auth/v1 REST endpoints with
httpx.AsyncClient. The session lives in memory on the client instance; the
HTTP surface forks one client per request and restores the caller's bearer
token into it, so no session state is shared between requests.
"""

from __future__ import annotations

import logging
from time import time
from typing import Any
from urllib.parse import urlencode

import httpx

from legality.application.dtos.session import Identity, Session, SignUpResult
from legality.application.interfaces.services import AuthChangeCallback
from legality.domain.exceptions import (
    AuthenticationException,
    StoreRequestException,
    ValidationException,
)
from legality.infrastructure.supabase._rest_client import _json_body, _request_async
from legality.shared.enums import AuthChangeEvent
from legality.shared.utils.datetime import from_timestamp_utc, parse_timestamp

logger = logging.getLogger(__name__)


def identity_from_json(user: dict[str, Any]) -> Identity:
    """Map a GoTrue user object to an Identity."""
    return Identity(
        id=str(user["id"]),
        email=user.get("email") or "",
        user_metadata=dict(user.get("user_metadata") or {}),
        created_at=parse_timestamp(user.get("created_at")),
    )


def session_from_json(body: dict[str, Any]) -> Session:
    """Map a GoTrue token response to a Session."""
    expires_at = body.get("expires_at")
    if expires_at is None and body.get("expires_in") is not None:
        expires_at = time() + float(body["expires_in"])
    return Session(
        access_token=body["access_token"],
        refresh_token=body.get("refresh_token"),
        expires_at=from_timestamp_utc(float(expires_at)) if expires_at is not None else None,
        user=identity_from_json(body["user"]),
    )


class _Subscription:
    """Handle returned by on_auth_state_change."""

    def __init__(self, client: "GoTrueClient", callback: AuthChangeCallback):
        self._client = client
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._client._listeners:
            self._client._listeners.remove(self._callback)


class GoTrueClient:
    """Identity provider backed by Supabase Auth."""

    def __init__(
        self,
        auth_url: str,
        anon_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.auth_url = auth_url.rstrip("/")
        self._anon_key = anon_key
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None
        self._session: Session | None = None
        self._pending: tuple[str, str | None] | None = None
        self._listeners: list[AuthChangeCallback] = []

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    @property
    def access_token(self) -> str | None:
        """Token of the current session (None before sign-in or restore)."""
        return self._session.access_token if self._session else None

    def fork(self) -> "GoTrueClient":
        """Fresh client (no session, no listeners) sharing this one's HTTP pool."""
        return GoTrueClient(self.auth_url, self._anon_key, http_client=self._http)

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self._anon_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _emit(self, event: AuthChangeEvent, session: Session | None) -> None:
        for callback in list(self._listeners):
            try:
                await callback(event, session)
            except Exception:
                logger.exception("Auth state listener failed for %s", event.value)

    def on_auth_state_change(self, callback: AuthChangeCallback) -> _Subscription:
        self._listeners.append(callback)
        return _Subscription(self, callback)

    async def health(self) -> None:
        """GET /health; raises StoreUnavailableException when the provider is down."""
        await _request_async(
            self._http, "GET", f"{self.auth_url}/health", headers=self._headers()
        )

    async def _fetch_user(self, access_token: str) -> Identity | None:
        """GET /user; an expired or revoked token yields None."""
        try:
            resp = await _request_async(
                self._http,
                "GET",
                f"{self.auth_url}/user",
                headers=self._headers(access_token),
            )
        except StoreRequestException as exc:
            if exc.status_code in (401, 403, 404):
                return None
            raise
        return identity_from_json(_json_body(resp))

    async def restore_session(
        self, access_token: str, refresh_token: str | None = None
    ) -> Session | None:
        """Adopt a bearer token issued earlier; returns None if the provider rejects it."""
        user = await self._fetch_user(access_token)
        if user is None:
            self._session = None
            return None
        self._session = Session(access_token=access_token, refresh_token=refresh_token, user=user)
        return self._session

    def use_access_token(self, access_token: str, refresh_token: str | None = None) -> None:
        """Adopt a token lazily: the next get_session() validates it with the provider."""
        self._pending = (access_token, refresh_token)

    async def get_session(self) -> Session | None:
        """Current session; validates an adopted token first (transport errors propagate)."""
        if self._pending is not None:
            access_token, refresh_token = self._pending
            self._pending = None
            return await self.restore_session(access_token, refresh_token)
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        try:
            resp = await _request_async(
                self._http,
                "POST",
                f"{self.auth_url}/token",
                headers=self._headers(),
                params=[("grant_type", "password")],
                body={"email": email, "password": password},
            )
        except StoreRequestException as exc:
            logger.info("Password sign-in rejected for %s: %s", email, exc.message)
            raise AuthenticationException(exc.message) from exc
        self._session = session_from_json(_json_body(resp))
        await self._emit(AuthChangeEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> SignUpResult:
        try:
            resp = await _request_async(
                self._http,
                "POST",
                f"{self.auth_url}/signup",
                headers=self._headers(),
                body={"email": email, "password": password, "data": metadata or {}},
            )
        except StoreRequestException as exc:
            raise ValidationException(exc.message, field="email") from exc
        body = _json_body(resp)
        # With email confirmation enabled the provider answers with the bare user.
        if "access_token" not in body:
            return SignUpResult(user=identity_from_json(body.get("user") or body))
        self._session = session_from_json(body)
        await self._emit(AuthChangeEvent.SIGNED_IN, self._session)
        return SignUpResult(user=self._session.user, session=self._session)

    async def sign_in_with_oauth(self, provider: str, redirect_to: str | None = None) -> str:
        params = {"provider": provider}
        if redirect_to:
            params["redirect_to"] = redirect_to
        return f"{self.auth_url}/authorize?{urlencode(params)}"

    async def refresh_session(self, refresh_token: str | None = None) -> Session | None:
        """Exchange a refresh token for a new session (None when there is nothing to refresh).

        refresh_token defaults to the current session's, so a request whose
        access token already expired can still be renewed from its cookie.
        """
        if refresh_token is None and self._session is not None:
            refresh_token = self._session.refresh_token
        if not refresh_token:
            return None
        self._pending = None
        try:
            resp = await _request_async(
                self._http,
                "POST",
                f"{self.auth_url}/token",
                headers=self._headers(),
                params=[("grant_type", "refresh_token")],
                body={"refresh_token": refresh_token},
            )
        except StoreRequestException as exc:
            raise AuthenticationException(exc.message) from exc
        self._session = session_from_json(_json_body(resp))
        await self._emit(AuthChangeEvent.TOKEN_REFRESHED, self._session)
        return self._session

    async def sign_out(self) -> None:
        """Revoke the session remotely; the local session is dropped even if that fails."""
        session, self._session = self._session, None
        self._pending = None
        try:
            if session is not None:
                await _request_async(
                    self._http,
                    "POST",
                    f"{self.auth_url}/logout",
                    headers=self._headers(session.access_token),
                )
        except StoreRequestException as exc:
            logger.warning("Remote sign-out rejected (%s); session cleared locally", exc.message)
        finally:
            await self._emit(AuthChangeEvent.SIGNED_OUT, None)
