"""Profile resolution and provisioning.

ProfileResolver obtains the durable profile for an identity, provisioning a
default row when none exists yet. ProfilePoller waits for a profile that a
server-side trigger creates asynchronously after sign-up, with a fixed
interval and a hard attempt cap (tenacity), and can be cancelled by its owner.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import replace

from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_attempt, wait_fixed

from legality.application.dtos.profile import Profile
from legality.application.dtos.session import Cancelled, Identity, PollOutcome, Resolved, TimedOut
from legality.application.interfaces.repositories import IProfileRepository
from legality.application.services.session_store import SessionStore
from legality.domain.enums import ProfileRole
from legality.domain.exceptions import (
    AuthenticationException,
    LegalityException,
    ProfileNotFoundException,
    StoreRequestException,
)
from legality.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

_DEFAULT_NAME = "Usuario"


def default_full_name(identity: Identity) -> str:
    """Metadata full_name, then metadata name, then the email local part, then 'Usuario'."""
    meta = identity.user_metadata or {}
    for key in ("full_name", "name"):
        value = meta.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    local_part = (identity.email or "").split("@", 1)[0].strip()
    return local_part or _DEFAULT_NAME


class ProfileResolver:
    """Get-or-provision the profile of an identity and publish it to the SessionStore.

    Never raises for store failures: an unreachable store yields an in-memory
    profile (persisted=False) that is never written back. Concurrent calls for
    the same identity share one in-flight resolution; the store's primary key
    on id absorbs any remaining duplicate insert.
    """

    def __init__(
        self,
        profiles: IProfileRepository,
        store: SessionStore,
        default_role: ProfileRole = ProfileRole.PENDING,
    ) -> None:
        self._profiles = profiles
        self._store = store
        self._default_role = default_role
        self._inflight: dict[str, asyncio.Task[Profile]] = {}

    def default_profile(self, identity: Identity, *, persisted: bool = True) -> Profile:
        now = utc_now()
        return Profile(
            id=identity.id,
            email=identity.email,
            full_name=default_full_name(identity),
            role=self._default_role,
            created_at=now,
            updated_at=now,
            persisted=persisted,
        )

    async def resolve(self, identity: Identity | None = None) -> Profile:
        """Return the profile for identity (default: the store's identity).

        Raises:
            AuthenticationException: If there is no identity to resolve.
        """
        identity = identity or self._store.get_identity()
        if identity is None:
            raise AuthenticationException("No authenticated identity to resolve")
        task = self._inflight.get(identity.id)
        if task is None:
            task = asyncio.ensure_future(self._resolve(identity))
            self._inflight[identity.id] = task
            task.add_done_callback(lambda t, key=identity.id: self._forget(key, t))
        profile = await asyncio.shield(task)
        self._publish(profile)
        return profile

    def _forget(self, key: str, task: asyncio.Task[Profile]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    def _publish(self, profile: Profile) -> None:
        current = self._store.get_identity()
        if current is None or current.id == profile.id:
            self._store.set_profile(profile)

    async def _resolve(self, identity: Identity) -> Profile:
        try:
            return await self._profiles.get_by_id(identity.id)
        except ProfileNotFoundException:
            logger.info("No profile for %s; provisioning default", identity.id)
            return await self._provision(identity)
        except LegalityException as exc:
            logger.warning(
                "Profile lookup for %s failed (%s); using in-memory profile",
                identity.id,
                exc.error_code,
            )
            return self.default_profile(identity, persisted=False)

    async def _provision(self, identity: Identity) -> Profile:
        candidate = self.default_profile(identity)
        try:
            return await self._profiles.insert(candidate)
        except StoreRequestException as exc:
            # Most often a provisioning trigger created the row first.
            logger.info(
                "Profile insert for %s rejected (%s); re-querying once", identity.id, exc.code
            )
            try:
                return await self._profiles.get_by_id(identity.id)
            except LegalityException:
                logger.warning("Profile re-query for %s failed", identity.id, exc_info=True)
        except LegalityException:
            logger.warning("Profile insert for %s failed", identity.id, exc_info=True)
        return replace(candidate, persisted=False)

    async def lookup(self, identity: Identity) -> Profile | None:
        """Read-only fetch; None when the row is missing or the store fails."""
        try:
            return await self._profiles.get_by_id(identity.id)
        except ProfileNotFoundException:
            return None
        except LegalityException as exc:
            logger.debug("Profile lookup for %s failed: %s", identity.id, exc.message)
            return None

    async def refresh(self) -> Profile | None:
        """Re-resolve the store's identity (picks up a role changed by an admin)."""
        identity = self._store.get_identity()
        if identity is None:
            return None
        return await self.resolve(identity)


class ProfilePoller:
    """Bounded poll for a profile that may not exist yet.

    Each attempt succeeds when the SessionStore holds an identity and a
    profile for it can be read. After max_attempts failures one forced
    resolve() runs and its result (possibly the in-memory fallback) is
    returned as TimedOut. cancel() stops further attempts and wakes a
    pending wait immediately.
    """

    def __init__(
        self,
        store: SessionStore,
        resolver: ProfileResolver,
        *,
        interval: float = 0.5,
        max_attempts: int = 10,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._interval = interval
        self._max_attempts = max_attempts
        self._cancelled = asyncio.Event()
        self.attempts = 0

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def _sleep(self, seconds: float) -> None:
        with suppress(TimeoutError):
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)

    async def _attempt(self) -> Profile | None:
        if self.cancelled:
            return None
        self.attempts += 1
        identity = self._store.get_identity()
        if identity is None:
            return None
        profile = self._store.get_profile()
        if profile is not None and profile.id == identity.id and profile.persisted:
            return profile
        profile = await self._resolver.lookup(identity)
        if profile is not None:
            self._store.set_profile(profile)
        return profile

    async def poll(self) -> PollOutcome:
        self.attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_fixed(self._interval),
            retry=retry_if_result(lambda profile: profile is None and not self.cancelled),
            sleep=self._sleep,
        )
        try:
            profile = await retrying(self._attempt)
        except RetryError:
            if self.cancelled:
                return Cancelled(attempts=self.attempts)
            logger.info("Profile not found after %d attempts; forcing resolution", self.attempts)
            try:
                forced = await self._resolver.resolve()
            except AuthenticationException:
                forced = None
            return TimedOut(profile=forced, attempts=self.attempts)
        if profile is None:
            return Cancelled(attempts=self.attempts)
        return Resolved(profile=profile, attempts=self.attempts)
