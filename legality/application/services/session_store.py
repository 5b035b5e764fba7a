"""Holder of the current identity and profile for one portal session.

One instance per session (per request on the HTTP surface); never a module
global. Access is single-threaded cooperative, so no locking: the resolver
writes the profile, sign-out clears everything, every other component reads.
"""

from __future__ import annotations

import logging

from legality.application.dtos.profile import Profile
from legality.application.dtos.session import Identity, Session
from legality.application.interfaces.services import IIdentityProvider

logger = logging.getLogger(__name__)


class SessionStore:
    """Single source of truth for who is signed in and with which profile."""

    def __init__(self, provider: IIdentityProvider) -> None:
        self._provider = provider
        self._session: Session | None = None
        self._identity: Identity | None = None
        self._profile: Profile | None = None

    @property
    def provider(self) -> IIdentityProvider:
        return self._provider

    async def get_session(self) -> Session | None:
        """Ask the identity provider for the current session.

        Transport errors from the provider propagate; a returned session also
        replaces the stored identity.
        """
        session = await self._provider.get_session()
        self.set_session(session)
        return session

    def set_session(self, session: Session | None) -> None:
        self._session = session
        if session is None:
            self._identity = None
            self._profile = None
            return
        if self._identity is not None and self._identity.id != session.user.id:
            # Different user on the same store: the old profile no longer applies.
            self._profile = None
        self._identity = session.user

    def get_identity(self) -> Identity | None:
        return self._identity

    def set_identity(self, identity: Identity | None) -> None:
        if identity is None or (self._identity and self._identity.id != identity.id):
            self._profile = None
        self._identity = identity

    def get_profile(self) -> Profile | None:
        return self._profile

    def set_profile(self, profile: Profile | None) -> None:
        self._profile = profile

    def clear(self) -> None:
        logger.debug("Clearing session store")
        self._session = None
        self._identity = None
        self._profile = None

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def session(self) -> Session | None:
        """Last session seen, without asking the provider."""
        return self._session

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None
