"""Role router: the portal's authentication state machine.

States: INITIALIZING, UNAUTHENTICATED, PENDING_APPROVAL, AUTHENTICATED(role)
and ERROR(message). Every entry into AUTHENTICATED navigates to the role's
landing path unless the current view is already under it. ERROR is entered
only on provider failure during bootstrap and is terminal until reset().
"""

from __future__ import annotations

import logging

from legality.application.dtos.profile import Profile
from legality.application.dtos.result import OperationResult
from legality.application.dtos.session import Cancelled, RouterStatus, Session
from legality.application.interfaces.services import INavigator, ISubscription
from legality.application.services.profile_resolver import ProfilePoller, ProfileResolver
from legality.application.services.session_store import SessionStore
from legality.domain import access_policy
from legality.domain.enums import ProfileRole, RouterState
from legality.domain.exceptions import AuthenticationException, LegalityException
from legality.shared.enums import AuthChangeEvent

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Credenciales inválidas"
PROFILE_NOT_READY = "Perfil no disponible aún, intenta nuevamente."
BOOTSTRAP_FAILED = "Error inicializando autenticación"


class RoleRouter:
    """Decides, on every session or profile change, which view the user belongs on."""

    def __init__(
        self,
        store: SessionStore,
        resolver: ProfileResolver,
        navigator: INavigator,
        *,
        poll_interval: float = 0.5,
        poll_max_attempts: int = 10,
        oauth_redirect_url: str | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._navigator = navigator
        self._poll_interval = poll_interval
        self._poll_max_attempts = poll_max_attempts
        self._oauth_redirect_url = oauth_redirect_url
        self._status = RouterStatus(RouterState.INITIALIZING)
        self.transitions: list[RouterStatus] = [self._status]
        self._subscription: ISubscription | None = None
        self._poller: ProfilePoller | None = None
        self._signing_in = False

    @property
    def status(self) -> RouterStatus:
        return self._status

    @property
    def state(self) -> RouterState:
        return self._status.state

    @property
    def profile(self) -> Profile | None:
        return self._store.get_profile()

    # -- transitions --------------------------------------------------------

    def _transition(
        self,
        state: RouterState,
        role: ProfileRole | None = None,
        error: str | None = None,
    ) -> None:
        landing = None
        if state is RouterState.AUTHENTICATED:
            landing = access_policy.landing_path(role)
        elif state is RouterState.PENDING_APPROVAL:
            landing = access_policy.PENDING_PATH
        elif state is RouterState.UNAUTHENTICATED:
            landing = access_policy.LOGIN_PATH
        status = RouterStatus(state=state, role=role, error=error, landing_path=landing)
        if status == self._status:
            return
        logger.info(
            "Router %s -> %s%s",
            self._status.state.value,
            state.value,
            f" ({role.value})" if role else "",
        )
        self._status = status
        self.transitions.append(status)

    def _go(self, path: str, *, prefix_ok: bool) -> None:
        current = access_policy.normalize_path(self._navigator.current_path)
        if current == path or (prefix_ok and current.startswith(path)):
            return
        self._navigator.navigate(path, replace=True)

    def _enter_unauthenticated(self) -> None:
        self._transition(RouterState.UNAUTHENTICATED)
        self._go(access_policy.LOGIN_PATH, prefix_ok=False)

    def _enter_for_profile(self, profile: Profile) -> None:
        if access_policy.is_pending(profile.role):
            self._transition(RouterState.PENDING_APPROVAL, role=profile.role)
            self._go(access_policy.PENDING_PATH, prefix_ok=False)
            return
        self._transition(RouterState.AUTHENTICATED, role=profile.role)
        self._go(access_policy.landing_path(profile.role), prefix_ok=True)

    def _fail(self, message: str) -> None:
        self._transition(RouterState.ERROR, error=message)

    # -- lifecycle ----------------------------------------------------------

    async def bootstrap(self) -> RouterStatus:
        """Discover the current session and route accordingly."""
        if self.state is RouterState.ERROR:
            return self._status
        try:
            session = await self._store.get_session()
        except LegalityException as exc:
            logger.exception("Identity provider failed during bootstrap")
            self._fail(exc.message or BOOTSTRAP_FAILED)
            return self._status
        if session is None:
            self._enter_unauthenticated()
            return self._status
        profile = await self._resolver.resolve(session.user)
        self._enter_for_profile(profile)
        return self._status

    def start(self) -> None:
        """Subscribe to the identity provider's change notifications."""
        if self._subscription is None:
            self._subscription = self._store.provider.on_auth_state_change(
                self.on_auth_state_change
            )

    def stop(self) -> None:
        """Unsubscribe and stop any in-flight profile poll."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._cancel_poll()

    def reset(self) -> None:
        """Leave ERROR (manual reload); call bootstrap() afterwards."""
        self._cancel_poll()
        self._store.clear()
        self._transition(RouterState.INITIALIZING)

    def _cancel_poll(self) -> None:
        if self._poller is not None:
            self._poller.cancel()

    async def _await_profile(self):
        self._poller = ProfilePoller(
            self._store,
            self._resolver,
            interval=self._poll_interval,
            max_attempts=self._poll_max_attempts,
        )
        try:
            return await self._poller.poll()
        finally:
            self._poller = None

    # -- user actions -------------------------------------------------------

    async def _complete_sign_in(self, session: Session) -> OperationResult[Profile]:
        self._store.set_session(session)
        outcome = await self._await_profile()
        if isinstance(outcome, Cancelled):
            return OperationResult.failure("Inicio de sesión cancelado")
        if outcome.profile is None:
            return OperationResult.failure(PROFILE_NOT_READY)
        self._enter_for_profile(outcome.profile)
        return OperationResult.success(outcome.profile)

    async def sign_in(self, email: str, password: str) -> OperationResult[Profile]:
        if self.state is RouterState.ERROR:
            return OperationResult.failure(self._status.error or BOOTSTRAP_FAILED)
        self._signing_in = True
        try:
            try:
                session = await self._store.provider.sign_in_with_password(email, password)
            except AuthenticationException as exc:
                return OperationResult.failure(INVALID_CREDENTIALS, exc.error_code)
            except LegalityException as exc:
                logger.warning("Sign-in failed: %s", exc.message)
                return OperationResult.failure(exc.message, exc.error_code)
            return await self._complete_sign_in(session)
        finally:
            self._signing_in = False

    async def sign_up(
        self, email: str, password: str, full_name: str
    ) -> OperationResult[Profile | None]:
        """Register; value is None while the provider waits for email confirmation."""
        if self.state is RouterState.ERROR:
            return OperationResult.failure(self._status.error or BOOTSTRAP_FAILED)
        self._signing_in = True
        try:
            try:
                result = await self._store.provider.sign_up(
                    email, password, {"full_name": full_name}
                )
            except LegalityException as exc:
                logger.warning("Sign-up failed: %s", exc.message)
                return OperationResult.failure(exc.message, exc.error_code)
            if result.session is None:
                logger.info("Sign-up for %s awaiting email confirmation", email)
                return OperationResult.success(None)
            return await self._complete_sign_in(result.session)
        finally:
            self._signing_in = False

    async def sign_in_with_oauth(self, provider: str) -> OperationResult[str]:
        try:
            url = await self._store.provider.sign_in_with_oauth(
                provider, redirect_to=self._oauth_redirect_url
            )
        except LegalityException as exc:
            logger.warning("OAuth sign-in with %s failed: %s", provider, exc.message)
            return OperationResult.failure(exc.message, exc.error_code)
        return OperationResult.success(url)

    async def sign_out(self) -> OperationResult[None]:
        """Sign out remotely if possible; the local session is always cleared."""
        self._cancel_poll()
        try:
            await self._store.provider.sign_out()
        except LegalityException as exc:
            logger.warning("Remote sign-out failed: %s", exc.message)
        finally:
            self._store.clear()
        if self.state is not RouterState.ERROR:
            self._enter_unauthenticated()
        return OperationResult.success()

    async def refresh(self) -> OperationResult[Profile]:
        """Re-resolve the current profile (explicit refresh after a role change)."""
        if self.state is RouterState.ERROR:
            return OperationResult.failure(self._status.error or BOOTSTRAP_FAILED)
        profile = await self._resolver.refresh()
        if profile is None:
            return OperationResult.failure("No hay sesión activa", "AUTHENTICATION_ERROR")
        self._enter_for_profile(profile)
        return OperationResult.success(profile)

    async def refresh_session(self, refresh_token: str | None = None) -> OperationResult[Profile]:
        """Renew the session from a refresh token and route for its profile.

        A rejected token signs the user out locally.
        """
        if self.state is RouterState.ERROR:
            return OperationResult.failure(self._status.error or BOOTSTRAP_FAILED)
        try:
            session = await self._store.provider.refresh_session(refresh_token)
        except AuthenticationException as exc:
            logger.info("Session refresh rejected: %s", exc.message)
            self._store.clear()
            self._enter_unauthenticated()
            return OperationResult.failure(exc.message, exc.error_code)
        except LegalityException as exc:
            logger.warning("Session refresh failed: %s", exc.message)
            return OperationResult.failure(exc.message, exc.error_code)
        if session is None:
            return OperationResult.failure("No hay sesión activa", "AUTHENTICATION_ERROR")
        self._store.set_session(session)
        profile = self._store.get_profile()
        if profile is None:
            profile = await self._resolver.resolve(session.user)
        self._enter_for_profile(profile)
        return OperationResult.success(profile)

    async def on_auth_state_change(self, event: AuthChangeEvent, session: Session | None) -> None:
        """Identity provider notification handler (may race an explicit sign-in)."""
        if self.state is RouterState.ERROR:
            return
        if event is AuthChangeEvent.SIGNED_OUT:
            self._cancel_poll()
            self._store.clear()
            self._enter_unauthenticated()
            return
        if session is None:
            return
        self._store.set_session(session)
        if self._signing_in:
            # The explicit sign-in owns routing; only warm the store.
            profile = await self._resolver.lookup(session.user)
            if profile is not None:
                self._store.set_profile(profile)
            return
        if event is AuthChangeEvent.TOKEN_REFRESHED and self._store.get_profile() is not None:
            return
        profile = await self._resolver.resolve(session.user)
        self._enter_for_profile(profile)

    def guard(self, path: str) -> str | None:
        """Where a request for path must be redirected, or None to render it."""
        if self.state in (RouterState.INITIALIZING, RouterState.ERROR):
            return None
        profile = self._store.get_profile()
        return access_policy.redirect_for(
            path,
            profile,
            authenticated=self._store.is_authenticated and profile is not None,
        )
