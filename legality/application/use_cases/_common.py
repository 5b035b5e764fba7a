"""Helpers shared by the portal use cases."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from legality.application.dtos.profile import Profile
from legality.application.dtos.result import OperationResult
from legality.application.services.session_store import SessionStore
from legality.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    LegalityException,
    ValidationException,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Called after a successful mutation with the action name.
ChangeListener = Callable[[str], None]


async def run_operation(
    action: str, call: Callable[[], Awaitable[T]]
) -> OperationResult[T]:
    """Run call and convert any domain exception into a failure result.

    Store and provider errors never reach the caller as exceptions; they are
    logged here. Validation and permission failures are expected and logged
    at a lower level.
    """
    try:
        return OperationResult.success(await call())
    except (ValidationException, AuthorizationException, AuthenticationException) as exc:
        logger.info("%s rejected: %s", action, exc.message)
        return OperationResult.failure(exc.message, exc.error_code, exc)
    except LegalityException as exc:
        logger.exception("%s failed", action)
        return OperationResult.failure(exc.message, exc.error_code, exc)


def current_actor(store: SessionStore) -> Profile:
    """Profile of the signed-in user.

    Raises:
        AuthenticationException: If no profile has been resolved.
    """
    profile = store.get_profile()
    if profile is None:
        raise AuthenticationException("No authenticated profile")
    return profile


def require_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationException(f"{field} is required", field=field)
    return text


class ChangeNotifier:
    """Base for use cases whose mutations invalidate cached read models."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback fired after every successful mutation."""
        self._listeners.append(listener)

    def _notify(self, action: str) -> None:
        for listener in list(self._listeners):
            listener(action)

    async def _mutate(self, action: str, call: Callable[[], Awaitable[T]]) -> OperationResult[T]:
        result = await run_operation(action, call)
        if result.ok:
            self._notify(action)
        return result
