"""Explicit success/failure result returned by every portal operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from legality.domain.exceptions import LegalityException

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a use-case operation.

    Store and provider errors are caught by the use case and reported here
    instead of propagating to the caller. error_code mirrors the domain
    exception's error_code; exception keeps the original (with its details)
    for the HTTP layer.
    """

    ok: bool
    value: T | None = None
    error: str | None = None
    error_code: str | None = None
    exception: "LegalityException | None" = field(default=None, compare=False, repr=False)

    @classmethod
    def success(cls, value: T | None = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        exception: "LegalityException | None" = None,
    ) -> "OperationResult[T]":
        return cls(ok=False, error=error, error_code=error_code, exception=exception)
