"""Application-level exception types.

Every error carries an ``ErrorKind`` tag. The kind alone decides the HTTP
status, so call sites never inspect ad hoc fields to classify a failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, TypedDict


class ErrorKind(str, Enum):
    """Closed set of failure categories exposed to clients."""

    INVALID = "invalid"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS_BY_KIND[self]


_HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.EXPIRED: 410,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL: 500,
}


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    expired_at: str
    retry_after: int
    limit: int
    missing: list[str]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when caller input or a stored entry is malformed."""

    kind = ErrorKind.INVALID


class NotFoundAppError(AppError):
    """Raised when no record matches the caller's identifier."""

    kind = ErrorKind.NOT_FOUND


class ExpiredAppError(AppError):
    """Raised when a record exists but is past its validity."""

    kind = ErrorKind.EXPIRED


@dataclass
class RateLimitedAppError(AppError):
    """Raised by the HTTP layer when a client exhausted its request budget.

    Attributes:
        headers: Response headers (Retry-After, X-RateLimit-*) to send back.
    """

    headers: dict[str, str] | None = None

    kind = ErrorKind.RATE_LIMITED


class InternalAppError(AppError):
    """Raised when a collaborator (record store, URL signer) fails."""

    kind = ErrorKind.INTERNAL


class ConfigurationAppError(AppError):
    """Raised when a collaborator cannot be built from the current settings."""

    kind = ErrorKind.INTERNAL
