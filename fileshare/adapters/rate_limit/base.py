"""Rate limiter interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Admission decision for one request.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max requests per window applied to this decision.
        remaining: Requests still admissible in the current window.
        retry_after_seconds: Seconds until a slot frees up; None when admitted.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters keyed by (route, client)."""

    @abstractmethod
    def check(
        self,
        client_key: str,
        route_key: str,
        limit: int,
        window_ms: int,
    ) -> RateLimitResult:
        """Record a request attempt and decide whether it is admitted.

        Args:
            client_key: Client identity (e.g. IP address).
            route_key: Identifier of the protected endpoint.
            limit: Max admitted requests per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitResult; rejection is a value, never an exception.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Forget all tracked requests."""
        raise NotImplementedError
