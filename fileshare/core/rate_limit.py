"""Rate limiting dependencies for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Strategy:
- Sliding window per (route, client IP), policy chosen per route.
- Client IP comes from forwarding headers set by the reverse proxy.
- Clients without forwarding headers share the "unknown" bucket.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import Request

from fileshare.adapters.rate_limit.base import AbstractRateLimiter
from fileshare.adapters.rate_limit.in_memory import (
    UNKNOWN_CLIENT,
    InMemorySlidingWindowRateLimiter,
)
from fileshare.core.config import settings
from fileshare.core.errors import RateLimitedAppError
from fileshare.core.logging import hash_identifier

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    """

    global _limiter

    if _limiter is None:
        _limiter = InMemorySlidingWindowRateLimiter()
    return _limiter


def reset_rate_limiter() -> None:
    """Drop all tracked requests (tests, process lifecycle hooks)."""

    if _limiter is not None:
        _limiter.reset()


def get_client_ip(request: Request) -> str:
    """Best-effort client identity from proxy headers.

    Uses the first entry of ``X-Forwarded-For``, then ``X-Real-IP``, then the
    ``"unknown"`` sentinel.
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or UNKNOWN_CLIENT

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT


def enforce_rate_limit(request: Request, route_key: str, limit: int, window_ms: int) -> None:
    """Consume one request from the caller's budget for ``route_key``.

    Args:
        request: FastAPI request.
        route_key: Identifier of the protected endpoint.
        limit: Max requests per window.
        window_ms: Sliding window length in milliseconds.

    Raises:
        RateLimitedAppError: 429 when the budget is exhausted.
    """

    if not settings.app.rate_limit_enabled:
        return

    client_ip = get_client_ip(request)
    result = get_rate_limiter().check(client_ip, route_key, limit, window_ms)

    log_fields = {
        "route_key": route_key,
        "ip_hash": hash_identifier(client_ip),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_ms": window_ms,
    }
    if result.allowed:
        logger.debug("rate_limit.allowed", extra=log_fields)
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning("rate_limit.exceeded", extra={**log_fields, "retry_after_s": retry_after})

    headers: dict[str, str] | None = None
    if settings.app.rate_limit_include_headers:
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
        }

    raise RateLimitedAppError(
        code="rate_limited",
        message="Too Many Requests",
        details={"retry_after": retry_after, "limit": result.limit},
        headers=headers,
    )


def rate_limited(
    route_key: str,
    limit_setting: str,
    window_setting: str,
) -> Callable[[Request], Awaitable[None]]:
    """Build a route dependency enforcing a policy read from ``settings.app``.

    The policy is looked up on every call, so changed settings apply to the
    next request without rebuilding the limiter.

    Usage:
        @router.get("/x", dependencies=[Depends(rate_limited("x", "x_requests", "x_window_ms"))])
    """

    async def dependency(request: Request) -> None:
        enforce_rate_limit(
            request,
            route_key,
            getattr(settings.app, limit_setting),
            getattr(settings.app, window_setting),
        )

    return dependency
