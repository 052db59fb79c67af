"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Buckets are never evicted; the key space grows with distinct clients.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from fileshare.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

UNKNOWN_CLIENT = "unknown"


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class _Bucket:
    limit: int
    window_ms: int
    # Ascending: insertion order is chronological order
    timestamps: deque[float] = field(default_factory=deque)

    def prune(self, now: float) -> None:
        cutoff = now - self.window_ms
        while self.timestamps and self.timestamps[0] <= cutoff:
            self.timestamps.popleft()


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting request timestamps inside a moving window.

    A request at ``now`` is admitted when fewer than ``limit`` earlier admitted
    requests for the same (route, client) key happened after
    ``now - window_ms``. Stale timestamps are pruned lazily on access.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(self, *, clock: Callable[[], float] = _now_ms) -> None:
        """Initialize an empty limiter.

        Args:
            clock: Time source returning UNIX time in milliseconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._buckets: dict[str, _Bucket] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _get_bucket(self, key: str, limit: int, window_ms: int) -> _Bucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = _Bucket(limit=limit, window_ms=window_ms)
            self._buckets[key] = bucket
        else:
            # Last call wins, so a policy change applies without a reset
            bucket.limit = limit
            bucket.window_ms = window_ms
        return bucket

    def check(
        self,
        client_key: str,
        route_key: str,
        limit: int,
        window_ms: int,
    ) -> RateLimitResult:
        """Admit or reject one request for ``route_key`` from ``client_key``.

        Args:
            client_key: Client identity; empty values share the "unknown" bucket.
            route_key: Identifier of the protected endpoint.
            limit: Max admitted requests per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitResult with the decision and the remaining budget.

        Raises:
            ValueError: If route_key is empty or the policy values are invalid.
        """
        if not route_key:
            raise ValueError("route_key must be a non-empty string")
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be > 0")

        key = f"{route_key}:{client_key or UNKNOWN_CLIENT}"
        now = self._clock()

        with self._lock:
            bucket = self._get_bucket(key, limit, window_ms)
            bucket.prune(now)

            if len(bucket.timestamps) >= limit:
                oldest = bucket.timestamps[0]
                retry_after = max(0, math.ceil((oldest + window_ms - now) / 1000))
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    retry_after_seconds=retry_after,
                )

            bucket.timestamps.append(now)
            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=limit - len(bucket.timestamps),
            )

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
