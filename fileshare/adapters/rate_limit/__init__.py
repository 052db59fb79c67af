"""Rate limiting adapters.

The HTTP layer depends on ``AbstractRateLimiter`` only, so the per-process
in-memory limiter can later be replaced by a shared store without touching
the routes.
"""
