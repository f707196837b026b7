"""Rate limiting adapters.

This package provides a small abstraction layer so the store can start with
an in-memory limiter and later migrate to a shared backend without changing
the service or API layers.
"""

from recordstore.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from recordstore.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemoryFixedWindowRateLimiter", "RateLimitResult"]
