"""Rate limiting wiring for the HTTP layer.

The limiter itself lives in ``recordstore.adapters.rate_limit`` and is owned
by the record service; this module builds it from settings, derives the
client identity from a request, and renders throttling headers.
"""

from __future__ import annotations

from fastapi import Request

from recordstore.adapters.rate_limit.base import AbstractRateLimiter
from recordstore.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from recordstore.core.config import RateLimitSettings
from recordstore.core.errors import RateLimitAppError


def build_rate_limiter(rate_settings: RateLimitSettings) -> AbstractRateLimiter | None:
    """Create the process-wide limiter, or None when limiting is disabled."""

    if not rate_settings.enabled:
        return None

    return InMemoryFixedWindowRateLimiter(
        limit=rate_settings.requests,
        window_seconds=rate_settings.window_seconds,
        max_keys=rate_settings.max_keys,
    )


def get_client_id(request: Request) -> str:
    """FastAPI dependency returning the client identity (peer IP address)."""

    return request.client.host if request.client and request.client.host else "unknown"


def build_rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    """Render Retry-After and X-RateLimit-* headers for a denied request."""

    details = exc.details or {}
    headers: dict[str, str] = {}
    if "retry_after" in details:
        headers["Retry-After"] = str(details["retry_after"])
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    if "remaining" in details:
        headers["X-RateLimit-Remaining"] = str(details["remaining"])
    if "reset_at" in details:
        headers["X-RateLimit-Reset"] = str(details["reset_at"])
    return headers
