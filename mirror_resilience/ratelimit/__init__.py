"""Fail-closed rate limiting.

A failing limiter denies requests (HTTP 429) instead of letting unlimited
traffic through. A limiter without Redis is a deliberate pass-through.

Usage:
    >>> from mirror_resilience.ratelimit import with_rate_limit
    >>>
    >>> @app.post("/auth/signin")
    >>> async def signin(request: Request) -> Response:
    >>>     return await with_rate_limit(request, lambda: handle_signin(request))
"""

from mirror_resilience.ratelimit.backend import LimiterBackend, SlidingWindowLimiter
from mirror_resilience.ratelimit.guard import (
    RateLimitMiddleware,
    get_client_ip,
    with_rate_limit,
)
from mirror_resilience.ratelimit.limiter import (
    RateLimiter,
    RateLimiters,
    build_rate_limiters,
    check_rate_limit,
    create_rate_limiter,
)
from mirror_resilience.ratelimit.models import LimitResponse, RateLimitResult

__all__ = [
    "RateLimiter",
    "RateLimiters",
    "RateLimitResult",
    "LimitResponse",
    "LimiterBackend",
    "SlidingWindowLimiter",
    "RateLimitMiddleware",
    "build_rate_limiters",
    "check_rate_limit",
    "create_rate_limiter",
    "get_client_ip",
    "with_rate_limit",
]
