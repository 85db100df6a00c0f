"""HTTP rate limiting helpers for FastAPI/Starlette handlers.

``with_rate_limit`` wraps a single handler call; ``RateLimitMiddleware``
applies the global tier to every request.
"""

import math
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from mirror_resilience.observability.logging import LogEvents, get_logger
from mirror_resilience.ratelimit.limiter import RateLimiter, check_rate_limit
from mirror_resilience.ratelimit.models import RateLimitResult

logger = get_logger(__name__)

DEFAULT_RETRY_AFTER = 60


def _now_ms() -> float:
    return time.time() * 1000


def get_client_ip(request: Request) -> str:
    """Extract the caller identifier from proxy headers.

    Returns:
        First address in X-Forwarded-For, else X-Real-IP, else "unknown"
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # First IP in chain is the original client
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return "unknown"


def retry_after_seconds(result: RateLimitResult) -> int:
    """Seconds until the caller may retry, defaulting to 60 without a reset."""
    if result.reset is None:
        return DEFAULT_RETRY_AFTER
    return max(0, math.ceil((result.reset - _now_ms()) / 1000))


def too_many_requests(result: RateLimitResult) -> JSONResponse:
    """Build the 429 response for a denied request."""
    retry_after = retry_after_seconds(result)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": "Too many requests",
            "message": "Please try again later.",
            "retryAfter": retry_after,
        },
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Remaining": "0",
        },
    )


def _default_limiter(request: Request) -> RateLimiter | None:
    limiters = getattr(request.app.state, "rate_limiters", None)
    return limiters.auth if limiters is not None else None


async def with_rate_limit(
    request: Request,
    handler: Callable[[], Awaitable[Response]],
    limiter: RateLimiter | None = None,
) -> Response:
    """Run ``handler`` only if the caller is within its rate limit.

    Args:
        request: Incoming HTTP request (source of the caller identifier)
        handler: Zero-argument coroutine producing the real response
        limiter: Limiter to apply (defaults to the app's auth tier)

    Returns:
        429 response on denial, otherwise the handler's response with
        X-RateLimit-Remaining / X-RateLimit-Reset added when known

    Example:
        >>> @app.post("/auth/signin")
        ... async def signin(request: Request) -> Response:
        ...     return await with_rate_limit(request, lambda: do_signin(request))
    """
    if limiter is None:
        limiter = _default_limiter(request)

    client_ip = get_client_ip(request)
    result = await check_rate_limit(limiter, client_ip)

    if not result.success:
        logger.warning(
            LogEvents.RATE_LIMITED,
            identifier=client_ip,
            path=request.url.path,
            circuit_open=result.circuit_open,
        )
        return too_many_requests(result)

    response = await handler()

    if result.remaining is not None and result.reset is not None:
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(result.reset)

    return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies a rate limiter to every request.

    Uses the app's global tier from ``app.state.rate_limiters`` unless a
    limiter is passed explicitly. Health checks are exempt.

    Example:
        >>> app.add_middleware(RateLimitMiddleware)
    """

    def __init__(
        self,
        app: Callable[..., Any],
        limiter: RateLimiter | None = None,
        exempt_prefixes: tuple[str, ...] = ("/health/",),
    ):
        super().__init__(app)
        self.limiter = limiter
        self.exempt_prefixes = exempt_prefixes

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        limiter = self.limiter
        if limiter is None:
            limiters = getattr(request.app.state, "rate_limiters", None)
            limiter = limiters.global_ if limiters is not None else None

        if limiter is None:
            return await call_next(request)

        return await with_rate_limit(request, lambda: call_next(request), limiter)
