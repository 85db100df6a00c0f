"""Middleware for the FastAPI application."""

import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from mirror_resilience.observability.logging import (
    LogEvents,
    bind_context,
    clear_context,
    get_logger,
)
from mirror_resilience.ratelimit.guard import RateLimitMiddleware, get_client_ip

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests and responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.time()
        bind_context(client_ip=get_client_ip(request))

        logger.info(
            LogEvents.REQUEST_RECEIVED,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
            logger.info(
                LogEvents.REQUEST_COMPLETED,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                latency=round(time.time() - start_time, 3),
            )
            return response
        finally:
            clear_context()


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware in correct order.

    Middleware Order (applied bottom-to-top):
        1. Rate limiting - global tier, health checks exempt
        2. Logging - records request/response, including 429s
    """
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(LoggingMiddleware)

    logger.info("middleware_configured")
