"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mirror_resilience.api.middleware import setup_middleware
from mirror_resilience.api.routes import create_routes
from mirror_resilience.api.validation import ErrorResponse
from mirror_resilience.core.config import Settings, settings
from mirror_resilience.observability.logging import (
    LogEvents,
    configure_logging,
    get_logger,
)
from mirror_resilience.utils.service_factory import ResilienceServices, create_services

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan (startup/shutdown).

    Startup sequence:
        1. Build Redis client, cache and rate limiters (unless injected)
        2. Expose them on app.state for middleware and handlers

    Shutdown sequence:
        1. Close the shared Redis connection pool
    """
    config: Settings = getattr(app.state, "config", settings)
    services: ResilienceServices | None = getattr(app.state, "services", None)
    if services is None:
        services = create_services(config)

    app.state.services = services
    app.state.cache = services.cache
    app.state.rate_limiters = services.rate_limiters

    logger.info(
        LogEvents.SERVER_STARTED,
        cache_enabled=services.cache.is_enabled(),
        redis_configured=services.redis is not None,
    )

    yield

    await services.close()
    logger.info(LogEvents.SERVER_SHUTDOWN)


def create_app(
    config: Settings | None = None,
    services: ResilienceServices | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Settings override (defaults to environment settings)
        services: Prebuilt services (tests); built at startup if None

    Returns:
        Configured FastAPI app
    """
    config = config or settings
    configure_logging(
        level=config.log_level,
        log_format=config.log_format,
        is_production=config.is_production,
    )

    app = FastAPI(
        title="Mirror Resilience",
        description="Circuit-breaker-guarded caching and rate limiting",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    if services is not None:
        app.state.services = services

    setup_middleware(app)
    app.include_router(create_routes(admin_enabled=config.admin_endpoints_enabled))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unhandled exceptions."""
        logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal server error", detail=str(exc)).model_dump(),
        )

    return app
