"""Operational API routes: health probes and circuit breaker status."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status

from mirror_resilience.api.validation import CircuitsResponse, HealthResponse
from mirror_resilience.observability.logging import get_logger
from mirror_resilience.utils.service_factory import ResilienceServices

logger = get_logger(__name__)


def create_routes(admin_enabled: bool = False) -> APIRouter:
    """Create API routes.

    Handlers read the services built at startup from ``app.state.services``.

    Args:
        admin_enabled: Register the circuit breaker reset endpoint

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    def _circuits(services: ResilienceServices) -> CircuitsResponse:
        return CircuitsResponse(
            cache=services.cache.circuit_status(),
            rate_limiter=services.rate_limiters.circuit_status(),
            cache_enabled=services.cache.is_enabled(),
        )

    @router.get(
        "/health/live",
        response_model=HealthResponse,
        status_code=status.HTTP_200_OK,
        tags=["health"],
    )
    async def health_live() -> HealthResponse:
        """Liveness probe. Does not touch Redis."""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    @router.get(
        "/health/circuits",
        response_model=CircuitsResponse,
        status_code=status.HTTP_200_OK,
        tags=["health"],
    )
    async def health_circuits(request: Request) -> CircuitsResponse:
        return _circuits(request.app.state.services)

    if admin_enabled:

        @router.post(
            "/admin/circuits/reset",
            response_model=CircuitsResponse,
            status_code=status.HTTP_200_OK,
            tags=["admin"],
        )
        async def reset_circuits(request: Request) -> CircuitsResponse:
            """Force both circuit breakers closed (operational recovery)."""
            services: ResilienceServices = request.app.state.services
            services.cache.reset_circuit_breaker()
            services.rate_limiters.reset_circuit_breaker()
            logger.warning("circuits_reset_by_admin")
            return _circuits(services)

    return router
