"""Response schemas for the operational API."""

from pydantic import BaseModel, Field

from mirror_resilience.resilience.circuit_breaker import CircuitStatus


class HealthResponse(BaseModel):
    """Response schema for health endpoints."""

    status: str = Field(..., description="Health status (healthy, unhealthy)")
    timestamp: str = Field(..., description="ISO timestamp")


class CircuitsResponse(BaseModel):
    """Circuit breaker status for the cache and the rate limiters."""

    cache: CircuitStatus = Field(..., description="Cache breaker (fail-open)")
    rate_limiter: CircuitStatus = Field(
        ..., description="Rate limiter breaker (fail-closed)"
    )
    cache_enabled: bool = Field(..., description="Cache configured and circuit closed")


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error message")
    detail: str | None = Field(None, description="Error details")
