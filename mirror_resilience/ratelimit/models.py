"""Rate limit result models."""

from pydantic import BaseModel, Field


class LimitResponse(BaseModel):
    """Decision returned by a limiter backend.

    Attributes:
        success: Whether the identifier is within its limit
        limit: Requests allowed per window
        remaining: Requests left in the current window
        reset: Epoch milliseconds when the window frees up
    """

    success: bool = Field(..., description="Within limit")
    limit: int | None = Field(default=None, description="Requests per window")
    remaining: int | None = Field(default=None, description="Requests left")
    reset: int | None = Field(default=None, description="Reset time (epoch ms)")


class RateLimitResult(BaseModel):
    """Outcome of ``RateLimiter.check_limit``.

    Attributes:
        success: Whether the request may proceed
        remaining: Requests left in the window (absent when not known)
        reset: Epoch milliseconds when the window frees up (absent when not known)
        circuit_open: True only when the denial comes from a limiter outage
            rather than the caller exceeding its limit
    """

    success: bool = Field(..., description="Request allowed")
    remaining: int | None = Field(default=None, description="Requests left")
    reset: int | None = Field(default=None, description="Reset time (epoch ms)")
    circuit_open: bool = Field(
        default=False, description="Denied because the limiter is unavailable"
    )
