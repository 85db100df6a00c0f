"""Consecutive-failure circuit breaker for remote dependencies.

States:
    closed: Normal operation, calls allowed
    open: Threshold reached, calls short-circuited until the recovery timeout
    half_open: Timeout elapsed, the next call is let through as a probe

Pattern:
    closed -> (failures reach threshold) -> open
    open -> (timeout elapsed) -> half_open
    half_open -> (success) -> closed
    half_open -> (failure) -> open, timer restarted

Half-open is never stored. It is derived from the failure count still being
at or above the threshold while the recovery timeout has elapsed.
"""

import threading
import time
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, Field

from mirror_resilience.observability.logging import LogEvents, get_logger

logger = get_logger(__name__)

DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_RECOVERY_TIMEOUT = 15.0


class CircuitState(str, Enum):
    """Derived circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitStatus(BaseModel):
    """Point-in-time breaker status for monitoring.

    Attributes:
        is_open: Whether calls are currently short-circuited
        failures: Consecutive failure count
        recovery_in: Milliseconds until a probe is allowed. None when below
            the threshold, 0 once the recovery timeout has elapsed.
    """

    is_open: bool = Field(..., description="Calls currently short-circuited")
    failures: int = Field(..., ge=0, description="Consecutive failures")
    recovery_in: int | None = Field(
        default=None, description="Milliseconds until a probe is allowed"
    )


class CircuitBreaker:
    """Tracks consecutive failures of one remote dependency.

    The breaker does not call anything itself. Callers ask ``is_open()``
    before a remote call and report the outcome with ``record_success()``
    or ``record_failure()``.

    Example:
        >>> breaker = CircuitBreaker(name="cache")
        >>> if not breaker.is_open():
        ...     try:
        ...         value = await store.get(key)
        ...         breaker.record_success()
        ...     except Exception:
        ...         breaker.record_failure()
    """

    def __init__(
        self,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        recovery_timeout: float = DEFAULT_RECOVERY_TIMEOUT,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening circuit
            recovery_timeout: Seconds before a probe is allowed through
            name: Service name used in log events
            clock: Source of monotonic seconds (injectable for tests)
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if recovery_timeout <= 0:
            raise ValueError("recovery_timeout must be positive")

        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._failure_count = 0
        self._opened_at: float | None = None

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def opened_at(self) -> float | None:
        return self._opened_at

    @property
    def state(self) -> CircuitState:
        """Current state, derived from the counter and the clock."""
        with self._lock:
            if self._failure_count < self.failure_threshold:
                return CircuitState.CLOSED
            if self._within_open_window():
                return CircuitState.OPEN
            return CircuitState.HALF_OPEN

    def is_open(self) -> bool:
        """Check whether calls should be short-circuited.

        Returns False once the recovery timeout has elapsed, even though the
        failure count has not been reset. That lets the next caller probe.
        """
        with self._lock:
            return (
                self._failure_count >= self.failure_threshold
                and self._within_open_window()
            )

    def record_success(self) -> None:
        """Record a successful remote call and close the circuit."""
        with self._lock:
            previous_failures = self._failure_count
            self._failure_count = 0
            self._opened_at = None

        if previous_failures > 0:
            logger.info(
                LogEvents.CIRCUIT_BREAKER_CLOSED,
                service=self.name,
                previous_failures=previous_failures,
            )

    def record_failure(self) -> None:
        """Record a failed remote call, opening the circuit at the threshold."""
        with self._lock:
            probe_failed = (
                self._failure_count >= self.failure_threshold
                and not self._within_open_window()
            )
            self._failure_count += 1
            failures = self._failure_count
            opened = failures == self.failure_threshold
            if opened or probe_failed:
                self._opened_at = self._clock()

        if opened:
            logger.warning(
                LogEvents.CIRCUIT_BREAKER_OPENED,
                service=self.name,
                failure_count=failures,
                recovery_timeout=self.recovery_timeout,
            )
        elif probe_failed:
            logger.warning(
                LogEvents.CIRCUIT_BREAKER_REOPENED,
                service=self.name,
                failure_count=failures,
                recovery_timeout=self.recovery_timeout,
            )

    def status(self) -> CircuitStatus:
        """Get breaker status for monitoring."""
        with self._lock:
            failures = self._failure_count
            if failures < self.failure_threshold or self._opened_at is None:
                return CircuitStatus(is_open=False, failures=failures, recovery_in=None)

            elapsed = self._clock() - self._opened_at
            remaining = max(0.0, self.recovery_timeout - elapsed)
            return CircuitStatus(
                is_open=remaining > 0,
                failures=failures,
                recovery_in=round(remaining * 1000),
            )

    def reset(self) -> None:
        """Manually reset circuit breaker to closed state."""
        with self._lock:
            self._failure_count = 0
            self._opened_at = None
        logger.info(LogEvents.CIRCUIT_BREAKER_RESET, service=self.name)

    def _within_open_window(self) -> bool:
        # Caller holds the lock.
        if self._opened_at is None:
            return False
        return self._clock() - self._opened_at < self.recovery_timeout
