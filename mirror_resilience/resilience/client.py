"""Circuit-breaker-guarded access to a remote backend.

Both the cache and the rate limiter talk to Redis through this wrapper. They
share the bookkeeping (short-circuit while open, record outcome, absorb the
error) and differ only in their ``FailurePolicy``:

    FAIL_OPEN: errors are logged at warning level and the caller's safe
        default is returned. Used for caching, where an outage should only
        cost performance.
    FAIL_CLOSED: errors are logged at error level and the caller's denial
        value is returned. Used for rate limiting, where absorbing the error
        would silently disable protection.
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from mirror_resilience.core.exceptions import MirrorError
from mirror_resilience.observability.logging import LogEvents, get_logger
from mirror_resilience.resilience.circuit_breaker import CircuitBreaker, CircuitStatus

logger = get_logger(__name__)

BackendT = TypeVar("BackendT")
ResultT = TypeVar("ResultT")


class FailurePolicy(str, Enum):
    """What a guarded client does when its dependency is broken."""

    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


class CircuitBreakerClient(Generic[BackendT]):
    """Runs calls against an optional backend behind a circuit breaker.

    Attributes:
        backend: Remote backend, or None when not configured
        breaker: Breaker owned exclusively by this client
        policy: Failure policy (controls error log severity)
        service: Service name for log events
    """

    def __init__(
        self,
        backend: BackendT | None,
        breaker: CircuitBreaker,
        policy: FailurePolicy,
        service: str,
    ):
        self.backend = backend
        self.breaker = breaker
        self.policy = policy
        self.service = service

    @property
    def configured(self) -> bool:
        return self.backend is not None

    def available(self) -> bool:
        """Check if a backend is configured and the circuit allows calls."""
        return self.backend is not None and not self.breaker.is_open()

    async def call(
        self,
        operation: str,
        fn: Callable[[BackendT], Awaitable[ResultT]],
        *,
        unconfigured: ResultT,
        denied: ResultT,
        error_event: str,
        respect_open: bool = True,
        **context: Any,
    ) -> ResultT:
        """Execute ``fn(backend)`` under the breaker.

        Args:
            operation: Operation name for logs (get, set, limit, ...)
            fn: Coroutine function receiving the backend
            unconfigured: Returned when no backend is configured
            denied: Returned when the circuit is open or the call raises
            error_event: Log event name for a failed call
            respect_open: Short-circuit while the breaker is open. When False
                the call always reaches the backend and its outcome is still
                recorded.
            **context: Extra log fields (key, identifier, ...)

        Returns:
            The backend result, ``unconfigured`` or ``denied``

        Note:
            Any ``Exception`` from the backend is treated as a remote-call
            failure, whatever its cause (connection, timeout, serialization).
        """
        backend = self.backend
        if backend is None:
            return unconfigured

        if respect_open and self.breaker.is_open():
            logger.debug(
                LogEvents.CIRCUIT_OPEN_SKIP,
                service=self.service,
                operation=operation,
                **context,
            )
            return denied

        try:
            result = await fn(backend)
        except Exception as e:
            self.breaker.record_failure()
            self._log_failure(error_event, operation, e, context)
            return denied

        self.breaker.record_success()
        return result

    def circuit_status(self) -> CircuitStatus:
        """Get breaker status for monitoring."""
        return self.breaker.status()

    def reset_circuit_breaker(self) -> None:
        """Reset breaker state (tests and operational recovery)."""
        self.breaker.reset()

    def _log_failure(
        self,
        event: str,
        operation: str,
        error: Exception,
        context: dict[str, Any],
    ) -> None:
        fields = dict(context)
        if isinstance(error, MirrorError) and error.details:
            fields.update(error.details)

        log = logger.warning if self.policy is FailurePolicy.FAIL_OPEN else logger.error
        log(
            event,
            service=self.service,
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **fields,
        )
