"""Unit tests for the generic circuit-breaker-guarded client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mirror_resilience.resilience import CircuitBreakerClient, FailurePolicy


def _client(backend, breaker, policy=FailurePolicy.FAIL_OPEN):
    return CircuitBreakerClient(backend=backend, breaker=breaker, policy=policy, service="test")


async def _call(client, fn):
    return await client.call(
        "op",
        fn,
        unconfigured="unconfigured",
        denied="denied",
        error_event="test_error",
        key="k",
    )


class TestCircuitBreakerClient:
    """Tests for guarded call bookkeeping."""

    @pytest.mark.asyncio
    async def test_unconfigured_backend(self, breaker):
        """Test no backend returns the unconfigured value without calling fn."""
        fn = AsyncMock()
        client = _client(None, breaker)

        assert await _call(client, fn) == "unconfigured"
        fn.assert_not_called()
        assert client.configured is False
        assert client.available() is False

    @pytest.mark.asyncio
    async def test_success_records_success(self, breaker):
        """Test successful calls return the result and reset failures."""
        breaker.record_failure()
        client = _client(MagicMock(), breaker)

        result = await _call(client, AsyncMock(return_value="value"))

        assert result == "value"
        assert breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_failure_records_failure_and_denies(self, breaker):
        """Test a raising call returns the denied value and counts a failure."""
        client = _client(MagicMock(), breaker)

        result = await _call(client, AsyncMock(side_effect=ConnectionError("refused")))

        assert result == "denied"
        assert breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_short_circuits(self, breaker):
        """Test fn is never called while the circuit is open."""
        for _ in range(3):
            breaker.record_failure()
        fn = AsyncMock()
        client = _client(MagicMock(), breaker)

        assert await _call(client, fn) == "denied"
        fn.assert_not_called()
        assert client.available() is False

    @pytest.mark.asyncio
    async def test_open_circuit_bypassed_when_not_respected(self, breaker):
        """Test respect_open=False reaches the backend and records the outcome."""
        for _ in range(3):
            breaker.record_failure()
        fn = AsyncMock(return_value="ok")
        client = _client(MagicMock(), breaker)

        result = await client.call(
            "op",
            fn,
            unconfigured="unconfigured",
            denied="denied",
            error_event="test_error",
            respect_open=False,
        )

        assert result == "ok"
        fn.assert_awaited_once()
        assert breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_probe_allowed_after_timeout(self, breaker, clock):
        """Test the half-open probe reaches the backend and closes on success."""
        for _ in range(3):
            breaker.record_failure()
        clock.advance(15.0)
        fn = AsyncMock(return_value="ok")
        client = _client(MagicMock(), breaker)

        assert await _call(client, fn) == "ok"
        fn.assert_awaited_once()
        assert breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_sync_raise_is_absorbed(self, breaker):
        """Test an exception raised before any await is still handled."""
        client = _client(MagicMock(), breaker)

        def explode(backend):
            raise TimeoutError("timed out")

        assert await _call(client, explode) == "denied"
        assert breaker.failure_count == 1

    @pytest.mark.parametrize(
        "policy, level, other",
        [
            (FailurePolicy.FAIL_OPEN, "warning", "error"),
            (FailurePolicy.FAIL_CLOSED, "error", "warning"),
        ],
    )
    @pytest.mark.asyncio
    async def test_log_severity_follows_policy(self, breaker, policy, level, other):
        """Test fail-open logs warnings and fail-closed logs errors."""
        client = _client(MagicMock(), breaker, policy=policy)

        with patch("mirror_resilience.resilience.client.logger") as mock_logger:
            await _call(client, AsyncMock(side_effect=RuntimeError("boom")))

            getattr(mock_logger, level).assert_called_once()
            getattr(mock_logger, other).assert_not_called()
            args, kwargs = getattr(mock_logger, level).call_args
            assert args[0] == "test_error"
            assert kwargs["key"] == "k"
            assert kwargs["error"] == "boom"
            assert kwargs["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_status_and_reset_delegate_to_breaker(self, breaker):
        """Test status/reset helpers act on the owned breaker."""
        client = _client(MagicMock(), breaker)
        for _ in range(3):
            breaker.record_failure()

        assert client.circuit_status().is_open is True

        client.reset_circuit_breaker()

        assert client.circuit_status().failures == 0
