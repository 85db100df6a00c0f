"""Unit tests for the command-line interface."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from mirror_resilience.cache import CacheClient
from mirror_resilience.cli.main import cli
from mirror_resilience.core.config import Settings
from mirror_resilience.ratelimit import build_rate_limiters
from mirror_resilience.utils.service_factory import ResilienceServices


def _services(redis=None, store=None) -> ResilienceServices:
    return ResilienceServices(
        redis=redis,
        cache=CacheClient(store),
        rate_limiters=build_rate_limiters(None, Settings()),
    )


class TestCheckCommand:
    """Tests for the check command."""

    def test_without_redis(self):
        """Test check succeeds in pass-through mode."""
        with patch("mirror_resilience.cli.main.create_services", return_value=_services()):
            result = CliRunner().invoke(cli, ["check"])

        assert result.exit_code == 0
        report = json.loads(result.output)
        assert report["redis_configured"] is False
        assert report["cache"]["round_trip"] is False
        assert report["rate_limiter"]["result"]["success"] is True

    def test_round_trip(self, mock_store):
        """Test a working store reports a successful round trip."""
        mock_store.get.return_value = {"ok": True}
        redis = MagicMock()
        redis.aclose = AsyncMock()

        with patch(
            "mirror_resilience.cli.main.create_services",
            return_value=_services(redis=redis, store=mock_store),
        ):
            result = CliRunner().invoke(cli, ["check"])

        assert result.exit_code == 0
        report = json.loads(result.output)
        assert report["cache"]["round_trip"] is True
        assert report["cache"]["circuit"]["failures"] == 0
        mock_store.set.assert_awaited_once()
        mock_store.delete.assert_awaited_once()

    def test_failing_redis_exits_nonzero(self, mock_store):
        """Test a configured but failing Redis exits with status 1."""
        mock_store.set.side_effect = ConnectionError("down")
        mock_store.get.side_effect = ConnectionError("down")
        redis = MagicMock()
        redis.aclose = AsyncMock()

        with patch(
            "mirror_resilience.cli.main.create_services",
            return_value=_services(redis=redis, store=mock_store),
        ):
            result = CliRunner().invoke(cli, ["check"])

        assert result.exit_code == 1


class TestServeCommand:
    """Tests for the serve command."""

    def test_runs_uvicorn(self):
        """Test serve hands the app to uvicorn with the chosen bind address."""
        with (
            patch("mirror_resilience.cli.main.uvicorn.run") as mock_run,
            patch("mirror_resilience.cli.main.create_app") as mock_create_app,
        ):
            result = CliRunner().invoke(
                cli, ["serve", "--host", "127.0.0.1", "--port", "9000", "--log-level", "info"]
            )

        assert result.exit_code == 0
        mock_run.assert_called_once_with(
            mock_create_app.return_value, host="127.0.0.1", port=9000, log_level="info"
        )
