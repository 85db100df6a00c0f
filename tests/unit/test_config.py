"""Unit tests for configuration management."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from mirror_resilience.core.config import Settings
from mirror_resilience.core.redis_client import create_redis


class TestSettings:
    """Tests for Settings configuration model."""

    def test_default_values(self, monkeypatch):
        """Test default configuration values."""
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.redis_url == ""
        assert settings.redis_configured is False
        assert settings.cache_key_prefix == "ctx"
        assert settings.cache_circuit_failure_threshold == 3
        assert settings.cache_circuit_recovery_timeout == 15.0
        assert settings.rate_limit_circuit_failure_threshold == 3
        assert settings.rate_limit_circuit_recovery_timeout == 15.0
        assert settings.rate_limit_window_seconds == 60
        assert settings.rate_limit_auth == 5
        assert settings.rate_limit_ai == 10
        assert settings.rate_limit_write == 30
        assert settings.rate_limit_global == 100
        assert settings.admin_endpoints_enabled is False
        assert settings.environment == "development"

    def test_env_overrides(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
        monkeypatch.setenv("RATE_LIMIT_AUTH", "7")
        monkeypatch.setenv("CACHE_ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.redis_configured is True
        assert settings.rate_limit_auth == 7
        assert settings.cache_enabled is False

    def test_whitespace_url_is_not_configured(self):
        """Test a blank Redis URL counts as not configured."""
        assert Settings(redis_url="   ").redis_configured is False

    def test_is_production(self):
        """Test production detection is case insensitive."""
        assert Settings(environment="Production").is_production is True
        assert Settings(environment="staging").is_production is False

    @pytest.mark.parametrize(
        "field, value",
        [
            ("cache_circuit_failure_threshold", 0),
            ("rate_limit_circuit_recovery_timeout", 0),
            ("rate_limit_auth", 0),
            ("rate_limit_window_seconds", 0),
            ("api_port", 70000),
            ("cache_key_prefix", ""),
        ],
    )
    def test_validation_errors(self, field, value):
        """Test out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            Settings(**{field: value})


class TestCreateRedis:
    """Tests for Redis client construction."""

    def test_none_without_url(self):
        """Test no client is created without a URL."""
        assert create_redis(Settings(redis_url="")) is None

    def test_client_from_url(self):
        """Test the client is built with the configured timeout."""
        with patch("mirror_resilience.core.redis_client.Redis") as mock_redis_class:
            client = create_redis(Settings(redis_url="redis://localhost:6379", redis_timeout=1.5))

        assert client is mock_redis_class.from_url.return_value
        args, kwargs = mock_redis_class.from_url.call_args
        assert args[0] == "redis://localhost:6379"
        assert kwargs["socket_timeout"] == 1.5
        assert kwargs["decode_responses"] is False
