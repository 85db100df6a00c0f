"""Configuration management for the resilience layer.

Settings are loaded from environment variables (and an optional .env file)
with validation and type safety.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Redis (shared by cache and rate limiters)
    redis_url: str = Field(
        default="", description="Redis URL (empty = Redis not configured)"
    )
    redis_timeout: float = Field(
        default=2.0, description="Redis socket timeout seconds", gt=0, le=30
    )

    # Cache (fail-open)
    cache_enabled: bool = Field(default=True, description="Enable user context caching")
    cache_key_prefix: str = Field(
        default="ctx", min_length=1, description="Namespace prefix for cache keys"
    )
    cache_circuit_failure_threshold: int = Field(
        default=3, description="Consecutive failures before opening circuit", ge=1, le=20
    )
    cache_circuit_recovery_timeout: float = Field(
        default=15.0,
        description="Seconds before a half-open probe is allowed",
        gt=0,
        le=3600,
    )

    # Rate limiting (fail-closed)
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    rate_limit_circuit_failure_threshold: int = Field(
        default=3, description="Consecutive failures before opening circuit", ge=1, le=20
    )
    rate_limit_circuit_recovery_timeout: float = Field(
        default=15.0,
        description="Seconds before a half-open probe is allowed",
        gt=0,
        le=3600,
    )
    rate_limit_window_seconds: int = Field(
        default=60, description="Sliding window size in seconds", ge=1, le=86400
    )
    rate_limit_auth: int = Field(
        default=5, description="Auth requests per window per IP", ge=1, le=10000
    )
    rate_limit_ai: int = Field(
        default=10, description="AI requests per window per user", ge=1, le=10000
    )
    rate_limit_write: int = Field(
        default=30, description="Write requests per window per user", ge=1, le=10000
    )
    rate_limit_global: int = Field(
        default=100, description="Requests per window per IP", ge=1, le=100000
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port", ge=1, le=65535)
    admin_endpoints_enabled: bool = Field(
        default=False, description="Expose circuit breaker reset endpoint"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str | None = Field(
        default=None, description="Log format (json, console); None = by environment"
    )
    environment: str = Field(
        default="development", description="Environment (development, production)"
    )

    @property
    def redis_configured(self) -> bool:
        """Check if a Redis URL was provided."""
        return bool(self.redis_url.strip())

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


settings = Settings()
