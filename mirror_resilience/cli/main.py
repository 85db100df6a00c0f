"""Command-line interface for the resilience layer."""

import asyncio
import json
from typing import Any

import click
import uvicorn

from mirror_resilience.api.app import create_app
from mirror_resilience.core.config import settings
from mirror_resilience.observability.logging import configure_logging, get_logger
from mirror_resilience.utils.service_factory import create_services

logger = get_logger(__name__)

PROBE_KEY = "probe:cli:check"


@click.group()
def cli() -> None:
    """Mirror Resilience - guarded caching and rate limiting."""
    pass


@cli.command()
@click.option("--host", default=settings.api_host, help="Host to bind to", show_default=True)
@click.option(
    "--port", default=settings.api_port, type=int, help="Port to bind to", show_default=True
)
@click.option(
    "--log-level",
    default=settings.log_level.lower(),
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
    show_default=True,
)
def serve(host: str, port: int, log_level: str) -> None:
    """Start the API server."""
    configure_logging(level=log_level.upper())
    logger.info("starting_server", host=host, port=port)

    app = create_app()
    uvicorn.run(app, host=host, port=port, log_level=log_level)


async def _run_check() -> dict[str, Any]:
    services = create_services(settings)
    try:
        await services.cache.set(PROBE_KEY, {"ok": True}, ttl=10)
        cached = await services.cache.get(PROBE_KEY)
        await services.cache.delete(PROBE_KEY)
        limit = await services.rate_limiters.global_.check_limit("cli-probe")

        return {
            "redis_configured": services.redis is not None,
            "cache": {
                "round_trip": cached == {"ok": True},
                "enabled": services.cache.is_enabled(),
                "circuit": services.cache.circuit_status().model_dump(),
            },
            "rate_limiter": {
                "result": limit.model_dump(),
                "circuit": services.rate_limiters.circuit_status().model_dump(),
            },
        }
    finally:
        await services.close()


@cli.command()
def check() -> None:
    """Probe Redis through the cache and rate limiter and print the result."""
    report = asyncio.run(_run_check())
    click.echo(json.dumps(report, indent=2))

    # Non-zero exit when a configured dependency is failing
    if report["redis_configured"] and not (
        report["cache"]["round_trip"] and not report["rate_limiter"]["result"]["circuit_open"]
    ):
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
