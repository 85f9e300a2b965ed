"""
Application entry point — wires dependencies and starts the scheduler.

Composition root: creates concrete adapters, injects them into the
pipeline, and hands the pipeline to the scheduler.

This is the ONLY place where concrete classes are instantiated.
Everything else depends on Protocol interfaces.

Responsibilities:
  1. Load and validate configuration from environment
  2. Configure structlog
  3. Create concrete adapter instances (HTTP client + file persister)
  4. Wire the pipeline (partial application with config and ports)
  5. Run the scheduler until SIGINT/SIGTERM
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from functools import partial

import structlog
from railway.result import Result

from porkbun_ssl import __version__
from porkbun_ssl.adapters.filesystem import LocalFilePersister
from porkbun_ssl.adapters.http_client import PorkbunCertificateClient
from porkbun_ssl.config import AppSettings, ConfigurationError
from porkbun_ssl.domain.models import RenewalSummary
from porkbun_ssl.pipeline import run_renewal
from porkbun_ssl.scheduler import RenewalScheduler, register_shutdown_signals


def configure_structlog(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    Configure structlog for structured logging.

    log_format="json" emits JSON lines (machine-readable); anything else
    gives colored, human-readable console output.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _create_adapters(settings: AppSettings) -> tuple[PorkbunCertificateClient, LocalFilePersister]:
    """Instantiate the concrete certificate client and file persister."""
    client = PorkbunCertificateClient(
        api_url=settings.api_url,
        api_key=settings.api_key.get_secret_value(),
        secret_key=settings.secret_key.get_secret_value(),
        timeout=settings.http_timeout_seconds,
    )
    return client, LocalFilePersister()


def build_renewal_fn(settings: AppSettings) -> Callable[[], Result[RenewalSummary]]:
    """Bind config and adapters into the zero-argument pass the scheduler runs."""
    client, persister = _create_adapters(settings)
    return partial(
        run_renewal,
        config=settings.to_renewal_config(),
        client=client,
        persister=persister,
    )


def main() -> None:
    """Wire dependencies and run the scheduled renewal until signalled."""
    try:
        settings = AppSettings()  # type: ignore[call-arg]
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level, settings.log_format)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        domains=list(settings.domains),
        cron=settings.cron_schedule,
        combined_mode=bool(settings.combined_cert_path),
    )

    scheduler = RenewalScheduler(build_renewal_fn(settings), cron=settings.cron_schedule)
    register_shutdown_signals(scheduler)

    try:
        scheduler.run_forever()
    except ConfigurationError as e:
        log.error("app.configuration_error", error=str(e))
        sys.exit(1)

    log.info("app.shutdown", reason="signal received")


if __name__ == "__main__":
    main()
