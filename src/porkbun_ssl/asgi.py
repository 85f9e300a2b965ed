"""
FastAPI + Uvicorn ASGI application for container deployment.

Runs the renewal scheduler in a background thread while Uvicorn serves
health probes and a manual trigger. Uvicorn owns signal handling here;
lifespan shutdown stops the scheduler and lets an in-flight pass finish.

Entry point: uvicorn porkbun_ssl.asgi:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from porkbun_ssl import __version__
from porkbun_ssl.config import AppSettings
from porkbun_ssl.main import build_renewal_fn, configure_structlog
from porkbun_ssl.scheduler import RenewalScheduler, SchedulerState

# ─────────────────────── Global State ───────────────────────
# Set during app startup and read by the probes.

_scheduler: RenewalScheduler | None = None
_scheduler_thread: threading.Thread | None = None
_error_message: str | None = None
log = structlog.get_logger()


def _run_scheduler(scheduler: RenewalScheduler) -> None:
    """Thread target: start (blocking through the startup pass), then wait for stop."""
    global _error_message
    try:
        log.info("asgi.scheduler_thread_started")
        scheduler.run_forever()
    except Exception as e:
        _error_message = f"Scheduler error: {e}"
        log.error("asgi.scheduler_error", error=_error_message)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: load settings, start scheduler thread. Shutdown: stop it."""
    global _scheduler, _scheduler_thread, _error_message

    try:
        settings = AppSettings()  # type: ignore[call-arg]
    except Exception as e:
        _error_message = f"Configuration error: {e}"
        log.error("asgi.startup_error", error=_error_message)
        raise

    configure_structlog(settings.log_level, settings.log_format)
    log.info("asgi.startup", version=__version__, cron=settings.cron_schedule)

    _scheduler = RenewalScheduler(build_renewal_fn(settings), cron=settings.cron_schedule)
    _scheduler_thread = threading.Thread(
        target=_run_scheduler, args=(_scheduler,), daemon=True
    )
    _scheduler_thread.start()

    yield  # ← App is running here; Uvicorn handles requests

    log.info("asgi.shutdown")
    _scheduler.stop()
    _scheduler_thread.join(timeout=5.0)
    if _scheduler_thread.is_alive():
        log.warning("asgi.scheduler_thread_timeout", timeout_seconds=5.0)
    log.info("asgi.shutdown_complete")


app = FastAPI(
    title="porkbun-ssl",
    description="Scheduled SSL certificate renewal from the Porkbun API",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness: 200 while the scheduler thread is alive and startup succeeded."""
    if _error_message:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": _error_message},
        )
    if not _scheduler_thread or not _scheduler_thread.is_alive():
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "reason": "scheduler thread not running"},
        )
    return JSONResponse(status_code=200, content={"status": "healthy"})


@app.get("/ready")
async def ready() -> JSONResponse:
    """Readiness: 200 once the scheduler has entered RUNNING."""
    if _error_message:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "error": _error_message},
        )
    if _scheduler is None or _scheduler.state is not SchedulerState.RUNNING:
        return JSONResponse(
            status_code=202,
            content={
                "status": "starting",
                "state": _scheduler.state.value if _scheduler else None,
            },
        )
    return JSONResponse(status_code=200, content={"status": "ready"})


@app.get("/info")
async def info() -> dict[str, Any]:
    """Application metadata and the outcome of the most recent pass."""
    summary = _scheduler.last_summary if _scheduler else None
    next_run = _scheduler.next_run_time if _scheduler else None
    return {
        "name": "porkbun-ssl",
        "version": __version__,
        "state": _scheduler.state.value if _scheduler else None,
        "cron": _scheduler.cron if _scheduler else None,
        "next_run": str(next_run) if next_run else None,
        "last_pass": (
            {"succeeded": summary.succeeded, "failed": summary.failed}
            if summary
            else None
        ),
        "has_error": _error_message is not None,
    }


@app.post("/trigger")
async def trigger() -> JSONResponse:
    """
    Run one renewal pass now.

    Goes through the scheduler's run_pass(), so it waits for a scheduled
    pass that is already running instead of overlapping it.

    Returns 200 with per-domain results (even if some domains failed),
    500 if the pass itself failed, 503 before the scheduler exists.
    """
    if _scheduler is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "reason": "Scheduler not initialized"},
        )

    log.info("trigger.manual_start", source="REST")
    result = await asyncio.to_thread(_scheduler.run_pass)

    if result.is_success():
        summary = result.value()
        return JSONResponse(
            status_code=200,
            content={
                "status": "success" if summary.all_succeeded else "partial",
                "succeeded": summary.succeeded,
                "failed": summary.failed,
            },
        )

    failure = result.error()
    return JSONResponse(
        status_code=500,
        content={
            "status": "failed",
            "error_code": failure.code.value,
            "message": failure.message,
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("porkbun_ssl.asgi:app", host="0.0.0.0", port=8000, log_level="info")
