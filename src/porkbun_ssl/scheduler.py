"""
Scheduler — periodic execution of the renewal pipeline.

Infrastructure layer — uses APScheduler (3.x) for lightweight in-process
scheduling driven by a standard 5-field cron expression.

Lifecycle:

  IDLE ──start()──▶ RUNNING ──stop()──▶ STOPPED

start() parses the cron expression (fatal on error), runs one pass right
away, then arms the periodic job. Every pass, whether from a tick, from
startup or from a manual trigger, goes through run_pass(), which holds a
lock: a tick that fires mid-pass waits instead of running alongside it.

Shutdown is cooperative: request_stop() (signal-safe) wakes
wait_for_shutdown(), and stop() removes the trigger and waits for an
in-flight pass to finish.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable
from datetime import datetime
from enum import Enum

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from railway import LoggingExecutionContext
from railway.result import Result

from porkbun_ssl.config import parse_cron
from porkbun_ssl.domain.models import RenewalSummary

log = structlog.get_logger()

JOB_ID = "certificate_renewal"


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class RenewalScheduler:
    """
    Run a renewal function once at startup and then on a cron schedule.

    Args:
        renewal_fn: Zero-argument callable returning Result[RenewalSummary]
                    (the wired pipeline).
        cron: Standard 5-field cron expression (minute hour dom month dow).
    """

    def __init__(
        self,
        renewal_fn: Callable[[], Result[RenewalSummary]],
        cron: str,
    ) -> None:
        self._renewal_fn = renewal_fn
        self._cron = cron
        self._ctx = LoggingExecutionContext(operation="CertificateRenewal")
        self._scheduler = BackgroundScheduler()
        self._pass_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._state_lock = threading.Lock()
        self._state = SchedulerState.IDLE
        self.last_summary: RenewalSummary | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def cron(self) -> str:
        return self._cron

    @property
    def next_run_time(self) -> datetime | None:
        """When the periodic trigger fires next; None unless armed."""
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def start(self) -> None:
        """
        Parse the schedule, run one pass immediately, then arm the trigger.

        Raises ConfigurationError if the cron expression is invalid; the
        scheduler then stays IDLE and nothing has run.
        """
        with self._state_lock:
            if self._state is not SchedulerState.IDLE:
                raise RuntimeError(f"cannot start a scheduler in state {self._state.value}")
            trigger = parse_cron(self._cron)
            self._state = SchedulerState.RUNNING

        log.info("scheduler.started", cron=self._cron)
        log.info("scheduler.startup_run")
        self.run_pass()

        with self._state_lock:
            if self._state is not SchedulerState.RUNNING:
                return
            self._scheduler.add_job(
                self.run_pass,
                trigger=trigger,
                id=JOB_ID,
                name="Certificate renewal",
                replace_existing=True,
                coalesce=True,
                # A second instance only ever blocks on the pass lock.
                max_instances=2,
            )
            self._scheduler.start()
        log.info("scheduler.armed", next_run=str(self.next_run_time))

    def run_pass(self) -> Result[RenewalSummary]:
        """Execute one renewal pass; blocks while another pass is in flight."""
        with self._pass_lock:
            result = self._ctx.execute(self._renewal_fn)
        if result.is_success():
            summary = result.value()
            self.last_summary = summary
            log.info(
                "scheduler.pass_completed",
                succeeded=len(summary.succeeded),
                failed=len(summary.failed),
            )
        else:
            log.error("scheduler.pass_failed", failure=str(result.error()))
        return result

    def request_stop(self) -> None:
        """Ask wait_for_shutdown() to return. Safe to call from a signal handler."""
        self._stop_requested.set()

    def wait_for_shutdown(self, timeout: float | None = None) -> bool:
        """Block until request_stop() is called. Returns False on timeout."""
        return self._stop_requested.wait(timeout)

    def stop(self) -> None:
        """Remove the periodic trigger and wait for any in-flight pass."""
        with self._state_lock:
            if self._state is SchedulerState.STOPPED:
                return
            was_armed = self._scheduler.running
            self._state = SchedulerState.STOPPED
        self._stop_requested.set()
        log.info("scheduler.stopping")
        if was_armed:
            self._scheduler.shutdown(wait=True)
        # A startup or manual pass may still hold the lock.
        with self._pass_lock:
            pass
        log.info("scheduler.stopped")

    def run_forever(self) -> None:
        """start(), then block until shutdown is requested, then stop()."""
        self.start()
        try:
            self.wait_for_shutdown()
        finally:
            self.stop()


def register_shutdown_signals(scheduler: RenewalScheduler) -> None:
    """Register SIGINT and SIGTERM handlers for graceful shutdown."""

    def _shutdown(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        log.info("scheduler.shutdown_requested", signal=sig_name)
        scheduler.request_stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
