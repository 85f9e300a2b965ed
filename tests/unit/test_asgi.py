"""
Unit tests for the FastAPI ASGI application — REST endpoints.

Tests the /trigger endpoint for manual renewal passes, as well as the
/health, /ready and /info probes.

Uses FastAPI's TestClient without the lifespan, with a mocked scheduler
placed into the module-level state.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from railway import ErrorCode, Result

from porkbun_ssl import __version__, asgi
from porkbun_ssl.domain.models import DomainOutcome, RenewalSummary
from porkbun_ssl.scheduler import SchedulerState


@pytest.fixture(autouse=True)
def _reset_asgi_state() -> None:
    """Reset ASGI module-level state before each test."""
    asgi._scheduler = None
    asgi._scheduler_thread = None
    asgi._error_message = None


@pytest.fixture()
def client() -> TestClient:
    """Create a TestClient without running the lifespan (no real startup)."""
    return TestClient(asgi.app, raise_server_exceptions=False)


def _mock_scheduler(state: SchedulerState = SchedulerState.RUNNING) -> MagicMock:
    scheduler = MagicMock()
    scheduler.state = state
    scheduler.cron = "0 2 * * 1"
    scheduler.next_run_time = None
    scheduler.last_summary = None
    return scheduler


def _alive_thread() -> MagicMock:
    thread = MagicMock()
    thread.is_alive.return_value = True
    return thread


# ─────────────────────── POST /trigger ───────────────────────


class TestTriggerEndpoint:
    """Tests for the POST /trigger endpoint — manual renewal pass."""

    def test_trigger_returns_503_when_scheduler_not_initialized(
        self, client: TestClient,
    ) -> None:
        """
        GIVEN the application has not completed startup
        WHEN POST /trigger is called
        THEN it returns 503 with an unavailable status.
        """
        response = client.post("/trigger")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unavailable"
        assert "not initialized" in body["reason"]

    def test_trigger_returns_200_when_all_domains_renewed(self, client: TestClient) -> None:
        scheduler = _mock_scheduler()
        scheduler.run_pass.return_value = Result.success(
            RenewalSummary(outcomes=(DomainOutcome("example.com", succeeded=True),))
        )
        asgi._scheduler = scheduler

        response = client.post("/trigger")

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "succeeded": ["example.com"],
            "failed": [],
        }
        scheduler.run_pass.assert_called_once_with()

    def test_trigger_reports_partial_pass(self, client: TestClient) -> None:
        """
        GIVEN a pass where one of two domains failed
        WHEN POST /trigger is called
        THEN it returns 200 with status "partial" and the failed domain listed.
        """
        scheduler = _mock_scheduler()
        scheduler.run_pass.return_value = Result.success(
            RenewalSummary(
                outcomes=(
                    DomainOutcome("a.com", succeeded=True),
                    DomainOutcome("b.com", succeeded=False),
                )
            )
        )
        asgi._scheduler = scheduler

        response = client.post("/trigger")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "partial"
        assert body["failed"] == ["b.com"]

    def test_trigger_returns_500_on_pass_failure(self, client: TestClient) -> None:
        scheduler = _mock_scheduler()
        scheduler.run_pass.return_value = Result.failure(
            ErrorCode.TECHNICAL_ERROR, "Execution failed: kaboom"
        )
        asgi._scheduler = scheduler

        response = client.post("/trigger")

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "failed"
        assert body["error_code"] == "TECHNICAL_ERROR"
        assert "kaboom" in body["message"]


# ─────────────────────── GET /health ───────────────────────


class TestHealthEndpoint:
    """Tests for the GET /health liveness probe."""

    def test_health_returns_503_when_no_scheduler_thread(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 503

    def test_health_returns_503_on_error(self, client: TestClient) -> None:
        """
        GIVEN a startup error occurred
        WHEN GET /health is called
        THEN it returns 503 with the error message.
        """
        asgi._error_message = "Config broken"

        response = client.get("/health")

        assert response.status_code == 503
        assert "Config broken" in response.json()["error"]

    def test_health_returns_503_when_thread_died(self, client: TestClient) -> None:
        thread = MagicMock()
        thread.is_alive.return_value = False
        asgi._scheduler_thread = thread

        assert client.get("/health").status_code == 503

    def test_health_returns_200_with_alive_thread(self, client: TestClient) -> None:
        asgi._scheduler_thread = _alive_thread()

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ─────────────────────── GET /ready ───────────────────────


class TestReadyEndpoint:
    """Tests for the GET /ready readiness probe."""

    def test_ready_returns_202_without_scheduler(self, client: TestClient) -> None:
        response = client.get("/ready")
        assert response.status_code == 202

    def test_ready_returns_202_while_idle(self, client: TestClient) -> None:
        """
        GIVEN the scheduler exists but is still IDLE
        WHEN GET /ready is called
        THEN it returns 202 with the current state.
        """
        asgi._scheduler = _mock_scheduler(SchedulerState.IDLE)

        response = client.get("/ready")

        assert response.status_code == 202
        assert response.json()["state"] == "idle"

    def test_ready_returns_200_when_running(self, client: TestClient) -> None:
        asgi._scheduler = _mock_scheduler(SchedulerState.RUNNING)

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_ready_returns_503_on_error(self, client: TestClient) -> None:
        asgi._error_message = "Scheduler error: invalid cron schedule"
        assert client.get("/ready").status_code == 503


# ─────────────────────── GET /info ───────────────────────


class TestInfoEndpoint:
    """Tests for the GET /info metadata endpoint."""

    def test_info_before_startup(self, client: TestClient) -> None:
        response = client.get("/info")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "porkbun-ssl"
        assert body["version"] == __version__
        assert body["state"] is None
        assert body["last_pass"] is None

    def test_info_reports_schedule_and_last_pass(self, client: TestClient) -> None:
        """
        GIVEN a running scheduler that has completed a pass
        WHEN GET /info is called
        THEN it reports the cron, next run and last pass outcome.
        """
        scheduler = _mock_scheduler()
        scheduler.next_run_time = datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc)
        scheduler.last_summary = RenewalSummary(
            outcomes=(
                DomainOutcome("a.com", succeeded=True),
                DomainOutcome("b.com", succeeded=False),
            )
        )
        asgi._scheduler = scheduler

        body = client.get("/info").json()

        assert body["state"] == "running"
        assert body["cron"] == "0 2 * * 1"
        assert body["next_run"].startswith("2026-10-19 02:00")
        assert body["last_pass"] == {"succeeded": ["a.com"], "failed": ["b.com"]}
        assert body["has_error"] is False
