"""
Unit tests for the main module — composition root.

Tests verify structlog configuration and the wiring logic without making
real HTTP calls or starting the scheduler loop. structlog.configure is
patched so the global logging setup of the test session is left untouched.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import structlog

from porkbun_ssl.adapters.filesystem import LocalFilePersister
from porkbun_ssl.adapters.http_client import PorkbunCertificateClient
from porkbun_ssl.config import AppSettings, ConfigurationError
from porkbun_ssl.main import build_renewal_fn, configure_structlog, main


@pytest.fixture()
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(  # type: ignore[call-arg]
        _env_file=None,
        domain="example.com,example.org",
        api_key="pk1_main_key",
        secret_key="sk1_main_secret",
        certificate_path=str(tmp_path / "{domain}" / "cert.pem"),
        private_key_path=str(tmp_path / "{domain}" / "key.pem"),
        http_timeout_seconds=7,
    )


class TestConfigureStructlog:
    """Verify structlog configuration function."""

    @patch("porkbun_ssl.main.structlog.configure")
    def test_console_renderer_by_default(self, mock_configure: MagicMock) -> None:
        configure_structlog()

        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    @patch("porkbun_ssl.main.structlog.configure")
    def test_json_renderer(self, mock_configure: MagicMock) -> None:
        """
        GIVEN log_format="json"
        WHEN configure_structlog is called
        THEN the last processor renders JSON lines.
        """
        configure_structlog("INFO", "json")

        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    @patch("porkbun_ssl.main.structlog.make_filtering_bound_logger")
    @patch("porkbun_ssl.main.structlog.configure")
    def test_sets_log_level(self, _configure: MagicMock, mock_filter: MagicMock) -> None:
        configure_structlog("WARNING")
        mock_filter.assert_called_once_with(logging.WARNING)

    @patch("porkbun_ssl.main.structlog.make_filtering_bound_logger")
    @patch("porkbun_ssl.main.structlog.configure")
    def test_invalid_level_falls_back_to_info(
        self, _configure: MagicMock, mock_filter: MagicMock
    ) -> None:
        """
        GIVEN an invalid log_level string
        WHEN configure_structlog is called
        THEN it falls back to INFO (no crash).
        """
        configure_structlog("NONEXISTENT")
        mock_filter.assert_called_once_with(logging.INFO)


class TestBuildRenewalFn:
    """Verify the pipeline is wired with concrete adapters."""

    def test_binds_config_and_adapters(self, settings: AppSettings) -> None:
        renewal_fn = build_renewal_fn(settings)

        assert isinstance(renewal_fn, partial)
        assert renewal_fn.keywords["config"] == settings.to_renewal_config()
        assert isinstance(renewal_fn.keywords["client"], PorkbunCertificateClient)
        assert isinstance(renewal_fn.keywords["persister"], LocalFilePersister)

    def test_client_uses_configured_timeout(self, settings: AppSettings) -> None:
        client = build_renewal_fn(settings).keywords["client"]
        assert client.timeout == 7


class TestMain:
    """Verify process-level behavior of main()."""

    def test_configuration_error_exits_with_status_1(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """
        GIVEN no DOMAIN in the environment
        WHEN main is called
        THEN the process exits with status 1 and a FATAL line on stderr.
        """
        monkeypatch.delenv("DOMAIN", raising=False)
        monkeypatch.setattr(
            "porkbun_ssl.main.AppSettings",
            lambda: AppSettings(_env_file=None),  # type: ignore[call-arg]
        )

        with pytest.raises(SystemExit) as excinfo:
            main()

        assert excinfo.value.code == 1
        assert "FATAL: Configuration error" in capsys.readouterr().err

    @patch("porkbun_ssl.main.register_shutdown_signals")
    @patch("porkbun_ssl.main.RenewalScheduler")
    @patch("porkbun_ssl.main.configure_structlog")
    def test_runs_scheduler_until_shutdown(
        self,
        _configure: MagicMock,
        mock_scheduler_cls: MagicMock,
        mock_signals: MagicMock,
        settings: AppSettings,
    ) -> None:
        """
        GIVEN valid settings
        WHEN main is called
        THEN a scheduler is built with the configured cron, signals are wired,
        and run_forever is called.
        """
        with patch("porkbun_ssl.main.AppSettings", return_value=settings):
            main()

        mock_scheduler_cls.assert_called_once()
        assert mock_scheduler_cls.call_args.kwargs["cron"] == settings.cron_schedule
        scheduler = mock_scheduler_cls.return_value
        mock_signals.assert_called_once_with(scheduler)
        scheduler.run_forever.assert_called_once_with()

    @patch("porkbun_ssl.main.register_shutdown_signals")
    @patch("porkbun_ssl.main.RenewalScheduler")
    @patch("porkbun_ssl.main.configure_structlog")
    def test_invalid_cron_at_start_exits_with_status_1(
        self,
        _configure: MagicMock,
        mock_scheduler_cls: MagicMock,
        _signals: MagicMock,
        settings: AppSettings,
    ) -> None:
        mock_scheduler_cls.return_value.run_forever.side_effect = ConfigurationError("bad cron")

        with patch("porkbun_ssl.main.AppSettings", return_value=settings):
            with pytest.raises(SystemExit) as excinfo:
                main()

        assert excinfo.value.code == 1
