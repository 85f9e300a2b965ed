"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (12-factor app)
  - Fall back to .env file
  - Validate types and constraints at startup
  - Keep API credentials out of logs (SecretStr)

Environment variables (case-insensitive):
  DOMAIN               comma-separated list, e.g. "example.com, example.org"
  API_KEY, SECRET_KEY  Porkbun API credentials
  API_URL              defaults to the public v3 JSON API
  CERTIFICATE_PATH     template, defaults to /certs/{domain}/certificate.pem
  PRIVATE_KEY_PATH     template, defaults to /certs/{domain}/private_key.pem
  COMBINED_CERT_PATH   template; when set, chain + key go to this one file only
  CRON_SCHEDULE        5-field crontab, defaults to Mondays at 02:00

All configuration errors surface when AppSettings() is constructed, before
anything is scheduled.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from apscheduler.triggers.cron import CronTrigger
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from porkbun_ssl.domain.models import RenewalConfig
from porkbun_ssl.domain.paths import check_templates

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"

DEFAULT_API_URL = "https://api.porkbun.com/api/json/v3"
DEFAULT_CERTIFICATE_PATH = "/certs/{domain}/certificate.pem"
DEFAULT_PRIVATE_KEY_PATH = "/certs/{domain}/private_key.pem"
DEFAULT_CRON_SCHEDULE = "0 2 * * 1"


class ConfigurationError(Exception):
    """Structural misconfiguration detected at startup. Always fatal."""


def parse_cron(expression: str) -> CronTrigger:
    """
    Build a CronTrigger from a standard 5-field crontab expression.

    Raises ConfigurationError for anything APScheduler cannot parse.
    """
    try:
        return CronTrigger.from_crontab(expression.strip())
    except ValueError as e:
        raise ConfigurationError(f"invalid cron schedule {expression!r}: {e}") from e


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    domain: str = Field(description="Comma-separated list of domains to renew")
    api_key: SecretStr = Field(description="Porkbun API key")
    secret_key: SecretStr = Field(description="Porkbun secret API key")
    api_url: str = Field(default=DEFAULT_API_URL)
    certificate_path: str = Field(default=DEFAULT_CERTIFICATE_PATH)
    private_key_path: str = Field(default=DEFAULT_PRIVATE_KEY_PATH)
    combined_cert_path: str = Field(
        default="",
        description="Combined chain + key output template; empty disables combined mode",
    )
    cron_schedule: str = Field(
        default=DEFAULT_CRON_SCHEDULE,
        description="Cron expression (5 fields: minute hour dom month dow)",
    )

    http_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, value: str) -> str:
        """Require at least one domain and no empty entries between commas."""
        domains = [d.strip() for d in value.split(",")]
        if not any(domains):
            raise ValueError("at least one domain is required")
        if not all(domains):
            raise ValueError(f"empty entry in domain list: {value!r}")
        return ",".join(domains)

    @field_validator("cron_schedule")
    @classmethod
    def validate_cron(cls, value: str) -> str:
        try:
            parse_cron(value)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e
        return value.strip()

    @model_validator(mode="after")
    def validate_templates(self) -> AppSettings:
        """Multiple domains must not collide on one output path."""
        result = check_templates(self.to_renewal_config())
        if result.is_failure():
            raise ValueError(result.error().message)
        return self

    @property
    def domains(self) -> tuple[str, ...]:
        return tuple(self.domain.split(","))

    def to_renewal_config(self) -> RenewalConfig:
        """Freeze these settings into the value object the pipeline consumes."""
        return RenewalConfig(
            domains=self.domains,
            api_key=self.api_key.get_secret_value(),
            secret_key=self.secret_key.get_secret_value(),
            api_url=self.api_url,
            certificate_path_template=self.certificate_path,
            private_key_path_template=self.private_key_path,
            combined_path_template=self.combined_cert_path,
            cron_schedule=self.cron_schedule,
        )
