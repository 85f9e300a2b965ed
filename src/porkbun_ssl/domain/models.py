"""
Domain models — immutable value objects for the renewal workflow.

RenewalConfig is built once at startup and shared read-only by every pass.
CertificateBundle lives only for the duration of one domain's processing.
DomainOutcome and RenewalSummary describe what a pass did; they are logged
and returned to callers, never persisted.

All models are frozen dataclasses. Key material and API credentials are
excluded from repr so they cannot leak into logs through an f-string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from railway import FailureDescription


@dataclass(frozen=True, slots=True)
class RenewalConfig:
    """
    Validated configuration consumed by the renewal pipeline.

    An empty combined_path_template disables combined mode; when it is set,
    the certificate and private-key templates are ignored entirely.
    """

    domains: tuple[str, ...]
    api_key: str = field(repr=False)
    secret_key: str = field(repr=False)
    api_url: str
    certificate_path_template: str
    private_key_path_template: str
    combined_path_template: str = ""
    cron_schedule: str = "0 2 * * 1"

    @property
    def combined_mode(self) -> bool:
        return self.combined_path_template != ""


@dataclass(frozen=True, slots=True)
class CertificateBundle:
    """
    Certificate chain and private key returned by the provider for one domain.

    Both fields are opaque PEM text; nothing here parses them.
    """

    certificate_chain: str
    private_key: str = field(repr=False)

    def combined(self) -> str:
        """Chain, newline, key — the content of a combined-mode file."""
        return f"{self.certificate_chain}\n{self.private_key}"


@dataclass(frozen=True, slots=True)
class DomainOutcome:
    """Result of processing one domain during a pass."""

    domain: str
    succeeded: bool
    failure: FailureDescription | None = None
    written: tuple[Path, ...] = ()


@dataclass(frozen=True, slots=True)
class RenewalSummary:
    """Per-domain outcomes of one renewal pass, in configured order."""

    outcomes: tuple[DomainOutcome, ...] = ()

    @property
    def succeeded(self) -> list[str]:
        return [o.domain for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[str]:
        return [o.domain for o in self.outcomes if not o.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return all(o.succeeded for o in self.outcomes)
