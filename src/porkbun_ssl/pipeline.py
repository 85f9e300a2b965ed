"""
Pipeline — one renewal pass over every configured domain.

All I/O is injected via ports (Protocol interfaces); this module decides
order, output mode and failure isolation.

Per domain the stages are chained via flat_map:

  fetch(domain)
    → combined mode: save(combined_path, chain + "\\n" + key)
    → split mode:    save(certificate_path, chain) → save(private_key_path, key)

A failing stage short-circuits that domain only. The pass itself always
succeeds; per-domain failures are reported in the RenewalSummary.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from railway.result import Result

from porkbun_ssl.domain.models import (
    CertificateBundle,
    DomainOutcome,
    RenewalConfig,
    RenewalSummary,
)
from porkbun_ssl.domain.paths import render_path
from porkbun_ssl.domain.ports import CertificateClient, FilePersister

log = structlog.get_logger()


def _save_combined(
    domain: str,
    bundle: CertificateBundle,
    config: RenewalConfig,
    persister: FilePersister,
) -> Result[tuple[Path, ...]]:
    path = render_path(config.combined_path_template, domain)
    log.info("renewal.saving_combined", domain=domain, path=path)
    return persister.save(path, bundle.combined()).map(lambda written: (written,))


def _save_split(
    domain: str,
    bundle: CertificateBundle,
    config: RenewalConfig,
    persister: FilePersister,
) -> Result[tuple[Path, ...]]:
    cert_path = render_path(config.certificate_path_template, domain)
    key_path = render_path(config.private_key_path_template, domain)

    def save_key(cert_written: Path) -> Result[tuple[Path, ...]]:
        log.info("renewal.saving_private_key", domain=domain, path=key_path)
        return persister.save(key_path, bundle.private_key).map(
            lambda key_written: (cert_written, key_written)
        )

    log.info("renewal.saving_certificate", domain=domain, path=cert_path)
    return persister.save(cert_path, bundle.certificate_chain).flat_map(save_key)


def renew_domain(
    domain: str,
    config: RenewalConfig,
    client: CertificateClient,
    persister: FilePersister,
) -> Result[tuple[Path, ...]]:
    """
    Fetch and persist the bundle for a single domain.

    Combined mode wins: when a combined template is configured the split
    templates are never rendered. Returns the paths written.
    """
    log.info("renewal.domain_started", domain=domain)
    save = _save_combined if config.combined_mode else _save_split
    return client.fetch(domain).flat_map(
        lambda bundle: save(domain, bundle, config, persister)
    )


def _to_outcome(domain: str, result: Result[tuple[Path, ...]]) -> DomainOutcome:
    return result.either(
        on_success=lambda written: DomainOutcome(domain=domain, succeeded=True, written=written),
        on_failure=lambda err: DomainOutcome(domain=domain, succeeded=False, failure=err),
    )


def _log_outcome(outcome: DomainOutcome) -> None:
    if outcome.succeeded:
        log.info(
            "renewal.domain_renewed",
            domain=outcome.domain,
            files=[str(p) for p in outcome.written],
        )
        return
    assert outcome.failure is not None
    log.error(
        "renewal.domain_failed",
        domain=outcome.domain,
        error_code=outcome.failure.code.value,
        error=outcome.failure.message,
    )


def run_renewal(
    config: RenewalConfig,
    client: CertificateClient,
    persister: FilePersister,
) -> Result[RenewalSummary]:
    """
    Execute one renewal pass over config.domains, in configured order.

    Every domain is attempted regardless of earlier failures. Returns
    Result.success(RenewalSummary) — per-domain failures live in the summary.
    """
    log.info("renewal.started", domains=len(config.domains))

    outcomes: list[DomainOutcome] = []
    for domain in config.domains:
        outcome = _to_outcome(domain, renew_domain(domain, config, client, persister))
        _log_outcome(outcome)
        outcomes.append(outcome)

    summary = RenewalSummary(outcomes=tuple(outcomes))
    log_event = log.info if summary.all_succeeded else log.warning
    log_event(
        "renewal.completed",
        succeeded=len(summary.succeeded),
        failed=len(summary.failed),
        failed_domains=summary.failed,
    )
    return Result.success(summary)
