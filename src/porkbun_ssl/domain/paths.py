"""
Path templates — render per-domain output paths and check template sanity.
"""

from __future__ import annotations

from railway import Result, ResultFailures

from porkbun_ssl.domain.models import RenewalConfig

DOMAIN_PLACEHOLDER = "{domain}"


def render_path(template: str, domain: str) -> str:
    """Replace every literal ``{domain}`` in template; nothing else is interpreted."""
    return template.replace(DOMAIN_PLACEHOLDER, domain)


def active_templates(config: RenewalConfig) -> dict[str, str]:
    """Templates a pass will actually render, keyed by their setting name."""
    if config.combined_mode:
        return {"COMBINED_CERT_PATH": config.combined_path_template}
    return {
        "CERTIFICATE_PATH": config.certificate_path_template,
        "PRIVATE_KEY_PATH": config.private_key_path_template,
    }


def check_templates(config: RenewalConfig) -> Result[RenewalConfig]:
    """
    Reject configurations where several domains would share one output path.

    With a single domain any template is fine. With more, every active
    template must contain the placeholder.
    """
    if len(config.domains) <= 1:
        return Result.success(config)
    for name, template in active_templates(config).items():
        if DOMAIN_PLACEHOLDER not in template:
            return ResultFailures.configuration_error(
                f"{name} must contain the {DOMAIN_PLACEHOLDER} placeholder "
                f"when multiple domains are specified"
            )
    return Result.success(config)
