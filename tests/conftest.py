"""
Shared test fixtures for the porkbun-ssl test suite.

Output paths always point into pytest's tmp_path, so nothing is ever
written outside it.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from porkbun_ssl.domain.models import CertificateBundle, RenewalConfig
from tests.factories import make_bundle, make_config


@pytest.fixture()
def certs_root(tmp_path: Path) -> Path:
    """Directory under which tests render certificate paths."""
    return tmp_path / "certs"


@pytest.fixture()
def config(certs_root: Path) -> RenewalConfig:
    """Single-domain split-mode config for example.com."""
    return make_config(certs_root)


@pytest.fixture()
def bundle() -> CertificateBundle:
    return make_bundle()
