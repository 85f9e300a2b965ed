"""
Ports — Protocol-based interfaces for infrastructure adapters.

The pipeline needs two things from the outside world: a way to obtain a
certificate bundle for a domain, and a way to write text to a path. Both
report problems as Result failures; neither raises.

  pipeline ← ports (protocols) ← adapters (httpx client, local filesystem)
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from railway.result import Result

from porkbun_ssl.domain.models import CertificateBundle


@runtime_checkable
class CertificateClient(Protocol):
    """
    Port: retrieve the current certificate bundle for one domain.

    Failure codes: PROVIDER_ERROR when the provider rejects the request,
    TRANSPORT_ERROR when it cannot be reached, DECODE_ERROR when its answer
    is not usable. Implementations do not retry.
    """

    def fetch(self, domain: str) -> Result[CertificateBundle]: ...


@runtime_checkable
class FilePersister(Protocol):
    """
    Port: write text to a path, replacing any existing file.

    Returns the written path on success, IO_ERROR on failure. Writes are
    not atomic; a failure may leave a partial file behind.
    """

    def save(self, path: str | Path, content: str) -> Result[Path]: ...
