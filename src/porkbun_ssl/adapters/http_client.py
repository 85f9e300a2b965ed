"""
HTTP adapter — certificate bundle retrieval from the Porkbun API via httpx.

Adapter layer — implements the CertificateClient port.

Wire contract:
  POST {api_url}/ssl/retrieve/{domain}
  Content-Type: application/json
  {"apikey": "...", "secretapikey": "..."}

  → {"status": "SUCCESS"|"ERROR", "message"?, "certificatechain"?, "privatekey"?}

Three failure kinds are kept apart so logs tell them apart:
  - TRANSPORT_ERROR: the request never got an answer (timeout, refused, TLS)
  - DECODE_ERROR:    the answer is not the JSON document above
  - PROVIDER_ERROR:  the answer says status "ERROR"

The provider reports rejections with a JSON body on 4xx codes, so the HTTP
status is not used to decide success. No retry: a failed domain is retried
on the next scheduled pass.
"""

from __future__ import annotations

import httpx
import structlog
from pydantic import BaseModel, ConfigDict
from railway import ErrorCode, ResultFailures
from railway.result import Result

from porkbun_ssl.domain.models import CertificateBundle

log = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 30.0


class ProviderResponse(BaseModel):
    """Body of a /ssl/retrieve response. Unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: str
    message: str | None = None
    certificatechain: str | None = None
    privatekey: str | None = None

    def to_bundle(self) -> Result[CertificateBundle]:
        """Convert to a CertificateBundle, or the failure the response describes."""
        if self.status == "ERROR":
            return ResultFailures.provider_error(
                f"API error: {self.message or 'no message from provider'}"
            )
        missing = [
            name
            for name, value in (
                ("certificatechain", self.certificatechain),
                ("privatekey", self.privatekey),
            )
            if not value
        ]
        if missing:
            return ResultFailures.decode_error(
                f"Response with status {self.status!r} is missing {', '.join(missing)}"
            )
        return Result.success(
            CertificateBundle(
                certificate_chain=self.certificatechain,  # type: ignore[arg-type]
                private_key=self.privatekey,  # type: ignore[arg-type]
            )
        )


class PorkbunCertificateClient:
    """
    Retrieve SSL bundles from the Porkbun API.

    Implements the CertificateClient port. Credentials are only ever placed
    in the request body; they are not logged and not part of repr.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        secret_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._api_key = api_key
        self._secret_key = secret_key
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"PorkbunCertificateClient(api_url={self._api_url!r}, timeout={self._timeout})"

    @property
    def timeout(self) -> float:
        return self._timeout

    def retrieve_url(self, domain: str) -> str:
        return f"{self._api_url}/ssl/retrieve/{domain}"

    def fetch(self, domain: str) -> Result[CertificateBundle]:
        """
        Retrieve the current bundle for domain.

        Returns Result[CertificateBundle] on success, or a failure coded
        TRANSPORT_ERROR, DECODE_ERROR or PROVIDER_ERROR.
        """
        return (
            self._post(domain)
            .flat_map(self._decode)
            .flat_map(lambda body: body.to_bundle())
            .peek(lambda _: log.info("provider.bundle_received", domain=domain))
        )

    def _post(self, domain: str) -> Result[httpx.Response]:
        url = self.retrieve_url(domain)
        return Result.from_computation(
            lambda: self._do_request(url),
            ErrorCode.TRANSPORT_ERROR,
            f"Request to {url} failed",
        )

    def _do_request(self, url: str) -> httpx.Response:
        """HTTP call — exceptions caught by from_computation."""
        with httpx.Client(timeout=self._timeout) as client:
            response = client.post(
                url,
                headers={"Content-Type": "application/json"},
                json={"apikey": self._api_key, "secretapikey": self._secret_key},
            )
        log.debug("provider.response", url=url, status_code=response.status_code)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Result[ProviderResponse]:
        return Result.from_computation(
            lambda: ProviderResponse.model_validate_json(response.content),
            ErrorCode.DECODE_ERROR,
            f"Could not decode provider response (HTTP {response.status_code})",
        )
