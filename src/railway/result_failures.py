"""
Convenience factory methods for the renewal service's failure kinds.

    # Instead of:
    Result.failure(ErrorCode.PROVIDER_ERROR, "Invalid API key")

    # Write:
    ResultFailures.provider_error("Invalid API key")
"""

from __future__ import annotations

from railway.failure import ErrorCode
from railway.result import Result


class ResultFailures:
    """Factory methods for the failure kinds a renewal pass can produce."""

    @staticmethod
    def configuration_error(message: str) -> Result:
        """Structural misconfiguration detected before scheduling."""
        return Result.failure(ErrorCode.CONFIGURATION_ERROR, message)

    @staticmethod
    def provider_error(message: str) -> Result:
        """The provider rejected the request."""
        return Result.failure(ErrorCode.PROVIDER_ERROR, message)

    @staticmethod
    def transport_error(message: str, exception: BaseException | None = None) -> Result:
        """The provider could not be reached."""
        return Result.failure(ErrorCode.TRANSPORT_ERROR, message, exception)

    @staticmethod
    def decode_error(message: str, exception: BaseException | None = None) -> Result:
        """The provider's response body was unusable."""
        return Result.failure(ErrorCode.DECODE_ERROR, message, exception)

    @staticmethod
    def io_error(message: str, exception: BaseException | None = None) -> Result:
        """Filesystem failure."""
        return Result.failure(ErrorCode.IO_ERROR, message, exception)
