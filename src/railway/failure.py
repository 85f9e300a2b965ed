"""
Failure description — structured error information for the failure track.

Every per-domain failure in a renewal pass travels as a FailureDescription:
an ErrorCode from the taxonomy below, a human-readable message and, when
the failure started as a Python exception, that exception.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """
    Error taxonomy of the renewal service.

    Only CONFIGURATION_ERROR is fatal, and only at startup. Every other code
    marks a single domain as failed while the batch carries on.
    """

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Structural misconfiguration: missing placeholder, invalid cron."""

    PROVIDER_ERROR = "PROVIDER_ERROR"
    """The provider answered with status "ERROR" (bad key, rate limit, unknown domain)."""

    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    """The provider could not be reached: timeout, refused connection, TLS failure."""

    DECODE_ERROR = "DECODE_ERROR"
    """The provider answered, but not with the expected JSON document."""

    IO_ERROR = "IO_ERROR"
    """Directory creation or file write failed."""

    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """Unexpected exception escaping a computation."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.PROVIDER_ERROR, "Invalid API key")
    >>> desc.code
    <ErrorCode.PROVIDER_ERROR: 'PROVIDER_ERROR'>
    >>> desc.message
    'Invalid API key'
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(
                type(self.exception), self.exception, self.exception.__traceback__
            )
        )
        return f"{self.message}\n{tb}"
