"""
Railway-Oriented Programming (ROP) core used by the renewal service.

Explicit, composable error handling — adapters turn exceptions into
failures at their boundary, business logic only chains Results.

    from railway import Result, ErrorCode

    def require_chain(pem: str | None) -> Result[str]:
        if not pem:
            return Result.failure(ErrorCode.DECODE_ERROR, "certificatechain missing")
        return Result.success(pem)
"""

from railway.assertions import ResultAssertions
from railway.execution import (
    ExecutionContext,
    LoggingExecutionContext,
    NoOpExecutionContext,
)
from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result, Success
from railway.result_failures import ResultFailures

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultFailures",
    "ResultAssertions",
]
