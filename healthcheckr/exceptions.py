# ============================================================================
# HEALTHCHECKR EXCEPTIONS
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Error taxonomy
# PURPOSE: Registration errors and cancellation faults
# CREATED: 06 OCT 2026
# ============================================================================
"""
Healthcheckr Exceptions

Error taxonomy:
- InvalidArgumentError: Bad registration input (empty name, missing probe)
- DuplicateNameError: Name already registered (case-insensitive)
- ProbeFaultError: Probe cancelled itself outside a timeout or caller cancel
- OperationCancelledError: Caller-level cancellation, always propagated
- CheckTimeoutError: Per-check deadline elapsed, recovered into an entry

Ordinary probe faults keep their own type. Any Exception raised by a
probe is contained by the executor and reported as an Unhealthy entry.
"""

from typing import Any, Dict, Optional


class HealthCheckrError(Exception):
    """
    Base exception for healthcheckr.

    Attributes:
        message: Human-readable description
        details: Additional context for logging
        cause: Original exception, if any
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        result: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result


class InvalidArgumentError(HealthCheckrError, ValueError):
    """Raised when a registration or query argument is invalid."""

    def __init__(self, message: str, *, argument: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if argument:
            details["argument"] = argument
        super().__init__(message, details=details, **kwargs)
        self.argument = argument


class DuplicateNameError(InvalidArgumentError):
    """Raised when a check name is already registered."""

    def __init__(self, check_name: str):
        super().__init__(
            f"A health check with name '{check_name}' is already registered.",
            argument="name",
            details={"check_name": check_name},
        )
        self.check_name = check_name


class ProbeFaultError(HealthCheckrError):
    """
    Wraps a probe failure the executor could not report as-is.

    Used when a probe raises OperationCancelledError of its own while
    neither the caller nor the per-check timeout cancelled it.
    """

    def __init__(self, check_name: str, cause: BaseException):
        super().__init__(
            f"Health check '{check_name}' was cancelled internally: {cause}",
            details={"check_name": check_name},
            cause=cause,
        )
        self.check_name = check_name


class OperationCancelledError(HealthCheckrError):
    """
    Raised when a cancellation token fires.

    Caller-level cancellation is never recovered by the executor: the
    query call is abandoned and this error reaches the caller.
    """

    def __init__(self, message: str = "The operation was cancelled.", **kwargs):
        super().__init__(message, **kwargs)


class CheckTimeoutError(OperationCancelledError):
    """Raised by a token that was cancelled by its own deadline."""

    def __init__(self, timeout_seconds: float, **kwargs):
        super().__init__(
            f"Timed out after {timeout_seconds:g}s",
            details={"timeout_seconds": timeout_seconds},
            **kwargs,
        )
        self.timeout_seconds = timeout_seconds


__all__ = [
    "HealthCheckrError",
    "InvalidArgumentError",
    "DuplicateNameError",
    "ProbeFaultError",
    "OperationCancelledError",
    "CheckTimeoutError",
]
