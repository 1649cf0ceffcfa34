# ============================================================================
# HEALTH CHECKER CONFIGURATION
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Checker options and defaults
# PURPOSE: Result codes, error/duration inclusion, global report metadata
# CREATED: 07 OCT 2026
# ============================================================================
"""
Health Checker Configuration

Options are fixed when a HealthChecker is constructed.

Design:
- Immutable dataclass for options
- Environment variable overrides (HEALTHCHECKR_*)
- Global report metadata copied into a read-only mapping
"""

import copy
import os
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional

from healthcheckr.core import HealthStatus

# Result code used when no check matched the query
NOT_FOUND_STATUS_CODE = 404


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


@dataclass(frozen=True)
class HealthCheckerOptions:
    """
    Options controlling report construction.

    Attributes:
        healthy_status_code: Result code for an overall healthy status
        degraded_status_code: Result code for an overall degraded status
        unhealthy_status_code: Result code for an overall unhealthy status
        include_errors: Put error text on entries that faulted
        include_stack_trace: Use the full traceback instead of the message
            (only meaningful with include_errors)
        include_duration: Measure and report per-check and total duration
        data: Global metadata attached to every detailed report
        max_parallel: Upper bound on concurrently running checks (None = all)
    """
    healthy_status_code: int = 200
    degraded_status_code: int = 200
    unhealthy_status_code: int = 503
    include_errors: bool = False
    include_stack_trace: bool = False
    include_duration: bool = True
    data: Optional[Mapping[str, Any]] = None
    max_parallel: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate values and freeze global metadata."""
        for attr in ("healthy_status_code", "degraded_status_code", "unhealthy_status_code"):
            code = getattr(self, attr)
            if not isinstance(code, int) or not 100 <= code <= 599:
                raise ValueError(f"{attr} must be an HTTP status code (100-599), got {code!r}")

        if self.max_parallel is not None and self.max_parallel < 1:
            raise ValueError("max_parallel must be at least 1")

        if self.data is not None:
            frozen = MappingProxyType(copy.deepcopy(dict(self.data))) if self.data else None
            object.__setattr__(self, "data", frozen)

    def status_code_for(self, status: HealthStatus) -> int:
        """Map an overall status to its result code."""
        if status == HealthStatus.HEALTHY:
            return self.healthy_status_code
        if status == HealthStatus.DEGRADED:
            return self.degraded_status_code
        if status == HealthStatus.UNHEALTHY:
            return self.unhealthy_status_code
        return NOT_FOUND_STATUS_CODE

    def with_data(self, **kwargs: Any) -> "HealthCheckerOptions":
        """Create options with additional global metadata."""
        return replace(self, data={**(self.data or {}), **kwargs})

    @classmethod
    def from_env(cls, prefix: str = "HEALTHCHECKR_") -> "HealthCheckerOptions":
        """Create from environment variables."""
        defaults = cls()
        return cls(
            healthy_status_code=_env_int(f"{prefix}HEALTHY_STATUS_CODE", defaults.healthy_status_code),
            degraded_status_code=_env_int(f"{prefix}DEGRADED_STATUS_CODE", defaults.degraded_status_code),
            unhealthy_status_code=_env_int(f"{prefix}UNHEALTHY_STATUS_CODE", defaults.unhealthy_status_code),
            include_errors=_env_bool(f"{prefix}INCLUDE_ERRORS", defaults.include_errors),
            include_stack_trace=_env_bool(f"{prefix}INCLUDE_STACK_TRACE", defaults.include_stack_trace),
            include_duration=_env_bool(f"{prefix}INCLUDE_DURATION", defaults.include_duration),
            max_parallel=_env_int(f"{prefix}MAX_PARALLEL", defaults.max_parallel),
        )


DEFAULT_OPTIONS = HealthCheckerOptions()


__all__ = [
    "NOT_FOUND_STATUS_CODE",
    "HealthCheckerOptions",
    "DEFAULT_OPTIONS",
]
