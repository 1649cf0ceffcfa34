# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Status model, probe outcome, check interface
# PURPOSE: Types shared by the registry, executor and report model
# CREATED: 06 OCT 2026
# ============================================================================
"""
Health Check Core Types

Defines the check interface and the outcome type returned by probes.

Status roll-up (worst wins):
- unhealthy: Dominates everything
- degraded: Dominates healthy
- healthy: No effect
- unknown: Reserved for "no checks executed", never produced by roll-up
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

if TYPE_CHECKING:
    from healthcheckr.cancellation import CancellationToken


class HealthStatus(str, Enum):
    """Health check status values."""
    UNKNOWN = "Unknown"
    UNHEALTHY = "Unhealthy"
    DEGRADED = "Degraded"
    HEALTHY = "Healthy"

    def __str__(self) -> str:
        return self.value

    @property
    def is_operational(self) -> bool:
        """Healthy or degraded."""
        return self in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)

    @classmethod
    def aggregate(cls, statuses: Iterable["HealthStatus"]) -> "HealthStatus":
        """
        Aggregate individual statuses into one overall status.

        Starts at healthy; the first unhealthy status wins immediately,
        otherwise any degraded status makes the result degraded. Empty
        input is handled by callers (it short-circuits to unknown before
        aggregation runs).
        """
        overall = cls.HEALTHY
        for status in statuses:
            if status == cls.UNHEALTHY:
                return cls.UNHEALTHY
            if status == cls.DEGRADED:
                overall = cls.DEGRADED
        return overall


@dataclass(frozen=True)
class CheckOutcome:
    """
    Result returned by a single probe.

    The error is the raw exception; it is formatted into text only when
    the report is built with error inclusion enabled.
    """
    status: HealthStatus
    description: Optional[str] = None
    error: Optional[BaseException] = None
    data: Optional[Mapping[str, Any]] = None

    @classmethod
    def healthy(cls, description: str = None, **data) -> "CheckOutcome":
        """Create healthy outcome."""
        return cls(status=HealthStatus.HEALTHY, description=description, data=data or None)

    @classmethod
    def degraded(cls, description: str = None, **data) -> "CheckOutcome":
        """Create degraded outcome."""
        return cls(status=HealthStatus.DEGRADED, description=description, data=data or None)

    @classmethod
    def unhealthy(
        cls,
        description: str = None,
        error: BaseException = None,
        **data,
    ) -> "CheckOutcome":
        """Create unhealthy outcome."""
        return cls(
            status=HealthStatus.UNHEALTHY,
            description=description,
            error=error,
            data=data or None,
        )

    @classmethod
    def from_exception(cls, e: BaseException, description: str = None) -> "CheckOutcome":
        """Create unhealthy outcome carrying the exception."""
        return cls(status=HealthStatus.UNHEALTHY, description=description, error=e)


class HealthCheck(ABC):
    """
    Base class for capability-object health checks.

    Subclass and implement check_health() to create a reusable check,
    then register an instance with HealthChecker.add_check().

    Example:
        class PostgresCheck(HealthCheck):
            def __init__(self, pool):
                self.pool = pool

            async def check_health(self, token):
                async with self.pool.connection() as conn:
                    await token.run(conn.execute("SELECT 1"))
                return CheckOutcome.healthy("PostgreSQL connected")

        checker.add_check("postgres", PostgresCheck(pool), timeout=5.0)
    """

    @abstractmethod
    async def check_health(self, token: "CancellationToken") -> CheckOutcome:
        """
        Execute health check.

        Args:
            token: Fires on the per-check timeout or caller cancellation.
                Implementations should observe it at their I/O boundaries.

        Returns:
            CheckOutcome with status and optional details
        """
        pass


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthStatus",
    "CheckOutcome",
    "HealthCheck",
]
