# ============================================================================
# HEALTH CHECKER
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Public facade
# PURPOSE: Register checks and query overall or detailed health
# CREATED: 09 OCT 2026
# ============================================================================
"""
Health Checker

One HealthChecker owns one registry and one set of options. Register
checks first, then query as often as needed.

Usage:
    checker = HealthChecker(include_errors=True)

    checker.add_check("self", lambda: CheckOutcome.healthy())
    checker.add_check("postgres", PostgresCheck(pool), tags=["db"], timeout=5.0)

    @checker.register(tags=["external"], timeout=2.0)
    async def storage(token):
        await token.run(blob_client.get_account_information())
        return CheckOutcome.healthy("Blob storage reachable")

    report = await checker.check(include_tags=["db"])
    status = await checker.check_simple()
"""

import uuid
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional

from healthcheckr.cancellation import CancellationToken
from healthcheckr.config import HealthCheckerOptions
from healthcheckr.core import HealthStatus
from healthcheckr.exceptions import InvalidArgumentError
from healthcheckr.executor import HealthCheckExecutor
from healthcheckr.filters import TagsArg
from healthcheckr.logging import get_logger, log_context
from healthcheckr.registry import CheckRegistration, HealthCheckRegistry, TimeoutArg
from healthcheckr.report import HealthReport

logger = get_logger(__name__)


def _new_run_id() -> str:
    return uuid.uuid4().hex[:8]


class HealthChecker:
    """
    Health check aggregator.

    Options are fixed at construction. Either pass a HealthCheckerOptions
    or keyword overrides for individual fields:

        HealthChecker(HealthCheckerOptions.from_env(), include_errors=True)
    """

    def __init__(self, options: Optional[HealthCheckerOptions] = None, **overrides: Any):
        options = options or HealthCheckerOptions()
        if overrides:
            options = replace(options, **overrides)
        self._options = options
        self._registry = HealthCheckRegistry()
        self._executor = HealthCheckExecutor(options)

    @property
    def options(self) -> HealthCheckerOptions:
        return self._options

    @property
    def registry(self) -> HealthCheckRegistry:
        return self._registry

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def add_check(
        self,
        name: str,
        probe: Any,
        *,
        tags: TagsArg = None,
        timeout: TimeoutArg = None,
        description: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> "HealthChecker":
        """
        Register a health check.

        Args:
            name: Unique name (case-insensitive)
            probe: HealthCheck instance, object with check_health(token),
                fn(token) or fn(); sync or async
            tags: Tags used by include/exclude filters
            timeout: Per-check timeout in seconds (or timedelta)
            description: Static description used when the outcome has none
            metadata: Static data merged under the outcome's data

        Returns:
            self, for chaining

        Raises:
            InvalidArgumentError: Bad name, probe or timeout
            DuplicateNameError: Name already registered
        """
        self._registry.register(
            name,
            probe,
            tags=tags,
            timeout=timeout,
            description=description,
            metadata=metadata,
        )
        return self

    def register(
        self,
        name: Optional[str] = None,
        *,
        tags: TagsArg = None,
        timeout: TimeoutArg = None,
        description: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Callable:
        """
        Decorator to register a function or HealthCheck class.

        Classes are instantiated with no arguments. The name defaults to
        the function or class name.

        Example:
            @checker.register(tags=["db"], timeout=5.0)
            class PostgresCheck(HealthCheck):
                async def check_health(self, token):
                    ...
        """
        def decorator(target):
            probe = target() if isinstance(target, type) else target
            self.add_check(
                name or target.__name__,
                probe,
                tags=tags,
                timeout=timeout,
                description=description,
                metadata=metadata,
            )
            return target

        return decorator

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    # ========================================================================
    # QUERIES
    # ========================================================================

    async def check(
        self,
        include_tags: TagsArg = None,
        exclude_tags: TagsArg = None,
        token: Optional[CancellationToken] = None,
    ) -> HealthReport:
        """
        Run the selected checks concurrently and build a detailed report.

        Raises:
            OperationCancelledError: token was cancelled
        """
        checks = self._registry.select(include_tags, exclude_tags)
        return await self._run_detailed(checks, token)

    async def check_named(
        self,
        name: str,
        token: Optional[CancellationToken] = None,
    ) -> HealthReport:
        """
        Run the single check registered under name.

        An unknown name yields an Unknown report with result code 404.

        Raises:
            InvalidArgumentError: name is empty
            OperationCancelledError: token was cancelled
        """
        return await self._run_detailed(self._select_named(name), token)

    async def check_simple(
        self,
        include_tags: TagsArg = None,
        exclude_tags: TagsArg = None,
        token: Optional[CancellationToken] = None,
    ) -> HealthStatus:
        """
        Run the selected checks one at a time and return the overall status.

        Stops at the first unhealthy check.

        Raises:
            OperationCancelledError: token was cancelled
        """
        checks = self._registry.select(include_tags, exclude_tags)
        return await self._run_simple(checks, token)

    async def check_simple_named(
        self,
        name: str,
        token: Optional[CancellationToken] = None,
    ) -> HealthStatus:
        """
        Return the status of the single check registered under name.

        Raises:
            InvalidArgumentError: name is empty
            OperationCancelledError: token was cancelled
        """
        return await self._run_simple(self._select_named(name), token)

    def _select_named(self, name: str) -> List[CheckRegistration]:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("name must be a non-empty string", argument="name")
        registration = self._registry.get(name)
        return [registration] if registration is not None else []

    async def _run_detailed(
        self,
        checks: List[CheckRegistration],
        token: Optional[CancellationToken],
    ) -> HealthReport:
        token = token or CancellationToken()
        with log_context(run_id=_new_run_id(), operation="check"):
            logger.debug(f"Running {len(checks)} health checks")
            report = await self._executor.execute_all(checks, token)
            logger.info(
                f"Health: {report.status.value} "
                f"({len(report.checks)} checks, result_code={report.result_code})"
            )
        return report

    async def _run_simple(
        self,
        checks: List[CheckRegistration],
        token: Optional[CancellationToken],
    ) -> HealthStatus:
        token = token or CancellationToken()
        with log_context(run_id=_new_run_id(), operation="check_simple"):
            logger.debug(f"Running {len(checks)} health checks sequentially")
            status = await self._executor.execute_simple(checks, token)
            logger.info(f"Health: {status.value}")
        return status

    def __repr__(self) -> str:
        return f"<HealthChecker checks={self._registry.names()}>"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthChecker",
]
