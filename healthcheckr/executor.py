# ============================================================================
# HEALTH CHECK EXECUTOR
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Parallel and sequential health check execution
# PURPOSE: Execute health checks with timeouts and aggregation
# CREATED: 08 OCT 2026
# ============================================================================
"""
Health Check Executor

Two execution strategies over an ordered, already-filtered check list:

execute_all (detailed):
1. Start every check as its own task
2. Derive a linked token per check that also fires on the check's timeout
3. Convert timeouts and probe faults into Unhealthy entries
4. Wait for all tasks, then sort entries back into registration order
5. Aggregate with 'worst wins' semantics and map the result code

execute_simple (status only):
1. Run checks one at a time in registration order
2. Return Unhealthy at the first unhealthy outcome, timeout or fault
3. Otherwise return the worst status seen (Healthy or Degraded)

In both strategies caller cancellation is never recovered: it propagates
and no partial result is produced.
"""

import asyncio
import copy
import time
import traceback
from operator import itemgetter
from typing import Any, Mapping, Optional, Sequence, Tuple

from healthcheckr.cancellation import CancellationToken
from healthcheckr.config import DEFAULT_OPTIONS, NOT_FOUND_STATUS_CODE, HealthCheckerOptions
from healthcheckr.core import CheckOutcome, HealthStatus
from healthcheckr.exceptions import (
    CheckTimeoutError,
    OperationCancelledError,
    ProbeFaultError,
)
from healthcheckr.logging import get_logger, log_context
from healthcheckr.registry import CheckRegistration
from healthcheckr.report import HealthReport, HealthReportEntry

logger = get_logger(__name__)

TIMEOUT_ERROR_MESSAGE = "Timeout exceeded"


class Stopwatch:
    """High-resolution clock started once per run and only read afterwards."""

    __slots__ = ("_started",)

    def __init__(self) -> None:
        self._started = time.perf_counter()

    @property
    def elapsed_ms(self) -> int:
        """Whole milliseconds since the stopwatch started."""
        return int((time.perf_counter() - self._started) * 1000)


def timeout_description(timeout_seconds: float) -> str:
    """Description used for entries whose check exceeded its timeout."""
    return f"Health check timed out after {timeout_seconds * 1000:g} ms"


def format_error(error: Any, include_stack_trace: bool = False) -> str:
    """Render an outcome error as report text."""
    if isinstance(error, BaseException):
        if include_stack_trace:
            return "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ).rstrip()
        return str(error) or type(error).__name__
    return str(error)


def _merge_data(
    metadata: Optional[Mapping[str, Any]],
    data: Optional[Mapping[str, Any]],
) -> Optional[dict]:
    merged: dict = {}
    if metadata:
        merged.update(copy.deepcopy(dict(metadata)))
    if data:
        merged.update(copy.deepcopy(dict(data)))
    return merged or None


def _raise_if_caller_cancelled(token: CancellationToken) -> None:
    """Raise OperationCancelledError if the caller token fired, whatever the reason."""
    try:
        token.raise_if_cancelled()
    except CheckTimeoutError as e:
        raise OperationCancelledError(cause=e) from e


class HealthCheckExecutor:
    """
    Executes health checks for one HealthChecker.

    Stateless between runs apart from its options; each run gets its own
    stopwatch and its own linked tokens.
    """

    def __init__(self, options: Optional[HealthCheckerOptions] = None):
        """
        Initialize executor.

        Args:
            options: Report options (defaults if None)
        """
        self.options = options or DEFAULT_OPTIONS

    async def execute_all(
        self,
        checks: Sequence[CheckRegistration],
        token: CancellationToken,
    ) -> HealthReport:
        """
        Execute checks concurrently and build a detailed report.

        Args:
            checks: Filtered registrations
            token: Caller cancellation token

        Returns:
            Report with entries in registration order

        Raises:
            OperationCancelledError: The caller cancelled token
        """
        checks = list(checks)

        if not checks:
            logger.debug("No health checks selected; reporting Unknown")
            return HealthReport(
                status=HealthStatus.UNKNOWN,
                result_code=NOT_FOUND_STATUS_CODE,
            )

        stopwatch = Stopwatch() if self.options.include_duration else None
        semaphore = (
            asyncio.Semaphore(self.options.max_parallel)
            if self.options.max_parallel
            else None
        )

        async def run_indexed(check: CheckRegistration) -> Tuple[int, HealthReportEntry]:
            if semaphore is None:
                return check.index, await self._execute_check(check, stopwatch, token)
            async with semaphore:
                return check.index, await self._execute_check(check, stopwatch, token)

        tasks = [
            asyncio.create_task(run_indexed(check), name=f"healthcheck:{check.name}")
            for check in checks
        ]

        try:
            done, pending = await asyncio.wait(
                tasks,
                return_when=asyncio.FIRST_EXCEPTION,
            )
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        # Only caller cancellation escapes a check task
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        errors = [task.exception() for task in tasks if task in done and not task.cancelled()]
        errors = [e for e in errors if e is not None]
        if errors:
            raise errors[0]

        indexed = sorted((task.result() for task in done), key=itemgetter(0))
        entries = tuple(entry for _, entry in indexed)

        status = HealthStatus.aggregate(entry.status for entry in entries)
        total_duration_ms = stopwatch.elapsed_ms if stopwatch else None

        logger.debug(
            f"Health checks completed: {status.value} "
            f"({len(entries)} checks, {total_duration_ms}ms)"
        )

        return HealthReport(
            status=status,
            checks=entries,
            total_duration_ms=total_duration_ms,
            data=copy.deepcopy(dict(self.options.data)) if self.options.data else None,
            result_code=self.options.status_code_for(status),
        )

    async def execute_simple(
        self,
        checks: Sequence[CheckRegistration],
        token: CancellationToken,
    ) -> HealthStatus:
        """
        Execute checks sequentially, stopping at the first unhealthy one.

        Args:
            checks: Filtered registrations in registration order
            token: Caller cancellation token

        Returns:
            Unknown (no checks), Unhealthy, Degraded or Healthy

        Raises:
            OperationCancelledError: The caller cancelled token
        """
        if not checks:
            return HealthStatus.UNKNOWN

        overall = HealthStatus.HEALTHY

        for check in checks:
            _raise_if_caller_cancelled(token)

            with log_context(check_name=check.name):
                try:
                    outcome = await self._invoke(check, token)
                except CheckTimeoutError:
                    logger.warning(
                        f"Health check {check.name} timed out after {check.timeout}s"
                    )
                    return HealthStatus.UNHEALTHY
                except OperationCancelledError:
                    logger.info(f"Health check {check.name} abandoned: operation cancelled")
                    raise
                except Exception as e:
                    logger.error(f"Health check {check.name} failed: {e!r}")
                    return HealthStatus.UNHEALTHY

                if outcome.status == HealthStatus.UNHEALTHY:
                    logger.info(f"Short-circuit: {check.name} is unhealthy")
                    return HealthStatus.UNHEALTHY

                if outcome.status == HealthStatus.DEGRADED:
                    overall = HealthStatus.DEGRADED

        return overall

    async def _execute_check(
        self,
        check: CheckRegistration,
        stopwatch: Optional[Stopwatch],
        token: CancellationToken,
    ) -> HealthReportEntry:
        """Execute a single check and produce its report entry."""
        _raise_if_caller_cancelled(token)

        start_ms = stopwatch.elapsed_ms if stopwatch else 0
        error_text: Optional[str] = None

        with log_context(check_name=check.name):
            try:
                outcome = await self._invoke(check, token)

            except CheckTimeoutError:
                logger.warning(
                    f"Health check {check.name} timed out after {check.timeout}s"
                )
                outcome = CheckOutcome(
                    status=HealthStatus.UNHEALTHY,
                    description=timeout_description(check.timeout),
                )
                error_text = TIMEOUT_ERROR_MESSAGE

            except OperationCancelledError:
                logger.info(f"Health check {check.name} abandoned: operation cancelled")
                raise

            except Exception as e:
                logger.error(f"Health check {check.name} failed: {e!r}")
                logger.debug("Health check failure detail", exc_info=True)
                outcome = CheckOutcome.from_exception(e)

            duration_ms = stopwatch.elapsed_ms - start_ms if stopwatch else None
            try:
                entry = self._build_entry(check, outcome, duration_ms, error_text)
            except Exception as e:
                logger.error(f"Health check {check.name} returned an unusable outcome: {e!r}")
                entry = self._build_entry(
                    check, CheckOutcome.from_exception(e), duration_ms,
                )

            logger.debug(
                f"Health check {check.name}: {entry.status.value} ({duration_ms}ms)"
            )

        return entry

    async def _invoke(
        self,
        check: CheckRegistration,
        token: CancellationToken,
    ) -> CheckOutcome:
        """
        Run a probe under its effective token.

        Raises:
            CheckTimeoutError: The per-check timeout elapsed
            OperationCancelledError: The caller cancelled token
            Exception: Anything else the probe raised
        """
        effective = token.link(check.timeout) if check.timeout is not None else token
        try:
            return await effective.run(check.probe(effective))
        except OperationCancelledError as e:
            if token.is_cancelled:
                # The caller's own deadline is cancellation, not a check timeout
                if isinstance(e, CheckTimeoutError):
                    raise OperationCancelledError(cause=e) from e
                raise
            if effective is not token and effective.timed_out:
                if isinstance(e, CheckTimeoutError):
                    raise
                raise CheckTimeoutError(check.timeout) from e
            raise ProbeFaultError(check.name, e) from e
        finally:
            if effective is not token:
                effective.close()

    def _build_entry(
        self,
        check: CheckRegistration,
        outcome: CheckOutcome,
        duration_ms: Optional[int],
        error_text: Optional[str] = None,
    ) -> HealthReportEntry:
        error = None
        if self.options.include_errors:
            if error_text is not None:
                error = error_text
            elif outcome.error is not None:
                error = format_error(outcome.error, self.options.include_stack_trace)

        description = outcome.description
        if description is None:
            description = check.description

        return HealthReportEntry(
            name=check.name,
            description=description,
            status=outcome.status,
            error=error,
            duration_ms=duration_ms,
            data=_merge_data(check.metadata, outcome.data),
            tags=check.tags,
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheckExecutor",
    "Stopwatch",
    "TIMEOUT_ERROR_MESSAGE",
    "timeout_description",
    "format_error",
]
