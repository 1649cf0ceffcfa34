# ============================================================================
# HEALTHCHECKR PACKAGE
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Health check aggregation library
# PURPOSE: Register named checks, run them, report aggregated health
# CREATED: 06 OCT 2026
# ============================================================================
"""
Health Check Aggregation

Register named checks on a HealthChecker and query them:
- check(): all selected checks run concurrently, detailed JSON report
- check_simple(): checks run one by one, stops at the first unhealthy one

Architecture:
- HealthCheck / closures: Probes, sync or async, optionally cancellable
- HealthCheckRegistry: Ordered, name-unique registrations with tags
- HealthCheckExecutor: Parallel and sequential strategies with timeouts
- HealthReport: Pydantic model serialized to camelCase JSON
- create_health_router / create_health_blueprint: FastAPI and Azure hosts

Usage:
    from healthcheckr import CheckOutcome, HealthChecker

    checker = HealthChecker(include_errors=True)
    checker.add_check("self", lambda: CheckOutcome.healthy())

    report = await checker.check()
    print(report.to_json())
"""

from healthcheckr.__version__ import __version__
from healthcheckr.cancellation import CancellationToken
from healthcheckr.checker import HealthChecker
from healthcheckr.config import DEFAULT_OPTIONS, NOT_FOUND_STATUS_CODE, HealthCheckerOptions
from healthcheckr.core import CheckOutcome, HealthCheck, HealthStatus
from healthcheckr.exceptions import (
    CheckTimeoutError,
    DuplicateNameError,
    HealthCheckrError,
    InvalidArgumentError,
    OperationCancelledError,
    ProbeFaultError,
)
from healthcheckr.executor import HealthCheckExecutor
from healthcheckr.functions import create_health_blueprint, health_response, simple_health_response
from healthcheckr.logging import configure_logging, get_logger, log_context
from healthcheckr.registry import CheckRegistration, HealthCheckRegistry
from healthcheckr.report import HealthReport, HealthReportEntry
from healthcheckr.router import create_health_router

__all__ = [
    "__version__",
    # Core types
    "HealthStatus",
    "CheckOutcome",
    "HealthCheck",
    "CancellationToken",
    # Errors
    "HealthCheckrError",
    "InvalidArgumentError",
    "DuplicateNameError",
    "ProbeFaultError",
    "OperationCancelledError",
    "CheckTimeoutError",
    # Configuration
    "HealthCheckerOptions",
    "DEFAULT_OPTIONS",
    "NOT_FOUND_STATUS_CODE",
    # Registry / execution
    "CheckRegistration",
    "HealthCheckRegistry",
    "HealthCheckExecutor",
    "HealthChecker",
    # Report
    "HealthReport",
    "HealthReportEntry",
    # Logging
    "configure_logging",
    "get_logger",
    "log_context",
    # Hosts
    "create_health_router",
    "create_health_blueprint",
    "health_response",
    "simple_health_response",
]
