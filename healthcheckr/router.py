# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Infrastructure - FastAPI health check endpoints
# PURPOSE: Expose a HealthChecker over HTTP for probes and dashboards
# CREATED: 10 OCT 2026
# ============================================================================
"""
Health Check Router

FastAPI router factory bound to one HealthChecker.

Endpoints:
    GET /livez                - Liveness probe (no checks run)
    GET /health               - Detailed report, checks run concurrently
                                ?include=db&include=cache&exclude=slow
    GET /health/{check_name}  - Detailed report for one check
    GET /healthz              - Bare status text, checks run sequentially
    GET /healthz/{check_name} - Bare status text for one check

Response Codes (defaults, configurable on HealthCheckerOptions):
    200 - Healthy or Degraded
    503 - Unhealthy
    404 - No check matched the query

Usage:
    app = FastAPI()
    app.include_router(create_health_router(checker))
"""

from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from healthcheckr.__version__ import BUILD_DATE, __version__
from healthcheckr.checker import HealthChecker
from healthcheckr.core import HealthStatus
from healthcheckr.logging import get_logger
from healthcheckr.report import HealthReport

logger = get_logger(__name__)


def _report_response(report: HealthReport) -> JSONResponse:
    return JSONResponse(status_code=report.result_code, content=report.to_dict())


def _status_response(checker: HealthChecker, status: HealthStatus) -> PlainTextResponse:
    return PlainTextResponse(
        content=status.value,
        status_code=checker.options.status_code_for(status),
    )


def create_health_router(checker: HealthChecker, prefix: str = "") -> APIRouter:
    """
    Build a router serving checker's health endpoints.

    Args:
        checker: Checker whose registered checks back the endpoints
        prefix: Optional path prefix (e.g. "/ops")

    Returns:
        APIRouter to include in a FastAPI app
    """
    router = APIRouter(prefix=prefix, tags=["Health"])

    # ========================================================================
    # LIVENESS PROBE
    # ========================================================================

    @router.get("/livez")
    async def liveness_probe():
        """
        Liveness probe.

        Instant, no checks run. Confirms the process is responsive.
        """
        return {"status": "alive", "version": __version__, "build_date": BUILD_DATE}

    # ========================================================================
    # DETAILED REPORT
    # ========================================================================

    @router.get("/health")
    async def full_health_check(
        include: Optional[List[str]] = Query(default=None),
        exclude: Optional[List[str]] = Query(default=None),
    ):
        """
        Detailed health report.

        Runs the selected checks concurrently. The status code follows the
        overall status.
        """
        report = await checker.check(include_tags=include, exclude_tags=exclude)
        return _report_response(report)

    @router.get("/health/{check_name}")
    async def single_health_check(check_name: str):
        """Detailed report for one check (404 if not registered)."""
        report = await checker.check_named(check_name)
        if report.status == HealthStatus.UNKNOWN:
            logger.debug(f"Health check not found: {check_name}")
        return _report_response(report)

    # ========================================================================
    # STATUS ONLY
    # ========================================================================

    @router.get("/healthz")
    async def simple_health_check(
        include: Optional[List[str]] = Query(default=None),
        exclude: Optional[List[str]] = Query(default=None),
    ):
        """Overall status as plain text; stops at the first unhealthy check."""
        status = await checker.check_simple(include_tags=include, exclude_tags=exclude)
        return _status_response(checker, status)

    @router.get("/healthz/{check_name}")
    async def simple_single_health_check(check_name: str):
        """Status of one check as plain text."""
        status = await checker.check_simple_named(check_name)
        return _status_response(checker, status)

    return router


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "create_health_router",
]
