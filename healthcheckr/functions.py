# ============================================================================
# AZURE FUNCTIONS ADAPTER
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Infrastructure - Azure Functions health endpoints
# PURPOSE: Turn HealthChecker results into func.HttpResponse objects
# CREATED: 10 OCT 2026
# ============================================================================
"""
Azure Functions Adapter

Response helpers and a blueprint factory for Azure Functions v2 apps.

Endpoints (create_health_blueprint):
    GET /api/health          - Detailed JSON report
    GET /api/health/{name}   - Detailed JSON report for one check
    GET /api/healthz         - Bare status text
    GET /api/healthz/{name}  - Bare status text for one check

Query params (comma-separated):
    include=external,critical
    exclude=slow
"""

import json
from typing import List, Optional

import azure.functions as func

from healthcheckr.checker import HealthChecker
from healthcheckr.logging import get_logger

logger = get_logger(__name__)


def _split_param(req: func.HttpRequest, key: str) -> Optional[List[str]]:
    """Parse a comma-separated query param into tags (None when absent)."""
    raw = req.params.get(key)
    if not raw:
        return None
    tags = [tag.strip() for tag in raw.split(",") if tag.strip()]
    return tags or None


def _route_name(req: func.HttpRequest) -> Optional[str]:
    return (req.route_params or {}).get("name") or None


async def health_response(checker: HealthChecker, req: func.HttpRequest) -> func.HttpResponse:
    """
    Run a detailed check for the request and build a JSON response.

    The status code is the report's result code.
    """
    name = _route_name(req)
    if name:
        report = await checker.check_named(name)
    else:
        report = await checker.check(
            include_tags=_split_param(req, "include"),
            exclude_tags=_split_param(req, "exclude"),
        )

    return func.HttpResponse(
        json.dumps(report.to_dict()),
        status_code=report.result_code,
        headers={"Content-Type": "application/json"},
    )


async def simple_health_response(checker: HealthChecker, req: func.HttpRequest) -> func.HttpResponse:
    """Run a simple check for the request and return the bare status text."""
    name = _route_name(req)
    if name:
        status = await checker.check_simple_named(name)
    else:
        status = await checker.check_simple(
            include_tags=_split_param(req, "include"),
            exclude_tags=_split_param(req, "exclude"),
        )

    return func.HttpResponse(
        status.value,
        status_code=checker.options.status_code_for(status),
        headers={"Content-Type": "text/plain"},
    )


def create_health_blueprint(checker: HealthChecker) -> func.Blueprint:
    """
    Build a blueprint serving checker's health endpoints.

    Usage:
        app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)
        app.register_functions(create_health_blueprint(checker))
    """
    health_bp = func.Blueprint()

    @health_bp.route(route="health", methods=["GET"])
    async def health(req: func.HttpRequest) -> func.HttpResponse:
        """
        Detailed health report.

        GET /api/health?include=external&exclude=slow
        """
        return await health_response(checker, req)

    @health_bp.route(route="health/{name}", methods=["GET"])
    async def health_named(req: func.HttpRequest) -> func.HttpResponse:
        """Detailed health report for one check."""
        return await health_response(checker, req)

    @health_bp.route(route="healthz", methods=["GET"])
    async def healthz(req: func.HttpRequest) -> func.HttpResponse:
        """
        Overall status as plain text.

        GET /api/healthz?include=external
        """
        return await simple_health_response(checker, req)

    @health_bp.route(route="healthz/{name}", methods=["GET"])
    async def healthz_named(req: func.HttpRequest) -> func.HttpResponse:
        """Status of one check as plain text."""
        return await simple_health_response(checker, req)

    logger.debug(f"Health blueprint created for {len(checker)} checks")
    return health_bp


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "health_response",
    "simple_health_response",
    "create_health_blueprint",
]
