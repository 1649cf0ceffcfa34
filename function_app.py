# ============================================================================
# HEALTHCHECKR - Azure Function App (Sample Host)
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Host - Sample health endpoints
# PURPOSE: Azure Functions v2 host wiring a sample HealthChecker
# CREATED: 11 OCT 2026
# ============================================================================
"""
HealthCheckr Sample Function App

Azure Functions V2 entry point providing:
- /api/livez - Liveness probe (no checks run)
- /api/health - Detailed report (?include=external&exclude=critical)
- /api/health/{name} - Detailed report for one check
- /api/healthz - Bare status text, sequential with short-circuit
- /api/healthz/{name} - Bare status text for one check

Sample checks:
- "Check 1": always healthy
- "Check 2": 2 s delay under a 50 ms timeout (reports a timeout), tag external
- "Check 3": capability object, tags external and critical

Options come from HEALTHCHECKR_* environment variables; errors are always
included and the report carries the deployment metadata below.
"""

import json
import logging

import azure.functions as func

from healthcheckr import (
    CheckOutcome,
    HealthCheck,
    HealthChecker,
    HealthCheckerOptions,
    __version__,
    create_health_blueprint,
)

# ============================================================================
# APP
# ============================================================================

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

logger = logging.getLogger(__name__)


@app.route(route="livez", methods=["GET"])
def liveness_probe(req: func.HttpRequest) -> func.HttpResponse:
    """
    Liveness probe - always returns 200 if function is running.

    GET /api/livez
    """
    return func.HttpResponse(
        json.dumps({"alive": True, "service": "healthcheckr", "version": __version__}),
        status_code=200,
        headers={"Content-Type": "application/json"},
    )


# ============================================================================
# SAMPLE CHECKS
# ============================================================================

class CustomHealthCheck(HealthCheck):
    """Capability-object check that always passes."""

    async def check_health(self, token) -> CheckOutcome:
        return CheckOutcome.healthy("Custom health check passed.")


async def slow_external_check(token) -> CheckOutcome:
    await token.sleep(2.0)
    return CheckOutcome.degraded(Metadata1=123)


checker = HealthChecker(
    HealthCheckerOptions.from_env().with_data(Environment="Production", Id=42),
    include_errors=True,
)

(
    checker
    .add_check("Check 1", lambda: CheckOutcome.healthy())
    .add_check("Check 2", slow_external_check, tags=["external"], timeout=0.05)
    .add_check("Check 3", CustomHealthCheck(), tags=["external", "critical"])
)

logger.info(f"Registered health checks: {checker.registry.names()}")

# ============================================================================
# BLUEPRINT REGISTRATION
# ============================================================================

app.register_functions(create_health_blueprint(checker))
logger.info("Registered: health blueprint")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["app", "checker"]
