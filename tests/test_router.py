# ============================================================================
# HEALTH ROUTER TESTS
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Tests - FastAPI health endpoints
# PURPOSE: Verify HTTP status codes and bodies of the health router
# CREATED: 15 OCT 2026
# ============================================================================
"""
Health Router Tests

Uses FastAPI TestClient against an app mounting create_health_router().

Covers:
1. GET /livez
2. GET /health with include/exclude query params
3. GET /health/{check_name} (found and not found)
4. GET /healthz plain-text status and codes
5. Router prefix

Run with:
    pytest tests/test_router.py -v
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from healthcheckr import CheckOutcome, HealthChecker, __version__
from healthcheckr.router import create_health_router


# ============================================================================
# FIXTURES
# ============================================================================

def _make_test_app(checker, prefix=""):
    """Create a test FastAPI app with the health router."""
    app = FastAPI()
    app.include_router(create_health_router(checker, prefix=prefix))
    return app


@pytest.fixture
def checker():
    def broken():
        raise ConnectionError("refused")

    return (
        HealthChecker(include_errors=True)
        .add_check("api", lambda: CheckOutcome.healthy("ok"), tags=["internal"])
        .add_check("queue", lambda: CheckOutcome.degraded("backlog"), tags=["external"])
        .add_check("storage", broken, tags=["external", "critical"])
    )


@pytest.fixture
def client(checker):
    return TestClient(_make_test_app(checker))


# ============================================================================
# LIVENESS
# ============================================================================

class TestLivez:
    """Tests for GET /livez."""

    def test_livez(self, client):
        response = client.get("/livez")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"
        assert response.json()["version"] == __version__


# ============================================================================
# DETAILED REPORT
# ============================================================================

class TestHealth:
    """Tests for GET /health and GET /health/{check_name}."""

    def test_unhealthy_returns_503(self, client):
        response = client.get("/health")
        body = response.json()
        assert response.status_code == 503
        assert body["status"] == "Unhealthy"
        assert [c["name"] for c in body["checks"]] == ["api", "queue", "storage"]
        assert body["checks"][2]["error"] == "refused"

    def test_include_filter(self, client):
        response = client.get("/health", params={"include": "internal"})
        assert response.status_code == 200
        assert [c["name"] for c in response.json()["checks"]] == ["api"]

    def test_repeated_include_and_exclude(self, client):
        response = client.get(
            "/health",
            params=[("include", "internal"), ("include", "external"), ("exclude", "critical")],
        )
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "Degraded"
        assert [c["name"] for c in body["checks"]] == ["api", "queue"]

    def test_no_match_returns_404(self, client):
        response = client.get("/health", params={"include": "nope"})
        assert response.status_code == 404
        assert response.json()["status"] == "Unknown"

    def test_single_check(self, client):
        response = client.get("/health/QUEUE")
        assert response.status_code == 200
        assert response.json()["checks"][0]["description"] == "backlog"

    def test_single_check_not_found(self, client):
        response = client.get("/health/missing")
        assert response.status_code == 404
        assert response.json()["checks"] == []


# ============================================================================
# STATUS ONLY
# ============================================================================

class TestHealthz:
    """Tests for GET /healthz and GET /healthz/{check_name}."""

    def test_simple_unhealthy(self, client):
        response = client.get("/healthz")
        assert response.status_code == 503
        assert response.text == "Unhealthy"

    def test_simple_filtered(self, client):
        response = client.get("/healthz", params={"exclude": "critical"})
        assert response.status_code == 200
        assert response.text == "Degraded"

    def test_simple_named(self, client):
        response = client.get("/healthz/api")
        assert response.status_code == 200
        assert response.text == "Healthy"

    def test_simple_named_not_found(self, client):
        response = client.get("/healthz/missing")
        assert response.status_code == 404
        assert response.text == "Unknown"


class TestPrefix:
    """Tests for mounting under a prefix."""

    def test_prefix(self, checker):
        client = TestClient(_make_test_app(checker, prefix="/ops"))
        assert client.get("/ops/healthz/api").text == "Healthy"
        assert client.get("/healthz/api").status_code == 404
