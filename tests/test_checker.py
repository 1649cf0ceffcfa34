# ============================================================================
# HEALTH CHECKER TESTS
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Tests - Public facade
# PURPOSE: Verify registration and query API end to end
# CREATED: 13 OCT 2026
# ============================================================================
"""
Health Checker Tests

Covers:
1. Chained and decorator registration
2. Probe shapes through the facade (sync, async, capability, bare status)
3. Tag filtering on check() and check_simple()
4. Named queries (case-insensitive, unknown, empty)
5. Static description/metadata merge and defensive copies
6. Result codes and global report data
7. Caller cancellation through the facade

Run with:
    pytest tests/test_checker.py -v
"""

import asyncio

import pytest

from healthcheckr import (
    CancellationToken,
    CheckOutcome,
    DuplicateNameError,
    HealthCheck,
    HealthChecker,
    HealthCheckerOptions,
    HealthStatus,
    InvalidArgumentError,
    OperationCancelledError,
)


# ============================================================================
# FIXTURES
# ============================================================================

class CustomHealthCheck(HealthCheck):
    async def check_health(self, token):
        return CheckOutcome.healthy("Custom health check passed.")


async def _slow_degraded(token):
    await token.sleep(2.0)
    return CheckOutcome.degraded(Metadata1=123)


@pytest.fixture
def sample_checker():
    """Checker mirroring the sample Function host."""
    checker = HealthChecker(include_errors=True, data={"Environment": "Production", "Id": 42})
    (
        checker
        .add_check("Check 1", lambda: CheckOutcome(status=HealthStatus.HEALTHY))
        .add_check("Check 2", _slow_degraded, tags=["external"], timeout=0.05)
        .add_check("Check 3", CustomHealthCheck(), tags=["external", "critical"])
    )
    return checker


@pytest.fixture
def tagged_checker():
    checker = HealthChecker()
    checker.add_check("untagged", lambda: CheckOutcome.healthy())
    checker.add_check("external", lambda: CheckOutcome.healthy(), tags=["external"])
    checker.add_check("critical", lambda: CheckOutcome.healthy(), tags=["external", "critical"])
    return checker


def _names(report):
    return [entry.name for entry in report.checks]


# ============================================================================
# REGISTRATION
# ============================================================================

class TestRegistration:
    """Tests for add_check() and register()."""

    def test_add_check_chains(self):
        checker = HealthChecker()
        result = checker.add_check("a", lambda: CheckOutcome.healthy())
        assert result is checker
        assert len(checker) == 1
        assert "A" in checker

    def test_duplicate_differing_by_case(self):
        checker = HealthChecker().add_check("Redis", lambda: CheckOutcome.healthy())
        with pytest.raises(DuplicateNameError):
            checker.add_check("redis", lambda: CheckOutcome.healthy())

    def test_register_function_decorator(self):
        checker = HealthChecker()

        @checker.register(tags=["db"], timeout=1.0)
        async def postgres(token):
            return CheckOutcome.healthy("connected")

        assert "postgres" in checker
        assert checker.registry.get("postgres").tags == ("db",)
        report = asyncio.run(checker.check())
        assert report.checks[0].description == "connected"

    def test_register_class_decorator(self):
        checker = HealthChecker()

        @checker.register("custom")
        class Custom(HealthCheck):
            async def check_health(self, token):
                return CheckOutcome.degraded("slow")

        assert isinstance(Custom, type)
        assert asyncio.run(checker.check_simple()) == HealthStatus.DEGRADED

    def test_overrides_applied_to_options(self):
        checker = HealthChecker(HealthCheckerOptions(include_errors=True), degraded_status_code=206)
        assert checker.options.include_errors is True
        assert checker.options.degraded_status_code == 206

    def test_unknown_override_rejected(self):
        with pytest.raises(TypeError):
            HealthChecker(not_an_option=True)


# ============================================================================
# PROBE SHAPES
# ============================================================================

class TestProbeShapes:
    """Tests for each supported probe shape through check()."""

    def test_all_shapes(self):
        class Duck:
            def check_health(self, token):
                return CheckOutcome.healthy("duck")

        async def async_plain():
            return CheckOutcome.healthy("async plain")

        checker = (
            HealthChecker()
            .add_check("sync", lambda: CheckOutcome.healthy("sync"))
            .add_check("sync-token", lambda token: CheckOutcome.healthy("sync token"))
            .add_check("async", async_plain)
            .add_check("capability", CustomHealthCheck())
            .add_check("duck", Duck())
            .add_check("bare", lambda: HealthStatus.DEGRADED)
        )
        report = asyncio.run(checker.check())

        assert [e.description for e in report.checks] == [
            "sync", "sync token", "async plain", "Custom health check passed.", "duck", None,
        ]
        assert report.checks[-1].status == HealthStatus.DEGRADED
        assert report.status == HealthStatus.DEGRADED

    def test_invalid_return_value_is_a_fault(self):
        checker = HealthChecker(include_errors=True).add_check("bad", lambda: "Healthy")
        report = asyncio.run(checker.check())
        assert report.status == HealthStatus.UNHEALTHY
        assert "expected CheckOutcome or HealthStatus" in report.checks[0].error


# ============================================================================
# TAG FILTERING
# ============================================================================

class TestFiltering:
    """Tests for include/exclude through the facade."""

    def test_no_filters_runs_everything(self, tagged_checker):
        report = asyncio.run(tagged_checker.check())
        assert _names(report) == ["untagged", "external", "critical"]

    def test_include_external(self, tagged_checker):
        report = asyncio.run(tagged_checker.check(include_tags=["external"]))
        assert _names(report) == ["external", "critical"]

    def test_exclude_dominates_include(self, tagged_checker):
        report = asyncio.run(
            tagged_checker.check(include_tags=["external"], exclude_tags=["critical"])
        )
        assert _names(report) == ["external"]

    def test_exclude_only_skips_untagged(self, tagged_checker):
        report = asyncio.run(tagged_checker.check(exclude_tags=["critical"]))
        assert _names(report) == ["external"]

    def test_no_match_reports_unknown(self, tagged_checker):
        report = asyncio.run(tagged_checker.check(include_tags=["nope"]))
        assert report.status == HealthStatus.UNKNOWN
        assert report.result_code == 404

    def test_simple_respects_filters(self):
        checker = (
            HealthChecker()
            .add_check("bad", lambda: CheckOutcome.unhealthy())
            .add_check("good", lambda: CheckOutcome.healthy(), tags=["external"])
        )
        assert asyncio.run(checker.check_simple()) == HealthStatus.UNHEALTHY
        assert asyncio.run(checker.check_simple(include_tags=["external"])) == HealthStatus.HEALTHY
        assert asyncio.run(checker.check_simple(include_tags=["nope"])) == HealthStatus.UNKNOWN


# ============================================================================
# NAMED QUERIES
# ============================================================================

class TestNamedQueries:
    """Tests for check_named() and check_simple_named()."""

    def test_check_named_case_insensitive(self, sample_checker):
        report = asyncio.run(sample_checker.check_named("check 3"))
        assert _names(report) == ["Check 3"]
        assert report.status == HealthStatus.HEALTHY
        assert report.result_code == 200

    def test_check_named_ignores_tags(self, sample_checker):
        report = asyncio.run(sample_checker.check_named("Check 1"))
        assert _names(report) == ["Check 1"]

    def test_unknown_name_reports_unknown(self, sample_checker):
        report = asyncio.run(sample_checker.check_named("missing"))
        assert report.status == HealthStatus.UNKNOWN
        assert report.result_code == 404
        assert report.checks == ()

    def test_empty_name_rejected(self, sample_checker):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(sample_checker.check_named(""))
        with pytest.raises(InvalidArgumentError):
            asyncio.run(sample_checker.check_simple_named(""))

    def test_simple_named(self, sample_checker):
        assert asyncio.run(sample_checker.check_simple_named("Check 2")) == HealthStatus.UNHEALTHY
        assert asyncio.run(sample_checker.check_simple_named("Check 3")) == HealthStatus.HEALTHY
        assert asyncio.run(sample_checker.check_simple_named("missing")) == HealthStatus.UNKNOWN


# ============================================================================
# REPORT CONTENT
# ============================================================================

class TestReportContent:
    """Tests for entry content and report-level fields."""

    def test_sample_external_report(self, sample_checker):
        report = asyncio.run(sample_checker.check(include_tags=["external"]))

        assert report.status == HealthStatus.UNHEALTHY
        assert report.result_code == 503
        assert report.data == {"Environment": "Production", "Id": 42}

        timed_out, custom = report.checks
        assert timed_out.name == "Check 2"
        assert timed_out.description == "Health check timed out after 50 ms"
        assert timed_out.error == "Timeout exceeded"
        assert timed_out.tags == ("external",)
        assert custom.description == "Custom health check passed."
        assert custom.error is None
        assert custom.tags == ("external", "critical")

    def test_static_description_and_metadata_merge(self):
        checker = HealthChecker().add_check(
            "cache",
            lambda: CheckOutcome.healthy(hits=10, region="override"),
            description="Redis cache",
            metadata={"region": "eu-west", "cluster": "c1"},
        )
        entry = asyncio.run(checker.check()).checks[0]
        assert entry.description == "Redis cache"
        assert entry.data == {"region": "override", "cluster": "c1", "hits": 10}

    def test_outcome_description_wins(self):
        checker = HealthChecker().add_check(
            "cache", lambda: CheckOutcome.healthy("hot"), description="Redis cache",
        )
        assert asyncio.run(checker.check()).checks[0].description == "hot"

    def test_outcome_data_is_copied(self):
        shared = {"hosts": ["a"]}
        checker = HealthChecker().add_check(
            "db", lambda: CheckOutcome(status=HealthStatus.HEALTHY, data=shared),
        )
        report = asyncio.run(checker.check())
        shared["hosts"].append("b")
        assert report.checks[0].data == {"hosts": ["a"]}

    def test_global_data_is_copied(self):
        data = {"tags": ["prod"]}
        checker = HealthChecker(data=data).add_check("a", lambda: CheckOutcome.healthy())
        data["tags"].append("mutated")
        assert asyncio.run(checker.check()).data == {"tags": ["prod"]}

    def test_outcome_error_included(self):
        checker = HealthChecker(include_errors=True).add_check(
            "db", lambda: CheckOutcome.unhealthy("down", error=ConnectionError("refused")),
        )
        entry = asyncio.run(checker.check()).checks[0]
        assert entry.description == "down"
        assert entry.error == "refused"

    def test_errors_hidden_by_default(self):
        def broken():
            raise RuntimeError("secret detail")

        report = asyncio.run(HealthChecker().add_check("db", broken).check())
        assert report.checks[0].status == HealthStatus.UNHEALTHY
        assert report.checks[0].error is None

    @pytest.mark.parametrize(
        "status, expected",
        [
            (HealthStatus.HEALTHY, 200),
            (HealthStatus.DEGRADED, 206),
            (HealthStatus.UNHEALTHY, 500),
        ],
    )
    def test_custom_result_codes(self, status, expected):
        checker = HealthChecker(
            degraded_status_code=206,
            unhealthy_status_code=500,
        ).add_check("a", lambda: status)
        assert asyncio.run(checker.check()).result_code == expected


# ============================================================================
# CANCELLATION
# ============================================================================

class TestCallerCancellation:
    """Tests for caller cancellation through the facade."""

    def test_check_propagates_cancellation(self, sample_checker):
        async def _run():
            token = CancellationToken()
            token.cancel_after(0.01)
            await sample_checker.check_named("Check 2", token=token)

        # Check 2's own 50 ms timeout is longer than the caller's 10 ms
        with pytest.raises(OperationCancelledError):
            asyncio.run(asyncio.wait_for(_run(), timeout=2.0))

    def test_check_simple_with_cancelled_token(self, sample_checker):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            asyncio.run(sample_checker.check_simple(token=token))

    def test_native_task_cancellation_propagates(self):
        checker = HealthChecker().add_check("slow", _slow_degraded)

        async def _run():
            task = asyncio.ensure_future(checker.check())
            await asyncio.sleep(0.02)
            task.cancel()
            await task

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(_run())
