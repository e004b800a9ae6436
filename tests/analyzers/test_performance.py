"""Tests for the performance profiler."""

from auditscope.analyzers.performance import (
    PerformanceAnalyzer,
    bundle_findings,
    cost_findings,
    cost_summary,
    detect_leaks,
    load_findings,
)
from auditscope.config import PerformanceConfig
from auditscope.models import PhaseStatus, Severity
from auditscope.providers import (
    BundleStats,
    Chunk,
    LoadMetrics,
    OperationCost,
    StaticArtifactProvider,
    StaticMeasurementProvider,
)

KB = 1024

LEAKY_COMPONENT = """\
export function Clock() {
  useEffect(() => {
    const id = setInterval(tick, 1000);
    window.addEventListener('resize', onResize);
  }, []);
}
"""

CLEAN_COMPONENT = """\
export function Clock() {
  useEffect(() => {
    const id = setInterval(tick, 1000);
    window.addEventListener('resize', onResize);
    return () => {
      clearInterval(id);
      window.removeEventListener('resize', onResize);
    };
  }, []);
}
"""


class TestLeakDetection:
    """Subscriptions without teardown."""

    def test_missing_teardown(self, unit):
        leaks = detect_leaks(unit("src/Clock.jsx", LEAKY_COMPONENT))
        assert [(v.rule_id, v.severity) for v in leaks] == [
            ("performance.leak-effect-cleanup", Severity.MEDIUM),
            ("performance.leak-event-listener", Severity.HIGH),
            ("performance.leak-timer", Severity.HIGH),
        ]
        assert [v.line for v in leaks] == [2, 4, 3]

    def test_teardown_present(self, unit):
        assert detect_leaks(unit("src/Clock.tsx", CLEAN_COMPONENT)) == []

    def test_non_script_units_are_ignored(self, unit):
        assert detect_leaks(unit("app/clock.py", "setInterval(tick)")) == []


class TestBundle:
    """Bundle size, chunk size and duplicate modules."""

    def test_within_budget(self):
        stats = BundleStats((Chunk("main", 50 * KB, ("src/a.js",)),), "stats.json")
        breached, violations = bundle_findings(stats, PerformanceConfig())
        assert not breached
        assert violations == []

    def test_oversized_bundle(self):
        stats = BundleStats(
            (
                Chunk("main", 600 * KB, ("src/a.js", "lodash")),
                Chunk("vendor", 600 * KB, ("lodash",)),
            ),
            "stats.json",
        )
        breached, violations = bundle_findings(stats, PerformanceConfig())
        assert breached
        assert [v.rule_id for v in violations] == [
            "performance.bundle-size",
            "performance.large-chunk",
            "performance.large-chunk",
            "performance.duplicate-module",
        ]
        assert violations[-1].file == "lodash"

    def test_gzip_estimate(self):
        stats = BundleStats((Chunk("main", 1000),))
        assert stats.gzipped_size == 300


class TestLoadTime:
    """Initial load and time-to-interactive limits."""

    def test_within_limits(self):
        assert load_findings(LoadMetrics(1200, 2500), PerformanceConfig()) == (False, [])

    def test_slow_load(self):
        breached, violations = load_findings(LoadMetrics(4000, 6000), PerformanceConfig())
        assert breached
        assert [(v.rule_id, v.severity) for v in violations] == [
            ("performance.load-time", Severity.HIGH),
            ("performance.time-to-interactive", Severity.MEDIUM),
        ]


class TestResourceCost:
    """Cost statistics and optimization estimates."""

    def test_summary(self):
        costs = [OperationCost("read", 100), OperationCost("mint", 400_000), OperationCost("swap", 600_000)]
        summary = cost_summary(costs, 500_000)
        assert summary["operations"] == 3
        assert summary["max_cost"] == 600_000
        assert summary["average_cost"] == round((100 + 400_000 + 600_000) / 3, 1)
        assert [o["operation"] for o in summary["optimizations"]] == ["mint", "swap"]
        assert summary["optimizations"][1]["optimized"] == 510_000
        assert summary["optimizations"][1]["savings"] == 90_000

    def test_empty(self):
        summary = cost_summary([], 500_000)
        assert summary["average_cost"] == 0.0
        assert summary["max_cost"] == 0
        assert summary["optimizations"] == []

    def test_average_near_ceiling(self):
        breached, violations = cost_findings(cost_summary([OperationCost("swap", 450_000)], 500_000))
        assert breached
        assert [(v.rule_id, v.severity) for v in violations] == [("performance.resource-cost", Severity.MEDIUM)]
        assert "500000" in violations[0].description

    def test_operation_over_ceiling(self):
        costs = [OperationCost("read", 100), OperationCost("migrate", 600_000)]
        breached, violations = cost_findings(cost_summary(costs, 500_000))
        assert breached
        assert [(v.rule_id, v.severity) for v in violations] == [
            ("performance.resource-cost-ceiling", Severity.HIGH)
        ]

    def test_cheap_operations(self):
        assert cost_findings(cost_summary([OperationCost("read", 1000)], 500_000)) == (False, [])
        assert cost_findings(cost_summary([], 500_000)) == (False, [])


class TestPerformanceAnalyzer:
    """Phase report with injected providers."""

    def test_missing_capabilities_degrade_to_warning(self, unit, make_context):
        context = make_context(
            unit("src/app.js", "export const x = 1;\n"),
            artifacts=StaticArtifactProvider(),
            measurements=StaticMeasurementProvider(),
        )
        report = PerformanceAnalyzer().analyze(context)

        assert report.status == PhaseStatus.WARNING
        assert report.score == 100.0
        assert report.violations == ()
        assert len(report.notes) == 3
        assert report.notes[0].startswith("Bundle analysis skipped")
        bundle = report.summary["bundle"]
        assert bundle["total_size"] == 0
        assert bundle["gzipped_size"] == 0
        assert bundle["chunks"] == []
        assert report.summary["load_time"] is None
        assert report.summary["resource_cost"]["operations"] == 0

    def test_all_measurements_within_budget_pass(self, unit, make_context):
        context = make_context(
            unit("src/app.js", "export const x = 1;\n"),
            artifacts=StaticArtifactProvider(BundleStats((Chunk("main", 40 * KB),), "stats.json")),
            measurements=StaticMeasurementProvider(LoadMetrics(900, 1800), [OperationCost("read", 1000)]),
        )
        report = PerformanceAnalyzer().analyze(context)
        assert report.status == PhaseStatus.PASSED
        assert report.score == 100.0
        assert report.summary["load_time"]["initial_load_ms"] == 900.0

    def test_bundle_breach_fails(self, unit, make_context):
        context = make_context(
            unit("src/app.js", "export const x = 1;\n"),
            artifacts=StaticArtifactProvider(BundleStats((Chunk("main", 2 * KB * KB),), "stats.json")),
            measurements=StaticMeasurementProvider(LoadMetrics(900, 1800), []),
        )
        report = PerformanceAnalyzer().analyze(context)
        assert report.status == PhaseStatus.FAILED
        assert report.score == 80.0
        assert report.notes == ()

    def test_penalties_accumulate(self, unit, make_context):
        context = make_context(
            unit("src/Clock.jsx", LEAKY_COMPONENT),
            artifacts=StaticArtifactProvider(BundleStats((Chunk("main", 2 * KB * KB),), "stats.json")),
            measurements=StaticMeasurementProvider(
                LoadMetrics(4000, 6000), [OperationCost("swap", 450_000)]
            ),
        )
        report = PerformanceAnalyzer().analyze(context)
        # 100 - 20 bundle - 25 load - 15 cost - 3 * 10 leaks
        assert report.score == 10.0
        assert report.summary["memory_leaks"] == 3

    def test_recommendations_are_deduplicated(self, unit, make_context):
        context = make_context(
            unit("src/a.jsx", LEAKY_COMPONENT),
            unit("src/b.jsx", LEAKY_COMPONENT),
            artifacts=StaticArtifactProvider(),
            measurements=StaticMeasurementProvider(),
        )
        report = PerformanceAnalyzer().analyze(context)
        texts = [r.text for r in report.recommendations]
        assert len(texts) == len(set(texts)) == 3
        assert report.recommendations[0].severity == Severity.HIGH

    def test_cost_breach_alone_fails(self, unit, make_context):
        context = make_context(
            unit("src/app.js", "export const x = 1;\n"),
            artifacts=StaticArtifactProvider(BundleStats((Chunk("main", 1 * KB),), "stats.json")),
            measurements=StaticMeasurementProvider(LoadMetrics(900, 1800), [OperationCost("swap", 450_000)]),
        )
        report = PerformanceAnalyzer().analyze(context)
        assert report.status == PhaseStatus.FAILED
        assert report.score == 85.0
        assert [v.rule_id for v in report.violations] == ["performance.resource-cost"]
