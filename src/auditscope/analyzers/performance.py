"""Performance profiler: bundle composition, load timings, resource cost, leak idioms.

Each sub-analysis is optional to satisfy. A missing capability (no build
artifacts, no load measurement, no cost catalog) zeroes that part of the
summary and adds a note; the phase still reports.
"""

from __future__ import annotations

import re
from typing import Any, Optional

import numpy as np

from ..config import PerformanceConfig
from ..exceptions import CapabilityUnavailable
from ..logging_config import get_logger
from ..models import Phase, PhaseReport, PhaseStatus, Recommendation, Severity, SourceUnit, Violation, clamp_score
from ..providers.artifacts import BuildArtifactProvider, BundleStats, FilesystemArtifactProvider
from ..providers.measurements import (
    LoadMetrics,
    MeasurementProvider,
    OperationCost,
    ReportFileMeasurementProvider,
)
from .base import Analyzer, AuditContext, merge_recommendations, recommendations_from

logger = get_logger(__name__)

BUNDLE_PENALTY = 20
LOAD_TIME_PENALTY = 25
COST_PENALTY = 15
LEAK_PENALTY = 10

# Optimized estimate for expensive operations
OPTIMIZATION_FACTOR = 0.85

# Share of the cost ceiling the average may reach before it counts as a breach
AVERAGE_COST_RATIO = 0.8

_LEAK_LANGUAGES = frozenset({"javascript", "typescript", "tsx"})

# (rule id, subscription, teardown, severity, description, recommendation)
_LEAK_CHECKS = (
    (
        "performance.leak-effect-cleanup",
        re.compile(r"\buseEffect\s*\("),
        re.compile(r"\breturn\b"),
        Severity.MEDIUM,
        "useEffect without cleanup function may cause memory leaks",
        "Add a cleanup function to useEffect for subscriptions and timers",
    ),
    (
        "performance.leak-event-listener",
        re.compile(r"\baddEventListener\s*\("),
        re.compile(r"\bremoveEventListener\s*\("),
        Severity.HIGH,
        "Event listeners not removed on unmount",
        "Remove event listeners in a cleanup function",
    ),
    (
        "performance.leak-timer",
        re.compile(r"\bset(?:Interval|Timeout)\s*\("),
        re.compile(r"\bclear(?:Interval|Timeout)\s*\("),
        Severity.HIGH,
        "Timers not cleared on unmount",
        "Clear timers in a cleanup function",
    ),
)


def detect_leaks(unit: SourceUnit) -> list[Violation]:
    """Subscriptions in a unit with no matching teardown anywhere in it."""
    if unit.language not in _LEAK_LANGUAGES:
        return []
    leaks = []
    for rule_id, subscribe, teardown, severity, description, recommendation in _LEAK_CHECKS:
        first = subscribe.search(unit.text)
        if first and not teardown.search(unit.text):
            line = unit.text.count("\n", 0, first.start()) + 1
            leaks.append(
                Violation(
                    rule_id=rule_id,
                    severity=severity,
                    file=unit.path,
                    line=line,
                    column=first.start() - (unit.text.rfind("\n", 0, first.start()) + 1) + 1,
                    description=description,
                    recommendation=recommendation,
                    excerpt=first.group(0),
                )
            )
    return leaks


def bundle_findings(stats: BundleStats, config: PerformanceConfig) -> tuple[bool, list[Violation]]:
    """Returns (total size breached, violations)."""
    violations = []
    breached = stats.total_size > config.max_bundle_bytes
    if breached:
        violations.append(
            Violation(
                rule_id="performance.bundle-size",
                severity=Severity.HIGH,
                file=stats.source,
                line=0,
                column=0,
                description=(
                    f"Bundle size {stats.total_size / 1024:.1f} KB exceeds "
                    f"{config.max_bundle_bytes / 1024:.0f} KB"
                ),
                recommendation="Implement code splitting and lazy loading",
            )
        )
    for chunk in stats.chunks:
        if chunk.size > config.max_chunk_bytes:
            violations.append(
                Violation(
                    rule_id="performance.large-chunk",
                    severity=Severity.MEDIUM,
                    file=chunk.name,
                    line=0,
                    column=0,
                    description=f"Chunk {chunk.name} is {chunk.size / 1024:.1f} KB",
                    recommendation="Split large chunks into smaller, route-level pieces",
                )
            )
    for module in stats.duplicate_modules():
        violations.append(
            Violation(
                rule_id="performance.duplicate-module",
                severity=Severity.LOW,
                file=module,
                line=0,
                column=0,
                description=f"Module {module} is bundled into more than one chunk",
                recommendation="Deduplicate shared modules into a common chunk",
            )
        )
    return breached, violations


def load_findings(metrics: LoadMetrics, config: PerformanceConfig) -> tuple[bool, list[Violation]]:
    violations = []
    if metrics.initial_load_ms > config.max_load_ms:
        violations.append(
            Violation(
                rule_id="performance.load-time",
                severity=Severity.HIGH,
                file="",
                line=0,
                column=0,
                description=f"Initial load {metrics.initial_load_ms:.0f} ms exceeds {config.max_load_ms} ms",
                recommendation="Optimize critical rendering path and defer non-critical scripts",
            )
        )
    if metrics.time_to_interactive_ms > config.max_tti_ms:
        violations.append(
            Violation(
                rule_id="performance.time-to-interactive",
                severity=Severity.MEDIUM,
                file="",
                line=0,
                column=0,
                description=(
                    f"Time to interactive {metrics.time_to_interactive_ms:.0f} ms exceeds {config.max_tti_ms} ms"
                ),
                recommendation="Reduce JavaScript execution time",
            )
        )
    return bool(violations), violations


def cost_findings(cost: dict[str, Any]) -> tuple[bool, list[Violation]]:
    """Returns (average cost breached, violations) for a cost_summary() result."""
    ceiling = cost["ceiling"]
    violations = []
    breached = cost["operations"] > 0 and cost["average_cost"] > AVERAGE_COST_RATIO * ceiling
    if breached:
        violations.append(
            Violation(
                rule_id="performance.resource-cost",
                severity=Severity.MEDIUM,
                file="",
                line=0,
                column=0,
                description=f"Average operation cost {cost['average_cost']:.0f} is approaching the ceiling {ceiling}",
                recommendation="Reduce the cost of the most frequently executed operations",
            )
        )
    if cost["max_cost"] > ceiling:
        violations.append(
            Violation(
                rule_id="performance.resource-cost-ceiling",
                severity=Severity.HIGH,
                file="",
                line=0,
                column=0,
                description=f"Operation cost {cost['max_cost']} exceeds the ceiling {ceiling}",
                recommendation="Split or optimize operations that exceed the resource-cost ceiling",
            )
        )
    return bool(violations), violations


def cost_summary(costs: list[OperationCost], ceiling: int) -> dict[str, Any]:
    """Average/max cost and an optimized estimate for each expensive operation."""
    values = np.array([c.cost for c in costs], dtype=float)
    optimizations = [
        {
            "operation": c.name,
            "current": c.cost,
            "optimized": round(c.cost * OPTIMIZATION_FACTOR),
            "savings": c.cost - round(c.cost * OPTIMIZATION_FACTOR),
        }
        for c in costs
        if c.cost > ceiling / 2
    ]
    return {
        "operations": len(costs),
        "average_cost": round(float(values.mean()), 1) if values.size else 0.0,
        "max_cost": int(values.max()) if values.size else 0,
        "ceiling": ceiling,
        "optimizations": optimizations,
    }


class PerformanceAnalyzer(Analyzer):
    """Bundle, load-time, resource-cost and leak analysis."""

    phase = Phase.PERFORMANCE

    def __init__(self, config: Optional[PerformanceConfig] = None):
        self.config = config or PerformanceConfig()

    def analyze(self, context: AuditContext) -> PhaseReport:
        root = context.sources.root
        artifacts: BuildArtifactProvider = context.artifacts or FilesystemArtifactProvider(root, self.config)
        measurements: MeasurementProvider = context.measurements or ReportFileMeasurementProvider(
            root, self.config
        )

        score = 100.0
        violations: list[Violation] = []
        recommendations: list[Recommendation] = []
        notes: list[str] = []
        breached = False

        # Bundle
        try:
            stats = artifacts.load()
        except CapabilityUnavailable as e:
            logger.debug(f"Bundle analysis degraded: {e}")
            notes.append(f"Bundle analysis skipped: {e.message}")
            stats = BundleStats()
        bundle_breach, found = bundle_findings(stats, self.config)
        violations.extend(found)
        if bundle_breach:
            score -= BUNDLE_PENALTY
            breached = True
        context.check_cancelled(self.phase)

        # Load time
        try:
            load: Optional[LoadMetrics] = measurements.load_metrics()
        except CapabilityUnavailable as e:
            logger.debug(f"Load-time analysis degraded: {e}")
            notes.append(f"Load-time analysis skipped: {e.message}")
            load = None
        if load is not None:
            load_breach, found = load_findings(load, self.config)
            violations.extend(found)
            if load_breach:
                score -= LOAD_TIME_PENALTY
                breached = True

        # Resource cost
        try:
            costs: list[OperationCost] = measurements.operation_costs()
        except CapabilityUnavailable as e:
            logger.debug(f"Resource-cost analysis degraded: {e}")
            notes.append(f"Resource-cost analysis skipped: {e.message}")
            costs = []
        cost = cost_summary(costs, self.config.cost_ceiling)
        cost_breach, found = cost_findings(cost)
        violations.extend(found)
        if cost_breach:
            breached = True
            if any(v.rule_id == "performance.resource-cost" for v in found):
                score -= COST_PENALTY
        for opt in cost["optimizations"]:
            recommendations.append(
                Recommendation(
                    f"Optimize {opt['operation']}: estimated savings {opt['savings']}", Severity.LOW, self.phase
                )
            )
        context.check_cancelled(self.phase)

        # Leak idioms
        leaks = [leak for unit in context.sources.units for leak in detect_leaks(unit)]
        violations.extend(leaks)
        score -= LEAK_PENALTY * len(leaks)

        recommendations.extend(recommendations_from(violations, self.phase))

        if breached:
            status = PhaseStatus.FAILED
        elif notes or violations:
            status = PhaseStatus.WARNING
        else:
            status = PhaseStatus.PASSED

        summary = {
            "bundle": {
                "total_size": stats.total_size,
                "gzipped_size": stats.gzipped_size,
                "chunks": [{"name": c.name, "size": c.size} for c in stats.chunks],
                "duplicate_modules": stats.duplicate_modules(),
                "source": stats.source,
            },
            "load_time": load.to_dict() if load is not None else None,
            "resource_cost": cost,
            "memory_leaks": len(leaks),
        }
        score = clamp_score(score)
        logger.info(f"Performance: bundle {stats.total_size} bytes, {len(leaks)} leaks, score {score:.1f}")
        return PhaseReport(
            phase=self.phase,
            score=score,
            status=status,
            violations=tuple(violations),
            summary=summary,
            recommendations=merge_recommendations(recommendations),
            notes=tuple(notes),
        )

