"""Tree walker and complexity analyzer.

Per function-like node:

    cyclomatic  1 + one per decision point (if, else-if, loop, switch,
                non-default case, catch, ternary, && / || / and / or)
    cognitive   if/loops add 1 + nesting and nest their bodies; else-if,
                switch, catch, ternary and logical operators add a flat 1
    length      body end line - body start line + 1
    nesting     deepest stack of if/loop/switch/try/catch bodies
    parameters  declared parameter count

Nested functions are boundaries: each gets its own FunctionRecord and
contributes nothing to its parent's metrics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import numpy as np

from ..config import ComplexityThresholds
from ..logging_config import get_logger
from ..models import (
    ComplexityMetrics,
    FunctionRecord,
    Phase,
    PhaseReport,
    PhaseStatus,
    Severity,
    SourceUnit,
    Violation,
    clamp_score,
)
from ..scanning.nodes import NodeKind, SyntaxNode
from ..scanning.provider import SyntaxTreeProvider
from .base import Analyzer, AuditContext, recommendations_from

logger = get_logger(__name__)

# Continuation clauses sit at their construct's own level
_CLAUSES = (NodeKind.ELSE, NodeKind.ELSE_IF, NodeKind.CATCH)

_METRIC_RULES = (
    # (metric attribute, threshold attribute, rule id, label, recommendation)
    (
        "cyclomatic",
        "max_cyclomatic",
        "complexity.cyclomatic",
        "cyclomatic complexity",
        "Split the function into smaller functions with fewer branches",
    ),
    (
        "length",
        "max_length",
        "complexity.length",
        "function length",
        "Extract cohesive blocks of the function into helpers",
    ),
    (
        "nesting_depth",
        "max_nesting",
        "complexity.nesting",
        "nesting depth",
        "Flatten nested conditionals with early returns or guard clauses",
    ),
    (
        "parameter_count",
        "max_parameters",
        "complexity.parameters",
        "parameter count",
        "Group related parameters into an options object",
    ),
)


@dataclass
class _Tally:
    cyclomatic: int = 1
    cognitive: int = 0
    max_depth: int = 0


def _walk(function: SyntaxNode, tally: _Tally) -> None:
    """Accumulate metrics for one function body.

    Explicit stack of (node, nesting, depth): nesting drives the cognitive
    increment, depth the nesting-depth metric.
    """
    stack: list[tuple[SyntaxNode, int, int]] = [(c, 0, 0) for c in reversed(function.children)]

    while stack:
        node, nesting, depth = stack.pop()
        kind = node.kind
        children = node.children

        if kind is NodeKind.FUNCTION:
            continue

        if kind is NodeKind.IF or kind is NodeKind.LOOP:
            tally.cyclomatic += 1
            tally.cognitive += 1 + nesting
            tally.max_depth = max(tally.max_depth, depth + 1)
            _push(stack, children, (nesting, depth), (nesting + 1, depth + 1))
        elif kind is NodeKind.ELSE_IF:
            tally.cyclomatic += 1
            tally.cognitive += 1
            tally.max_depth = max(tally.max_depth, depth + 1)
            _push(stack, children, (nesting, depth), (nesting + 1, depth + 1))
        elif kind is NodeKind.ELSE:
            if any(c.kind is NodeKind.ELSE_IF for c in children):
                _push(stack, children, (nesting, depth), (nesting, depth))
            else:
                tally.max_depth = max(tally.max_depth, depth + 1)
                _push(stack, children, (nesting + 1, depth + 1), (nesting + 1, depth + 1))
        elif kind is NodeKind.SWITCH:
            tally.cyclomatic += 1
            tally.cognitive += 1
            tally.max_depth = max(tally.max_depth, depth + 1)
            _push(stack, children, (nesting, depth + 1), (nesting, depth + 1))
        elif kind is NodeKind.TRY:
            tally.max_depth = max(tally.max_depth, depth + 1)
            _push(stack, children, (nesting, depth), (nesting, depth + 1))
        elif kind is NodeKind.CATCH:
            tally.cyclomatic += 1
            tally.cognitive += 1
            tally.max_depth = max(tally.max_depth, depth + 1)
            _push(stack, children, (nesting, depth + 1), (nesting, depth + 1))
        elif kind is NodeKind.CASE:
            tally.cyclomatic += 1
            _push(stack, children, (nesting, depth), (nesting, depth))
        elif kind is NodeKind.TERNARY or kind is NodeKind.LOGICAL:
            tally.cyclomatic += 1
            tally.cognitive += 1
            _push(stack, children, (nesting, depth), (nesting, depth))
        else:
            _push(stack, children, (nesting, depth), (nesting, depth))


def _push(
    stack: list[tuple[SyntaxNode, int, int]],
    children: list[SyntaxNode],
    clause_level: tuple[int, int],
    body_level: tuple[int, int],
) -> None:
    # Reversed so children pop in document order
    for child in reversed(children):
        nesting, depth = clause_level if child.kind in _CLAUSES else body_level
        stack.append((child, nesting, depth))


def measure_function(function: SyntaxNode) -> ComplexityMetrics:
    """Compute ComplexityMetrics for one function-like node."""
    tally = _Tally()
    _walk(function, tally)
    body = function.body()
    return ComplexityMetrics(
        cyclomatic=tally.cyclomatic,
        cognitive=tally.cognitive,
        length=body.end_line - body.line + 1,
        nesting_depth=tally.max_depth,
        parameter_count=function.parameter_count(),
    )


def find_functions(root: SyntaxNode) -> list[SyntaxNode]:
    """Every function-like node in the tree, in document order."""
    return [node for node in root.walk() if node.is_function]


def check_thresholds(
    metrics: ComplexityMetrics, thresholds: ComplexityThresholds
) -> list[tuple[str, str, int, int, Severity, str]]:
    """Threshold breaches as (rule id, label, value, limit, severity, recommendation).

    Severity is HIGH above twice the limit, otherwise MEDIUM.
    """
    breaches = []
    for metric, limit_name, rule_id, label, recommendation in _METRIC_RULES:
        value = getattr(metrics, metric)
        limit = getattr(thresholds, limit_name)
        if value > limit:
            severity = Severity.HIGH if value > 2 * limit else Severity.MEDIUM
            breaches.append((rule_id, label, value, limit, severity, recommendation))
    return breaches


@dataclass
class ComplexityReport:
    """Function records, violations and aggregate statistics for one run."""

    functions: list[FunctionRecord] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)
    files_analyzed: int = 0
    files_skipped: int = 0

    @property
    def total_functions(self) -> int:
        return len(self.functions)

    @property
    def violating_functions(self) -> int:
        return sum(1 for f in self.functions if f.violations)

    def _cyclomatic(self) -> np.ndarray:
        return np.array([f.metrics.cyclomatic for f in self.functions], dtype=float)

    @property
    def average_complexity(self) -> float:
        values = self._cyclomatic()
        return float(values.mean()) if values.size else 0.0

    @property
    def max_complexity(self) -> int:
        values = self._cyclomatic()
        return int(values.max()) if values.size else 0

    def stats(self) -> dict[str, Any]:
        values = self._cyclomatic()
        cognitive = np.array([f.metrics.cognitive for f in self.functions], dtype=float)
        lengths = np.array([f.metrics.length for f in self.functions], dtype=float)
        return {
            "files_analyzed": self.files_analyzed,
            "files_skipped": self.files_skipped,
            "total_functions": self.total_functions,
            "violating_functions": self.violating_functions,
            "average_complexity": round(self.average_complexity, 2),
            "max_complexity": self.max_complexity,
            "p90_complexity": round(float(np.percentile(values, 90)), 2) if values.size else 0.0,
            "average_cognitive": round(float(cognitive.mean()), 2) if cognitive.size else 0.0,
            "average_length": round(float(lengths.mean()), 2) if lengths.size else 0.0,
        }

    def score(self, thresholds: ComplexityThresholds) -> float:
        """100 minus severity penalties, minus 2 per point of excess average."""
        score = 100.0 - sum(v.severity.penalty for v in self.violations)
        average = self.average_complexity
        if average > thresholds.max_cyclomatic:
            score -= 2 * (average - thresholds.max_cyclomatic)
        return clamp_score(score)


class ComplexityAnalyzer(Analyzer):
    """Walks every function in every parsed SourceUnit."""

    phase = Phase.COMPLEXITY

    def __init__(self, thresholds: Optional[ComplexityThresholds] = None):
        self.thresholds = thresholds or ComplexityThresholds()

    def analyze_unit(self, unit: SourceUnit, root: SyntaxNode) -> tuple[list[FunctionRecord], list[Violation]]:
        """FunctionRecords and threshold Violations for one parsed unit."""
        records: list[FunctionRecord] = []
        violations: list[Violation] = []
        for function in find_functions(root):
            metrics = measure_function(function)
            name = function.function_name()
            breaches = check_thresholds(metrics, self.thresholds)
            records.append(
                FunctionRecord(
                    name=name,
                    file=unit.path,
                    line=function.line,
                    column=function.column,
                    metrics=metrics,
                    violations=tuple(f"{label} {value} exceeds {limit}" for _, label, value, limit, _, _ in breaches),
                )
            )
            for rule_id, label, value, limit, severity, recommendation in breaches:
                violations.append(
                    Violation(
                        rule_id=rule_id,
                        severity=severity,
                        file=unit.path,
                        line=function.line,
                        column=function.column,
                        description=f"{name}: {label} {value} exceeds threshold {limit}",
                        recommendation=recommendation,
                    )
                )
        return records, violations

    def analyze_units(self, units: Iterable[SourceUnit], roots: Iterable[SyntaxNode]) -> ComplexityReport:
        report = ComplexityReport()
        for unit, root in zip(units, roots):
            records, violations = self.analyze_unit(unit, root)
            report.files_analyzed += 1
            report.functions.extend(records)
            report.violations.extend(violations)
        return report

    def analyze(self, context: AuditContext) -> PhaseReport:
        provider = context.syntax or SyntaxTreeProvider(require_manifest=context.config.require_manifest)
        parsed = provider.parse_all(context.sources.units, context.sources.root)
        context.check_cancelled(self.phase)

        report = self.analyze_units(parsed.units, (provider.root(u) for u in parsed.units))
        report.files_skipped = len(parsed.failures)
        score = report.score(self.thresholds)

        if any(v.severity >= Severity.HIGH for v in report.violations):
            status = PhaseStatus.FAILED
        elif report.violations:
            status = PhaseStatus.WARNING
        else:
            status = PhaseStatus.PASSED

        recommendations = recommendations_from(report.violations, self.phase)
        notes = tuple(f"Skipped {f.details.get('filepath', '?')}: {f.message}" for f in parsed.failures)
        logger.info(
            f"Complexity: {report.total_functions} functions, "
            f"{report.violating_functions} over threshold, score {score:.1f}"
        )
        return PhaseReport(
            phase=self.phase,
            score=score,
            status=status,
            violations=tuple(report.violations),
            summary=report.stats(),
            recommendations=recommendations,
            notes=notes,
        )
