"""Core data models shared by every audit phase.

The models are frozen dataclasses: a run produces fresh SourceUnits,
FunctionRecords and Violations, and a re-run produces a new
ComprehensiveReport rather than updating an old one.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from types import MappingProxyType
from enum import Enum
from functools import total_ordering
from typing import Any, Mapping, Optional


@total_ordering
class Severity(Enum):
    """Finding severity. Ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def penalty(self) -> int:
        """Fixed score penalty subtracted per finding of this severity."""
        return SEVERITY_PENALTY[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"unknown severity '{value}'") from None


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

SEVERITY_PENALTY = {
    Severity.CRITICAL: 15,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}


class Phase(Enum):
    """Audit phases in their default execution order."""

    COMPLEXITY = "complexity"
    SECURITY = "security"
    COVERAGE = "coverage"
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"


class PhaseStatus(Enum):
    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class ReadinessTier(Enum):
    NOT_READY = "NOT_READY"
    NEEDS_WORK = "NEEDS_WORK"
    READY = "READY"
    PRODUCTION_READY = "PRODUCTION_READY"


def clamp_score(score: float) -> float:
    """Clamp a score into [0, 100]."""
    return max(0.0, min(100.0, float(score)))


def penalized_score(violations: "list[Violation] | tuple[Violation, ...]") -> float:
    """100 minus the severity penalty of every violation, clamped."""
    return clamp_score(100 - sum(v.severity.penalty for v in violations))


# ── Source inputs ───────────────────────────────────────────────────


@dataclass(frozen=True)
class SourceUnit:
    """One analyzable file.

    Attributes:
        path: Path relative to the audited root (used in reports)
        text: Raw file contents
        language: Detected language name ("typescript", "html", ...)
        tree: Parsed syntax tree, attached by the syntax-tree provider
    """

    path: str
    text: str
    language: str = "unknown"
    tree: Optional[Any] = field(default=None, compare=False, repr=False)

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1 if self.text else 0

    @property
    def extension(self) -> str:
        dot = self.path.rfind(".")
        return self.path[dot:].lower() if dot != -1 else ""


# ── Complexity ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class ComplexityMetrics:
    cyclomatic: int = 1
    cognitive: int = 0
    length: int = 0
    nesting_depth: int = 0
    parameter_count: int = 0


@dataclass(frozen=True)
class FunctionRecord:
    """One function-like node with its computed metrics.

    Attributes:
        name: Declared or inferred name, or "<anonymous>"/"<unknown>"
        file: File the function lives in
        line: 1-indexed start line
        column: 1-indexed start column
        metrics: Computed ComplexityMetrics
        violations: Human-readable threshold breaches for this function
    """

    name: str
    file: str
    line: int
    column: int
    metrics: ComplexityMetrics
    violations: tuple[str, ...] = ()


# ── Findings ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Violation:
    """A single rule breach.

    ``excerpt`` is always sanitized before a Violation is built; analyzers
    that match sensitive text must redact it first.
    """

    rule_id: str
    severity: Severity
    file: str
    line: int
    column: int
    description: str
    recommendation: str
    excerpt: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class KeyExposure(Violation):
    """Security finding with a 0-10 risk level."""

    risk_level: int = 0


@dataclass(frozen=True)
class WcagViolation(Violation):
    """Accessibility finding tagged with its WCAG conformance level."""

    wcag_level: str = "A"
    wcag_criterion: str = ""


@dataclass(frozen=True)
class Recommendation:
    """Remediation text tagged with the severity of what it addresses."""

    text: str
    severity: Severity = Severity.LOW
    phase: Optional[Phase] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "severity": self.severity.value,
            "phase": self.phase.value if self.phase else None,
        }


# ── Reports ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PhaseReport:
    """Output of one analyzer for one run.

    Attributes:
        phase: Which phase produced the report
        score: Phase score, always clamped to [0, 100]
        status: passed / warning / failed
        violations: Findings raised by the phase
        summary: Phase-specific statistics, read-only
        recommendations: Phase recommendations, tagged by severity
        notes: Degradation notes (e.g. "no build artifacts found")
    """

    phase: Phase
    score: float
    status: PhaseStatus
    violations: tuple[Violation, ...] = ()
    summary: Mapping[str, Any] = field(default_factory=dict)
    recommendations: tuple[Recommendation, ...] = ()
    notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", clamp_score(self.score))
        object.__setattr__(self, "summary", MappingProxyType(dict(self.summary)))

    @property
    def max_severity(self) -> Optional[Severity]:
        if not self.violations:
            return None
        return max(v.severity for v in self.violations)

    def count(self, severity: Severity) -> int:
        return sum(1 for v in self.violations if v.severity is severity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "score": round(self.score, 2),
            "status": self.status.value,
            "violations": [v.to_dict() for v in self.violations],
            "summary": dict(self.summary),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class ExecutionError:
    """A phase failure captured by the orchestrator."""

    phase: Phase
    category: str
    severity: Severity
    message: str
    remediation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "category": self.category,
            "severity": self.severity.value,
            "message": self.message,
            "remediation": self.remediation,
        }


@dataclass(frozen=True)
class ComprehensiveReport:
    """Aggregate of every PhaseReport produced by one run."""

    overall_score: float
    overall_status: PhaseStatus
    readiness: ReadinessTier
    reports: tuple[PhaseReport, ...]
    phases_executed: tuple[Phase, ...]
    phases_failed: tuple[Phase, ...]
    errors: tuple[ExecutionError, ...]
    recommendations: tuple[Recommendation, ...]
    started_at: datetime
    finished_at: datetime
    cancelled: bool = False

    def report_for(self, phase: Phase) -> Optional[PhaseReport]:
        for report in self.reports:
            if report.phase is phase:
                return report
        return None

    @property
    def duration_ms(self) -> int:
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def severity_counts(self) -> dict[str, int]:
        counts = {s.value: 0 for s in Severity}
        for report in self.reports:
            for violation in report.violations:
                counts[violation.severity.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_score": round(self.overall_score, 2),
            "overall_status": self.overall_status.value,
            "readiness": self.readiness.value,
            "phases_executed": [p.value for p in self.phases_executed],
            "phases_failed": [p.value for p in self.phases_failed],
            "cancelled": self.cancelled,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_ms": self.duration_ms,
            "severity_counts": self.severity_counts(),
            "reports": {r.phase.value: r.to_dict() for r in self.reports},
            "errors": [e.to_dict() for e in self.errors],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }
