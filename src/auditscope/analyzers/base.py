"""Base analyzer class and the per-run context every phase reads from."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..config import AuditConfig
from ..exceptions import AuditCancelledError
from ..models import Phase, PhaseReport, Recommendation, Severity, Violation
from ..scanning.files import SourceCollection

if TYPE_CHECKING:
    from ..providers.artifacts import BuildArtifactProvider
    from ..providers.measurements import MeasurementProvider
    from ..scanning.provider import SyntaxTreeProvider


@dataclass
class AuditContext:
    """Read-only inputs shared by all phases of one run.

    Attributes:
        config: Validated run configuration
        sources: SourceUnits loaded for the run
        cancel_event: Set by the orchestrator when the caller cancels
        syntax: Syntax-tree provider (complexity phase)
        artifacts: Build-artifact provider (performance phase)
        measurements: Runtime measurement provider (performance phase)
    """

    config: AuditConfig
    sources: SourceCollection
    cancel_event: threading.Event = field(default_factory=threading.Event)
    syntax: Optional["SyntaxTreeProvider"] = None
    artifacts: Optional["BuildArtifactProvider"] = None
    measurements: Optional["MeasurementProvider"] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def check_cancelled(self, phase: Phase) -> None:
        """Raise AuditCancelledError if the run has been cancelled."""
        if self.cancel_event.is_set():
            raise AuditCancelledError(phase.value)


class Analyzer(ABC):
    """One audit phase: (SourceUnits, config) -> PhaseReport."""

    phase: Phase

    @abstractmethod
    def analyze(self, context: AuditContext) -> PhaseReport:
        """Run the phase and return its report.

        Raises:
            AuditscopeError: Phase-fatal problems; the orchestrator records them
        """


def recommendations_from(
    violations: list[Violation], phase: Phase, limit: Optional[int] = None
) -> tuple[Recommendation, ...]:
    """One recommendation per distinct text, tagged with its worst severity."""
    worst: dict[str, Severity] = {}
    for violation in violations:
        text = violation.recommendation
        if text and (text not in worst or violation.severity > worst[text]):
            worst[text] = violation.severity
    ordered = sorted(worst.items(), key=lambda item: -item[1].rank)
    if limit is not None:
        ordered = ordered[:limit]
    return tuple(Recommendation(text, severity, phase) for text, severity in ordered)


def merge_recommendations(recommendations: list[Recommendation]) -> tuple[Recommendation, ...]:
    """Deduplicate by exact text keeping the worst severity; most severe first."""
    best: dict[str, Recommendation] = {}
    for rec in recommendations:
        if rec.text not in best or rec.severity > best[rec.text].severity:
            best[rec.text] = rec
    return tuple(sorted(best.values(), key=lambda r: -r.severity.rank))
