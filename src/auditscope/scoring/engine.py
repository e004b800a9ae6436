"""Scoring and recommendation engine.

Turns the PhaseReports a run actually produced into one overall score,
an overall status, a readiness tier and a ranked recommendation list.
Phases that failed to execute are left out of the mean; they are not
scored as zero.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

import numpy as np

from ..config import ScoringConfig
from ..logging_config import get_logger
from ..models import (
    ComprehensiveReport,
    PhaseReport,
    PhaseStatus,
    ReadinessTier,
    Recommendation,
    Severity,
    clamp_score,
)
from ..orchestrator.orchestrator import OrchestrationResult

logger = get_logger(__name__)


def overall_score(reports: Iterable[PhaseReport]) -> float:
    """Arithmetic mean of the executed phase scores; 0 when nothing ran."""
    scores = np.array([r.score for r in reports], dtype=float)
    if scores.size == 0:
        return 0.0
    return clamp_score(float(scores.mean()))


def overall_status(reports: Iterable[PhaseReport]) -> PhaseStatus:
    statuses = {r.status for r in reports}
    if not statuses:
        return PhaseStatus.FAILED
    if PhaseStatus.FAILED in statuses:
        return PhaseStatus.FAILED
    if PhaseStatus.WARNING in statuses:
        return PhaseStatus.WARNING
    return PhaseStatus.PASSED


def severity_counts(reports: Iterable[PhaseReport]) -> dict[Severity, int]:
    counts = {s: 0 for s in Severity}
    for report in reports:
        for violation in report.violations:
            counts[violation.severity] += 1
    return counts


def readiness_tier(
    score: float,
    counts: Mapping[Severity, int],
    any_passed: bool,
    config: Optional[ScoringConfig] = None,
) -> ReadinessTier:
    """Deterministic tier from the score and the findings present.

    CRITICAL findings or a score under the needs-work bar are NOT_READY.
    PRODUCTION_READY and READY need their score bar; READY also allows at
    most max_high_for_ready HIGH findings. Anything else is NEEDS_WORK
    when at least one phase passed, otherwise NOT_READY.
    """
    config = config or ScoringConfig()
    if counts.get(Severity.CRITICAL, 0) or score < config.needs_work_score:
        return ReadinessTier.NOT_READY
    if score >= config.production_ready_score:
        return ReadinessTier.PRODUCTION_READY
    if score >= config.ready_score and counts.get(Severity.HIGH, 0) <= config.max_high_for_ready:
        return ReadinessTier.READY
    if any_passed:
        return ReadinessTier.NEEDS_WORK
    return ReadinessTier.NOT_READY


def rank_recommendations(reports: Iterable[PhaseReport]) -> tuple[Recommendation, ...]:
    """Every phase's recommendations, deduplicated by exact text.

    A duplicate keeps the highest severity seen; the list is ordered
    most severe first, then by first appearance.
    """
    best: dict[str, Recommendation] = {}
    for report in reports:
        for rec in report.recommendations:
            if rec.text not in best or rec.severity > best[rec.text].severity:
                best[rec.text] = rec
    return tuple(sorted(best.values(), key=lambda r: -r.severity.rank))


def build_report(result: OrchestrationResult, config: Optional[ScoringConfig] = None) -> ComprehensiveReport:
    """Aggregate an orchestration result into the final immutable report."""
    reports = result.reports
    score = overall_score(reports)
    counts = severity_counts(reports)
    tier = readiness_tier(
        score,
        counts,
        any(r.status is PhaseStatus.PASSED for r in reports),
        config,
    )
    status = overall_status(reports)
    logger.info(
        f"Audit complete: score {score:.1f}, status {status.value}, readiness {tier.value}, "
        f"{len(reports)} phase(s) executed, {len(result.errors)} failed"
    )
    return ComprehensiveReport(
        overall_score=score,
        overall_status=status,
        readiness=tier,
        reports=reports,
        phases_executed=result.phases_executed,
        phases_failed=result.phases_failed,
        errors=result.errors,
        recommendations=rank_recommendations(reports),
        started_at=result.started_at,
        finished_at=result.finished_at,
        cancelled=result.cancelled,
    )
