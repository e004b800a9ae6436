"""End-to-end tests for run_audit."""

import threading

import pytest

from auditscope import AuditConfig, ReadinessTier, run_audit
from auditscope.config import PhaseToggles
from auditscope.exceptions import SourceEnumerationError
from auditscope.models import Phase, PhaseStatus
from auditscope.orchestrator import LoggingErrorTracker, PhaseState
from auditscope.providers import (
    BundleStats,
    Chunk,
    LoadMetrics,
    OperationCost,
    StaticArtifactProvider,
    StaticMeasurementProvider,
)

COVERAGE_SUMMARY = (
    '{"total": {"lines": {"total": 6, "covered": 6, "pct": 100}}, '
    '"src/math.js": {"lines": {"total": 6, "covered": 6}, "functions": {"total": 1, "covered": 1}, '
    '"statements": {"total": 6, "covered": 6}, "branches": {"total": 4, "covered": 4}}}'
)


@pytest.fixture
def webapp(project):
    (project / "src").mkdir()
    (project / "src" / "math.js").write_text(
        "export function clamp(value, low, high) {\n"
        "  if (value < low) {\n"
        "    return low;\n"
        "  }\n"
        "  return value > high ? high : value;\n"
        "}\n"
    )
    (project / "src" / "index.html").write_text(
        '<!DOCTYPE html>\n<html lang="en">\n<head><title>Shop front page</title></head>\n'
        "<body>\n<main>\n<h1>Shop</h1>\n<p>Welcome</p>\n</main>\n</body>\n</html>\n"
    )
    (project / "coverage").mkdir()
    (project / "coverage" / "coverage-summary.json").write_text(COVERAGE_SUMMARY)
    return project


def _providers():
    return {
        "artifacts": StaticArtifactProvider(BundleStats((Chunk("main", 64 * 1024),))),
        "measurements": StaticMeasurementProvider(
            LoadMetrics(1200, 2500), [OperationCost("transfer", 52000)]
        ),
    }


class TestRunAudit:
    """Full pipeline over a small project."""

    def test_clean_project(self, webapp):
        report = run_audit(AuditConfig(roots=(str(webapp),)), **_providers())

        assert report.phases_executed == tuple(Phase)
        assert report.errors == ()
        assert not report.cancelled
        assert report.report_for(Phase.SECURITY).status == PhaseStatus.PASSED
        assert report.report_for(Phase.COVERAGE).score == 100.0
        assert report.readiness in (ReadinessTier.PRODUCTION_READY, ReadinessTier.READY)

    def test_sequential_matches_parallel(self, webapp):
        parallel = run_audit(AuditConfig(roots=(str(webapp),)), **_providers())
        sequential = run_audit(AuditConfig(roots=(str(webapp),), parallel=False), **_providers())
        assert parallel.reports == sequential.reports
        assert parallel.overall_score == sequential.overall_score

    def test_callbacks(self, webapp):
        states = []
        completed = []
        run_audit(
            AuditConfig(roots=(str(webapp),), parallel=False),
            on_progress=lambda p: states.append((p.phase, p.state)),
            on_phase_complete=lambda r: completed.append(r.phase),
            **_providers(),
        )
        assert completed == list(Phase)
        assert (Phase.ACCESSIBILITY, PhaseState.COMPLETED) in states

    def test_disabled_phases(self, webapp):
        config = AuditConfig(roots=(str(webapp),), phases=PhaseToggles(performance=False, coverage=False))
        report = run_audit(config)
        assert report.phases_executed == (Phase.COMPLEXITY, Phase.SECURITY, Phase.ACCESSIBILITY)

    def test_missing_root(self, tmp_path):
        with pytest.raises(SourceEnumerationError):
            run_audit(AuditConfig(roots=(str(tmp_path / "missing"),)))

    def test_pre_cancelled_run(self, webapp):
        cancel = threading.Event()
        cancel.set()
        report = run_audit(AuditConfig(roots=(str(webapp),)), cancel_event=cancel, **_providers())
        assert report.cancelled
        assert report.reports == ()
        assert report.overall_score == 0.0
        assert report.readiness == ReadinessTier.NOT_READY

    def test_tracker(self, webapp):
        tracker = LoggingErrorTracker()
        report = run_audit(
            AuditConfig(roots=(str(webapp),)),
            artifacts=StaticArtifactProvider(),
            measurements=StaticMeasurementProvider(),
            tracker=tracker,
        )
        # Missing artifacts and measurements degrade the phase, they do not fail it
        assert Phase.PERFORMANCE in report.phases_executed
        assert tracker.captured == []
