"""Tests for the shared report models."""

import json

import pytest

from auditscope.models import Phase, PhaseReport, PhaseStatus


class TestPhaseReport:
    """Immutability and serialization of a phase report."""

    def test_score_is_clamped(self):
        assert PhaseReport(Phase.SECURITY, 140.0, PhaseStatus.PASSED).score == 100.0
        assert PhaseReport(Phase.SECURITY, -5.0, PhaseStatus.FAILED).score == 0.0

    def test_summary_is_read_only(self):
        report = PhaseReport(Phase.COVERAGE, 90.0, PhaseStatus.PASSED, summary={"files": 2})
        with pytest.raises(TypeError):
            report.summary["files"] = 3
        assert report.summary["files"] == 2

    def test_summary_detached_from_caller(self):
        stats = {"files": 2}
        report = PhaseReport(Phase.COVERAGE, 90.0, PhaseStatus.PASSED, summary=stats)
        stats["files"] = 7
        assert report.summary["files"] == 2

    def test_to_dict_is_json_ready(self):
        report = PhaseReport(Phase.COVERAGE, 90.0, PhaseStatus.PASSED, summary={"files": 2})
        data = report.to_dict()
        assert type(data["summary"]) is dict
        assert json.loads(json.dumps(data))["summary"] == {"files": 2}
