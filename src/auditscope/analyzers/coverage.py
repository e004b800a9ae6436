"""Test-coverage phase: reads Istanbul summary JSON or lcov output.

The phase never runs a test suite. It reads whatever coverage report the
project's own tooling left behind and scores the overall line coverage.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..config import CoverageConfig
from ..exceptions import CapabilityUnavailable, MeasurementUnavailable
from ..logging_config import get_logger
from ..models import Phase, PhaseReport, PhaseStatus, Severity, Violation, clamp_score
from .base import Analyzer, AuditContext, recommendations_from

logger = get_logger(__name__)

# Files under these directories with very low coverage are flagged HIGH
_CRITICAL_DIRS = ("src/", "lib/")
_CRITICAL_FLOOR = 50.0


@dataclass(frozen=True)
class CoverageMetric:
    total: int = 0
    covered: int = 0

    @property
    def pct(self) -> float:
        return self.covered / self.total * 100 if self.total else 0.0


@dataclass(frozen=True)
class FileCoverage:
    path: str
    lines: CoverageMetric
    functions: CoverageMetric
    statements: CoverageMetric
    branches: CoverageMetric


def _metric(data: Any) -> CoverageMetric:
    if not isinstance(data, dict):
        return CoverageMetric()
    return CoverageMetric(int(data.get("total") or 0), int(data.get("covered") or 0))


def parse_coverage_summary(data: dict[str, Any]) -> list[FileCoverage]:
    """Per-file entries of an Istanbul coverage-summary.json (the "total" key is skipped)."""
    files = []
    for path, entry in data.items():
        if path == "total" or not isinstance(entry, dict):
            continue
        files.append(
            FileCoverage(
                path=path,
                lines=_metric(entry.get("lines")),
                functions=_metric(entry.get("functions")),
                statements=_metric(entry.get("statements")),
                branches=_metric(entry.get("branches")),
            )
        )
    return files


def parse_lcov(text: str) -> list[FileCoverage]:
    """Records of an lcov tracefile; statements mirror line counts."""
    files = []
    for record in text.split("end_of_record"):
        fields: dict[str, str] = {}
        for line in record.strip().splitlines():
            key, sep, value = line.partition(":")
            if sep:
                fields[key.strip()] = value.strip()
        if "SF" not in fields:
            continue

        def count(key: str) -> int:
            try:
                return int(fields.get(key, 0))
            except ValueError:
                return 0

        lines = CoverageMetric(count("LF"), count("LH"))
        files.append(
            FileCoverage(
                path=fields["SF"],
                lines=lines,
                functions=CoverageMetric(count("FNF"), count("FNH")),
                statements=lines,
                branches=CoverageMetric(count("BRF"), count("BRH")),
            )
        )
    return files


def load_coverage(root: Path, config: CoverageConfig) -> tuple[str, list[FileCoverage]]:
    """Find and parse the first coverage report under root.

    Raises:
        MeasurementUnavailable: If no readable report exists
    """
    for relative in config.summary_files:
        path = root / relative
        if path.is_file():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Unreadable coverage summary {path}: {e}")
                continue
            if isinstance(data, dict):
                return relative, parse_coverage_summary(data)
    for relative in config.lcov_files:
        path = root / relative
        if path.is_file():
            try:
                return relative, parse_lcov(path.read_text(encoding="utf-8"))
            except OSError as e:
                logger.warning(f"Unreadable lcov report {path}: {e}")
    searched = list(config.summary_files) + list(config.lcov_files)
    raise MeasurementUnavailable("coverage", f"no coverage report found (searched {', '.join(searched)})")


def _aggregate(files: list[FileCoverage], attr: str) -> CoverageMetric:
    metrics = [getattr(f, attr) for f in files]
    return CoverageMetric(sum(m.total for m in metrics), sum(m.covered for m in metrics))


def _relative(path: str, root: Path) -> str:
    candidate = Path(path)
    if candidate.is_absolute():
        try:
            return candidate.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            return path
    return path


class CoverageAnalyzer(Analyzer):
    """Scores overall line coverage against a minimum."""

    phase = Phase.COVERAGE

    def __init__(self, config: Optional[CoverageConfig] = None):
        self.config = config or CoverageConfig()

    def analyze(self, context: AuditContext) -> PhaseReport:
        root = context.sources.root
        try:
            source, files = load_coverage(root, self.config)
        except CapabilityUnavailable as e:
            logger.debug(f"Coverage analysis degraded: {e}")
            return PhaseReport(
                phase=self.phase,
                score=0.0,
                status=PhaseStatus.WARNING,
                summary={"overall_coverage": 0.0, "files": 0, "source": None},
                notes=(f"Coverage analysis skipped: {e.message}",),
            )
        context.check_cancelled(self.phase)

        minimum = self.config.min_coverage
        totals = {attr: _aggregate(files, attr) for attr in ("lines", "functions", "statements", "branches")}
        overall = totals["lines"].pct

        violations = []
        if overall < minimum:
            violations.append(
                Violation(
                    rule_id="coverage.overall",
                    severity=Severity.HIGH,
                    file=source,
                    line=0,
                    column=0,
                    description=f"Overall line coverage {overall:.1f}% is below {minimum:.0f}%",
                    recommendation="Add tests for the least-covered modules",
                )
            )
        uncovered = []
        for f in files:
            pct = f.lines.pct
            if pct >= minimum:
                continue
            path = _relative(f.path, root)
            uncovered.append(path)
            critical = pct < _CRITICAL_FLOOR and any(f"/{d}" in f"/{path}" for d in _CRITICAL_DIRS)
            violations.append(
                Violation(
                    rule_id="coverage.critical-path" if critical else "coverage.file",
                    severity=Severity.HIGH if critical else Severity.LOW,
                    file=path,
                    line=0,
                    column=0,
                    description=f"Line coverage {pct:.1f}% is below {minimum:.0f}%",
                    recommendation=(
                        "Cover critical source paths with unit tests" if critical else "Increase test coverage"
                    ),
                )
            )

        if overall < minimum:
            status = PhaseStatus.FAILED
        elif violations:
            status = PhaseStatus.WARNING
        else:
            status = PhaseStatus.PASSED

        summary = {
            "overall_coverage": round(overall, 2),
            **{f"{attr}_coverage": round(m.pct, 2) for attr, m in totals.items()},
            "files": len(files),
            "uncovered_files": uncovered,
            "min_coverage": minimum,
            "source": source,
        }
        logger.info(f"Coverage: {overall:.1f}% over {len(files)} files")
        return PhaseReport(
            phase=self.phase,
            score=clamp_score(overall),
            status=status,
            violations=tuple(violations),
            summary=summary,
            recommendations=recommendations_from(violations, self.phase),
        )
