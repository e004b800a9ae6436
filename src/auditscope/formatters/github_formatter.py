"""GitHub Actions formatter: workflow annotations plus a Markdown summary."""

from ..models import ComprehensiveReport, Severity
from .base import BaseFormatter

_LEVELS = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "notice",
}


def _escape(text: str) -> str:
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GithubFormatter(BaseFormatter):
    """Output ``::error`` / ``::warning`` / ``::notice`` annotations.

    Also generates a Markdown table suitable for ``$GITHUB_STEP_SUMMARY``.
    """

    def render(self, report: ComprehensiveReport) -> None:
        print(self.format(report))

    def format(self, report: ComprehensiveReport) -> str:
        lines: list[str] = []
        for phase_report in report.reports:
            for v in phase_report.violations:
                location = f"file={v.file}" if v.file else ""
                if v.file and v.line:
                    location += f",line={v.line},col={max(v.column, 1)}"
                prefix = f"::{_LEVELS[v.severity]} {location}".rstrip()
                lines.append(f"{prefix}::[{v.rule_id}] {_escape(v.description)}")
        for error in report.errors:
            lines.append(f"::error::{error.phase.value} phase failed: {_escape(error.message)}")

        lines.append("")
        lines.append("## Audit Summary")
        lines.append("")
        lines.append(
            f"**Score:** {report.overall_score:.1f} | **Status:** {report.overall_status.value} "
            f"| **Readiness:** {report.readiness.value}"
        )
        lines.append("")
        lines.append("| Phase | Score | Status | Findings |")
        lines.append("|-------|-------|--------|----------|")
        for r in report.reports:
            lines.append(f"| {r.phase.value} | {r.score:.1f} | {r.status.value} | {len(r.violations)} |")
        for error in report.errors:
            lines.append(f"| {error.phase.value} | - | error | - |")
        return "\n".join(lines)
