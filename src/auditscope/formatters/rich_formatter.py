"""Rich terminal formatter for auditscope."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models import ComprehensiveReport, PhaseReport, PhaseStatus, ReadinessTier, Severity
from .base import BaseFormatter

console = Console(stderr=True)

_SEVERITY_STYLE = {
    Severity.CRITICAL: "red bold",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}

_STATUS_STYLE = {
    PhaseStatus.PASSED: "green",
    PhaseStatus.WARNING: "yellow",
    PhaseStatus.FAILED: "red",
}

_READINESS_STYLE = {
    ReadinessTier.PRODUCTION_READY: "green bold",
    ReadinessTier.READY: "green",
    ReadinessTier.NEEDS_WORK: "yellow",
    ReadinessTier.NOT_READY: "red bold",
}


def _score_label(score: float) -> str:
    if score >= 90:
        return f"[green]{score:.1f}[/green]"
    elif score >= 75:
        return f"[cyan]{score:.1f}[/cyan]"
    elif score >= 50:
        return f"[yellow]{score:.1f}[/yellow]"
    else:
        return f"[red]{score:.1f}[/red]"


def _severity_label(severity: Optional[Severity]) -> str:
    if severity is None:
        return "[dim]-[/dim]"
    style = _SEVERITY_STYLE[severity]
    return f"[{style}]{severity.value.lower()}[/{style}]"


class RichFormatter(BaseFormatter):
    """Summary panel, per-phase table, top findings and recommendations."""

    def __init__(self, top_n: int = 15, out: Optional[Console] = None):
        self.top_n = top_n
        self.console = out or console

    def render(self, report: ComprehensiveReport) -> None:
        self._print_summary(report)
        self._print_phases(report)
        self._print_findings(report)
        self._print_recommendations(report)

    def format(self, report: ComprehensiveReport) -> str:
        # Rich output goes directly to the console; return empty string
        self.render(report)
        return ""

    # -- private helpers --

    def _print_summary(self, report: ComprehensiveReport) -> None:
        tier_style = _READINESS_STYLE[report.readiness]
        status_style = _STATUS_STYLE[report.overall_status]
        counts = report.severity_counts()
        summary_text = (
            f"Score [bold]{_score_label(report.overall_score)}[/bold]  |  "
            f"Status [{status_style}]{report.overall_status.value}[/{status_style}]  |  "
            f"Readiness [{tier_style}]{report.readiness.value}[/{tier_style}]\n"
            f"[red bold]{counts['CRITICAL']}[/red bold] critical, "
            f"[red]{counts['HIGH']}[/red] high, "
            f"[yellow]{counts['MEDIUM']}[/yellow] medium, "
            f"[dim]{counts['LOW']}[/dim] low  |  "
            f"{len(report.phases_executed)} phase(s) in {report.duration_ms / 1000:.1f}s"
        )
        if report.cancelled:
            summary_text += "\n[yellow]Run cancelled: partial results[/yellow]"
        self.console.print(Panel(summary_text, title="[bold cyan]Audit Summary[/bold cyan]", expand=False))
        self.console.print()

    def _print_phases(self, report: ComprehensiveReport) -> None:
        table = Table(title="Phases", expand=True)
        table.add_column("Phase", style="bold")
        table.add_column("Score", justify="right", width=8)
        table.add_column("Status", justify="center", width=10)
        table.add_column("Findings", justify="right", width=9)
        table.add_column("Worst", justify="center", width=10)
        table.add_column("Notes", style="dim", ratio=2)

        for r in report.reports:
            style = _STATUS_STYLE[r.status]
            table.add_row(
                r.phase.value,
                _score_label(r.score),
                f"[{style}]{r.status.value}[/{style}]",
                str(len(r.violations)),
                _severity_label(r.max_severity),
                "; ".join(r.notes) or "-",
            )
        for error in report.errors:
            table.add_row(
                error.phase.value,
                "[dim]-[/dim]",
                "[red]error[/red]",
                "-",
                _severity_label(error.severity),
                error.message,
            )
        self.console.print(table)
        self.console.print()

    def _print_findings(self, report: ComprehensiveReport) -> None:
        findings = [(r, v) for r in report.reports for v in r.violations]
        if not findings:
            return
        findings.sort(key=lambda item: -item[1].severity.rank)

        table = Table(title=f"Top {min(self.top_n, len(findings))} Findings", expand=True)
        table.add_column("Severity", justify="center", width=10)
        table.add_column("Rule", style="cyan", ratio=1)
        table.add_column("Location", style="yellow", ratio=2)
        table.add_column("Description", ratio=3)

        for _, v in findings[: self.top_n]:
            location = f"{v.file}:{v.line}" if v.line else (v.file or "-")
            table.add_row(_severity_label(v.severity), v.rule_id, location, v.description)
        self.console.print(table)
        self.console.print()

    def _print_recommendations(self, report: ComprehensiveReport) -> None:
        if not report.recommendations:
            return
        self.console.print("[bold]Recommendations:[/bold]")
        for rec in report.recommendations[: self.top_n]:
            self.console.print(f"  [green]->[/green] {_severity_label(rec.severity)} {rec.text}")
        self.console.print()

    def render_phase(self, report: PhaseReport) -> None:
        """One-line status for a phase as soon as it completes."""
        style = _STATUS_STYLE[report.status]
        self.console.print(
            f"  [{style}]{report.status.value:>7}[/{style}]  {report.phase.value:<14} "
            f"score {_score_label(report.score)}  ({len(report.violations)} findings)"
        )
