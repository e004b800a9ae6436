"""Run command: audit a project and print or save the report."""

from pathlib import Path
from typing import List, Optional

import click
import typer

from ..api import run_audit
from ..exceptions import AuditscopeError
from ..formatters import JsonFormatter, RichFormatter, get_formatter
from ..logging_config import setup_logging
from ..models import ComprehensiveReport, Phase, ReadinessTier
from . import app
from ._common import PRESETS, console, resolve_config

# Readiness tiers that make the command exit 1, per --fail-on value
_FAILING_TIERS = {
    "not-ready": {ReadinessTier.NOT_READY},
    "needs-work": {ReadinessTier.NOT_READY, ReadinessTier.NEEDS_WORK},
    "never": set(),
}


@app.command()
def run(
    path: Path = typer.Argument(
        Path("."),
        help="Project root to audit (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    preset: Optional[str] = typer.Option(
        None,
        "--preset",
        help="Threshold preset: production | development",
        click_type=click.Choice(sorted(PRESETS), case_sensitive=False),
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "-f",
        "--format",
        help="Output format: rich | json | github",
        click_type=click.Choice(["rich", "json", "github"], case_sensitive=False),
    ),
    output: Optional[Path] = typer.Option(
        None,
        "-o",
        "--output",
        help="Also write the JSON report to this file",
        dir_okay=False,
    ),
    skip: Optional[List[str]] = typer.Option(
        None,
        "--skip",
        help="Phase to skip (repeatable): complexity | security | coverage | performance | accessibility",
    ),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        help="Run phases one after another instead of in parallel",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: one per phase)",
        min=1,
        max=32,
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds a single phase may run",
        min=1,
    ),
    no_manifest: bool = typer.Option(
        False,
        "--no-manifest",
        help="Parse sources even without a project manifest",
    ),
    fail_on: str = typer.Option(
        "not-ready",
        "--fail-on",
        help="Exit 1 at this readiness tier or below: not-ready | needs-work | never",
        click_type=click.Choice(sorted(_FAILING_TIERS), case_sensitive=False),
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records to this file",
        dir_okay=False,
    ),
):
    """
    Audit a project and score its production readiness.

    Exits 1 when the readiness tier is at or below --fail-on.

    [bold cyan]Examples:[/bold cyan]

      auditscope run
      auditscope run ./webapp --format json -o audit-report.json
      auditscope run --preset production --skip performance
    """
    logger = setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)
    skipped = {_phase_name(name): False for name in skip or ()}

    try:
        overrides = {
            "output_format": output_format,
            "workers": workers,
            "phase_timeout": timeout,
        }
        if sequential:
            overrides["parallel"] = False
        if no_manifest:
            overrides["require_manifest"] = False
        if skipped:
            overrides["phases"] = skipped
        audit_config = resolve_config(path, config=config, preset=preset, **overrides)

        formatter = get_formatter(audit_config.output_format)
        on_phase_complete = None
        if isinstance(formatter, RichFormatter) and not quiet:
            on_phase_complete = formatter.render_phase

        report = run_audit(audit_config, on_phase_complete=on_phase_complete)

        formatter.render(report)
        if output is not None:
            _write_report(report, output)
            logger.info(f"Report written to {output}")

        if report.readiness in _FAILING_TIERS[fail_on]:
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except AuditscopeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        if e.remediation:
            console.print(f"[dim]{e.remediation}[/dim]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        logger.info("Audit interrupted by user")
        console.print("\n[yellow]Audit interrupted[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        logger.exception("Unexpected error during audit")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


def _write_report(report: ComprehensiveReport, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(JsonFormatter().format(report) + "\n", encoding="utf-8")


def _phase_name(value: str) -> str:
    names = [p.value for p in Phase]
    if value.lower() not in names:
        raise typer.BadParameter(f"unknown phase {value!r}, choose from {', '.join(names)}", param_hint="--skip")
    return value.lower()
