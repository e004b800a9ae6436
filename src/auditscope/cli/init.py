"""Init command: write a starter auditscope.toml."""

from pathlib import Path

import typer

from . import app
from ._common import PROJECT_CONFIG, console

CONFIG_TEMPLATE = """\
# auditscope configuration
# Environment variables override these values: AUDITSCOPE_PARALLEL=false,
# AUDITSCOPE_COMPLEXITY_MAX_CYCLOMATIC=8, ...

parallel = true
phase_timeout = 300
require_manifest = true
output_format = "rich"
exclude_patterns = [
    "node_modules/*", ".git/*", "dist/*", "build/*", "out/*",
    "coverage/*", ".venv/*", "venv/*", "__pycache__/*", "*.min.js", "*.d.ts",
]

[phases]
complexity = true
security = true
coverage = true
performance = true
accessibility = true

[complexity]
max_cyclomatic = 10
max_length = 50
max_nesting = 3
max_parameters = 5

[security]
# Phase fails when the overall risk level reaches this: LOW | MEDIUM | HIGH | CRITICAL
risk_threshold = "MEDIUM"
check_storage = true

[accessibility]
# Minimum WCAG conformance level: A | AA | AAA
wcag_level = "AA"

[coverage]
min_coverage = 80

[performance]
max_bundle_bytes = 1048576
max_load_ms = 3000
max_tti_ms = 5000
cost_ceiling = 500000
# build_command = "npm run build"
build_timeout = 300

[scoring]
production_ready_score = 90
ready_score = 75
needs_work_score = 50
max_high_for_ready = 3
"""


@app.command()
def init(
    path: Path = typer.Argument(
        Path("."),
        help="Directory to write auditscope.toml into",
        file_okay=False,
        dir_okay=True,
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing auditscope.toml"),
):
    """
    Write a starter auditscope.toml with every option at its default.

    [bold cyan]Examples:[/bold cyan]

      auditscope init
      auditscope init ./webapp --force
    """
    target = path / PROJECT_CONFIG
    if target.exists() and not force:
        console.print(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite it.")
        raise typer.Exit(1)

    path.mkdir(parents=True, exist_ok=True)
    target.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Wrote[/green] {target}")
