"""Validate command: load configuration and show the effective values."""

from pathlib import Path
from typing import Optional

import click
import typer
from rich.table import Table

from ..config import config_to_dict
from ..exceptions import ConfigurationError
from . import app
from ._common import PRESETS, console, resolve_config


@app.command()
def validate(
    path: Path = typer.Argument(
        Path("."),
        help="Project root whose configuration is validated",
        exists=True,
        file_okay=False,
        dir_okay=True,
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
):
    """
    Load every configuration source and report the merged result.

    Exits 1 if any source is malformed or any value is out of range.
    """
    try:
        audit_config = resolve_config(path, config=config, preset=preset)
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Effective Configuration", expand=False)
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    for key, value in config_to_dict(audit_config).items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", str(sub_value))
        else:
            table.add_row(key, str(value))
    console.print(table)
    console.print("[green]Configuration is valid.[/green]")
