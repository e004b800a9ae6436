"""CLI entry point: registers all subcommands."""

import typer

from ._common import console

app = typer.Typer(
    name="auditscope",
    help="auditscope - Static Source-Code Audit Engine",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        console.print(f"[bold cyan]auditscope[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Audit a codebase for complexity, exposed secrets, test coverage,
    performance and accessibility, and score its production readiness.
    """


# Import subcommands to register them
from .run import run as _run  # noqa: F401, E402
from .init import init as _init  # noqa: F401, E402
from .validate import validate as _validate  # noqa: F401, E402
