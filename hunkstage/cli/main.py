"""Main callback for the hunkstage CLI (global options)."""

from typing import Optional

import typer

from hunkstage import __version__
from hunkstage.logging_utils import set_log_level


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hunkstage {__version__}")
        raise typer.Exit()


def main_command(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Print diagnostics (diff parsing, patch text, git apply attempts)",
    ),
) -> None:
    """Stage individual lines and changes of a modified file."""
    if debug:
        set_log_level("DEBUG")

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
