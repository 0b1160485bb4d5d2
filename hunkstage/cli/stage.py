"""CLI commands for staging lines and hunks from a file."""

import sys
from pathlib import Path
from typing import Optional

import typer

from hunkstage.cli.utils import run_engine_operation


def stage_command(
    file: Path = typer.Argument(..., help="File to stage lines from"),
    start_line: int = typer.Argument(..., help="First working-tree line of the selection"),
    end_line: Optional[int] = typer.Argument(None, help="Last line of the selection (defaults to START_LINE)"),
) -> None:
    """Stage the diff hunk that contains the selected lines."""
    end = end_line if end_line is not None else start_line
    message = run_engine_operation(
        lambda engine: engine.stage_line_range(file, start_line, end)
    )
    typer.echo(message)


def patch_command(
    file: Path = typer.Argument(..., help="File to build the patch from"),
    start_line: int = typer.Argument(..., help="Working-tree line of the added line"),
    end_line: Optional[int] = typer.Argument(None, help="Last line of the selection (defaults to START_LINE)"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the patch to this file instead of stdout",
    ),
) -> None:
    """Print a minimal patch for the change at a single line."""
    end = end_line if end_line is not None else start_line
    patch_text = run_engine_operation(
        lambda engine: engine.create_patch_from_lines(file, start_line, end)
    )

    if output:
        output.write_text(patch_text)
        typer.echo(f"Patch written to {output}", err=True)
    else:
        typer.echo(patch_text, nl=False)


def apply_command(
    file: Path = typer.Argument(..., help="File the patch modifies"),
    patch_file: str = typer.Argument(..., help="Patch file to apply to the index ('-' for stdin)"),
) -> None:
    """Apply a patch for a single file to the index."""
    if patch_file == "-":
        patch_text = sys.stdin.read()
    else:
        patch_path = Path(patch_file)
        if not patch_path.exists():
            typer.echo(f"Patch file not found: {patch_path}", err=True)
            raise typer.Exit(1)
        patch_text = patch_path.read_text()

    message = run_engine_operation(
        lambda engine: engine.stage_hunk_from_patch(file, patch_text)
    )
    typer.echo(message)
