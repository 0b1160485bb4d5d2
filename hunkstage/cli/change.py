"""CLI commands for staging and unstaging a single diff-editor change.

The HEAD, index and working-tree versions of the file are read from git and
from disk, then handed to the engine's buffer reconciler.
"""

from pathlib import Path

import typer

from hunkstage.cli.utils import run_engine_operation
from hunkstage.staging import LineChange


def _line_change(original_start: int, original_end: int, modified_start: int, modified_end: int) -> LineChange:
    try:
        return LineChange(
            original_start_line_number=original_start,
            original_end_line_number=original_end,
            modified_start_line_number=modified_start,
            modified_end_line_number=modified_end,
        )
    except ValueError as e:
        typer.echo(f"Invalid line change: {e}", err=True)
        raise typer.Exit(1)


_ORIGINAL_START = typer.Option(..., "--original-start", help="First HEAD line of the change (insertions: line before)")
_ORIGINAL_END = typer.Option(..., "--original-end", help="Last HEAD line of the change (0 for an insertion)")
_MODIFIED_START = typer.Option(..., "--modified-start", help="First new line of the change (deletions: line before)")
_MODIFIED_END = typer.Option(..., "--modified-end", help="Last new line of the change (0 for a deletion)")


def stage_change_command(
    file: Path = typer.Argument(..., help="File the change belongs to"),
    original_start: int = _ORIGINAL_START,
    original_end: int = _ORIGINAL_END,
    modified_start: int = _MODIFIED_START,
    modified_end: int = _MODIFIED_END,
) -> None:
    """Stage one change between HEAD and the working tree."""
    change = _line_change(original_start, original_end, modified_start, modified_end)

    async def operation(engine):
        absolute, relative = engine.resolve_path(file)
        original = await engine.git.show(f"HEAD:{relative}")
        modified = absolute.read_bytes().decode("utf-8")
        return await engine.stage_monaco_change(absolute, original, change, modified)

    typer.echo(run_engine_operation(operation))


def unstage_change_command(
    file: Path = typer.Argument(..., help="File the change belongs to"),
    original_start: int = _ORIGINAL_START,
    original_end: int = _ORIGINAL_END,
    modified_start: int = _MODIFIED_START,
    modified_end: int = _MODIFIED_END,
) -> None:
    """Unstage one change between HEAD and the index."""
    change = _line_change(original_start, original_end, modified_start, modified_end)

    async def operation(engine):
        absolute, relative = engine.resolve_path(file)
        original = await engine.git.show(f"HEAD:{relative}")
        staged = await engine.git.show(f":{relative}")
        return await engine.unstage_monaco_change(absolute, original, change, staged)

    typer.echo(run_engine_operation(operation))
