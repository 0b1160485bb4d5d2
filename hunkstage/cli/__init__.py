"""CLI entry point for hunkstage.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from hunkstage.cli.change import stage_change_command, unstage_change_command
from hunkstage.cli.config import config_app
from hunkstage.cli.main import main_command
from hunkstage.cli.stage import apply_command, patch_command, stage_command

# Main application
app = typer.Typer(
    name="hunkstage",
    help="hunkstage: stage individual lines and hunks into the git index",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("stage")(stage_command)
app.command("patch")(patch_command)
app.command("apply")(apply_command)
app.command("stage-change")(stage_change_command)
app.command("unstage-change")(unstage_change_command)

# Global options (--version, --debug)
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "config_app",
    "main_command",
    "stage_command",
    "patch_command",
    "apply_command",
    "stage_change_command",
    "unstage_change_command",
]
