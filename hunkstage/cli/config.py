"""CLI commands for repository configuration management."""

import typer

from hunkstage.git import GitError, get_repo_root
from hunkstage.user_config import ConfigError, get_config_file, load_config, set_config_value

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage hunkstage settings in .hunkstage/config.yaml",
    add_completion=False,
)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration of the current repository."""
    try:
        repo_root = get_repo_root()
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    config = load_config(repo_root)
    config_file = get_config_file(repo_root)
    source = config_file if config_file.exists() else "defaults"

    typer.echo(f"hunkstage configuration ({source}):")
    typer.echo()
    for key, value in config.model_dump().items():
        typer.echo(f"  {key}: {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name (e.g. large_hunk_threshold)"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a configuration value for the current repository."""
    try:
        repo_root = get_repo_root()
        config = set_config_value(repo_root, key, value)
    except (GitError, ConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ {key} set to {getattr(config, key)}")
