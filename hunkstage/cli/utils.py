"""Shared helpers for hunkstage CLI commands."""

import asyncio
from typing import Awaitable, Callable, TypeVar

import typer

from hunkstage.git import GitError, get_repo_root
from hunkstage.staging import ReformattingRefusalError, StagingEngine, StagingError
from hunkstage.user_config import load_config

T = TypeVar("T")


def build_engine() -> StagingEngine:
    """Create a StagingEngine for the current repository with its configuration.

    Raises:
        GitError: If not in a git repository.
    """
    repo_root = get_repo_root()
    return StagingEngine(repo_root, config=load_config(repo_root))


def run_engine_operation(operation: Callable[[StagingEngine], Awaitable[T]]) -> T:
    """Run an engine coroutine to completion, reporting failures.

    Errors are printed to stderr and turned into exit code 1. Reformatting
    refusals also suggest staging the whole file.

    Args:
        operation: Called with the engine; returns the coroutine to run.

    Returns:
        The operation's result.
    """
    try:
        engine = build_engine()
        return asyncio.run(operation(engine))
    except ReformattingRefusalError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo("Stage the whole file instead with: git add <file>", err=True)
        raise typer.Exit(1)
    except (GitError, StagingError, ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
