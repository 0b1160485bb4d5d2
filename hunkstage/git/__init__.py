"""Git command layer for hunkstage.

This package provides:
- exceptions: GitError
- runner: GitRunner, _run_git_command, get_repo_root
"""

from hunkstage.git.exceptions import GitError
from hunkstage.git.runner import (
    DEFAULT_MAX_PROCESSES,
    GitRunner,
    _run_git_command,
    get_repo_root,
)


__all__ = [
    # Exceptions
    "GitError",
    # Runner
    "DEFAULT_MAX_PROCESSES",
    "GitRunner",
    "_run_git_command",
    "get_repo_root",
]
