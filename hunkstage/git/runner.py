"""Git command runner and repository utilities.

Contains:
- GitRunner: Async git command layer used by the staging engine
- _run_git_command: Run a git command synchronously and return its output
- get_repo_root: Get the root directory of the current git repository
"""

import asyncio
import subprocess
from pathlib import Path
from typing import Optional, Union

from hunkstage.git.exceptions import GitError
from hunkstage.logging_utils import logger

# Disable path quoting so non-ASCII file names survive round trips through diffs
GIT_BASE_ARGS = ["git", "-c", "core.quotepath=false"]

DEFAULT_MAX_PROCESSES = 2


def _format_failure(args: list[str], stderr: str) -> str:
    return f"Git command failed: git {' '.join(args)}\n{stderr.strip()}"


def _run_git_command(args: list[str], cwd: Optional[Path] = None) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        cwd: Directory to run the command in (defaults to the current one).

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails.
    """
    try:
        result = subprocess.run(
            GIT_BASE_ARGS + args,
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        raise GitError(_format_failure(args, e.stderr or ""), args, e.stderr or "")
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.", args)


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the current git repository.

    Args:
        cwd: Directory to start from (defaults to the current one).

    Returns:
        Path to the repository root.

    Raises:
        GitError: If not in a git repository.
    """
    try:
        root = _run_git_command(["rev-parse", "--show-toplevel"], cwd=cwd)
        return Path(root)
    except GitError:
        raise GitError("Not in a git repository. Please run this command from within a git repo.")


class GitRunner:
    """Async git command layer bound to one repository.

    Each call spawns a git subprocess. At most ``max_processes`` of them run
    at the same time; further calls wait for a free slot.
    """

    def __init__(self, repo_root: Union[str, Path], max_processes: int = DEFAULT_MAX_PROCESSES):
        if max_processes < 1:
            raise ValueError("max_processes must be at least 1")
        self.repo_root = Path(repo_root)
        self.max_processes = max_processes
        self._slots = asyncio.Semaphore(max_processes)

    async def run(self, args: list[str], strip: bool = True) -> str:
        """Run a git command in the repository and return its output.

        Args:
            args: List of arguments to pass to git.
            strip: Strip surrounding whitespace from stdout. Disable this for
                output where trailing whitespace is significant (diffs, blobs).

        Returns:
            The stdout of the git command.

        Raises:
            GitError: If the command exits non-zero or git is missing.
        """
        async with self._slots:
            logger.debug(f"Running: git {' '.join(args)}")
            try:
                process = await asyncio.create_subprocess_exec(
                    *GIT_BASE_ARGS,
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=self.repo_root,
                )
            except FileNotFoundError:
                raise GitError("Git is not installed or not in PATH.", args)

            stdout, stderr = await process.communicate()

        out = stdout.decode("utf-8", errors="replace")
        err = stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise GitError(_format_failure(args, err), args, err)
        return out.strip() if strip else out

    async def diff(self, file_path: str) -> str:
        """Get the unstaged diff of a single file (working tree vs index).

        Args:
            file_path: Repository-relative path of the file.

        Returns:
            Unified diff text, or an empty string when the file is unchanged.
        """
        return await self.run(["diff", "--no-color", "--no-ext-diff", "--", file_path], strip=False)

    async def raw_apply(self, options: list[str], patch_path: Union[str, Path]) -> str:
        """Run ``git apply`` with the given options on a patch file.

        Args:
            options: Options passed to git apply (e.g. ["--cached", "--3way"]).
            patch_path: Path of the patch file.

        Returns:
            Output of git apply.

        Raises:
            GitError: If the patch does not apply.
        """
        return await self.run(["apply", *options, str(patch_path)])

    async def add(self, file_path: str) -> str:
        """Stage a file with ``git add``.

        Args:
            file_path: Repository-relative path of the file.
        """
        return await self.run(["add", "--", file_path])

    async def show(self, object_name: str) -> str:
        """Get the content of an object, e.g. ``HEAD:path`` or ``:path`` for the index.

        Args:
            object_name: Object name understood by ``git show``.

        Returns:
            The object content, byte-for-byte decoded as UTF-8.
        """
        return await self.run(["show", object_name], strip=False)
