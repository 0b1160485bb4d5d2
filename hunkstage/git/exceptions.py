"""Git-related exception classes.

Contains:
- GitError: Raised when a git command fails or git is unavailable
"""


class GitError(Exception):
    """Custom exception for git-related errors."""

    def __init__(self, message: str, command: list[str] = None, stderr: str = ""):
        super().__init__(message)
        self.command = list(command) if command else []
        self.stderr = stderr
