"""Exception classes for the staging engine.

Contains:
- StagingError: Base exception for staging failures
- NoChangesError: The file has no unstaged changes
- NoHunkFoundError: No hunk or change could be found for the request
- DiffParseError: The diff text could not be parsed (strict mode only)
- ReformattingRefusalError: The selected hunk is large pure reformatting
- ApplyError: A patch could not be applied to the index
- StagingFailedError: Every apply strategy failed
- ReconciliationError: Buffer reconciliation failed
"""


class StagingError(Exception):
    """Base exception for staging errors."""

    pass


class NoChangesError(StagingError):
    """Raised when a file has no changes to stage."""

    pass


class NoHunkFoundError(StagingError):
    """Raised when no hunk or change matches the requested lines."""

    pass


class DiffParseError(StagingError):
    """Raised when diff text is malformed and strict parsing is enabled."""

    pass


class ReformattingRefusalError(StagingError):
    """Raised when partial staging of a large reformatting hunk is refused."""

    def __init__(self, message: str, line_count: int = 0, content_line_ratio: float = 0.0):
        super().__init__(message)
        self.line_count = line_count
        self.content_line_ratio = content_line_ratio


class ApplyError(StagingError):
    """Raised when a patch cannot be applied to the index."""

    pass


class StagingFailedError(ApplyError):
    """Raised when all apply strategies have been exhausted.

    The exception carries the ApplyRecord of the failed chain and is chained
    to the error of the last strategy tried.
    """

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class ReconciliationError(StagingError):
    """Raised when buffer reconciliation fails."""

    pass
