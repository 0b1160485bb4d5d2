"""Hunk locator for the hunkstage staging engine.

Contains:
- find_containing_hunk: Find the hunk whose new-file range contains a line
- locate_hunk: Find the owning hunk, falling back to the closest one
"""

from typing import Optional

from hunkstage.logging_utils import logger
from hunkstage.staging.exceptions import NoHunkFoundError
from hunkstage.staging.models import DiffDocument, Hunk


def find_containing_hunk(document: DiffDocument, line_number: int) -> Optional[Hunk]:
    """Find the hunk whose [new_start, new_end] range contains a line.

    Args:
        document: The parsed diff.
        line_number: Working-tree line number (1-based).

    Returns:
        The containing hunk, or None.
    """
    for hunk in document.hunks:
        if hunk.contains(line_number):
            return hunk
    return None


def locate_hunk(document: DiffDocument, start_line: int) -> Hunk:
    """Find the hunk owning a working-tree line.

    When no hunk contains the line, the hunk whose new_start is nearest to it
    is used instead. The UI captures line numbers before the diff is
    recomputed, so they can drift by a few lines.

    Args:
        document: The parsed diff.
        start_line: First selected working-tree line.

    Returns:
        The owning (or closest) hunk.

    Raises:
        NoHunkFoundError: If the document has no hunks.
    """
    if not document.hunks:
        raise NoHunkFoundError(f"No hunk found for line {start_line}")

    hunk = find_containing_hunk(document, start_line)
    if hunk is not None:
        logger.debug(f"Found target hunk: new lines {hunk.new_start}-{hunk.new_end}")
        return hunk

    # min() keeps the first of equally distant hunks
    closest = min(document.hunks, key=lambda h: abs(h.new_start - start_line))
    logger.info(
        f"Using closest hunk: new lines {closest.new_start}-{closest.new_end} "
        f"(distance: {abs(closest.new_start - start_line)})"
    )
    return closest
