"""Patch builder for the hunkstage staging engine.

Contains:
- build_hunk_patch: Build a patch holding one whole hunk of a file diff
- build_single_change_patch: Synthesize a patch for a single added line
- find_addition: Locate the addition at a working-tree line
- match_deletion: Pick the deletion an addition replaces, if any
"""

from difflib import SequenceMatcher
from typing import Optional

from hunkstage.logging_utils import logger
from hunkstage.staging.exceptions import NoHunkFoundError
from hunkstage.staging.models import DiffDocument, DiffLine, Hunk, LineKind

DEFAULT_CONTEXT_LINES = 3
DEFAULT_SIMILARITY_THRESHOLD = 0.5


def _join_patch(lines: list[str]) -> str:
    # git apply requires the patch to end with a newline
    return "\n".join(lines) + "\n"


def build_hunk_patch(document: DiffDocument, hunk: Hunk) -> str:
    """Build a patch containing the file headers and exactly one hunk.

    Args:
        document: The parsed diff the hunk belongs to (for its headers).
        hunk: The hunk to extract.

    Returns:
        Patch content as string.
    """
    return _join_patch(document.headers + hunk.to_lines())


def find_addition(document: DiffDocument, line_number: int) -> tuple[Hunk, int]:
    """Find the added line at a working-tree line number.

    Args:
        document: The parsed diff.
        line_number: Working-tree line number of the addition.

    Returns:
        Tuple of (hunk, index of the addition in hunk.lines).

    Raises:
        NoHunkFoundError: If no addition sits at that line.
    """
    for hunk in document.hunks:
        for index, (_, new_no, line) in enumerate(hunk.numbered_lines()):
            if line.kind == LineKind.ADDITION and new_no == line_number:
                return hunk, index
    raise NoHunkFoundError(f"No change found at line {line_number}")


def _change_block(hunk: Hunk, index: int) -> range:
    """Indices of the run of changed lines around hunk.lines[index]."""
    lines = hunk.lines
    start = index
    while start > 0 and lines[start - 1].kind != LineKind.CONTEXT:
        start -= 1
    end = index
    while end + 1 < len(lines) and lines[end + 1].kind != LineKind.CONTEXT:
        end += 1
    return range(start, end + 1)


def _similarity(a: str, b: str) -> float:
    return SequenceMatcher(None, a.strip(), b.strip()).ratio()


def match_deletion(
    hunk: Hunk,
    addition_index: int,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> Optional[int]:
    """Pick the deleted line that an added line replaces.

    Only deletions in the same run of changed lines are candidates. The most
    similar one wins when its similarity reaches the threshold; ties go to
    the deletion nearest the addition. Otherwise the addition is paired with
    the deletion at the same position in the run (k-th addition with k-th
    deletion), if there is one.

    Args:
        hunk: The hunk holding the addition.
        addition_index: Index of the addition in hunk.lines.
        similarity_threshold: Minimum similarity ratio (0..1) for a match.

    Returns:
        Index of the matched deletion in hunk.lines, or None.
    """
    block = _change_block(hunk, addition_index)
    deletions = [i for i in block if hunk.lines[i].kind == LineKind.DELETION]
    additions = [i for i in block if hunk.lines[i].kind == LineKind.ADDITION]
    if not deletions:
        return None

    target = hunk.lines[addition_index].text
    scored = [
        (_similarity(hunk.lines[i].text, target), -abs(addition_index - i), i)
        for i in deletions
    ]
    best_score, _, best_index = max(scored)
    if best_score >= similarity_threshold:
        return best_index

    position = additions.index(addition_index)
    if position < len(deletions):
        return deletions[position]
    return None


def _isolate_change(hunk: Hunk, addition_index: int, deletion_index: int) -> list[tuple[int, DiffLine]]:
    """Rewrite a hunk so that only one deletion/addition pair remains.

    Other deletions become context (they stay in the index) and other
    additions are dropped. Each returned line carries the old-file line
    number it sits at or, for the addition, precedes.
    """
    isolated: list[tuple[int, DiffLine]] = []
    old_no = hunk.old_start
    kept_previous = True

    for index, line in enumerate(hunk.lines):
        if line.kind == LineKind.MARKER:
            if kept_previous:
                isolated.append((old_no, line))
            continue

        if line.kind == LineKind.CONTEXT:
            isolated.append((old_no, line))
            old_no += 1
            kept_previous = True
        elif line.kind == LineKind.DELETION:
            if index == deletion_index:
                isolated.append((old_no, line))
            else:
                isolated.append((old_no, DiffLine(kind=LineKind.CONTEXT, text=line.text)))
            old_no += 1
            kept_previous = True
        else:
            kept_previous = index == addition_index
            if kept_previous:
                isolated.append((old_no, line))

    return isolated


def _trim_context(lines: list[tuple[int, DiffLine]], context_lines: int) -> list[tuple[int, DiffLine]]:
    """Keep at most context_lines context lines around the changed lines."""
    change_indices = [i for i, (_, ln) in enumerate(lines) if ln.is_change]
    first, last = change_indices[0], change_indices[-1]

    start = max(0, first - context_lines)
    end = min(len(lines), last + 1 + context_lines)
    # A trailing "\ No newline" marker belongs to the line before it
    if end < len(lines) and lines[end][1].kind == LineKind.MARKER:
        end += 1
    return lines[start:end]


def build_single_change_patch(
    document: DiffDocument,
    start_line: int,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> str:
    """Synthesize a minimal patch for the addition at a working-tree line.

    If the addition replaces a deletion, the patch holds that pair plus up
    to context_lines context lines on each side. Otherwise it is a bare
    addition hunk ``@@ -N,0 +N,1 @@`` with N the working-tree line.

    Args:
        document: The parsed diff of the file.
        start_line: Working-tree line number of the addition.
        context_lines: Maximum context lines before and after the change.
        similarity_threshold: Minimum similarity for pairing a deletion.

    Returns:
        Patch content as string.

    Raises:
        NoHunkFoundError: If no addition sits at start_line.
    """
    hunk, addition_index = find_addition(document, start_line)
    addition = hunk.lines[addition_index]
    deletion_index = match_deletion(hunk, addition_index, similarity_threshold)

    patch_lines = list(document.headers)

    if deletion_index is None:
        logger.debug(f"No matching deletion for line {start_line}, building a pure addition")
        patch_lines.append(f"@@ -{start_line},0 +{start_line},1 @@")
        patch_lines.append(addition.raw)
        return _join_patch(patch_lines)

    logger.debug(
        f"Pairing addition at new line {start_line} with deletion "
        f"{hunk.lines[deletion_index].raw[:50]!r}"
    )
    selected = _trim_context(_isolate_change(hunk, addition_index, deletion_index), context_lines)

    old_count = sum(1 for _, ln in selected if ln.kind in (LineKind.CONTEXT, LineKind.DELETION))
    new_count = sum(1 for _, ln in selected if ln.kind in (LineKind.CONTEXT, LineKind.ADDITION))
    hunk_start = selected[0][0]

    # The patch applies on its own, so old and new sides start at the same line
    patch_lines.append(f"@@ -{hunk_start},{old_count} +{hunk_start},{new_count} @@")
    patch_lines.extend(ln.raw for _, ln in selected)
    return _join_patch(patch_lines)
