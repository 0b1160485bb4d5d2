"""Diff parser for the hunkstage staging engine.

Contains functions for parsing unified diff output:
- parse_file_diff: Parse the diff of a single file into a DiffDocument
- parse_unified_diff: Parse a multi-file diff into one DiffDocument per file
- parse_hunk_header: Extract positions and counts from an @@ header
"""

import re
from typing import Optional

from hunkstage.logging_utils import logger
from hunkstage.staging.exceptions import DiffParseError, NoChangesError
from hunkstage.staging.models import DiffDocument, DiffLine, Hunk

# Format: @@ -old_start,old_len +new_start,new_len @@ optional context
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

# Header positions used when a hunk header cannot be parsed
_FALLBACK_POSITIONS = (0, 1, 0, 1)


def parse_hunk_header(header: str) -> Optional[tuple[int, int, int, int]]:
    """Parse an @@ hunk header.

    Counts default to 1 when omitted, as in the unified diff format.

    Args:
        header: The @@ line.

    Returns:
        Tuple of (old_start, old_count, new_start, new_count), or None if the
        header is malformed.
    """
    match = _HUNK_HEADER_RE.match(header)
    if not match:
        return None

    old_start = int(match.group(1))
    old_count = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) is not None else 1
    return old_start, old_count, new_start, new_count


def _open_hunk(header: str, strict: bool) -> Hunk:
    positions = parse_hunk_header(header)
    if positions is None:
        if strict:
            raise DiffParseError(f"Malformed hunk header: {header}")
        logger.warning(f"Malformed hunk header, using default positions: {header}")
        positions = _FALLBACK_POSITIONS

    old_start, old_count, new_start, new_count = positions
    return Hunk(
        header=header,
        old_start=old_start,
        old_count=old_count,
        new_start=new_start,
        new_count=new_count,
    )


def parse_file_diff(diff_text: str, strict: bool = False) -> DiffDocument:
    """Parse the unified diff of exactly one file.

    Every line before the first @@ is a header line. Each @@ line opens a
    new hunk, and all following non-empty lines belong to it until the next
    @@ or the end of input.

    Args:
        diff_text: Raw output of ``git diff -- <file>``.
        strict: Raise on malformed hunk headers instead of recovering.

    Returns:
        The parsed DiffDocument.

    Raises:
        NoChangesError: If the diff text is empty.
        DiffParseError: If the text holds more than one file, or (in strict
            mode) a hunk header is malformed.
    """
    if not diff_text or not diff_text.strip():
        raise NoChangesError("No changes found in diff")

    document = DiffDocument()
    current: Optional[Hunk] = None

    for line in diff_text.split("\n"):
        if line.startswith("diff --git"):
            if document.hunks or current is not None:
                raise DiffParseError("Expected the diff of a single file, found several")
            document.headers.append(line)
            continue

        if line.startswith("@@"):
            if current is not None:
                document.hunks.append(current)
            current = _open_hunk(line, strict)
            continue

        if current is None:
            # Still in the file header block (index, ---, +++, mode lines, ...)
            if line:
                document.headers.append(line)
            continue

        if line:
            current.lines.append(DiffLine.from_raw(line))

    # Save last hunk
    if current is not None:
        document.hunks.append(current)

    if strict:
        _check_counts(document)

    return document


def _check_counts(document: DiffDocument) -> None:
    """Verify that every hunk's line counts match its header."""
    for hunk in document.hunks:
        old_seen = sum(1 for old_no, _, _ in hunk.numbered_lines() if old_no is not None)
        new_seen = sum(1 for _, new_no, _ in hunk.numbered_lines() if new_no is not None)
        if old_seen != hunk.old_count or new_seen != hunk.new_count:
            raise DiffParseError(
                f"Hunk {hunk.header} declares -{hunk.old_count} +{hunk.new_count} "
                f"lines but contains -{old_seen} +{new_seen}"
            )


def parse_unified_diff(diff_output: str, strict: bool = False) -> list[DiffDocument]:
    """Parse a diff covering any number of files.

    Args:
        diff_output: Raw output from git diff.
        strict: Raise on malformed hunk headers instead of recovering.

    Returns:
        One DiffDocument per file block, in diff order.
    """
    if not diff_output.strip():
        return []

    # Each file starts with 'diff --git a/... b/...'
    file_blocks = re.split(r"(?=^diff --git )", diff_output, flags=re.MULTILINE)

    documents = []
    for block in file_blocks:
        if not block.strip():
            continue
        documents.append(parse_file_diff(block, strict=strict))
    return documents
