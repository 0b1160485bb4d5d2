"""Reformatting classifier for the hunkstage staging engine.

Large hunks that only reshuffle whitespace and punctuation cannot be split
into meaningful line selections, so partial staging is refused for them.

Contains:
- normalize_line: Reduce a changed line to its formatting-insensitive content
- classify_hunk: Decide whether a hunk is pure reformatting
- ensure_stageable: Raise ReformattingRefusalError for reformatting hunks
"""

import re

from hunkstage.logging_utils import logger
from hunkstage.staging.exceptions import ReformattingRefusalError
from hunkstage.staging.models import Hunk, ReformattingVerdict

DEFAULT_LARGE_HUNK_THRESHOLD = 20
DEFAULT_MIN_CONTENT_RATIO = 0.2

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PUNCT_RE = re.compile(r"[,;]$")
_BRACE_ONLY_RE = re.compile(r"^\s*[{}]\s*$")


def normalize_line(text: str) -> str:
    """Strip formatting from a line's content.

    Collapses whitespace runs, drops one trailing comma or semicolon and
    blanks lines holding a single brace.

    Args:
        text: Line content without the +/- prefix.

    Returns:
        The normalized content; empty if the line is formatting only.
    """
    normalized = _WHITESPACE_RE.sub(" ", text.strip())
    normalized = _TRAILING_PUNCT_RE.sub("", normalized)
    return _BRACE_ONLY_RE.sub("", normalized)


def classify_hunk(
    hunk: Hunk,
    large_hunk_threshold: int = DEFAULT_LARGE_HUNK_THRESHOLD,
    min_content_ratio: float = DEFAULT_MIN_CONTENT_RATIO,
) -> ReformattingVerdict:
    """Classify a hunk as pure reformatting or substantive change.

    The ratio is the number of changed lines that still carry content after
    normalization, divided by the number of lines in the hunk. Hunks with at
    most large_hunk_threshold new lines are never classified as reformatting.

    Args:
        hunk: The hunk to classify.
        large_hunk_threshold: Size above which a hunk is examined.
        min_content_ratio: Ratio below which a large hunk is reformatting.

    Returns:
        The ReformattingVerdict.
    """
    content_lines = [ln for ln in hunk.changed_lines if normalize_line(ln.text)]
    total = len(hunk.lines)
    ratio = len(content_lines) / total if total else 0.0

    if hunk.new_count <= large_hunk_threshold:
        return ReformattingVerdict(is_reformatting=False, content_line_ratio=ratio)

    logger.debug(
        f"Large hunk ({hunk.new_count} lines): {len(content_lines)} content changes "
        f"out of {total} lines (ratio {ratio:.3f})"
    )
    return ReformattingVerdict(is_reformatting=ratio < min_content_ratio, content_line_ratio=ratio)


def ensure_stageable(
    hunk: Hunk,
    large_hunk_threshold: int = DEFAULT_LARGE_HUNK_THRESHOLD,
    min_content_ratio: float = DEFAULT_MIN_CONTENT_RATIO,
) -> ReformattingVerdict:
    """Refuse partial staging of large pure-reformatting hunks.

    Returns:
        The ReformattingVerdict when the hunk may be staged.

    Raises:
        ReformattingRefusalError: If the hunk is classified as reformatting.
    """
    verdict = classify_hunk(hunk, large_hunk_threshold, min_content_ratio)
    if verdict.is_reformatting:
        raise ReformattingRefusalError(
            f"Cannot stage individual lines from a large reformatting hunk "
            f"({hunk.new_count} lines, mostly formatting). Please stage the entire "
            f"file or revert the formatting changes first.",
            line_count=hunk.new_count,
            content_line_ratio=verdict.content_line_ratio,
        )
    return verdict
