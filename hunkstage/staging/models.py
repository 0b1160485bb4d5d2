"""Data models for the hunkstage staging engine.

Contains:
- LineKind: Kind of a line inside a hunk
- DiffLine: A single line of a hunk
- Hunk: One @@ block of a unified diff
- DiffDocument: Parsed diff of a single file (headers + hunks)
- StagingTarget: A working-tree line range selected for staging
- ReformattingVerdict: Result of the reformatting classifier
- LineChange: A line-range change reported by a side-by-side diff editor
- ReconciliationSnapshot: Content buffers used by the buffer reconciler
- ApplyAttempt: One apply strategy tried against the index
- ApplyRecord: All attempts made while applying one patch
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


_DIFF_GIT_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")

# Escapes git uses inside C-quoted path names
_C_ESCAPES = {
    "a": "\a", "b": "\b", "t": "\t", "n": "\n",
    "v": "\v", "f": "\f", "r": "\r", '"': '"', "\\": "\\",
}
_OCTAL_RE = re.compile(r"[0-7]{3}")


def unquote_c_path(value: str) -> str:
    """Decode a path that git wrapped in double quotes with C escapes.

    Octal escapes are raw UTF-8 bytes. Unquoted values are returned as is.
    """
    if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
        return value

    body = value[1:-1]
    decoded = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            octal = _OCTAL_RE.match(body, i + 1)
            if octal:
                decoded.append(int(octal.group(), 8))
                i += 4
                continue
            decoded += _C_ESCAPES.get(body[i + 1], body[i + 1]).encode("utf-8")
            i += 2
            continue
        decoded += char.encode("utf-8")
        i += 1
    return decoded.decode("utf-8", errors="replace")


def _header_path(value: str) -> str:
    # git ends ---/+++ lines with a tab when the name contains a space
    if not value.startswith('"'):
        value = value.split("\t", 1)[0]
    return unquote_c_path(value.rstrip("\t"))


class LineKind(Enum):
    """Kind of a hunk line, keyed by its leading character."""

    CONTEXT = " "
    ADDITION = "+"
    DELETION = "-"
    MARKER = "\\"  # "\ No newline at end of file"


@dataclass
class DiffLine:
    """A single line inside a hunk."""

    kind: LineKind
    text: str  # Line content without the leading kind character

    @classmethod
    def from_raw(cls, raw: str) -> "DiffLine":
        """Classify a raw hunk line by its first character.

        Lines with an unknown prefix are treated as context, which is how
        git itself reads a context line whose leading space was lost.
        """
        for kind in LineKind:
            if raw.startswith(kind.value):
                return cls(kind=kind, text=raw[1:])
        return cls(kind=LineKind.CONTEXT, text=raw)

    @property
    def raw(self) -> str:
        return self.kind.value + self.text

    @property
    def is_change(self) -> bool:
        return self.kind in (LineKind.ADDITION, LineKind.DELETION)


@dataclass
class Hunk:
    """One hunk of a unified diff."""

    header: str  # The @@ ... @@ line
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def new_end(self) -> int:
        """Last working-tree line number covered by the hunk."""
        return self.new_start + self.new_count - 1

    def contains(self, line_number: int) -> bool:
        return self.new_start <= line_number <= self.new_end

    @property
    def changed_lines(self) -> list[DiffLine]:
        return [ln for ln in self.lines if ln.is_change]

    def numbered_lines(self) -> Iterator[tuple[Optional[int], Optional[int], DiffLine]]:
        """Yield (old line number, new line number, line) for every hunk line.

        Additions have no old line number and deletions no new one. Marker
        lines have neither.
        """
        old_no = self.old_start
        new_no = self.new_start
        for line in self.lines:
            if line.kind == LineKind.CONTEXT:
                yield old_no, new_no, line
                old_no += 1
                new_no += 1
            elif line.kind == LineKind.DELETION:
                yield old_no, None, line
                old_no += 1
            elif line.kind == LineKind.ADDITION:
                yield None, new_no, line
                new_no += 1
            else:
                yield None, None, line

    def to_lines(self) -> list[str]:
        """Serialize the hunk back to raw diff lines, header first."""
        return [self.header] + [ln.raw for ln in self.lines]


@dataclass
class DiffDocument:
    """Parsed unified diff of a single file."""

    headers: list[str] = field(default_factory=list)  # From 'diff --git' up to first @@
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def file_path(self) -> Optional[str]:
        """Repository-relative path named by the headers, if any."""
        for marker, prefix in (("+++ ", "b/"), ("--- ", "a/")):
            for header in self.headers:
                if not header.startswith(marker):
                    continue
                path = _header_path(header[len(marker):])
                if path.startswith(prefix):
                    return path[len(prefix):]
        for header in self.headers:
            match = _DIFF_GIT_RE.match(header)
            if match:
                return match.group(2)
        return None

    def to_patch(self) -> str:
        """Serialize headers and all hunks as a patch ending with a newline."""
        lines = list(self.headers)
        for hunk in self.hunks:
            lines.extend(hunk.to_lines())
        # git apply requires the patch to end with a newline
        return "\n".join(lines) + "\n"


@dataclass
class StagingTarget:
    """A working-tree line range selected by the user (1-based, inclusive)."""

    file_path: str
    start_line: int
    end_line: int

    def __post_init__(self):
        if self.start_line < 1:
            raise ValueError(f"start_line must be >= 1, got {self.start_line}")
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line ({self.end_line}) must not be before start_line ({self.start_line})"
            )


@dataclass(frozen=True)
class ReformattingVerdict:
    """Whether a hunk is pure reformatting, and the share of lines with real content."""

    is_reformatting: bool
    content_line_ratio: float


class LineChange(BaseModel):
    """A line-range change as reported by a side-by-side diff editor.

    Line numbers are 1-based and inclusive. An end line number of 0 marks
    an empty side: ``original_end_line_number == 0`` is an insertion after
    ``original_start_line_number``, ``modified_end_line_number == 0`` a
    deletion after ``modified_start_line_number``.
    """

    model_config = ConfigDict(populate_by_name=True)

    original_start_line_number: int = Field(alias="originalStartLineNumber", ge=0)
    original_end_line_number: int = Field(alias="originalEndLineNumber", ge=0)
    modified_start_line_number: int = Field(alias="modifiedStartLineNumber", ge=0)
    modified_end_line_number: int = Field(alias="modifiedEndLineNumber", ge=0)
    # Character-level detail sent by editors; the line splice does not use it
    char_changes: Optional[list[dict]] = Field(default=None, alias="charChanges")

    @model_validator(mode="after")
    def check_ranges(self) -> "LineChange":
        """Reject inverted ranges and changes that are empty on both sides."""
        if self.original_end_line_number == 0 and self.modified_end_line_number == 0:
            raise ValueError("A line change cannot be empty on both sides")
        if 0 < self.original_end_line_number < self.original_start_line_number:
            raise ValueError("original end line is before original start line")
        if 0 < self.modified_end_line_number < self.modified_start_line_number:
            raise ValueError("modified end line is before modified start line")
        return self

    @property
    def is_insertion(self) -> bool:
        return self.original_end_line_number == 0

    @property
    def is_deletion(self) -> bool:
        return self.modified_end_line_number == 0

    def original_slice(self) -> tuple[int, int]:
        """0-based [start, end) of the change in the original buffer."""
        if self.is_insertion:
            return self.original_start_line_number, self.original_start_line_number
        return self.original_start_line_number - 1, self.original_end_line_number

    def modified_slice(self) -> tuple[int, int]:
        """0-based [start, end) of the change in the modified buffer."""
        if self.is_deletion:
            return self.modified_start_line_number, self.modified_start_line_number
        return self.modified_start_line_number - 1, self.modified_end_line_number


@dataclass
class ReconciliationSnapshot:
    """Buffers held for the duration of one reconcile operation.

    ``base_content`` is the modified (working) content when staging and the
    staged (index) content when unstaging.
    """

    original_content: str
    base_content: str
    working_file_content: bytes


@dataclass
class ApplyAttempt:
    """One apply strategy tried against the index."""

    strategy: str
    options: list[str]
    succeeded: bool = False
    error: Optional[str] = None


@dataclass
class ApplyRecord:
    """All attempts made while applying one patch, in order."""

    attempts: list[ApplyAttempt] = field(default_factory=list)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def succeeded(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].succeeded

    @property
    def strategy(self) -> Optional[str]:
        """Name of the strategy that applied the patch, if any did."""
        if self.succeeded:
            return self.attempts[-1].strategy
        return None
