"""Selective hunk staging engine.

This package provides:
- models: DiffDocument, Hunk, DiffLine, LineKind, StagingTarget,
          ReformattingVerdict, LineChange, ReconciliationSnapshot,
          ApplyAttempt, ApplyRecord
- parser: parse_file_diff, parse_unified_diff, parse_hunk_header
- locator: locate_hunk, find_containing_hunk
- classifier: classify_hunk, ensure_stageable, normalize_line
- patch: build_hunk_patch, build_single_change_patch
- applier: PatchApplier, ApplyStrategy, HUNK_STRATEGIES, LINE_STRATEGIES,
           temporary_patch_file
- reconciler: BufferReconciler, splice_for_stage, splice_for_unstage
- engine: StagingEngine
- exceptions: StagingError and its subclasses
"""

# Models
from hunkstage.staging.models import (
    ApplyAttempt,
    ApplyRecord,
    DiffDocument,
    DiffLine,
    Hunk,
    LineChange,
    LineKind,
    ReconciliationSnapshot,
    ReformattingVerdict,
    StagingTarget,
)

# Exceptions
from hunkstage.staging.exceptions import (
    ApplyError,
    DiffParseError,
    NoChangesError,
    NoHunkFoundError,
    ReconciliationError,
    ReformattingRefusalError,
    StagingError,
    StagingFailedError,
)

# Parser
from hunkstage.staging.parser import (
    parse_file_diff,
    parse_hunk_header,
    parse_unified_diff,
)

# Locator
from hunkstage.staging.locator import (
    find_containing_hunk,
    locate_hunk,
)

# Classifier
from hunkstage.staging.classifier import (
    classify_hunk,
    ensure_stageable,
    normalize_line,
)

# Patch builder
from hunkstage.staging.patch import (
    build_hunk_patch,
    build_single_change_patch,
    match_deletion,
)

# Applier
from hunkstage.staging.applier import (
    HUNK_STRATEGIES,
    LINE_STRATEGIES,
    ApplyStrategy,
    PatchApplier,
    temporary_patch_file,
)

# Reconciler
from hunkstage.staging.reconciler import (
    BufferReconciler,
    splice_for_stage,
    splice_for_unstage,
)

# Engine
from hunkstage.staging.engine import StagingEngine


__all__ = [
    # Models
    "ApplyAttempt",
    "ApplyRecord",
    "DiffDocument",
    "DiffLine",
    "Hunk",
    "LineChange",
    "LineKind",
    "ReconciliationSnapshot",
    "ReformattingVerdict",
    "StagingTarget",
    # Exceptions
    "ApplyError",
    "DiffParseError",
    "NoChangesError",
    "NoHunkFoundError",
    "ReconciliationError",
    "ReformattingRefusalError",
    "StagingError",
    "StagingFailedError",
    # Parser
    "parse_file_diff",
    "parse_hunk_header",
    "parse_unified_diff",
    # Locator
    "find_containing_hunk",
    "locate_hunk",
    # Classifier
    "classify_hunk",
    "ensure_stageable",
    "normalize_line",
    # Patch
    "build_hunk_patch",
    "build_single_change_patch",
    "match_deletion",
    # Applier
    "HUNK_STRATEGIES",
    "LINE_STRATEGIES",
    "ApplyStrategy",
    "PatchApplier",
    "temporary_patch_file",
    # Reconciler
    "BufferReconciler",
    "splice_for_stage",
    "splice_for_unstage",
    # Engine
    "StagingEngine",
]
