"""Selective staging engine.

StagingEngine ties the parser, locator, classifier, patch builder, applier
and reconciler together behind the operations offered to a source-control
UI. Every operation is a coroutine. Operations on the same file never
overlap: each one holds that file's lock from start to finish.
"""

import asyncio
import weakref
from pathlib import Path
from typing import Optional, Union

from hunkstage.git.runner import GitRunner
from hunkstage.logging_utils import logger
from hunkstage.staging.applier import HUNK_STRATEGIES, LINE_STRATEGIES, PatchApplier
from hunkstage.staging.classifier import ensure_stageable
from hunkstage.staging.exceptions import NoChangesError, StagingError, StagingFailedError
from hunkstage.staging.locator import locate_hunk
from hunkstage.staging.models import ApplyRecord, LineChange, StagingTarget
from hunkstage.staging.parser import parse_file_diff, parse_unified_diff
from hunkstage.staging.patch import build_hunk_patch, build_single_change_patch
from hunkstage.staging.reconciler import BufferReconciler
from hunkstage.user_config import StagingConfig


class StagingEngine:
    """Stage parts of a modified file into the git index."""

    def __init__(
        self,
        repo_root: Union[str, Path],
        config: Optional[StagingConfig] = None,
        git: Optional[GitRunner] = None,
    ):
        self.repo_root = Path(repo_root).resolve()
        self.config = config or StagingConfig()
        self.git = git or GitRunner(self.repo_root, max_processes=self.config.max_git_processes)
        self.applier = PatchApplier(self.git)
        self.reconciler = BufferReconciler(self.git)
        self.last_apply_record: Optional[ApplyRecord] = None
        # Entries vanish once no operation holds or awaits the lock
        self._file_locks: "weakref.WeakValueDictionary[Path, asyncio.Lock]" = weakref.WeakValueDictionary()

    def resolve_path(self, file_path: Union[str, Path]) -> tuple[Path, str]:
        """Return (absolute path, repository-relative POSIX path) of a file."""
        path = Path(file_path)
        absolute = path if path.is_absolute() else self.repo_root / path
        absolute = absolute.resolve()
        try:
            relative = absolute.relative_to(self.repo_root)
        except ValueError:
            raise StagingError(f"{file_path} is outside the repository {self.repo_root}")
        return absolute, relative.as_posix()

    def _lock_for(self, absolute_path: Path) -> asyncio.Lock:
        lock = self._file_locks.get(absolute_path)
        if lock is None:
            lock = asyncio.Lock()
            self._file_locks[absolute_path] = lock
        return lock

    async def _apply(self, patch_text: str, strategies) -> ApplyRecord:
        try:
            self.last_apply_record = await self.applier.apply(patch_text, strategies)
        except StagingFailedError as e:
            self.last_apply_record = e.record
            raise
        return self.last_apply_record

    async def stage_line_range(self, file_path: Union[str, Path], start_line: int, end_line: int) -> str:
        """Stage the diff hunk that owns a working-tree line range.

        Args:
            file_path: File to stage from (absolute or repository-relative).
            start_line: First selected working-tree line (1-based).
            end_line: Last selected working-tree line.

        Returns:
            Result message.

        Raises:
            NoChangesError: If the file has no unstaged changes.
            NoHunkFoundError: If the diff has no hunks.
            ReformattingRefusalError: If the hunk is large pure reformatting.
            StagingFailedError: If no apply strategy succeeded.
        """
        target = StagingTarget(str(file_path), start_line, end_line)
        absolute, relative = self.resolve_path(target.file_path)

        async with self._lock_for(absolute):
            logger.info(f"Staging lines {start_line}-{end_line} of {relative}")
            diff_text = await self.git.diff(relative)
            if not diff_text.strip():
                raise NoChangesError(f"No changes found in {relative}")

            document = parse_file_diff(diff_text, strict=self.config.strict_hunk_headers)
            logger.debug(f"Found {len(document.hunks)} hunks in diff")

            hunk = locate_hunk(document, target.start_line)
            ensure_stageable(hunk, self.config.large_hunk_threshold, self.config.min_content_ratio)

            await self._apply(build_hunk_patch(document, hunk), LINE_STRATEGIES)

        return f"Staged hunk containing lines {start_line}-{end_line}"

    async def create_patch_from_lines(self, file_path: Union[str, Path], start_line: int, end_line: int) -> str:
        """Build a minimal patch for the change at a working-tree line.

        Only the addition at start_line (and the deletion it replaces, if
        any) ends up in the patch.

        Returns:
            Patch text.

        Raises:
            NoChangesError: If the file has no unstaged changes.
            NoHunkFoundError: If no addition sits at start_line.
        """
        target = StagingTarget(str(file_path), start_line, end_line)
        absolute, relative = self.resolve_path(target.file_path)

        async with self._lock_for(absolute):
            diff_text = await self.git.diff(relative)
            if not diff_text.strip():
                raise NoChangesError(f"No changes found in {relative}")

            logger.info(f"Extracting lines {start_line}-{end_line} from diff")
            document = parse_file_diff(diff_text, strict=self.config.strict_hunk_headers)
            return build_single_change_patch(
                document,
                target.start_line,
                context_lines=self.config.context_lines,
                similarity_threshold=self.config.similarity_threshold,
            )

    async def stage_hunk_from_patch(self, file_path: Union[str, Path], patch_text: str) -> str:
        """Apply a caller-supplied patch to the index.

        Raises:
            NoChangesError: If the patch is empty.
            StagingError: If the patch touches another file.
            StagingFailedError: If no apply strategy succeeded.
        """
        absolute, relative = self.resolve_path(file_path)

        documents = parse_unified_diff(patch_text, strict=self.config.strict_hunk_headers)
        if not any(doc.hunks for doc in documents):
            raise NoChangesError("Patch contains no hunks")
        for doc in documents:
            if doc.file_path is not None and doc.file_path != relative:
                raise StagingError(f"Patch modifies {doc.file_path}, expected {relative}")

        async with self._lock_for(absolute):
            await self._apply(patch_text, HUNK_STRATEGIES)

        return "Successfully staged hunk"

    async def stage_monaco_change(
        self,
        file_path: Union[str, Path],
        original_content: str,
        target_change: Union[LineChange, dict],
        modified_content: str,
    ) -> str:
        """Stage one line-range change reported by a diff editor.

        Args:
            file_path: File the change belongs to.
            original_content: HEAD version of the file.
            target_change: The change (a LineChange or the editor's dict).
            modified_content: Working-tree version shown in the editor.

        Raises:
            ReconciliationError: If staging failed. The working-tree file is
                restored either way.
        """
        change = LineChange.model_validate(target_change)
        absolute, relative = self.resolve_path(file_path)

        async with self._lock_for(absolute):
            return await self.reconciler.stage_change(
                absolute, relative, original_content, change, modified_content
            )

    async def unstage_monaco_change(
        self,
        file_path: Union[str, Path],
        original_content: str,
        target_change: Union[LineChange, dict],
        staged_content: str,
    ) -> str:
        """Unstage one line-range change reported by a diff editor.

        Args:
            file_path: File the change belongs to.
            original_content: HEAD version of the file.
            target_change: The change (a LineChange or the editor's dict).
            staged_content: Index version of the file.

        Raises:
            ReconciliationError: If unstaging failed. The working-tree file is
                restored either way.
        """
        change = LineChange.model_validate(target_change)
        absolute, relative = self.resolve_path(file_path)

        async with self._lock_for(absolute):
            return await self.reconciler.unstage_change(
                absolute, relative, original_content, change, staged_content
            )
