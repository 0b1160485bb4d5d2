"""Buffer reconciler for the hunkstage staging engine.

Stages or unstages one line-range change without building a patch: the
target range is spliced between full-text buffers, the hybrid is written to
the working-tree file, ``git add`` picks it up, and the working-tree file is
put back exactly as it was.

Contains:
- splice_for_stage: HEAD content with one change from the working tree applied
- splice_for_unstage: Index content with one change reverted to HEAD
- BufferReconciler: Runs the write -> add -> restore sequence
"""

from pathlib import Path

from hunkstage.git.exceptions import GitError
from hunkstage.git.runner import GitRunner
from hunkstage.logging_utils import logger
from hunkstage.staging.exceptions import ReconciliationError
from hunkstage.staging.models import LineChange, ReconciliationSnapshot


def _checked_slice(lines: list[str], bounds: tuple[int, int], side: str) -> tuple[int, int]:
    """Return bounds unchanged, or raise if they reach past the buffer."""
    start, end = bounds
    if end > len(lines):
        raise ReconciliationError(
            f"Change at {side} lines {start + 1}-{end} is outside the {len(lines)}-line buffer"
        )
    return bounds


def splice_for_stage(original_content: str, change: LineChange, modified_content: str) -> str:
    """Apply only the target change to the original content.

    Args:
        original_content: HEAD version of the file.
        change: The change to stage.
        modified_content: Working-tree version of the file.

    Returns:
        The content to stage.

    Raises:
        ReconciliationError: If the change reaches past either buffer.
    """
    lines = original_content.split("\n")
    modified_lines = modified_content.split("\n")

    orig_start, orig_end = _checked_slice(lines, change.original_slice(), "original")
    mod_start, mod_end = _checked_slice(modified_lines, change.modified_slice(), "modified")
    lines[orig_start:orig_end] = modified_lines[mod_start:mod_end]
    return "\n".join(lines)


def splice_for_unstage(original_content: str, change: LineChange, staged_content: str) -> str:
    """Revert only the target change in the staged content.

    Args:
        original_content: HEAD version of the file.
        change: The staged change to revert (modified side = index).
        staged_content: Index version of the file.

    Returns:
        The content to stage in place of the current index version.

    Raises:
        ReconciliationError: If the change reaches past either buffer.
    """
    lines = staged_content.split("\n")
    original_lines = original_content.split("\n")

    orig_start, orig_end = _checked_slice(original_lines, change.original_slice(), "original")
    staged_start, staged_end = _checked_slice(lines, change.modified_slice(), "staged")
    lines[staged_start:staged_end] = original_lines[orig_start:orig_end]
    return "\n".join(lines)


class BufferReconciler:
    """Stage content through the working-tree file, then restore the file.

    Callers must make sure nothing else writes the file while a reconcile
    sequence runs; the staging engine holds a per-file lock for this.
    """

    def __init__(self, git: GitRunner):
        self.git = git

    async def stage_change(
        self,
        absolute_path: Path,
        relative_path: str,
        original_content: str,
        change: LineChange,
        modified_content: str,
    ) -> str:
        """Stage one change of a file.

        Returns:
            Result message.

        Raises:
            ReconciliationError: If the change could not be staged.
        """
        snapshot = self._snapshot(absolute_path, original_content, modified_content)
        hybrid = splice_for_stage(snapshot.original_content, change, snapshot.base_content)
        await self._reconcile(absolute_path, relative_path, hybrid, snapshot, "stage")
        return (
            f"Successfully staged change at lines "
            f"{change.modified_start_line_number}-{change.modified_end_line_number}"
        )

    async def unstage_change(
        self,
        absolute_path: Path,
        relative_path: str,
        original_content: str,
        change: LineChange,
        staged_content: str,
    ) -> str:
        """Unstage one change of a file.

        Returns:
            Result message.

        Raises:
            ReconciliationError: If the change could not be unstaged.
        """
        snapshot = self._snapshot(absolute_path, original_content, staged_content)
        hybrid = splice_for_unstage(snapshot.original_content, change, snapshot.base_content)
        await self._reconcile(absolute_path, relative_path, hybrid, snapshot, "unstage")
        return (
            f"Successfully unstaged change at lines "
            f"{change.modified_start_line_number}-{change.modified_end_line_number}"
        )

    def _snapshot(self, absolute_path: Path, original_content: str, base_content: str) -> ReconciliationSnapshot:
        try:
            working = absolute_path.read_bytes()
        except OSError as e:
            raise ReconciliationError(f"Cannot read {absolute_path}: {e}") from e
        return ReconciliationSnapshot(
            original_content=original_content,
            base_content=base_content,
            working_file_content=working,
        )

    async def _reconcile(
        self,
        absolute_path: Path,
        relative_path: str,
        hybrid: str,
        snapshot: ReconciliationSnapshot,
        action: str,
    ) -> None:
        """Write the hybrid content, stage it and restore the working file.

        The restore runs on every exit path, cancellation included. A failed
        restore is logged; it only raises when nothing else went wrong.
        """
        try:
            absolute_path.write_bytes(hybrid.encode("utf-8"))
            await self.git.add(relative_path)
        except (GitError, OSError) as e:
            logger.error(f"Failed to {action} change in {relative_path}: {e}")
            raise ReconciliationError(f"Failed to {action} change in {relative_path}: {e}") from e
        finally:
            restored = self._restore(absolute_path, snapshot.working_file_content)

        if not restored:
            raise ReconciliationError(
                f"Staging index updated but {relative_path} could not be restored in the working tree"
            )

    def _restore(self, absolute_path: Path, content: bytes) -> bool:
        try:
            absolute_path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to restore {absolute_path} after reconcile: {e}")
            return False
        return True
