"""Tests for hunkstage.staging.reconciler module."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from hunkstage.git import GitError, GitRunner
from hunkstage.staging import (
    BufferReconciler,
    LineChange,
    ReconciliationError,
    splice_for_stage,
    splice_for_unstage,
)


def _change(orig_start, orig_end, mod_start, mod_end) -> LineChange:
    return LineChange(
        original_start_line_number=orig_start,
        original_end_line_number=orig_end,
        modified_start_line_number=mod_start,
        modified_end_line_number=mod_end,
    )


class TestSplice:
    """Tests for the buffer splice helpers."""

    def test_stage_replacement(self):
        original = "a\nb\nc\n"
        modified = "a\nB\nc\nd\n"

        result = splice_for_stage(original, _change(2, 2, 2, 2), modified)

        assert result == "a\nB\nc\n"

    def test_stage_insertion(self):
        original = "a\nc\n"
        modified = "a\nb\nc\nX\n"

        result = splice_for_stage(original, _change(1, 0, 2, 2), modified)

        assert result == "a\nb\nc\n"

    def test_stage_deletion(self):
        original = "a\nb\nc\n"
        modified = "a\nc\nZ\n"

        result = splice_for_stage(original, _change(2, 2, 1, 0), modified)

        assert result == "a\nc\n"

    def test_stage_multi_line_range(self):
        original = "1\n2\n3\n4\n"
        modified = "1\ntwo\nthree\nfour\n4\n"

        result = splice_for_stage(original, _change(2, 3, 2, 4), modified)

        assert result == "1\ntwo\nthree\nfour\n4\n"

    def test_unstage_replacement(self):
        original = "a\nb\nc\n"
        staged = "a\nB\nc\nD\n"

        result = splice_for_unstage(original, _change(2, 2, 2, 2), staged)

        assert result == "a\nb\nc\nD\n"

    def test_unstage_insertion(self):
        original = "a\nc\n"
        staged = "a\nb\nc\n"

        result = splice_for_unstage(original, _change(1, 0, 2, 2), staged)

        assert result == "a\nc\n"

    def test_stage_range_past_end_of_buffer(self):
        with pytest.raises(ReconciliationError, match="outside the 2-line buffer"):
            splice_for_stage("a\nb", _change(10, 12, 10, 12), "a\nb")

    def test_unstage_range_past_end_of_staged_buffer(self):
        with pytest.raises(ReconciliationError, match="staged lines"):
            splice_for_unstage("a\nb\nc\nd\n", _change(3, 4, 3, 4), "a\nb")

    def test_insertion_after_last_line(self):
        result = splice_for_stage("a\nb", _change(2, 0, 3, 3), "a\nb\nc")

        assert result == "a\nb\nc"


class TestLineChange:
    """Tests for LineChange validation."""

    def test_accepts_editor_aliases(self):
        change = LineChange.model_validate({
            "originalStartLineNumber": 3,
            "originalEndLineNumber": 4,
            "modifiedStartLineNumber": 3,
            "modifiedEndLineNumber": 5,
            "charChanges": [],
        })

        assert change.original_slice() == (2, 4)
        assert change.modified_slice() == (2, 5)
        assert change.char_changes == []

    def test_rejects_empty_change(self):
        with pytest.raises(ValueError):
            _change(3, 0, 3, 0)

    def test_rejects_inverted_range(self):
        with pytest.raises(ValueError):
            _change(5, 2, 5, 5)


@pytest.fixture
def working_file(tmp_path):
    path = tmp_path / "file.txt"
    path.write_bytes(b"a\r\nB\r\nc\r\nd\r\n")
    return path


@pytest.fixture
def fake_git():
    git = MagicMock(spec=GitRunner)
    git.add = AsyncMock(return_value="")
    return git


class TestBufferReconciler:
    """Tests for BufferReconciler."""

    @pytest.mark.asyncio
    async def test_stage_change_restores_working_file(self, working_file, fake_git):
        original_bytes = working_file.read_bytes()
        staged = []

        async def capture(relative_path):
            staged.append(working_file.read_bytes())
            return ""

        fake_git.add.side_effect = capture

        message = await BufferReconciler(fake_git).stage_change(
            working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\nd\n"
        )

        assert message == "Successfully staged change at lines 2-2"
        assert staged == [b"a\nB\nc\n"]
        fake_git.add.assert_awaited_once_with("file.txt")
        assert working_file.read_bytes() == original_bytes

    @pytest.mark.asyncio
    async def test_unstage_change_restores_working_file(self, working_file, fake_git):
        original_bytes = working_file.read_bytes()
        staged = []

        async def capture(relative_path):
            staged.append(working_file.read_bytes())
            return ""

        fake_git.add.side_effect = capture

        message = await BufferReconciler(fake_git).unstage_change(
            working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\n"
        )

        assert message == "Successfully unstaged change at lines 2-2"
        assert staged == [b"a\nb\nc\n"]
        assert working_file.read_bytes() == original_bytes

    @pytest.mark.asyncio
    async def test_add_failure_restores_and_raises(self, working_file, fake_git):
        original_bytes = working_file.read_bytes()
        fake_git.add.side_effect = GitError("Git command failed: git add", ["add"], "fatal: locked")

        with pytest.raises(ReconciliationError) as exc_info:
            await BufferReconciler(fake_git).stage_change(
                working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\n"
            )

        assert isinstance(exc_info.value.__cause__, GitError)
        assert working_file.read_bytes() == original_bytes

    @pytest.mark.asyncio
    async def test_unstage_failure_restores_working_file(self, working_file, fake_git):
        original_bytes = working_file.read_bytes()
        fake_git.add.side_effect = GitError("Git command failed: git add", ["add"], "fatal: locked")

        with pytest.raises(ReconciliationError, match="Failed to unstage change"):
            await BufferReconciler(fake_git).unstage_change(
                working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\n"
            )

        assert working_file.read_bytes() == original_bytes

    @pytest.mark.asyncio
    async def test_cancellation_restores_working_file(self, working_file, fake_git):
        original_bytes = working_file.read_bytes()
        fake_git.add.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await BufferReconciler(fake_git).stage_change(
                working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\n"
            )

        assert working_file.read_bytes() == original_bytes

    @pytest.mark.asyncio
    async def test_failed_restore_raises_after_success(self, working_file, fake_git, mocker):
        reconciler = BufferReconciler(fake_git)
        mocker.patch.object(reconciler, "_restore", return_value=False)

        with pytest.raises(ReconciliationError, match="could not be restored"):
            await reconciler.stage_change(
                working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\n"
            )

    @pytest.mark.asyncio
    async def test_failed_restore_keeps_original_error(self, working_file, fake_git, mocker):
        fake_git.add.side_effect = GitError("Git command failed: git add", ["add"], "fatal: locked")
        reconciler = BufferReconciler(fake_git)
        mocker.patch.object(reconciler, "_restore", return_value=False)

        with pytest.raises(ReconciliationError) as exc_info:
            await reconciler.stage_change(
                working_file, "file.txt", "a\nb\nc\n", _change(2, 2, 2, 2), "a\nB\nc\n"
            )

        assert "Failed to stage change" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_out_of_range_change_leaves_file_alone(self, working_file, fake_git):
        original_bytes = working_file.read_bytes()

        with pytest.raises(ReconciliationError, match="outside"):
            await BufferReconciler(fake_git).stage_change(
                working_file, "file.txt", "a\nb", _change(10, 12, 10, 12), "a\nb"
            )

        fake_git.add.assert_not_awaited()
        assert working_file.read_bytes() == original_bytes

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path, fake_git):
        with pytest.raises(ReconciliationError, match="Cannot read"):
            await BufferReconciler(fake_git).stage_change(
                tmp_path / "missing.txt", "missing.txt", "a\n", _change(1, 1, 1, 1), "b\n"
            )

        fake_git.add.assert_not_awaited()
