"""Tests for hunkstage.git.runner module."""

import asyncio
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from hunkstage.git import GitError, GitRunner, _run_git_command, get_repo_root


class TestRunGitCommand:
    """Tests for _run_git_command function."""

    def test_successful_command(self, mocker):
        """Test successful git command execution."""
        mock_result = MagicMock()
        mock_result.stdout = "output\n"
        mock_result.returncode = 0

        mock_run = mocker.patch("subprocess.run", return_value=mock_result)

        result = _run_git_command(["status"])
        assert result == "output"
        assert mock_run.call_args.args[0] == ["git", "-c", "core.quotepath=false", "status"]

    def test_failed_command_raises_error(self, mocker):
        """Test that failed command raises GitError with stderr."""
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "git", stderr="fatal: bad revision")
        )

        with pytest.raises(GitError) as exc_info:
            _run_git_command(["show", "nope"])

        assert "Git command failed" in str(exc_info.value)
        assert exc_info.value.stderr == "fatal: bad revision"
        assert exc_info.value.command == ["show", "nope"]

    def test_git_not_found_raises_error(self, mocker):
        """Test that missing git raises GitError."""
        mocker.patch("subprocess.run", side_effect=FileNotFoundError())

        with pytest.raises(GitError) as exc_info:
            _run_git_command(["status"])

        assert "not installed" in str(exc_info.value)


class TestGetRepoRoot:
    """Tests for get_repo_root function."""

    def test_returns_path(self, mocker):
        """Test that repo root path is returned."""
        mock_result = MagicMock()
        mock_result.stdout = "/path/to/repo\n"
        mock_result.returncode = 0

        mocker.patch("subprocess.run", return_value=mock_result)

        assert get_repo_root() == Path("/path/to/repo")

    def test_raises_error_if_not_repo(self, mocker):
        """Test error if not in a git repository."""
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(128, "git", stderr="not a git repo")
        )

        with pytest.raises(GitError) as exc_info:
            get_repo_root()

        assert "Not in a git repository" in str(exc_info.value)

    def test_real_repository(self, temp_repo):
        assert get_repo_root(temp_repo).resolve() == temp_repo.resolve()


class TestGitRunner:
    """Tests for the async GitRunner."""

    def test_rejects_zero_processes(self, temp_dir):
        with pytest.raises(ValueError):
            GitRunner(temp_dir, max_processes=0)

    @pytest.mark.asyncio
    async def test_diff_keeps_trailing_whitespace(self, temp_repo, commit_file):
        path = commit_file(temp_repo, "spaces.txt", "a\nb\n")
        path.write_text("a\nb  \n")

        diff = await GitRunner(temp_repo).diff("spaces.txt")

        assert diff.endswith("+b  \n")
        assert "--- a/spaces.txt" in diff

    @pytest.mark.asyncio
    async def test_diff_of_unchanged_file_is_empty(self, temp_repo):
        assert await GitRunner(temp_repo).diff("README.md") == ""

    @pytest.mark.asyncio
    async def test_show_reads_head_and_index(self, temp_repo, commit_file, run_git):
        path = commit_file(temp_repo, "f.txt", "one\n")
        path.write_text("two\n")
        run_git(temp_repo, "add", "f.txt")

        git = GitRunner(temp_repo)

        assert await git.show("HEAD:f.txt") == "one\n"
        assert await git.show(":f.txt") == "two\n"

    @pytest.mark.asyncio
    async def test_failure_carries_stderr(self, temp_repo):
        with pytest.raises(GitError) as exc_info:
            await GitRunner(temp_repo).show("HEAD:missing.txt")

        assert exc_info.value.stderr
        assert exc_info.value.command == ["show", "HEAD:missing.txt"]

    @pytest.mark.asyncio
    async def test_add_stages_file(self, temp_repo, run_git):
        (temp_repo / "new.txt").write_text("new\n")

        await GitRunner(temp_repo).add("new.txt")

        assert "new.txt" in run_git(temp_repo, "diff", "--cached", "--name-only")

    @pytest.mark.asyncio
    async def test_missing_git(self, temp_dir, mocker):
        mocker.patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError())

        with pytest.raises(GitError, match="not installed"):
            await GitRunner(temp_dir).run(["status"])

    @pytest.mark.asyncio
    async def test_limits_concurrent_processes(self, temp_dir, mocker):
        running = 0
        peak = 0

        class FakeProcess:
            returncode = 0

            async def communicate(self):
                nonlocal running, peak
                running += 1
                peak = max(peak, running)
                await asyncio.sleep(0.01)
                running -= 1
                return b"ok\n", b""

        async def fake_exec(*args, **kwargs):
            return FakeProcess()

        mocker.patch("asyncio.create_subprocess_exec", new=fake_exec)

        git = GitRunner(temp_dir, max_processes=2)
        results = await asyncio.gather(*(git.run(["status"]) for _ in range(6)))

        assert results == ["ok"] * 6
        assert peak == 2
