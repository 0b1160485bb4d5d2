"""Shared test fixtures and configuration."""

import subprocess
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def run_git():
    """Run a git command in a directory and return its stdout."""

    def _run(repo_dir: Path, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=repo_dir,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    return _run


@pytest.fixture
def temp_repo(tmp_path, run_git):
    """Create a temporary git repository with an initial commit."""
    repo_dir = tmp_path / "test_repo"
    repo_dir.mkdir()

    run_git(repo_dir, "init")
    run_git(repo_dir, "config", "user.email", "test@example.com")
    run_git(repo_dir, "config", "user.name", "Test User")
    run_git(repo_dir, "config", "core.autocrlf", "false")

    (repo_dir / "README.md").write_text("# Test Repo\n")
    run_git(repo_dir, "add", "README.md")
    run_git(repo_dir, "commit", "-m", "Initial commit")

    return repo_dir


@pytest.fixture
def commit_file(run_git):
    """Write a file into a repository and commit it."""

    def _commit(repo_dir: Path, name: str, content: str) -> Path:
        path = repo_dir / name
        path.write_bytes(content.encode("utf-8"))
        run_git(repo_dir, "add", name)
        run_git(repo_dir, "commit", "-m", f"Add {name}")
        return path

    return _commit


@pytest.fixture
def sample_diff():
    """Unified diff of one file with two hunks."""
    return """diff --git a/src/main.py b/src/main.py
index 1234567..abcdefg 100644
--- a/src/main.py
+++ b/src/main.py
@@ -10,2 +10,4 @@ def main():
     print("Hello")
+    print("World")
+    print("!")
     return 0
@@ -20,1 +22,3 @@ def helper():
     pass
+    # New comment
+    return True
"""


@pytest.fixture
def replacement_diff():
    """Diff where one line is replaced inside otherwise unchanged code."""
    return """diff --git a/app.js b/app.js
index 1111111..2222222 100644
--- a/app.js
+++ b/app.js
@@ -1,8 +1,8 @@
 const a = 1;
 const b = 2;
 const c = 3;
-console.log("source", a);
+console.log("source:", a, b);
 const d = 4;
 const e = 5;
 const f = 6;
 const g = 7;
"""


@pytest.fixture
def insertion_diff():
    """Diff holding a single inserted line."""
    return """diff --git a/notes.txt b/notes.txt
index 3333333..4444444 100644
--- a/notes.txt
+++ b/notes.txt
@@ -1,3 +1,4 @@
 a
 b
+inserted
 c
"""
