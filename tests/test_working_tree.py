"""Tests for the git working-tree wrapper and its subprocess handling."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from specguard.audit.diff_parser import parse_diff
from specguard.git.working_tree import GitCommandError, GitWorkingTree, _run_git


class _HangingProcess:
    """Stand-in for a git child that never finishes."""

    def __init__(self) -> None:
        self.returncode: int | None = None
        self.killed = False
        self.reaped = False

    async def communicate(self) -> tuple[bytes, bytes]:
        await asyncio.Event().wait()
        return b"", b""

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        self.reaped = True
        self.returncode = -9
        return self.returncode


@pytest.fixture
def hanging_git(monkeypatch) -> _HangingProcess:
    proc = _HangingProcess()

    async def fake_exec(*args, **kwargs):
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    return proc


class TestRunGit:
    @pytest.mark.asyncio
    async def test_missing_cwd_raises(self, tmp_path: Path) -> None:
        with pytest.raises(GitCommandError):
            await _run_git("status", cwd=tmp_path / "does-not-exist")

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self, git_repo: Path) -> None:
        with pytest.raises(GitCommandError, match="failed"):
            await _run_git("not-a-command", cwd=git_repo)

    @pytest.mark.asyncio
    async def test_timeout_kills_child(self, hanging_git: _HangingProcess) -> None:
        with pytest.raises(GitCommandError, match="timed out"):
            await _run_git("diff", timeout=0.01)
        assert hanging_git.killed
        assert hanging_git.reaped

    @pytest.mark.asyncio
    async def test_cancellation_kills_child(self, hanging_git: _HangingProcess) -> None:
        task = asyncio.create_task(_run_git("diff", timeout=30.0))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert hanging_git.killed
        assert hanging_git.reaped


class TestGitWorkingTree:
    @pytest.mark.asyncio
    async def test_clean_tree(self, git_repo: Path) -> None:
        tree = GitWorkingTree(git_repo)
        assert await tree.get_diff() == ""
        assert await tree.get_status() == []
        assert await tree.has_uncommitted_changes() is False

    @pytest.mark.asyncio
    async def test_modified_file(self, git_repo: Path) -> None:
        (git_repo / "src" / "app.py").write_text("print('hello')\napi_key = 'x'\n")
        tree = GitWorkingTree(git_repo)

        [changed] = parse_diff(await tree.get_diff())
        assert changed.path == "src/app.py"
        assert changed.additions == 1
        assert await tree.get_changed_files() == ["src/app.py"]
        assert await tree.has_uncommitted_changes() is True

    @pytest.mark.asyncio
    async def test_untracked_file_is_a_change(self, git_repo: Path) -> None:
        (git_repo / "notes.txt").write_text("todo\n")
        tree = GitWorkingTree(git_repo)
        assert await tree.get_changed_files() == ["notes.txt"]
        assert await tree.get_diff() == ""

    @pytest.mark.asyncio
    async def test_not_a_repository_degrades_to_empty(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        tree = GitWorkingTree(plain)
        assert await tree.get_diff() == ""
        assert await tree.get_changed_files() == []
        assert await tree.has_uncommitted_changes() is False
