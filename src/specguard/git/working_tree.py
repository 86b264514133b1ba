"""GitWorkingTree — read-only git queries via subprocess for change audits."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from specguard.audit.diff_parser import changed_paths, parse_status

logger = logging.getLogger(__name__)


class GitCommandError(RuntimeError):
    """A git invocation failed, timed out, or git is not installed."""


async def _run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 30.0,
) -> str:
    """Run a git command and return stdout.

    Raises GitCommandError on a missing executable, a timeout or a non-zero
    exit. On timeout or cancellation the child is killed and reaped before
    the exception propagates.
    """
    cmd = ["git"] + list(args)
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise GitCommandError(f"git {' '.join(args)} could not start: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except BaseException as e:
        # Timeout or cancellation: the child must not outlive the call.
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        if isinstance(e, asyncio.TimeoutError):
            raise GitCommandError(f"git {' '.join(args)} timed out after {timeout}s") from e
        raise

    if proc.returncode != 0:
        raise GitCommandError(
            f"git {' '.join(args)} failed (rc={proc.returncode}): "
            f"{stderr.decode(errors='replace').strip()}"
        )
    return stdout.decode(errors="replace")


class GitWorkingTree:
    """Reads the uncommitted state of a working tree.

    Every query degrades to "no changes" when git cannot answer (not a
    repository, git missing, timeout): the audit engine treats that as an
    empty diff rather than an error.
    """

    def __init__(self, repo_dir: str | Path = ".", timeout: float = 30.0) -> None:
        self.repo_dir = Path(repo_dir)
        self.timeout = timeout

    async def _query(self, *args: str) -> str:
        try:
            return await _run_git(*args, cwd=self.repo_dir, timeout=self.timeout)
        except GitCommandError as e:
            logger.warning("Treating git output as empty: %s", e)
            return ""

    async def get_diff(self) -> str:
        """Unified diff of the working tree against the index."""
        return await self._query("diff", "--unified=3")

    async def get_status(self) -> list[str]:
        """Porcelain status lines (``XY path``)."""
        return parse_status(await self._query("status", "--porcelain"))

    async def get_changed_files(self) -> list[str]:
        """Paths of every changed, staged or untracked file."""
        return changed_paths(await self._query("status", "--porcelain"))

    async def has_uncommitted_changes(self) -> bool:
        status = await self._query("status", "--porcelain")
        return bool(status.strip())
