"""Unified diff parser — turns `git diff` output into DiffFile records.

Best effort by construction: the parser never raises. Lines it does not
recognise are skipped, and whatever file/hunk is open at end of input is
flushed as-is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from specguard.models.audit import DiffFile, DiffHunk, FileStatus

# `diff --git a/path b/path`; the b/ side is the post-rename path.
_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.+?) b/(.+)")

# `@@ -oldStart[,oldLines] +newStart[,newLines] @@`; omitted counts mean 1.
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+),?(\d*) \+(\d+),?(\d*) @@")

# Offset of the path in a `git status --porcelain` line ("XY path").
_STATUS_PATH_OFFSET = 3


@dataclass
class _FileBuilder:
    path: str
    status: FileStatus = "modified"
    additions: int = 0
    deletions: int = 0
    hunks: list[DiffHunk] = field(default_factory=list)

    def build(self) -> DiffFile:
        return DiffFile(
            path=self.path,
            status=self.status,
            additions=self.additions,
            deletions=self.deletions,
            hunks=tuple(self.hunks),
        )


@dataclass
class _HunkBuilder:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[str] = field(default_factory=list)

    def build(self) -> DiffHunk:
        return DiffHunk(
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            content="\n".join(self.lines),
        )


def _parse_hunk_header(line: str) -> _HunkBuilder | None:
    match = _HUNK_HEADER_RE.match(line)
    if not match:
        return None
    old_start, old_lines, new_start, new_lines = match.groups()
    return _HunkBuilder(
        old_start=int(old_start),
        old_lines=int(old_lines) if old_lines else 1,
        new_start=int(new_start),
        new_lines=int(new_lines) if new_lines else 1,
    )


def parse_diff(diff_text: str) -> list[DiffFile]:
    """Parse unified diff text into per-file change records.

    Files and hunks keep the order they have in the input. ``+++``/``---``
    marker lines are kept in hunk content when they appear inside a hunk but
    never count toward additions/deletions.
    """
    files: list[DiffFile] = []
    current_file: _FileBuilder | None = None
    current_hunk: _HunkBuilder | None = None

    def close_hunk() -> None:
        nonlocal current_hunk
        if current_hunk is not None and current_file is not None:
            current_file.hunks.append(current_hunk.build())
        current_hunk = None

    for line in diff_text.split("\n"):
        if line.startswith("diff --git"):
            close_hunk()
            if current_file is not None:
                files.append(current_file.build())
            match = _DIFF_HEADER_RE.match(line)
            current_file = _FileBuilder(path=match.group(2) if match else "")
        elif line.startswith("new file"):
            if current_file is not None:
                current_file.status = "added"
        elif line.startswith("deleted file"):
            if current_file is not None:
                current_file.status = "deleted"
        elif line.startswith("rename from"):
            if current_file is not None:
                current_file.status = "renamed"
        elif line.startswith("@@"):
            close_hunk()
            current_hunk = _parse_hunk_header(line)
        elif current_hunk is not None and line[:1] in ("+", "-", " "):
            current_hunk.lines.append(line)
            if current_file is not None:
                if line.startswith("+") and not line.startswith("+++"):
                    current_file.additions += 1
                elif line.startswith("-") and not line.startswith("---"):
                    current_file.deletions += 1

    close_hunk()
    if current_file is not None:
        files.append(current_file.build())

    return files


def parse_status(status_text: str) -> list[str]:
    """Return the non-blank lines of `git status --porcelain` output."""
    return [line for line in status_text.split("\n") if line.strip()]


def changed_paths(status_text: str) -> list[str]:
    """Extract the path part of each porcelain status line."""
    return [line[_STATUS_PATH_OFFSET:].strip() for line in parse_status(status_text)]
