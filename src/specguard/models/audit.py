"""Audit records — parsed diff structure, scope violations and risk findings.

All records are frozen: they are built once per audit call and handed to the
caller, never mutated or persisted.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from specguard.models.spec import Spec, VerificationIssue

FileStatus = Literal["added", "modified", "deleted", "renamed"]
ViolationType = Literal["out_of_scope", "file_boundary", "unrelated"]
Severity = Literal["critical", "major", "minor"]


@dataclass(frozen=True)
class DiffHunk:
    """One ``@@`` block of a unified diff."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    content: str  # body lines with their +/-/space markers, newline-joined


@dataclass(frozen=True)
class DiffFile:
    """All changes to a single path in a unified diff."""

    path: str
    status: FileStatus = "modified"
    additions: int = 0
    deletions: int = 0
    hunks: tuple[DiffHunk, ...] = ()


@dataclass(frozen=True)
class ScopeViolation:
    type: ViolationType
    file: str
    description: str
    severity: Severity


@dataclass(frozen=True)
class RiskyPattern:
    pattern: str  # regex source of the catalog rule that matched
    file: str
    description: str
    severity: Severity


@dataclass(frozen=True)
class RiskScore:
    """Weighted risk of a change set.

    ``critical``/``major``/``minor`` count scope violations only; pattern
    findings add to ``total`` but never to the counters.
    """

    total: int = 0
    critical: int = 0
    major: int = 0
    minor: int = 0
    scope_violations: tuple[ScopeViolation, ...] = ()
    risky_patterns: tuple[RiskyPattern, ...] = ()


@dataclass(frozen=True)
class AuditResult:
    files: list[DiffFile]
    risk: RiskScore

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [asdict(f) for f in self.files],
            "risk": asdict(self.risk),
        }


@dataclass(frozen=True)
class VerificationReport:
    """Deterministic audit output plus the issues from the chosen detector.

    ``detector_error`` is set when issue detection failed; ``files`` and
    ``risk`` are still complete in that case.
    """

    files: list[DiffFile]
    risk: RiskScore
    issues: list[VerificationIssue] = field(default_factory=list)
    spec: Spec | None = None
    detector_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "files": [asdict(f) for f in self.files],
            "risk": asdict(self.risk),
            "issues": [i.model_dump(mode="json") for i in self.issues],
        }
        if self.spec is not None:
            data["spec"] = self.spec.model_dump(mode="json")
        if self.detector_error is not None:
            data["detector_error"] = self.detector_error
        return data
