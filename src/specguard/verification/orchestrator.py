"""Verifier — composes diff parsing, scope checks, risk scanning and issue detection.

Flow per call:
  1. Read the working-tree diff (empty on any git failure)
  2. parse_diff(diff) -> files
  3. classify_scope(files, spec) + scan_risky_patterns(files)
  4. score_risk(violations, findings)
  5. Run the chosen detector; a failure is recorded on the report instead of raised

The verifier keeps no state between calls.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from specguard.audit.diff_parser import parse_diff
from specguard.audit.risk_patterns import scan_risky_patterns
from specguard.audit.scope import classify_scope
from specguard.audit.scoring import score_risk
from specguard.models.audit import AuditResult, DiffFile, ScopeViolation, VerificationReport
from specguard.models.spec import Spec, SpecStatus, VerificationIssue
from specguard.verification.detectors import DetectorError, IssueDetector

logger = logging.getLogger(__name__)


class DiffSource(Protocol):
    """Anything that can hand over the current unified diff text."""

    async def get_diff(self) -> str: ...


class SpecLookup(Protocol):
    async def get(self, spec_id: str) -> Spec | None: ...

    async def list(self, status: SpecStatus | None = None) -> list[Spec]: ...


class Verifier:
    """Audits working-tree changes, optionally against a stored spec."""

    def __init__(
        self,
        store: SpecLookup,
        working_tree: DiffSource,
        local_detector: IssueDetector,
        assisted_detector: IssueDetector | None = None,
        detector_timeout: float = 120.0,
        scan_workers: int | None = None,
    ) -> None:
        self._store = store
        self._working_tree = working_tree
        self._local_detector = local_detector
        self._assisted_detector = assisted_detector
        self._detector_timeout = detector_timeout
        self._scan_workers = scan_workers

    async def _audit(self, files: list[DiffFile], violations: list[ScopeViolation]) -> AuditResult:
        findings = await asyncio.to_thread(scan_risky_patterns, files, self._scan_workers)
        return AuditResult(files=files, risk=score_risk(violations, findings))

    async def audit_working_tree(self) -> AuditResult | None:
        """Audit uncommitted changes with no spec; ``None`` when there is no diff."""
        diff = await self._working_tree.get_diff()
        if not diff.strip():
            return None
        return await self._audit(parse_diff(diff), [])

    async def audit_against_spec(self, spec: Spec) -> AuditResult:
        """Audit uncommitted changes against ``spec``; empty result when there is no diff."""
        diff = await self._working_tree.get_diff()
        files = parse_diff(diff) if diff.strip() else []
        return await self._audit(files, classify_scope(files, spec))

    async def verify(self, spec_id: str, use_ai: bool = False) -> VerificationReport | None:
        """Look up ``spec_id`` and verify current changes against it.

        Returns ``None`` if no such spec exists.
        """
        spec = await self._store.get(spec_id)
        if spec is None:
            logger.info("Spec %s not found", spec_id)
            return None
        report = await self.verify_current_changes(spec, use_ai)
        return VerificationReport(
            files=report.files,
            risk=report.risk,
            issues=report.issues,
            spec=spec,
            detector_error=report.detector_error,
        )

    async def verify_active(self, use_ai: bool = False) -> VerificationReport | None:
        """Verify against the most recently updated active spec, if any."""
        active = await self._store.list(SpecStatus.ACTIVE)
        if not active:
            return None
        return await self.verify(active[0].id, use_ai)

    async def verify_current_changes(self, spec: Spec, use_ai: bool = False) -> VerificationReport:
        """Verify current changes against an already-loaded spec."""
        audit = await self.audit_against_spec(spec)
        issues: list[VerificationIssue] = []
        detector_error: str | None = None
        try:
            issues = await self._detect(spec, audit.files, use_ai)
        except DetectorError as e:
            logger.warning("Issue detection failed for spec %s: %s", spec.id, e)
            detector_error = str(e)

        return VerificationReport(
            files=audit.files,
            risk=audit.risk,
            issues=issues,
            detector_error=detector_error,
        )

    async def _detect(
        self, spec: Spec, files: list[DiffFile], use_ai: bool
    ) -> list[VerificationIssue]:
        detector = self._local_detector
        if use_ai:
            if self._assisted_detector is None:
                raise DetectorError("assisted", "no model backend is configured")
            detector = self._assisted_detector

        try:
            return await asyncio.wait_for(
                detector.detect(spec, files), timeout=self._detector_timeout
            )
        except asyncio.TimeoutError as e:
            raise DetectorError(
                detector.name, f"timed out after {self._detector_timeout}s"
            ) from e
