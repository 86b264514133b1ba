"""Issue detectors — strategies that turn (spec, changed files) into issues.

``LocalDetector`` is deterministic and works offline. ``AssistedDetector``
asks a language model; its failures surface as ``DetectorError`` so the
verifier can still return the deterministic part of the report.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from pydantic import ValidationError

from specguard.agent.base import AgentBackend, AgentTask
from specguard.agent.prompt import PromptComposer
from specguard.models.audit import DiffFile
from specguard.models.spec import Spec, VerificationIssue, VerificationPriority

logger = logging.getLogger(__name__)

_MIN_KEYWORD_LEN = 4
_VERIFIER_ROLE = "spec_verifier"


class DetectorError(RuntimeError):
    """Issue detection failed; carries the detector's name."""

    def __init__(self, detector: str, message: str) -> None:
        super().__init__(f"{detector} detector failed: {message}")
        self.detector = detector


class IssueDetector(Protocol):
    """Protocol for issue detection strategies."""

    @property
    def name(self) -> str: ...

    async def detect(self, spec: Spec, files: list[DiffFile]) -> list[VerificationIssue]: ...


# ---------------------------------------------------------------------------
# Local (keyword heuristic)
# ---------------------------------------------------------------------------


def _criterion_keywords(criterion: str) -> list[str]:
    return [w for w in criterion.lower().split(" ") if len(w) >= _MIN_KEYWORD_LEN]


def _is_addressed(criterion: str, paths: list[str]) -> bool:
    if not paths:
        return True
    return any(kw in path for kw in _criterion_keywords(criterion) for path in paths)


class LocalDetector:
    """Flags acceptance criteria that no changed path seems to touch.

    A criterion counts as addressed when any of its words longer than three
    characters appears in a changed file path. Specs without in-scope items
    produce no issues.
    """

    @property
    def name(self) -> str:
        return "local"

    async def detect(self, spec: Spec, files: list[DiffFile]) -> list[VerificationIssue]:
        return self.detect_sync(spec, files)

    def detect_sync(self, spec: Spec, files: list[DiffFile]) -> list[VerificationIssue]:
        if not spec.in_scope:
            return []

        paths = [f.path.lower() for f in files]
        return [
            VerificationIssue(
                spec_id=spec.id,
                priority=VerificationPriority.MAJOR,
                category="missing_feature",
                description=f"Acceptance criterion may not be addressed: {criterion}",
                suggestion="Verify this criterion is addressed in the changes",
            )
            for criterion in spec.acceptance_criteria
            if not _is_addressed(criterion, paths)
        ]


# ---------------------------------------------------------------------------
# Model-assisted
# ---------------------------------------------------------------------------


def _format_files(files: list[DiffFile], limit: int) -> str:
    lines = [f"- {f.path} ({f.status}): +{f.additions} -{f.deletions}" for f in files[:limit]]
    if len(files) > limit:
        lines.append(f"- ... and {len(files) - limit} more files")
    return "\n".join(lines) if lines else "_No changed files._"


def build_verifier_payload(spec: Spec, files: list[DiffFile], max_files: int = 200) -> str:
    """Build the task payload describing the plan and the change set."""
    criteria = "\n".join(f"- {c}" for c in spec.acceptance_criteria) or "_None specified._"
    return f"""# Plan

**Title:** {spec.title}
**Goal:** {spec.goal}
**In Scope:** {', '.join(spec.in_scope)}
**Out of Scope:** {', '.join(spec.out_of_scope)}

**Acceptance Criteria:**
{criteria}

# Changed Files

{_format_files(files, max_files)}
"""


def parse_issues(text: str, spec_id: str) -> list[VerificationIssue]:
    """Extract the JSON array of issues from a model reply.

    Returns ``[]`` when the reply holds no parseable array. Entries that do
    not validate (unknown priority, missing description) are dropped.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end < start:
        logger.warning("Verifier reply contained no JSON array")
        return []

    try:
        raw: Any = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.warning("Verifier reply was not valid JSON: %s", e)
        return []
    if not isinstance(raw, list):
        return []

    issues: list[VerificationIssue] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            issues.append(VerificationIssue(
                spec_id=spec_id,
                priority=item.get("priority"),
                category=item.get("category") or "incomplete",
                description=item.get("description"),
                file=item.get("file") or None,
                line=item.get("line"),
                suggestion=item.get("suggestion") or None,
            ))
        except ValidationError as e:
            logger.warning("Dropping malformed verifier issue %r: %s", item, e.errors()[0]["msg"])
    return issues


class AssistedDetector:
    """Asks a language model to judge the change set against the plan."""

    def __init__(
        self,
        backend: AgentBackend,
        model: str,
        composer: PromptComposer | None = None,
        max_tokens: int = 4096,
        max_prompt_files: int = 200,
    ) -> None:
        self._backend = backend
        self._model = model
        self._composer = composer or PromptComposer()
        self._max_tokens = max_tokens
        self._max_prompt_files = max_prompt_files

    @property
    def name(self) -> str:
        return "assisted"

    async def detect(self, spec: Spec, files: list[DiffFile]) -> list[VerificationIssue]:
        try:
            task = AgentTask(
                role=_VERIFIER_ROLE,
                system_prompt=self._composer.compose_system_prompt(_VERIFIER_ROLE),
                user_prompt=self._composer.compose_user_prompt(
                    build_verifier_payload(spec, files, self._max_prompt_files)
                ),
                model=self._model,
                max_tokens=self._max_tokens,
            )
            result = await self._backend.execute(task)
        except Exception as e:
            raise DetectorError(self.name, str(e)) from e

        issues = parse_issues(result.output, spec.id)
        logger.info("Assisted verification of spec %s found %d issues", spec.id, len(issues))
        return issues
