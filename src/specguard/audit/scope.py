"""Deterministic scope classifier — checks changed files against a spec's boundaries.

Pure Python, no LLM calls. Matching is plain substring containment on the
file path, never glob or regex.
"""

from __future__ import annotations

from specguard.models.audit import DiffFile, ScopeViolation
from specguard.models.spec import Spec


def _in_boundary(path: str, boundaries: list[str]) -> bool:
    # An empty boundary list disables boundary checking.
    return not boundaries or any(b in path for b in boundaries)


def _is_out_of_scope(path: str, out_of_scope: list[str]) -> bool:
    return any(item in path for item in out_of_scope)


def _is_related(path: str, in_scope: list[str]) -> bool:
    lowered = path.lower()
    return any(item.lower() in lowered for item in in_scope)


def classify_file(file: DiffFile, spec: Spec) -> list[ScopeViolation]:
    """Return the violations for a single changed file, in emission order."""
    violations: list[ScopeViolation] = []
    in_boundary = _in_boundary(file.path, spec.file_boundaries)
    out_of_scope = _is_out_of_scope(file.path, spec.out_of_scope)

    if spec.file_boundaries and not in_boundary and not out_of_scope:
        violations.append(ScopeViolation(
            type="file_boundary",
            file=file.path,
            description=(
                "File is outside specified file boundaries: "
                f"{', '.join(spec.file_boundaries)}"
            ),
            severity="major",
        ))

    if out_of_scope:
        violations.append(ScopeViolation(
            type="out_of_scope",
            file=file.path,
            description="File is explicitly marked as out of scope",
            severity="critical",
        ))

    if (
        spec.in_scope
        and not in_boundary
        and not out_of_scope
        and not _is_related(file.path, spec.in_scope)
    ):
        violations.append(ScopeViolation(
            type="unrelated",
            file=file.path,
            description="File does not appear related to the planned work",
            severity="minor",
        ))

    return violations


def classify_scope(files: list[DiffFile], spec: Spec) -> list[ScopeViolation]:
    """Classify every changed file against ``spec``.

    A file can collect several violations (``file_boundary`` and
    ``unrelated`` fire independently); they are not de-duplicated.
    """
    violations: list[ScopeViolation] = []
    for file in files:
        violations.extend(classify_file(file, spec))
    return violations
