"""Risk scorer — folds scope violations and pattern findings into one score."""

from __future__ import annotations

from collections import Counter

from specguard.models.audit import RiskScore, RiskyPattern, ScopeViolation

SEVERITY_WEIGHTS: dict[str, int] = {
    "critical": 10,
    "major": 5,
    "minor": 1,
    "outdated": 0,
}


def score_risk(
    violations: list[ScopeViolation],
    risky_patterns: list[RiskyPattern],
) -> RiskScore:
    """Compute the weighted risk of a change set.

    ``total`` weighs violations and pattern findings alike, but the
    per-severity counters only count violations; pattern findings never
    increment them.
    """
    total = sum(SEVERITY_WEIGHTS.get(v.severity, 0) for v in violations)
    total += sum(SEVERITY_WEIGHTS.get(r.severity, 0) for r in risky_patterns)

    counts = Counter(v.severity for v in violations)

    return RiskScore(
        total=total,
        critical=counts["critical"],
        major=counts["major"],
        minor=counts["minor"],
        scope_violations=tuple(violations),
        risky_patterns=tuple(risky_patterns),
    )
