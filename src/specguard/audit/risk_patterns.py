"""Risk pattern scanner — flags hunks whose content looks security- or ops-sensitive.

The catalog is data: adding a heuristic means adding a rule, not a branch.
Each hunk's full content is tested against every rule, so a rule fires at
most once per hunk no matter how often its pattern appears inside it.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from specguard.models.audit import DiffFile, RiskyPattern, Severity


@dataclass(frozen=True)
class RiskPatternRule:
    regex: re.Pattern[str]
    description: str
    severity: Severity


RISK_PATTERNS: tuple[RiskPatternRule, ...] = (
    RiskPatternRule(
        re.compile(r"process\.env\.[A-Z_]+|os\.environ|os\.getenv\("),
        "Environment variable access",
        "major",
    ),
    RiskPatternRule(
        re.compile(r"password|secret|api_key|token", re.IGNORECASE),
        "Potential secret exposure",
        "critical",
    ),
    RiskPatternRule(
        re.compile(r"eval\(|exec\("),
        "Dynamic code execution",
        "critical",
    ),
    RiskPatternRule(
        re.compile(r"SQL|INSERT|UPDATE|DELETE.*FROM", re.IGNORECASE),
        "Raw SQL query",
        "major",
    ),
    RiskPatternRule(
        re.compile(r"migrate|migration"),
        "Database migration",
        "major",
    ),
    RiskPatternRule(
        re.compile(r"\.env$|\.env\."),
        ".env file modification",
        "critical",
    ),
    RiskPatternRule(
        re.compile(r"auth|login|password|permission", re.IGNORECASE),
        "Authentication/authorization change",
        "major",
    ),
    RiskPatternRule(
        re.compile(r"ssh|key|cert|credential", re.IGNORECASE),
        "Security-related file",
        "critical",
    ),
)


def scan_file(
    file: DiffFile,
    rules: tuple[RiskPatternRule, ...] = RISK_PATTERNS,
) -> list[RiskyPattern]:
    """Scan one file's hunks; findings come out in (hunk, rule) order."""
    findings: list[RiskyPattern] = []
    for hunk in file.hunks:
        for rule in rules:
            if rule.regex.search(hunk.content):
                findings.append(RiskyPattern(
                    pattern=rule.regex.pattern,
                    file=file.path,
                    description=rule.description,
                    severity=rule.severity,
                ))
    return findings


def scan_risky_patterns(
    files: list[DiffFile],
    max_workers: int | None = None,
    rules: tuple[RiskPatternRule, ...] = RISK_PATTERNS,
) -> list[RiskyPattern]:
    """Scan every hunk of every file against the rule catalog.

    Files are independent, so they are fanned out over a thread pool unless
    ``max_workers`` is 1 or there is a single file. ``Executor.map`` keeps
    input order, so the result is always sorted by (file, hunk, rule).
    """
    if max_workers == 1 or len(files) <= 1:
        per_file = [scan_file(f, rules) for f in files]
    else:
        with ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="risk-scan"
        ) as executor:
            per_file = list(executor.map(lambda f: scan_file(f, rules), files))

    return [finding for findings in per_file for finding in findings]
