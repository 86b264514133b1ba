"""CLI entry point — plan management and change verification.

Usage:
    specguard plan create --title "Add login" --in-scope auth --boundaries src/auth
    specguard plan activate <id>
    specguard plan verify [<id>] [--ai] [--json]
    specguard audit [--json]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from specguard.config.bootstrap import load_bootstrap_config
from specguard.db.engine import create_engine, create_session_factory, init_db
from specguard.git.working_tree import GitWorkingTree
from specguard.models.audit import AuditResult, RiskScore, VerificationReport
from specguard.models.config import BootstrapConfig
from specguard.models.spec import (
    Phase,
    PhaseStatus,
    Spec,
    SpecCreate,
    SpecStatus,
    SpecUpdate,
)
from specguard.storage.spec_store import SqlSpecStore
from specguard.verification.factory import build_verifier
from specguard.verification.orchestrator import Verifier

logger = logging.getLogger(__name__)

_RULE = "-" * 60


def _split(value: str | None) -> list[str]:
    """Split a comma-separated CLI value into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_spec(spec: Spec) -> str:
    lines = [spec.title, "", f"Goal: {spec.goal}", f"Status: {spec.status.value.upper()}"]
    if spec.in_scope:
        lines += ["", "In Scope:"] + [f"  + {s}" for s in spec.in_scope]
    if spec.out_of_scope:
        lines += ["", "Out of Scope:"] + [f"  - {s}" for s in spec.out_of_scope]
    if spec.file_boundaries:
        lines += ["", "File Boundaries:"] + [f"  {b}" for b in spec.file_boundaries]
    if spec.acceptance_criteria:
        lines += ["", "Acceptance Criteria:"] + [
            f"  {i}. {c}" for i, c in enumerate(spec.acceptance_criteria, start=1)
        ]
    if spec.phases:
        lines += ["", "Phases:"] + [f"  * [{p.id}] {p.title} ({p.status.value})" for p in spec.phases]
    lines += ["", f"ID: {spec.id}", f"Created: {spec.created_at:%Y-%m-%d %H:%M}",
              f"Updated: {spec.updated_at:%Y-%m-%d %H:%M}"]
    return "\n".join(lines)


def _render_risk(risk: RiskScore) -> list[str]:
    lines = [
        f"Risk score: {risk.total}  "
        f"(critical: {risk.critical}  major: {risk.major}  minor: {risk.minor})",
    ]
    if risk.scope_violations:
        lines += ["", "Scope Violations:"] + [
            f"  * {v.file}: {v.description}" for v in risk.scope_violations
        ]
    if risk.risky_patterns:
        lines += ["", "Risky Patterns:"] + [
            f"  [{r.severity.upper()}] {r.file}: {r.description}" for r in risk.risky_patterns
        ]
    return lines


def render_audit(result: AuditResult) -> str:
    lines = [f"Changed files: {len(result.files)}"]
    lines += [f"  {f.path} ({f.status}) +{f.additions} -{f.deletions}" for f in result.files]
    lines += [""] + _render_risk(result.risk) + [_RULE]
    return "\n".join(lines)


def render_report(report: VerificationReport) -> str:
    lines = ["Verification Results", "", f"Changed files: {len(report.files)}"]
    lines += _render_risk(report.risk)

    if report.detector_error:
        lines += ["", f"Issue detection unavailable: {report.detector_error}"]

    if report.issues:
        lines += ["", "Issues Found:"]
        for priority in ("critical", "major", "minor", "outdated"):
            for issue in (i for i in report.issues if i.priority.value == priority):
                lines.append(f"  [{priority.upper()}] {issue.description}")
                if issue.file:
                    lines.append(f"     File: {issue.file}")
                if issue.suggestion:
                    lines.append(f"     Fix: {issue.suggestion}")

    lines.append(_RULE)
    return "\n".join(lines)


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, default=str))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _cmd_list(store: SqlSpecStore, args: argparse.Namespace) -> int:
    specs = await store.list()
    if not specs:
        print("No plans found. Create one with: specguard plan create --title ...")
        return 0
    for spec in specs:
        goal = spec.goal if len(spec.goal) <= 50 else spec.goal[:50] + "..."
        print(f"{spec.id}  {spec.status.value.upper():<10} {spec.title}")
        print(f"          Goal: {goal} | {len(spec.in_scope)} in-scope | "
              f"{len(spec.acceptance_criteria)} criteria")
    return 0


async def _cmd_create(store: SqlSpecStore, args: argparse.Namespace) -> int:
    data = SpecCreate(
        title=args.title,
        goal=args.goal or "",
        description=args.description or "",
        in_scope=_split(args.in_scope),
        out_of_scope=_split(args.out_of_scope),
        acceptance_criteria=_split(args.criteria),
        file_boundaries=_split(args.boundaries),
    )
    spec = await store.create(data)
    print(f"Created plan: {spec.title}")
    print(f"ID: {spec.id}")
    print(f"Activate with: specguard plan activate {spec.id}")
    return 0


async def _cmd_show(store: SqlSpecStore, args: argparse.Namespace) -> int:
    spec = await store.get(args.id)
    if spec is None:
        print(f"Plan not found: {args.id}", file=sys.stderr)
        return 1
    print(render_spec(spec))
    return 0


async def _cmd_delete(store: SqlSpecStore, args: argparse.Namespace) -> int:
    if not await store.delete(args.id):
        print(f"Plan not found: {args.id}", file=sys.stderr)
        return 1
    print(f"Deleted plan: {args.id}")
    return 0


async def _set_status(store: SqlSpecStore, spec_id: str, status: SpecStatus) -> int:
    spec = await store.update(spec_id, SpecUpdate(status=status))
    if spec is None:
        print(f"Plan not found: {spec_id}", file=sys.stderr)
        return 1
    print(f"Plan {spec.title} is now {status.value}")
    return 0


async def _cmd_activate(store: SqlSpecStore, args: argparse.Namespace) -> int:
    code = await _set_status(store, args.id, SpecStatus.ACTIVE)
    if code == 0:
        print("Use 'specguard plan verify' to check your changes against this plan.")
    return code


async def _cmd_complete(store: SqlSpecStore, args: argparse.Namespace) -> int:
    return await _set_status(store, args.id, SpecStatus.COMPLETED)


async def _cmd_phase_add(store: SqlSpecStore, args: argparse.Namespace) -> int:
    phase = Phase(
        title=args.title,
        description=args.description or "",
        tasks=_split(args.tasks),
    )
    if await store.add_phase(args.id, phase) is None:
        print(f"Plan not found: {args.id}", file=sys.stderr)
        return 1
    print(f"Added phase {phase.id} to plan {args.id}")
    return 0


async def _cmd_phase_status(store: SqlSpecStore, args: argparse.Namespace) -> int:
    if not await store.update_phase_status(args.id, args.phase_id, PhaseStatus(args.status)):
        print(f"Plan or phase not found: {args.id}/{args.phase_id}", file=sys.stderr)
        return 1
    print(f"Phase {args.phase_id} is now {args.status}")
    return 0


async def _cmd_verify(verifier: Verifier, args: argparse.Namespace) -> int:
    if args.id:
        report = await verifier.verify(args.id, use_ai=args.ai)
        if report is None:
            print(f"Plan not found: {args.id}", file=sys.stderr)
            return 1
    else:
        report = await verifier.verify_active(use_ai=args.ai)
        if report is None:
            print("No active plan. Create one with: specguard plan create", file=sys.stderr)
            return 1

    if args.json:
        _print_json(report.to_dict())
    else:
        print(f"Verifying against: {report.spec.title}")
        print(render_report(report))
    return 0


async def _cmd_status(store: SqlSpecStore, working_tree: GitWorkingTree) -> int:
    spec = await store.get_active()
    if spec is None:
        print("No active plan")
        return 0
    print(f"Active plan: {spec.title}")
    print(f"ID: {spec.id}")
    print(f"Goal: {spec.goal}")
    if await working_tree.has_uncommitted_changes():
        print("You have uncommitted changes. Run 'specguard plan verify' to check them.")
    else:
        print("No uncommitted changes")
    return 0


async def _cmd_audit(verifier: Verifier, args: argparse.Namespace) -> int:
    result = await verifier.audit_working_tree()
    if result is None:
        if args.json:
            _print_json({"files": [], "risk": None})
        else:
            print("No uncommitted changes to audit")
        return 0
    if args.json:
        _print_json(result.to_dict())
    else:
        print(render_audit(result))
    return 0


_STORE_COMMANDS = {
    "list": _cmd_list,
    "create": _cmd_create,
    "show": _cmd_show,
    "delete": _cmd_delete,
    "activate": _cmd_activate,
    "complete": _cmd_complete,
}

_PHASE_COMMANDS = {
    "add": _cmd_phase_add,
    "status": _cmd_phase_status,
}


async def run(args: argparse.Namespace, cfg: BootstrapConfig) -> int:
    """Dispatch a parsed command line against a fresh store and verifier."""
    logger.debug("Running %s %s", args.command, getattr(args, "plan_command", "") or "")
    engine = create_engine(cfg.database_url)
    try:
        await init_db(engine)
        store = SqlSpecStore(create_session_factory(engine))

        if args.command == "audit":
            return await _cmd_audit(build_verifier(cfg, store), args)

        if args.plan_command == "verify":
            return await _cmd_verify(build_verifier(cfg, store), args)
        if args.plan_command == "status":
            return await _cmd_status(
                store, GitWorkingTree(cfg.repo_dir, timeout=cfg.git_timeout)
            )
        if args.plan_command == "phase":
            return await _PHASE_COMMANDS[args.phase_command](store, args)
        return await _STORE_COMMANDS[args.plan_command](store, args)
    finally:
        await engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="specguard",
        description="Plan units of work and verify working-tree changes against them",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    audit = commands.add_parser("audit", help="Audit uncommitted changes for risky patterns")
    audit.add_argument("--json", action="store_true", help="Print the result as JSON")

    plan = commands.add_parser("plan", help="Spec-driven development: create and verify plans")
    plan_commands = plan.add_subparsers(dest="plan_command", required=True)

    plan_commands.add_parser("list", aliases=["ls"], help="List all plans")

    create = plan_commands.add_parser("create", aliases=["new"], help="Create a new plan")
    create.add_argument("--title", required=True)
    create.add_argument("--goal", help="What the plan should achieve")
    create.add_argument("--description")
    create.add_argument("--in-scope", help="Comma-separated in-scope items")
    create.add_argument("--out-of-scope", help="Comma-separated out-of-scope items")
    create.add_argument("--criteria", help="Comma-separated acceptance criteria")
    create.add_argument("--boundaries", help="Comma-separated file boundaries (path substrings)")

    for name, help_text in (
        ("show", "Show plan details"),
        ("delete", "Delete a plan"),
        ("activate", "Activate a plan for verification"),
        ("complete", "Mark a plan as completed"),
    ):
        sub = plan_commands.add_parser(name, help=help_text)
        sub.add_argument("id", help="Plan ID")

    verify = plan_commands.add_parser("verify", help="Verify current changes against a plan")
    verify.add_argument("id", nargs="?", help="Plan ID (defaults to the active plan)")
    verify.add_argument("--ai", action="store_true", help="Use a model for deeper verification")
    verify.add_argument("--json", action="store_true", help="Print the report as JSON")

    plan_commands.add_parser("status", help="Show the active plan and uncommitted changes")

    phase = plan_commands.add_parser("phase", help="Manage phases in a plan")
    phase_commands = phase.add_subparsers(dest="phase_command", required=True)
    phase_add = phase_commands.add_parser("add", help="Add a phase to a plan")
    phase_add.add_argument("id", help="Plan ID")
    phase_add.add_argument("--title", required=True)
    phase_add.add_argument("--description")
    phase_add.add_argument("--tasks", help="Comma-separated tasks")
    phase_status = phase_commands.add_parser("status", help="Set a phase's status")
    phase_status.add_argument("id", help="Plan ID")
    phase_status.add_argument("phase_id", help="Phase ID")
    phase_status.add_argument("status", choices=[s.value for s in PhaseStatus])

    return parser


_ALIASES = {"ls": "list", "new": "create"}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "plan_command", None) in _ALIASES:
        args.plan_command = _ALIASES[args.plan_command]

    try:
        cfg = load_bootstrap_config()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        return asyncio.run(run(args, cfg))
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
