"""architask fix command."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.prompt import Confirm

from architask.cli.common import load_project_config, resolve_project, run_scan
from architask.cli.plan_cmd import POLICY_CHOICES, build_plan, load_policy
from architask.core.config import ensure_gitignore
from architask.core.output import console, print_diff, print_task
from architask.core.sandbox import SandboxViolation
from architask.executor.applier import TransformApplier
from architask.executor.executor import DeterministicExecutor
from architask.planner.policy import PolicyDecision
from architask.transforms.base import TransformError


@click.command()
@click.argument("target", default=".")
@click.option("--analyzers", type=str, default=None, help="Analyzers to run (comma-separated)")
@click.option("--policy", "policy_name", type=click.Choice(POLICY_CHOICES), default=None,
              help="Approval policy deciding which tasks run without asking")
@click.option("--preview", is_flag=True, help="Show diffs without writing files")
@click.option("--yes", "-y", is_flag=True, help="Approve tasks that would need a human")
def fix(target: str, analyzers: str | None, policy_name: str | None, preview: bool, yes: bool):
    """Apply planned tasks that have a deterministic transform.

    Tasks the policy denies are skipped; tasks that need a human are
    confirmed interactively unless --yes is given. Every written file is
    backed up under .architask/backups/ and can be restored with
    `architask undo`.
    """
    root, path = resolve_project(target)
    config = load_project_config(root, analyzers)
    policy = load_policy(policy_name or config.planner.policy)

    report = run_scan(config, path)
    tasks = build_plan(config, report.findings)

    executor = DeterministicExecutor()
    runnable = [t for t in tasks if executor.registry.transform_for(t.intent) is not None]
    if not runnable:
        console.print(f"\n  No automatically fixable tasks ({len(tasks)} proposed).\n")
        return

    if not preview:
        ensure_gitignore(root)
        executor.applier = TransformApplier(root, backup=config.fix.backup_before_fix)

    applied = failed = skipped = 0
    for task in runnable:
        print_task(task)
        decision = policy.apply(task)
        if decision == PolicyDecision.DENY:
            console.print(f"  [dim]Denied by {policy.name} policy.[/dim]\n")
            skipped += 1
            continue
        if decision == PolicyDecision.REQUIRE_HUMAN:
            if yes or Confirm.ask("  Apply this task?", default=False):
                task.approve()
            else:
                task.defer("Skipped at prompt")
                console.print("  [dim]Skipped.[/dim]\n")
                skipped += 1
                continue

        try:
            result = executor.execute_task(
                task,
                root,
                max_lines_changed=config.fix.max_lines_changed,
                apply_changes=not preview,
            )
        except (TransformError, SandboxViolation, OSError) as exc:
            console.print(f"  [red]❌ {escape(str(exc))}[/red]\n")
            failed += 1
            continue

        print_diff(result.diff)
        for warning in result.warnings:
            console.print(f"  [yellow]{escape(warning)}[/yellow]")
        console.print()
        applied += 1

    verb = "previewed" if preview else "applied"
    console.print(f"  [green]{applied} task(s) {verb}[/green], {failed} failed, {skipped} skipped.")
    if applied and not preview:
        console.print("  [dim]Run `architask undo --last` to revert.[/dim]")
    console.print()
