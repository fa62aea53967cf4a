"""architask plan command."""

from __future__ import annotations

import json

import click

from architask.cli.common import load_project_config, resolve_project, run_scan
from architask.core.config import ArchitaskConfig
from architask.core.models import Task
from architask.core.output import console, print_task
from architask.planner.generator import TaskGenerationConfig, TaskGenerator
from architask.planner.policy import ApprovalPolicy

POLICY_CHOICES = ["conservative", "moderate", "permissive", "ci", "strict"]


def build_plan(config: ArchitaskConfig, findings) -> list[Task]:
    generator = TaskGenerator(config=TaskGenerationConfig.from_config(config))
    return generator.generate_tasks(findings)


def load_policy(name: str) -> ApprovalPolicy:
    try:
        return ApprovalPolicy.named(name)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--policy") from exc


@click.command()
@click.argument("target", default=".")
@click.option("--analyzers", type=str, default=None, help="Analyzers to run (comma-separated)")
@click.option("--policy", "policy_name", type=click.Choice(POLICY_CHOICES), default=None,
              help="Approval policy to evaluate tasks against")
@click.option("--min-confidence", type=float, default=None, help="Drop tasks below this confidence")
@click.option("--json", "as_json", is_flag=True, help="Print tasks as JSON")
def plan(target: str, analyzers: str | None, policy_name: str | None, min_confidence: float | None, as_json: bool):
    """Propose refactoring tasks for the findings in TARGET."""
    root, path = resolve_project(target)
    config = load_project_config(root, analyzers)
    if min_confidence is not None:
        config.planner.minimum_confidence = min_confidence
    policy = load_policy(policy_name or config.planner.policy)

    report = run_scan(config, path, quiet=as_json)
    tasks = build_plan(config, report.findings)

    if as_json:
        entries = []
        for task in tasks:
            decision, reason = policy.match(task)
            entries.append({"task": task.to_dict(), "decision": decision.value, "reason": reason})
        click.echo(json.dumps({"policy": policy.name, "tasks": entries}, indent=2))
        return

    if not tasks:
        console.print(f"\n  No tasks proposed for {len(report.findings)} finding(s).\n")
        return

    console.print(f"\n  [bold]{len(tasks)} task(s)[/bold] from {len(report.findings)} finding(s), "
                  f"policy: {policy.name}\n")
    for task in tasks:
        decision, reason = policy.match(task)
        print_task(task, decision, reason)
    console.print("\n  Apply with: [bold]architask fix[/bold]\n")
