"""architask scan command."""

from __future__ import annotations

import json
import sys

import click

from architask.analysis.scanner import ScanReport
from architask.cli.common import load_project_config, resolve_project, run_scan
from architask.core.models import Severity
from architask.core.output import console, print_scan_report

SEVERITY_CHOICES = [s.name.lower() for s in Severity]


@click.command()
@click.argument("target", default=".")
@click.option("--analyzers", type=str, default=None, help="Analyzers to run (comma-separated)")
@click.option("--json", "as_json", is_flag=True, help="Print findings as JSON")
@click.option(
    "--fail-on",
    type=click.Choice(SEVERITY_CHOICES),
    default=None,
    help="Exit with status 1 if a finding reaches this severity (for CI)",
)
def scan(target: str, analyzers: str | None, as_json: bool, fail_on: str | None):
    """Scan Swift sources and report findings.

    TARGET can be a project directory or a single .swift file.
    """
    root, path = resolve_project(target)
    config = load_project_config(root, analyzers)
    report = run_scan(config, path, quiet=as_json)

    if as_json:
        click.echo(json.dumps(report_to_dict(report), indent=2))
    else:
        print_scan_report(report)

    if fail_on:
        threshold = Severity.parse(fail_on)
        failing = [f for f in report.findings if f.severity >= threshold]
        if failing:
            if not as_json:
                console.print(f"\n  [red]{len(failing)} finding(s) at or above {fail_on}.[/red]")
            sys.exit(1)


def report_to_dict(report: ScanReport) -> dict:
    return {
        "project_name": report.project_name,
        "files_scanned": report.files_scanned,
        "total_lines": report.total_lines,
        "errors": dict(report.errors),
        "findings": [f.to_dict() for f in report.findings],
    }
