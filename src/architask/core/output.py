"""Rich terminal formatting for architask output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from architask.core.models import Finding, Severity, Task

if TYPE_CHECKING:
    from architask.analysis.scanner import ScanReport
    from architask.executor.applier import ApplyResult
    from architask.planner.policy import PolicyDecision

console = Console()
error_console = Console(stderr=True)


SEVERITY_ICONS = {
    Severity.CRITICAL: "[bold red]●[/bold red]",
    Severity.ERROR: "[red]●[/red]",
    Severity.WARNING: "[yellow]●[/yellow]",
    Severity.INFO: "[blue]●[/blue]",
}

SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


def confidence_color(confidence: float) -> str:
    if confidence >= 0.8:
        return "green"
    elif confidence >= 0.6:
        return "yellow"
    return "red"


def confidence_bar(confidence: float, width: int = 12) -> str:
    """Text bar for a 0.0 - 1.0 confidence."""
    filled = round(confidence * width)
    color = confidence_color(confidence)
    return f"[{color}]{'█' * filled}{'░' * (width - filled)}[/{color}]"


def format_finding(finding: Finding) -> str:
    icon = SEVERITY_ICONS.get(finding.severity, "●")
    loc = finding.location
    return (
        f"  {icon} {finding.type.value}  {escape(finding.message)}\n"
        f"     [dim]{escape(loc.file)}:{loc.line}[/dim]"
    )


def print_scan_report(report: ScanReport) -> None:
    """Print findings grouped by severity, worst first."""
    worst = max((f.severity for f in report.findings), default=Severity.INFO)
    border = "green" if not report.findings else SEVERITY_COLORS[worst]

    lines = [""]
    for finding in sorted(report.findings, key=lambda f: -int(f.severity)):
        lines.append(format_finding(finding))
        lines.append("")

    if not report.findings:
        lines.append("  [green]No issues found.[/green]")
        lines.append("")

    counts = {s: 0 for s in Severity}
    for finding in report.findings:
        counts[finding.severity] += 1
    lines.append(
        "  "
        + " | ".join(f"{counts[s]} {s.name.lower()}" for s in sorted(Severity, reverse=True))
    )

    if report.errors:
        lines.append("")
        lines.append("  [red]Files that could not be parsed:[/red]")
        for path, message in sorted(report.errors.items()):
            lines.append(f"    {escape(path)}: {escape(message)}")

    lines.append("")
    lines.append(f"  {report.total_lines:,} lines | {report.files_scanned} files")

    title = "architask scan"
    if report.project_name:
        title += f"  {report.project_name}"

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold]{escape(title)}[/bold]",
        border_style=border,
        padding=(0, 1),
    ))


def print_task(task: Task, decision: PolicyDecision | None = None, reason: str | None = None) -> None:
    """Print one proposed task with its confidence, steps and policy verdict."""
    conf = task.confidence
    lines = [f"  Confidence: {confidence_bar(conf)} {conf:.2f}"]
    lines.append(f"  Intent: {task.intent.key} ({task.intent.category.value})")
    lines.append(f"  Scope: {escape(', '.join(task.scope.allowed_paths))}")
    if decision is not None:
        verdict = f"  Policy: {decision.value}"
        if reason:
            verdict += f" [dim]({escape(reason)})[/dim]"
        lines.append(verdict)
    lines.append("")
    for number, step in enumerate(task.steps, 1):
        lines.append(f"  {number}. {escape(step.description)} [dim]{step.expected_diff_type.value}[/dim]")

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold]{escape(task.title)}[/bold]",
        border_style=confidence_color(conf),
        padding=(0, 1),
    ))


def print_diff(diff: str) -> None:
    for diff_line in diff.splitlines():
        text = escape(diff_line)
        if diff_line.startswith(("---", "+++")):
            console.print(f"  [bold]{text}[/bold]")
        elif diff_line.startswith("-"):
            console.print(f"  [red]{text}[/red]")
        elif diff_line.startswith("+"):
            console.print(f"  [green]{text}[/green]")
        elif diff_line.startswith("@@"):
            console.print(f"  [cyan]{text}[/cyan]")
        else:
            console.print(f"  {text}")


def print_apply_result(result: ApplyResult) -> None:
    label = result.change_id or result.file or ""
    if result.success:
        console.print(f"  [green]✅ {escape(label)}[/green]  {escape(result.message)}")
    else:
        console.print(f"  [red]❌ {escape(label)}[/red]  {escape(result.message)}")


def get_progress() -> Progress:
    """Spinner shown while scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )
