"""Helpers shared by the subcommands."""

from __future__ import annotations

from pathlib import Path

import click

from architask.analysis.scanner import ProjectScanner, ScanReport
from architask.core.config import ArchitaskConfig, load_config
from architask.core.output import get_progress


def resolve_project(target: str) -> tuple[Path, Path]:
    """Return (project root, scan path). A file target is scanned alone."""
    path = Path(target).resolve()
    if not path.exists():
        raise click.BadParameter(f"No such file or directory: {target}", param_hint="TARGET")
    root = path if path.is_dir() else path.parent
    return root, path


def load_project_config(root: Path, analyzers: str | None = None) -> ArchitaskConfig:
    config = load_config(root)
    if analyzers:
        config.scan.analyzers = [a.strip() for a in analyzers.split(",") if a.strip()]
    return config


def run_scan(config: ArchitaskConfig, path: Path, quiet: bool = False) -> ScanReport:
    try:
        scanner = ProjectScanner.from_config(config)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    if quiet:
        return scanner.scan(path)
    with get_progress() as progress:
        progress.add_task(f"Scanning {path.name}...", total=None)
        return scanner.scan(path)
