"""Configuration management for architask (architask.toml parsing + defaults)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


CONFIG_FILE_NAME = "architask.toml"


@dataclass
class ScanConfig:
    analyzers: list[str] = field(default_factory=lambda: ["bindings", "complexity"])
    workers: int = 1


@dataclass
class ComplexityConfig:
    preset: str = "default"
    max_function_lines: int | None = None
    max_function_parameters: int | None = None
    max_nesting_depth: int | None = None
    max_file_lines: int | None = None
    max_cyclomatic_complexity: int | None = None


@dataclass
class NamingSettings:
    preset: str = "default"
    enforce_protocol_naming: bool | None = None
    min_name_length: int | None = None
    max_name_length: int | None = None


@dataclass
class SecuritySettings:
    detect_force_unwrap: bool = True
    detect_force_try: bool = True
    detect_implicit_unwrap: bool = True
    detect_hardcoded_secrets: bool = True
    detect_unsafe_apis: bool = True
    secret_patterns: list[str] | None = None


@dataclass
class StyleSettings:
    preset: str = "default"
    max_line_length: int | None = None


@dataclass
class PlannerConfig:
    minimum_confidence: float = 0.6
    max_tasks_per_run: int = 10
    enabled_categories: list[str] | None = None
    require_approval_for: list[str] | None = None
    policy: str = "moderate"


@dataclass
class FixConfig:
    backup_before_fix: bool = True
    max_lines_changed: int = 50


@dataclass
class ArchitaskConfig:
    """Complete architask configuration."""

    exclude: list[str] = field(
        default_factory=lambda: [
            ".build/",
            "DerivedData/",
            "Pods/",
            ".git/",
            ".architask/",
        ]
    )
    scan: ScanConfig = field(default_factory=ScanConfig)
    complexity: ComplexityConfig = field(default_factory=ComplexityConfig)
    naming: NamingSettings = field(default_factory=NamingSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    style: StyleSettings = field(default_factory=StyleSettings)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    fix: FixConfig = field(default_factory=FixConfig)


def _overlay(target: object, data: dict) -> None:
    for attr, value in data.items():
        if hasattr(target, attr):
            setattr(target, attr, value)


def load_config(project_path: Path | None = None) -> ArchitaskConfig:
    """Load configuration from architask.toml if present, otherwise return defaults."""
    config = ArchitaskConfig()

    if project_path is None:
        project_path = Path.cwd()

    config_file = project_path / CONFIG_FILE_NAME
    if not config_file.exists():
        return config

    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    if "general" in data:
        gen = data["general"]
        if "exclude" in gen:
            config.exclude = gen["exclude"]

    if "scan" in data:
        _overlay(config.scan, data["scan"])

    analyzers = data.get("analyzers", {})
    if "complexity" in analyzers:
        _overlay(config.complexity, analyzers["complexity"])
    if "naming" in analyzers:
        _overlay(config.naming, analyzers["naming"])
    if "security" in analyzers:
        _overlay(config.security, analyzers["security"])
    if "style" in analyzers:
        _overlay(config.style, analyzers["style"])

    if "planner" in data:
        _overlay(config.planner, data["planner"])

    if "fix" in data:
        _overlay(config.fix, data["fix"])

    return config


def get_architask_dir(project_path: Path | None = None) -> Path:
    """Get or create the .architask directory."""
    if project_path is None:
        project_path = Path.cwd()
    state_dir = project_path / ".architask"
    state_dir.mkdir(exist_ok=True)
    return state_dir


def ensure_gitignore(project_path: Path | None = None) -> None:
    """Add .architask/ to .gitignore if not already present."""
    if project_path is None:
        project_path = Path.cwd()
    gitignore = project_path / ".gitignore"
    entry = ".architask/"

    if gitignore.exists():
        content = gitignore.read_text()
        if entry in content:
            return
        if not content.endswith("\n"):
            content += "\n"
        content += f"{entry}\n"
        gitignore.write_text(content)
    else:
        gitignore.write_text(f"{entry}\n")
