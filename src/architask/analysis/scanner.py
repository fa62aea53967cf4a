"""Project scanner: runs the analyzer pipeline over every source file."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from architask.analysis.base import Analyzer, AnalyzerPipeline
from architask.analysis.bindings import BindingAnalyzer
from architask.analysis.complexity import ComplexityAnalyzer, ComplexityThresholds
from architask.analysis.dead_code import DeadCodeAnalyzer
from architask.analysis.naming import NamingAnalyzer, NamingConfig
from architask.analysis.security import DEFAULT_SECRET_PATTERNS, SecurityAnalyzer, SecurityConfig
from architask.analysis.style import StyleAnalyzer, StyleConfig
from architask.core.config import ArchitaskConfig
from architask.core.models import Finding
from architask.syntax.errors import SyntaxParseError

logger = logging.getLogger("architask.scanner")

SOURCE_SUFFIX = ".swift"
DEFAULT_EXCLUDES = [".build/", "DerivedData/", "Pods/", ".git/"]


@dataclass
class ScanReport:
    """Findings for a whole project, in sorted file order."""

    findings: list[Finding] = field(default_factory=list)
    files_scanned: int = 0
    total_lines: int = 0
    errors: dict[str, str] = field(default_factory=dict)
    project_name: str = ""


def build_analyzers(config: ArchitaskConfig) -> list[Analyzer]:
    """Instantiate the analyzers named in ``config.scan.analyzers``, in that order."""
    analyzers: list[Analyzer] = []
    for name in config.scan.analyzers:
        if name == "bindings":
            analyzers.append(BindingAnalyzer())
        elif name == "complexity":
            analyzers.append(ComplexityAnalyzer(_complexity_thresholds(config)))
        elif name == "naming":
            analyzers.append(NamingAnalyzer(_naming_config(config)))
        elif name == "security":
            s = config.security
            analyzers.append(SecurityAnalyzer(SecurityConfig(
                detect_force_unwrap=s.detect_force_unwrap,
                detect_force_try=s.detect_force_try,
                detect_implicit_unwrap=s.detect_implicit_unwrap,
                detect_hardcoded_secrets=s.detect_hardcoded_secrets,
                detect_unsafe_apis=s.detect_unsafe_apis,
                secret_patterns=list(s.secret_patterns or DEFAULT_SECRET_PATTERNS),
            )))
        elif name == "dead_code":
            analyzers.append(DeadCodeAnalyzer())
        elif name == "style":
            analyzers.append(StyleAnalyzer(_style_config(config)))
        else:
            raise ValueError(f"Unknown analyzer: {name!r}")
    return analyzers


def _complexity_thresholds(config: ArchitaskConfig) -> ComplexityThresholds:
    c = config.complexity
    thresholds = ComplexityThresholds.strict() if c.preset == "strict" else ComplexityThresholds.default()
    for attr in (
        "max_function_lines",
        "max_function_parameters",
        "max_nesting_depth",
        "max_file_lines",
        "max_cyclomatic_complexity",
    ):
        value = getattr(c, attr)
        if value is not None:
            setattr(thresholds, attr, value)
    return thresholds


def _naming_config(config: ArchitaskConfig) -> NamingConfig:
    s = config.naming
    naming = NamingConfig.strict() if s.preset == "strict" else NamingConfig.default()
    if s.enforce_protocol_naming is not None:
        naming.enforce_protocol_naming = s.enforce_protocol_naming
    if s.min_name_length is not None:
        naming.min_name_length = s.min_name_length
    if s.max_name_length is not None:
        naming.max_name_length = s.max_name_length
    return naming


def _style_config(config: ArchitaskConfig) -> StyleConfig:
    s = config.style
    if s.preset == "strict":
        style = StyleConfig.strict()
    elif s.preset == "lenient":
        style = StyleConfig.lenient()
    else:
        style = StyleConfig.default()
    if s.max_line_length is not None:
        style.max_line_length = s.max_line_length
    return style


class ProjectScanner:
    """Walks a project directory and analyzes each source file.

    Files are visited in sorted order and findings are merged in that
    order, so output is reproducible even when ``workers`` > 1. A file that
    fails to parse contributes no findings; its error is kept on the
    report instead.
    """

    def __init__(
        self,
        analyzers: list[Analyzer] | None = None,
        exclude: list[str] | None = None,
        workers: int = 1,
    ):
        if analyzers is None:
            analyzers = [BindingAnalyzer(), ComplexityAnalyzer()]
        self.pipeline = AnalyzerPipeline(analyzers)
        self.exclude = list(DEFAULT_EXCLUDES if exclude is None else exclude)
        self.workers = max(1, workers)

    @classmethod
    def from_config(cls, config: ArchitaskConfig) -> ProjectScanner:
        return cls(
            analyzers=build_analyzers(config),
            exclude=config.exclude,
            workers=config.scan.workers,
        )

    def scan(self, project_path: Path) -> ScanReport:
        root = project_path.resolve()
        files = self.collect_files(root)
        logger.debug("scanning %d files under %s", len(files), root)

        base = root.parent if root.is_file() else root
        report = ScanReport(files_scanned=len(files), project_name=base.name)
        if self.workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(lambda f: self._scan_one(base, f), files))
        else:
            outcomes = [self._scan_one(base, f) for f in files]

        for rel, line_count, findings, error in outcomes:
            report.total_lines += line_count
            if error is not None:
                report.errors[rel] = error
                continue
            report.findings.extend(findings)
        return report

    def scan_file(self, path: Path, relative_to: Path | None = None) -> list[Finding]:
        """Analyze one file. Parse errors propagate."""
        label = _relative_label(path, relative_to) if relative_to else str(path)
        content = path.read_text(encoding="utf-8")
        return self.pipeline.analyze(label, content)

    def collect_files(self, path: Path) -> list[Path]:
        if path.is_file():
            return [path] if path.suffix == SOURCE_SUFFIX else []

        files: list[Path] = []
        for source_file in path.rglob(f"*{SOURCE_SUFFIX}"):
            rel = source_file.relative_to(path)
            if self._is_excluded(rel):
                continue
            files.append(source_file)
        return sorted(files)

    def _is_excluded(self, rel: Path) -> bool:
        text = rel.as_posix()
        for pattern in self.exclude:
            stripped = pattern.rstrip("/")
            if not stripped:
                continue
            if "/" in stripped:
                if stripped in text:
                    return True
            elif stripped in rel.parts[:-1]:
                return True
        return False

    def _scan_one(self, root: Path, path: Path) -> tuple[str, int, list[Finding], str | None]:
        rel = _relative_label(path, root)
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            logger.debug("skipping %s: %s", rel, exc)
            return rel, 0, [], f"Not valid UTF-8: {exc.reason} at byte {exc.start}"
        line_count = len(content.splitlines())
        try:
            findings = self.pipeline.analyze(rel, content)
        except SyntaxParseError as exc:
            logger.debug("skipping %s: %s", rel, exc)
            return rel, line_count, [], str(exc)
        return rel, line_count, findings, None


def _relative_label(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return str(path)
