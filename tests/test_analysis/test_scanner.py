"""Tests for the project scanner and analyzer pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from architask.analysis.base import AnalyzerPipeline
from architask.analysis.bindings import BindingAnalyzer
from architask.analysis.complexity import ComplexityAnalyzer
from architask.analysis.dead_code import DeadCodeAnalyzer
from architask.analysis.scanner import ProjectScanner, build_analyzers
from architask.analysis.security import SecurityAnalyzer
from architask.core.config import ArchitaskConfig
from architask.core.models import FindingType
from architask.syntax import SyntaxParseError

VIEW = """\
struct FeedView: View {
    var viewModel: FeedViewModel
    var body: some View { Text("feed") }
}
"""

UNSAFE = """\
func load() -> String {
    return cache!
}
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    sources = tmp_path / "Sources" / "App"
    sources.mkdir(parents=True)
    (sources / "FeedView.swift").write_text(VIEW)
    (sources / "Loader.swift").write_text(UNSAFE)
    build = tmp_path / ".build" / "checkouts"
    build.mkdir(parents=True)
    (build / "Vendored.swift").write_text(VIEW)
    (tmp_path / "README.md").write_text("# not swift\n")
    return tmp_path


class TestAnalyzerPipeline:
    def test_runs_in_order_and_concatenates(self):
        pipeline = AnalyzerPipeline([SecurityAnalyzer(), BindingAnalyzer()])
        findings = pipeline.analyze("A.swift", VIEW + UNSAFE)
        assert [f.type for f in findings] == [FindingType.SECURITY_ISSUE, FindingType.MISSING_STATE_OBJECT]

    def test_supported_types_are_deduplicated(self):
        pipeline = AnalyzerPipeline([ComplexityAnalyzer(), ComplexityAnalyzer(), DeadCodeAnalyzer()])
        assert pipeline.supported_finding_types == [FindingType.HIGH_COMPLEXITY, FindingType.DEAD_CODE]


class TestProjectScanner:
    def test_collects_sorted_files_and_skips_excludes(self, project: Path):
        files = ProjectScanner().collect_files(project)
        assert [f.name for f in files] == ["FeedView.swift", "Loader.swift"]

    def test_scan_labels_findings_relative_to_root(self, project: Path):
        scanner = ProjectScanner([BindingAnalyzer(), SecurityAnalyzer()])
        report = scanner.scan(project)

        assert report.files_scanned == 2
        assert report.total_lines == 7
        assert report.project_name == project.name
        assert [(f.location.file, f.type) for f in report.findings] == [
            ("Sources/App/FeedView.swift", FindingType.MISSING_STATE_OBJECT),
            ("Sources/App/Loader.swift", FindingType.SECURITY_ISSUE),
        ]

    def test_parallel_scan_keeps_order(self, project: Path):
        serial = ProjectScanner([BindingAnalyzer(), SecurityAnalyzer()]).scan(project)
        parallel = ProjectScanner([BindingAnalyzer(), SecurityAnalyzer()], workers=4).scan(project)
        assert [f.message for f in parallel.findings] == [f.message for f in serial.findings]

    def test_parse_errors_are_recorded(self, project: Path):
        (project / "Sources" / "App" / "Broken.swift").write_text("struct Broken {\n")
        report = ProjectScanner().scan(project)

        assert "Sources/App/Broken.swift" in report.errors
        assert report.files_scanned == 3
        assert all(f.location.file != "Sources/App/Broken.swift" for f in report.findings)

    def test_undecodable_file_is_recorded(self, project: Path):
        (project / "Sources" / "App" / "Legacy.swift").write_bytes(b"// caf\xe9\nlet a = 1\n")
        report = ProjectScanner([BindingAnalyzer(), SecurityAnalyzer()]).scan(project)

        assert report.errors["Sources/App/Legacy.swift"].startswith("Not valid UTF-8")
        assert report.files_scanned == 3
        assert report.total_lines == 7
        assert len(report.findings) == 2

    def test_scan_file_raises_on_parse_error(self, tmp_path: Path):
        broken = tmp_path / "Broken.swift"
        broken.write_text("func f( {\n")
        with pytest.raises(SyntaxParseError):
            ProjectScanner().scan_file(broken)

    def test_scan_single_file(self, project: Path):
        target = project / "Sources" / "App" / "FeedView.swift"
        report = ProjectScanner().scan(target)
        assert report.files_scanned == 1
        assert [f.location.file for f in report.findings] == ["FeedView.swift"]

    def test_custom_excludes(self, project: Path):
        scanner = ProjectScanner(exclude=["App/"])
        assert scanner.collect_files(project) == sorted((project / ".build").rglob("*.swift"))


class TestBuildAnalyzers:
    def test_follows_configured_order(self):
        config = ArchitaskConfig()
        config.scan.analyzers = ["dead_code", "security", "naming", "style"]
        names = [a.name for a in build_analyzers(config)]
        assert names == ["dead_code", "security", "naming", "style"]

    def test_presets_and_overrides(self):
        config = ArchitaskConfig()
        config.scan.analyzers = ["complexity"]
        config.complexity.preset = "strict"
        config.complexity.max_function_lines = 80
        (analyzer,) = build_analyzers(config)
        assert analyzer.thresholds.max_function_lines == 80
        assert analyzer.thresholds.max_nesting_depth == 3

    def test_unknown_analyzer(self):
        config = ArchitaskConfig()
        config.scan.analyzers = ["telepathy"]
        with pytest.raises(ValueError, match="Unknown analyzer"):
            build_analyzers(config)

    def test_from_config(self):
        config = ArchitaskConfig()
        config.scan.workers = 3
        scanner = ProjectScanner.from_config(config)
        assert scanner.workers == 3
        assert ".architask/" in scanner.exclude
