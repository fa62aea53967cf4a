"""Style analyzer: line length, whitespace, import order and file layout.

Style findings reuse the ``namingViolation`` type; ``context["issue"]``
tells them apart.
"""

from __future__ import annotations

from dataclasses import dataclass

from architask.analysis.base import Analyzer
from architask.core.models import Finding, FindingType, Severity
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.parser import parse

# Top-level declaration kinds in the order a file should present them.
DECLARATION_ORDER = {
    "import": 0,
    "typealias": 1,
    "type": 2,
    "extension": 3,
    "function": 4,
    "variable": 5,
    "other": 6,
}


@dataclass
class StyleConfig:
    max_line_length: int = 120
    detect_trailing_whitespace: bool = True
    detect_multiple_blank_lines: bool = True
    detect_import_order: bool = True
    detect_file_structure: bool = True
    detect_trailing_newline: bool = True

    @classmethod
    def default(cls) -> StyleConfig:
        return cls()

    @classmethod
    def strict(cls) -> StyleConfig:
        return cls(max_line_length=100)

    @classmethod
    def lenient(cls) -> StyleConfig:
        return cls(
            max_line_length=150,
            detect_trailing_whitespace=False,
            detect_multiple_blank_lines=False,
            detect_import_order=False,
            detect_file_structure=False,
            detect_trailing_newline=False,
        )


def declaration_kind(node: n.Node) -> str:
    if isinstance(node, n.ImportDecl):
        return "import"
    if isinstance(node, n.TypeAliasDecl):
        return "typealias"
    if isinstance(node, n.TypeDecl):
        return "type"
    if isinstance(node, n.ExtensionDecl):
        return "extension"
    if isinstance(node, n.FunctionDecl):
        return "function"
    if isinstance(node, n.VariableDecl):
        return "variable"
    return "other"


class StyleAnalyzer(Analyzer):
    name = "style"
    supported_finding_types = (FindingType.NAMING_VIOLATION,)
    finding_type = FindingType.NAMING_VIOLATION
    severity = Severity.INFO

    def __init__(self, config: StyleConfig | None = None):
        self.config = config or StyleConfig.default()

    def analyze(self, path: str, content: str) -> list[Finding]:
        cfg = self.config
        lines = content.split("\n")
        findings: list[Finding] = []

        findings.extend(self._check_line_length(lines, path))
        if cfg.detect_trailing_whitespace:
            findings.extend(self._check_trailing_whitespace(lines, path))
        if cfg.detect_multiple_blank_lines:
            findings.extend(self._check_blank_lines(lines, path))
        if cfg.detect_trailing_newline and content and not content.endswith("\n"):
            findings.append(self._make_finding(
                message="File should end with a newline",
                path=path,
                line=len(lines),
                context={"issue": "missingTrailingNewline"},
            ))

        if cfg.detect_import_order or cfg.detect_file_structure:
            tree = parse(content)
            index = LineIndex(content)
            if cfg.detect_import_order:
                findings.extend(self._check_imports(tree, index, path))
            if cfg.detect_file_structure:
                findings.extend(self._check_file_structure(tree, index, path))

        return findings

    def _check_line_length(self, lines: list[str], path: str) -> list[Finding]:
        limit = self.config.max_line_length
        findings = []
        for number, line in enumerate(lines, start=1):
            if len(line) > limit:
                findings.append(self._make_finding(
                    message=f"Line exceeds {limit} characters ({len(line)} chars)",
                    path=path,
                    line=number,
                    context={"issue": "lineLength", "length": str(len(line)), "maxLength": str(limit)},
                ))
        return findings

    def _check_trailing_whitespace(self, lines: list[str], path: str) -> list[Finding]:
        return [
            self._make_finding(
                message="Line has trailing whitespace",
                path=path,
                line=number,
                context={"issue": "trailingWhitespace"},
            )
            for number, line in enumerate(lines, start=1)
            if line.endswith((" ", "\t"))
        ]

    def _check_blank_lines(self, lines: list[str], path: str) -> list[Finding]:
        findings = []
        blank_run = 0
        for number, line in enumerate(lines, start=1):
            if line.strip(" \t"):
                blank_run = 0
                continue
            blank_run += 1
            if blank_run > 1:
                findings.append(self._make_finding(
                    message=f"Multiple consecutive blank lines ({blank_run})",
                    path=path,
                    line=number,
                    context={"issue": "multipleBlankLines", "count": str(blank_run)},
                ))
        return findings

    def _check_imports(self, tree: n.SourceFile, index: LineIndex, path: str) -> list[Finding]:
        findings = []
        imports = [
            (stmt.path, index.line_for(stmt.offset))
            for stmt in tree.statements
            if isinstance(stmt, n.ImportDecl)
        ]
        if not imports:
            return findings

        expected = sorted((name for name, _ in imports), key=str.lower)
        for (name, line), wanted in zip(imports, expected):
            if name != wanted:
                findings.append(self._make_finding(
                    message=f"Import '{name}' is not in alphabetical order (expected '{wanted}')",
                    path=path,
                    line=line,
                    context={"issue": "importOrder", "import": name, "expected": wanted},
                ))
                break

        last_line = imports[-1][1]
        # index.lines is 0-based, so this is the line after the last import
        if last_line < len(index.lines) and index.lines[last_line].strip(" \t"):
            findings.append(self._make_finding(
                message="Missing blank line after imports",
                path=path,
                line=last_line,
                context={"issue": "missingBlankLineAfterImports"},
            ))
        return findings

    def _check_file_structure(self, tree: n.SourceFile, index: LineIndex, path: str) -> list[Finding]:
        findings = []
        previous = "import"
        for stmt in tree.statements:
            current = declaration_kind(stmt)
            if DECLARATION_ORDER[current] < DECLARATION_ORDER[previous]:
                findings.append(self._make_finding(
                    message=f"{current.capitalize()} should come before {previous}",
                    path=path,
                    line=index.line_for(stmt.offset),
                    context={"issue": "fileStructure", "found": current, "after": previous},
                ))
            previous = current
        return findings
