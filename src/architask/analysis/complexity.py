"""Complexity analyzer: long functions, long parameter lists, deep nesting,
large files and high cyclomatic complexity."""

from __future__ import annotations

from dataclasses import dataclass

from architask.analysis.base import Analyzer
from architask.core.models import Finding, FindingType, Severity
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.parser import parse

NESTING_NODES = (n.IfStmt, n.ForStmt, n.WhileStmt, n.SwitchStmt, n.GuardStmt)
BRANCH_NODES = (n.ForStmt, n.WhileStmt, n.RepeatStmt, n.SwitchCase, n.GuardStmt, n.CatchClause, n.TernaryExpr)


@dataclass
class ComplexityThresholds:
    max_function_lines: int = 50
    max_function_parameters: int = 5
    max_nesting_depth: int = 4
    max_file_lines: int = 500
    max_cyclomatic_complexity: int = 10

    @classmethod
    def default(cls) -> ComplexityThresholds:
        return cls()

    @classmethod
    def strict(cls) -> ComplexityThresholds:
        return cls(
            max_function_lines=30,
            max_function_parameters=3,
            max_nesting_depth=3,
            max_file_lines=300,
            max_cyclomatic_complexity=7,
        )


def cyclomatic_complexity(body: n.Node) -> int:
    """Decision points in ``body`` plus one."""
    complexity = 1
    for node in n.walk(body):
        if isinstance(node, n.IfStmt):
            complexity += 2 if node.else_body is not None else 1
        elif isinstance(node, BRANCH_NODES):
            complexity += 1
        elif isinstance(node, n.BinaryExpr) and node.operator in ("&&", "||"):
            complexity += 1
    return complexity


class ComplexityAnalyzer(Analyzer):
    """Flags functions and files that exceed the configured thresholds."""

    name = "complexity"
    supported_finding_types = (FindingType.HIGH_COMPLEXITY,)
    finding_type = FindingType.HIGH_COMPLEXITY
    severity = Severity.WARNING

    def __init__(self, thresholds: ComplexityThresholds | None = None):
        self.thresholds = thresholds or ComplexityThresholds.default()

    def analyze(self, path: str, content: str) -> list[Finding]:
        findings: list[Finding] = []
        t = self.thresholds
        lines = LineIndex(content)

        line_count = lines.line_count()
        if line_count > t.max_file_lines:
            findings.append(self._make_finding(
                message=f"File has {line_count} lines (threshold: {t.max_file_lines})",
                path=path,
                line=1,
                severity=Severity.INFO,
                context={
                    "metric": "fileLines",
                    "value": str(line_count),
                    "threshold": str(t.max_file_lines),
                },
            ))

        tree = parse(content)
        self._visit(tree, 0, path, lines, findings)
        return findings

    def _visit(
        self,
        node: n.Node,
        depth: int,
        path: str,
        lines: LineIndex,
        findings: list[Finding],
        function: str | None = None,
    ) -> None:
        if isinstance(node, n.FunctionDecl):
            self._check_function(node, path, lines, findings)
            function = node.name

        if isinstance(node, NESTING_NODES):
            if depth >= self.thresholds.max_nesting_depth:
                context = {
                    "metric": "nestingDepth",
                    "value": str(depth + 1),
                    "threshold": str(self.thresholds.max_nesting_depth),
                }
                if function:
                    context["function"] = function
                findings.append(self._make_finding(
                    message=f"Nesting depth {depth + 1} exceeds threshold {self.thresholds.max_nesting_depth}",
                    path=path,
                    line=lines.line_for(node.offset),
                    context=context,
                ))
            depth += 1

        for child in n.iter_child_nodes(node):
            self._visit(child, depth, path, lines, findings, function)

    def _check_function(
        self, node: n.FunctionDecl, path: str, lines: LineIndex, findings: list[Finding]
    ) -> None:
        t = self.thresholds
        name = node.name
        start_line = lines.line_for(node.offset)

        param_count = len(node.parameters)
        if param_count > t.max_function_parameters:
            findings.append(self._make_finding(
                message=f"Function '{name}' has {param_count} parameters (threshold: {t.max_function_parameters})",
                path=path,
                line=start_line,
                context={
                    "metric": "parameterCount",
                    "function": name,
                    "value": str(param_count),
                    "threshold": str(t.max_function_parameters),
                },
            ))

        if node.body is None:
            return

        end_line = lines.line_for(node.body.end - 1)
        function_lines = end_line - start_line + 1
        if function_lines > t.max_function_lines:
            findings.append(self._make_finding(
                message=f"Function '{name}' has {function_lines} lines (threshold: {t.max_function_lines})",
                path=path,
                line=start_line,
                context={
                    "metric": "functionLines",
                    "function": name,
                    "value": str(function_lines),
                    "threshold": str(t.max_function_lines),
                },
            ))

        complexity = cyclomatic_complexity(node.body)
        if complexity > t.max_cyclomatic_complexity:
            findings.append(self._make_finding(
                message=(
                    f"Function '{name}' has cyclomatic complexity {complexity} "
                    f"(threshold: {t.max_cyclomatic_complexity})"
                ),
                path=path,
                line=start_line,
                context={
                    "metric": "cyclomaticComplexity",
                    "function": name,
                    "value": str(complexity),
                    "threshold": str(t.max_cyclomatic_complexity),
                },
            ))
