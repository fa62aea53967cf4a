"""Tests for the complexity analyzer."""

from __future__ import annotations

import textwrap

from architask.analysis.complexity import (
    ComplexityAnalyzer,
    ComplexityThresholds,
    cyclomatic_complexity,
)
from architask.core.models import FindingType, Severity
from architask.syntax import parse


def _long_function(body_lines: int, params: int = 0) -> str:
    signature = ", ".join(f"p{i}: Int" for i in range(params))
    body = "\n".join("    total += 1" for _ in range(body_lines))
    return f"func process({signature}) {{\n{body}\n}}\n"


def _nested(depth: int) -> str:
    lines = ["func f() {"]
    for level in range(depth):
        lines.append("    " * (level + 1) + f"if c{level} {{")
    lines.append("    " * (depth + 1) + "work()")
    for level in reversed(range(depth)):
        lines.append("    " * (level + 1) + "}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _by_metric(findings, metric):
    return [f for f in findings if f.context.get("metric") == metric]


class TestFunctionMetrics:
    def test_long_function_with_many_parameters(self):
        source = _long_function(58, params=6)
        findings = ComplexityAnalyzer().analyze("A.swift", source)

        assert [f.context["metric"] for f in findings] == ["parameterCount", "functionLines"]
        params, lines = findings
        assert params.context == {
            "metric": "parameterCount",
            "function": "process",
            "value": "6",
            "threshold": "5",
        }
        assert lines.context["value"] == "60"
        assert lines.location.line == 1
        assert all(f.type == FindingType.HIGH_COMPLEXITY for f in findings)
        assert all(f.severity == Severity.WARNING for f in findings)

    def test_within_thresholds(self):
        assert ComplexityAnalyzer().analyze("A.swift", _long_function(10, params=2)) == []

    def test_cyclomatic_complexity_finding(self):
        source = textwrap.dedent("""\
            func decide(a: Bool, b: Bool) {
                if a && b { x() } else { y() }
                for i in items { z(i) }
                guard a else { return }
            }
        """)
        thresholds = ComplexityThresholds(max_cyclomatic_complexity=4)
        findings = ComplexityAnalyzer(thresholds).analyze("A.swift", source)
        found = _by_metric(findings, "cyclomaticComplexity")
        assert len(found) == 1
        assert found[0].context["value"] == "6"


class TestCyclomaticComplexity:
    def _body(self, source: str):
        return parse(textwrap.dedent(source)).statements[0].body

    def test_straight_line_code(self):
        assert cyclomatic_complexity(self._body("func f() { a(); b() }")) == 1

    def test_if_else_counts_twice(self):
        assert cyclomatic_complexity(self._body("func f() { if a { } }")) == 2
        assert cyclomatic_complexity(self._body("func f() { if a { } else { } }")) == 3

    def test_switch_cases_and_ternary(self):
        body = self._body("""\
            func f() {
                switch v {
                case 1: a()
                case 2: b()
                default: c()
                }
                let x = flag ? 1 : 2
            }
        """)
        assert cyclomatic_complexity(body) == 5

    def test_boolean_operators_and_catch(self):
        body = self._body("""\
            func f() {
                do { try g() } catch { }
                let ok = a || b && c
            }
        """)
        assert cyclomatic_complexity(body) == 4


class TestNesting:
    def test_five_deep_reports_past_threshold(self):
        analyzer = ComplexityAnalyzer(ComplexityThresholds(max_nesting_depth=3))
        findings = _by_metric(analyzer.analyze("A.swift", _nested(5)), "nestingDepth")

        assert [f.context["value"] for f in findings] == ["4", "5"]
        assert findings[0].location.line == 5
        assert findings[0].context["threshold"] == "3"

    def test_three_deep_is_fine(self):
        analyzer = ComplexityAnalyzer(ComplexityThresholds(max_nesting_depth=3))
        assert _by_metric(analyzer.analyze("A.swift", _nested(3)), "nestingDepth") == []

    def test_else_if_counts_as_nesting(self):
        source = textwrap.dedent("""\
            func f() {
                if a {
                } else if b {
                }
            }
        """)
        analyzer = ComplexityAnalyzer(ComplexityThresholds(max_nesting_depth=1))
        findings = _by_metric(analyzer.analyze("A.swift", source), "nestingDepth")
        assert len(findings) == 1
        assert findings[0].context["value"] == "2"

    def test_names_enclosing_function(self):
        source = textwrap.dedent("""\
            struct Feed {
                func reload() {
                    if a {
                        if b { work() }
                    }
                }
            }
            if c {
                if d { work() }
            }
        """)
        analyzer = ComplexityAnalyzer(ComplexityThresholds(max_nesting_depth=1))
        inside, top_level = _by_metric(analyzer.analyze("A.swift", source), "nestingDepth")
        assert inside.context["function"] == "reload"
        assert inside.location.line == 4
        assert "function" not in top_level.context


class TestFileLines:
    def test_large_file_is_info(self):
        source = "".join(f"let v{i} = {i}\n" for i in range(10))
        analyzer = ComplexityAnalyzer(ComplexityThresholds(max_file_lines=5))
        findings = _by_metric(analyzer.analyze("A.swift", source), "fileLines")

        assert len(findings) == 1
        assert findings[0].severity == Severity.INFO
        assert findings[0].location.line == 1


class TestPresets:
    def test_strict_is_tighter(self):
        strict = ComplexityThresholds.strict()
        default = ComplexityThresholds.default()
        assert strict.max_function_lines < default.max_function_lines
        assert strict.max_nesting_depth == 3

    def test_analysis_is_idempotent(self):
        analyzer = ComplexityAnalyzer()
        source = _long_function(58, params=6)
        first = [(f.message, f.location) for f in analyzer.analyze("A.swift", source)]
        second = [(f.message, f.location) for f in analyzer.analyze("A.swift", source)]
        assert first == second
