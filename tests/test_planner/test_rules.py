"""Tests for the task generation rule table."""

from __future__ import annotations

from architask.core.intents import ExtractFunction, FixWarning, ReduceNesting, RemoveDeadCode, SplitFile
from architask.core.models import (
    DiffType,
    FileScope,
    Finding,
    FindingType,
    ModuleScope,
    Severity,
    SourceLocation,
)
from architask.planner.rules import (
    DEFAULT_RULES,
    dead_code_rule,
    deep_nesting_rule,
    large_file_rule,
    long_function_rule,
    module_scope,
    too_many_parameters_rule,
)


def _finding(finding_type=FindingType.HIGH_COMPLEXITY, file="Sources/App/A.swift", line=4, **context):
    return Finding(
        type=finding_type,
        location=SourceLocation(file, line),
        severity=Severity.WARNING,
        message="m",
        context=context,
    )


class TestMetricRules:
    def test_rule_matches_its_metric(self):
        finding = _finding(metric="functionLines", function="load")
        assert long_function_rule.intent_factory(finding) == ExtractFunction(
            function="load", file="Sources/App/A.swift"
        )

    def test_rule_falls_back_for_other_metrics(self):
        finding = _finding(metric="nestingDepth")
        assert isinstance(long_function_rule.intent_factory(finding), FixWarning)
        assert deep_nesting_rule.intent_factory(finding) == ReduceNesting(file="Sources/App/A.swift", line=4)

    def test_large_file_rule(self):
        intent = large_file_rule.intent_factory(_finding(metric="fileLines"))
        assert intent == SplitFile(path="Sources/App/A.swift")

    def test_diff_types_pad_with_modify_body(self):
        assert too_many_parameters_rule.diff_type_for(1) == DiffType.ADD_TYPE
        assert too_many_parameters_rule.diff_type_for(10) == DiffType.MODIFY_BODY


class TestDeadCodeRule:
    def test_unreachable_becomes_removal(self):
        finding = _finding(FindingType.DEAD_CODE, reason="unreachable", terminator="return")
        assert dead_code_rule.intent_factory(finding) == RemoveDeadCode(file="Sources/App/A.swift")

    def test_code_after_guard_is_not_removed(self):
        finding = _finding(FindingType.DEAD_CODE, reason="unreachable", terminator="guard")
        assert dead_code_rule.intent_factory(finding) == FixWarning(
            diagnostic="deadCode", file="Sources/App/A.swift"
        )

    def test_other_dead_code_is_not_handled(self):
        finding = _finding(FindingType.DEAD_CODE, reason="emptyFunction")
        assert isinstance(dead_code_rule.intent_factory(finding), FixWarning)

    def test_dead_code_rule_is_last(self):
        assert DEFAULT_RULES[-1] is dead_code_rule


class TestScopes:
    def test_module_scope_uses_parent_directory(self):
        assert module_scope(_finding()) == ModuleScope("App")

    def test_module_scope_without_directory(self):
        assert module_scope(_finding(file="A.swift")) == FileScope("A.swift")

    def test_rule_names_are_unique(self):
        names = [rule.name for rule in DEFAULT_RULES]
        assert len(names) == len(set(names)) == 8
