"""Rules that turn a finding into a task.

Several rules can share a finding type; the generator tries them in table
order and keeps the first one that applies, so order is a tie-break.
A rule signals "not my sub-case" by returning the ``FixWarning`` fallback
intent from its factory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable

from architask.core.intents import (
    AddBinding,
    AddStateWrapper,
    ExtractFunction,
    FixWarning,
    Intent,
    ReduceNesting,
    ReduceParameters,
    RemoveDeadCode,
    SplitFile,
)
from architask.core.models import DiffType, FileScope, Finding, FindingType, ModuleScope, TaskScope

IntentFactory = Callable[[Finding], Intent]
ScopeFactory = Callable[[Finding], TaskScope]


def file_scope(finding: Finding) -> TaskScope:
    return FileScope(finding.location.file)


def module_scope(finding: Finding) -> TaskScope:
    """Module named after the finding's parent directory."""
    name = PurePosixPath(finding.location.file).parent.name
    if not name:
        return FileScope(finding.location.file)
    return ModuleScope(name)


def _fallback(finding: Finding) -> Intent:
    return FixWarning(diagnostic="complexity", file=finding.location.file)


@dataclass
class TaskGenerationRule:
    finding_type: FindingType
    intent_factory: IntentFactory
    step_template: list[str]
    expected_diff_types: list[DiffType] = field(default_factory=list)
    default_scope: ScopeFactory = file_scope
    confidence_threshold: float = 0.5
    name: str = ""

    def diff_type_for(self, index: int) -> DiffType:
        if index < len(self.expected_diff_types):
            return self.expected_diff_types[index]
        return DiffType.MODIFY_BODY


def _metric_rule(metric: str, build: IntentFactory) -> IntentFactory:
    def factory(finding: Finding) -> Intent:
        if finding.context.get("metric") != metric:
            return _fallback(finding)
        return build(finding)

    return factory


M = DiffType.MODIFY_BODY

missing_state_object_rule = TaskGenerationRule(
    name="missingStateObjectRule",
    finding_type=FindingType.MISSING_STATE_OBJECT,
    intent_factory=lambda f: AddStateWrapper(
        property=f.context.get("property", "viewModel"),
        type=f.context.get("type", "ViewModel"),
        file=f.location.file,
    ),
    step_template=[
        "Locate the property declaration",
        "Add @StateObject or @ObservedObject wrapper",
        "Verify view updates correctly",
    ],
    expected_diff_types=[M, DiffType.ADD_WRAPPER, M],
    confidence_threshold=0.85,
)

missing_binding_rule = TaskGenerationRule(
    name="missingBindingRule",
    finding_type=FindingType.MISSING_BINDING,
    intent_factory=lambda f: AddBinding(
        property=f.context.get("property", "value"),
        file=f.location.file,
    ),
    step_template=[
        "Locate view initializer",
        "Identify missing binding type",
        "Add @Binding property wrapper",
        "Update call sites to pass binding",
    ],
    expected_diff_types=[M, M, DiffType.ADD_WRAPPER, M],
    confidence_threshold=0.8,
)

long_function_rule = TaskGenerationRule(
    name="longFunctionRule",
    finding_type=FindingType.HIGH_COMPLEXITY,
    intent_factory=_metric_rule(
        "functionLines",
        lambda f: ExtractFunction(function=f.context.get("function", "unknown"), file=f.location.file),
    ),
    step_template=[
        "Identify logical sections in the function",
        "Extract cohesive code blocks into helper methods",
        "Update original function to call extracted methods",
        "Verify behavior is preserved",
    ],
    expected_diff_types=[M, DiffType.ADD_METHOD, M, M],
    confidence_threshold=0.7,
)

deep_nesting_rule = TaskGenerationRule(
    name="deepNestingRule",
    finding_type=FindingType.HIGH_COMPLEXITY,
    intent_factory=_metric_rule(
        "nestingDepth",
        lambda f: ReduceNesting(file=f.location.file, line=f.location.line),
    ),
    step_template=[
        "Identify nested conditions that can be inverted",
        "Apply guard statements for early returns",
        "Flatten remaining nested logic",
        "Verify control flow is preserved",
    ],
    expected_diff_types=[M, M, M, M],
    confidence_threshold=0.65,
)

too_many_parameters_rule = TaskGenerationRule(
    name="tooManyParametersRule",
    finding_type=FindingType.HIGH_COMPLEXITY,
    intent_factory=_metric_rule(
        "parameterCount",
        lambda f: ReduceParameters(function=f.context.get("function", "unknown"), file=f.location.file),
    ),
    step_template=[
        "Identify related parameters that form a concept",
        "Create a parameter object or struct",
        "Update function signature to use new type",
        "Update all call sites",
    ],
    expected_diff_types=[M, DiffType.ADD_TYPE, M, M],
    # signature changes reach call sites in other files
    default_scope=module_scope,
    confidence_threshold=0.6,
)

large_file_rule = TaskGenerationRule(
    name="largeFileRule",
    finding_type=FindingType.HIGH_COMPLEXITY,
    intent_factory=_metric_rule("fileLines", lambda f: SplitFile(path=f.location.file)),
    step_template=[
        "Identify distinct responsibilities in the file",
        "Group related types and extensions",
        "Create new files for each responsibility",
        "Update imports in dependent files",
    ],
    expected_diff_types=[M, M, DiffType.ADD_FILE, M],
    default_scope=module_scope,
    confidence_threshold=0.55,
)

high_complexity_rule = TaskGenerationRule(
    name="highComplexityRule",
    finding_type=FindingType.HIGH_COMPLEXITY,
    intent_factory=_metric_rule(
        "cyclomaticComplexity",
        lambda f: ExtractFunction(function=f.context.get("function", "unknown"), file=f.location.file),
    ),
    step_template=[
        "Identify decision points (if/switch/loops)",
        "Extract conditional branches into separate methods",
        "Consider using strategy pattern for complex switches",
        "Verify all paths are covered",
    ],
    expected_diff_types=[M, DiffType.ADD_METHOD, M, M],
    confidence_threshold=0.65,
)


def _dead_code_intent(finding: Finding) -> Intent:
    ctx = finding.context
    # nothing removable follows a guard; its else branch is what exits
    if ctx.get("reason") != "unreachable" or ctx.get("terminator") == "guard":
        return FixWarning(diagnostic="deadCode", file=finding.location.file)
    return RemoveDeadCode(file=finding.location.file)


dead_code_rule = TaskGenerationRule(
    name="deadCodeRule",
    finding_type=FindingType.DEAD_CODE,
    intent_factory=_dead_code_intent,
    step_template=[
        "Locate the statements after the early exit",
        "Delete the unreachable statements",
        "Verify behavior is preserved",
    ],
    expected_diff_types=[M, DiffType.DELETE_LINES, M],
    confidence_threshold=0.6,
)

DEFAULT_RULES: list[TaskGenerationRule] = [
    missing_state_object_rule,
    missing_binding_rule,
    long_function_rule,
    deep_nesting_rule,
    too_many_parameters_rule,
    large_file_rule,
    high_complexity_rule,
    dead_code_rule,
]
