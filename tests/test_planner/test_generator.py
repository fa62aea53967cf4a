"""Tests for the task generator."""

from __future__ import annotations

from pathlib import Path

import pytest

from architask.analysis.complexity import ComplexityAnalyzer
from architask.analysis.scanner import ProjectScanner
from architask.core.config import ArchitaskConfig
from architask.core.intents import (
    AddStateWrapper,
    ExtractFunction,
    IntentCategory,
    ReduceParameters,
)
from architask.core.models import (
    FileScope,
    Finding,
    FindingType,
    Severity,
    SourceLocation,
    TaskStatus,
)
from architask.planner.generator import TaskGenerationConfig, TaskGenerator


def _long_function_source() -> str:
    params = ", ".join(f"p{i}: Int" for i in range(6))
    body = "\n".join("    total += 1" for _ in range(58))
    return f"func process({params}) {{\n{body}\n}}\n"


def _finding(finding_type, severity=Severity.WARNING, **context) -> Finding:
    return Finding(
        type=finding_type,
        location=SourceLocation("A.swift", 3),
        severity=severity,
        message="m",
        context=context,
    )


class TestGenerateTasks:
    def test_long_function_with_many_parameters(self):
        findings = ComplexityAnalyzer().analyze("A.swift", _long_function_source())
        assert len(findings) == 2

        tasks = TaskGenerator().generate_tasks(findings)

        assert [t.intent for t in tasks] == [
            ReduceParameters(function="process", file="A.swift"),
            ExtractFunction(function="process", file="A.swift"),
        ]
        assert all(t.intent.category == IntentCategory.QUALITY for t in tasks)
        assert tasks[0].confidence == pytest.approx(0.611, abs=1e-3)
        assert tasks[1].confidence == pytest.approx(0.644, abs=1e-3)

    def test_task_shape(self):
        finding = _finding(FindingType.MISSING_STATE_OBJECT, property="model", type="FeedModel")
        (task,) = TaskGenerator().generate_tasks([finding])

        assert task.intent == AddStateWrapper(property="model", type="FeedModel", file="A.swift")
        assert task.title == task.intent.description
        assert task.scope == FileScope("A.swift")
        assert task.status == TaskStatus.PROPOSED
        assert task.requires_approval
        assert task.source_findings == [finding.id]
        assert len(task.steps) == 3
        assert all(step.allowed_files == ["A.swift"] for step in task.steps)
        assert task.confidence_factors == {
            "rulePrecision": 0.85,
            "severityWeight": pytest.approx(1 / 3),
            "contextCompleteness": 0.9,
        }

    def test_missing_context_lowers_confidence(self):
        finding = _finding(FindingType.MISSING_STATE_OBJECT)
        config = TaskGenerationConfig(minimum_confidence=0.0)
        (task,) = TaskGenerator(config=config).generate_tasks([finding])
        assert task.confidence_factors["contextCompleteness"] == 0.5

    def test_minimum_confidence_filters(self):
        finding = _finding(FindingType.HIGH_COMPLEXITY, severity=Severity.INFO, metric="fileLines")
        assert TaskGenerator().generate_tasks([finding]) == []
        config = TaskGenerationConfig(minimum_confidence=0.4)
        assert len(TaskGenerator(config=config).generate_tasks([finding])) == 1

    def test_unhandled_findings_produce_nothing(self):
        finding = _finding(FindingType.NAMING_VIOLATION, kind="function")
        assert TaskGenerator().generate_tasks([finding]) == []

    def test_disabled_category(self):
        finding = _finding(FindingType.MISSING_STATE_OBJECT, property="m", type="T")
        config = TaskGenerationConfig(enabled_intent_categories=frozenset({IntentCategory.QUALITY}))
        assert TaskGenerator(config=config).generate_tasks([finding]) == []

    def test_approval_categories(self):
        finding = _finding(FindingType.MISSING_STATE_OBJECT, property="m", type="T")
        config = TaskGenerationConfig(require_approval_for_categories=frozenset())
        (task,) = TaskGenerator(config=config).generate_tasks([finding])
        assert not task.requires_approval

    def test_max_tasks_per_run(self):
        findings = [_finding(FindingType.MISSING_STATE_OBJECT, property=f"p{i}", type="T") for i in range(5)]
        config = TaskGenerationConfig(max_tasks_per_run=2)
        tasks = TaskGenerator(config=config).generate_tasks(findings)
        assert [t.intent.property for t in tasks] == ["p0", "p1"]


class TestGeneratorConfig:
    def test_from_config(self):
        config = ArchitaskConfig()
        config.planner.minimum_confidence = 0.7
        config.planner.enabled_categories = ["quality"]
        generation = TaskGenerationConfig.from_config(config)
        assert generation.minimum_confidence == 0.7
        assert generation.enabled_intent_categories == frozenset({IntentCategory.QUALITY})
        assert len(generation.require_approval_for_categories) == len(IntentCategory)

    def test_analyze_uses_scanner(self, tmp_path: Path):
        (tmp_path / "A.swift").write_text(_long_function_source())
        generator = TaskGenerator(scanner=ProjectScanner([ComplexityAnalyzer()]))
        findings = generator.analyze(tmp_path)
        assert {f.context["metric"] for f in findings} == {"parameterCount", "functionLines"}
