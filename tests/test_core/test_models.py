"""Tests for findings, tasks and their JSON form."""

from __future__ import annotations

import json

import pytest

from architask.core.intents import ReduceNesting
from architask.core.models import (
    Decision,
    Finding,
    FindingType,
    ModuleScope,
    ProjectScope,
    Severity,
    SourceLocation,
    StepResult,
    StepStatus,
    Task,
    TaskScope,
    TaskStatus,
    TaskStep,
)


def _task(**kwargs) -> Task:
    defaults = dict(
        title="Reduce nesting",
        intent=ReduceNesting(file="A.swift", line=4),
        scope=ModuleScope("Core"),
    )
    defaults.update(kwargs)
    return Task(**defaults)


class TestSeverity:
    def test_ordering(self):
        assert Severity.INFO < Severity.WARNING < Severity.ERROR < Severity.CRITICAL

    def test_parse_name_or_ordinal(self):
        assert Severity.parse("warning") == Severity.WARNING
        assert Severity.parse(3) == Severity.CRITICAL
        assert Severity.parse("2") == Severity.ERROR


class TestFinding:
    def test_json_round_trip(self):
        finding = Finding(
            type=FindingType.HIGH_COMPLEXITY,
            location=SourceLocation("A.swift", 10, 5),
            severity=Severity.WARNING,
            message="Function too long",
            context={"metric": "functionLines", "value": "60"},
        )
        data = json.loads(json.dumps(finding.to_dict()))
        assert data["type"] == "highComplexity"
        assert data["severity"] == 1
        assert Finding.from_dict(data) == finding

    def test_ids_are_unique(self):
        loc = SourceLocation("A.swift", 1)
        a = Finding(FindingType.DEAD_CODE, loc, Severity.INFO, "x")
        b = Finding(FindingType.DEAD_CODE, loc, Severity.INFO, "x")
        assert a.id != b.id

    def test_location_str(self):
        assert str(SourceLocation("A.swift", 3, 7)) == "A.swift:3:7"


class TestScope:
    def test_allowed_paths(self):
        assert ModuleScope("Core").allowed_paths == ["Sources/Core/**"]
        assert ProjectScope().allowed_paths == ["**"]

    def test_unknown_case(self):
        with pytest.raises(ValueError):
            TaskScope.from_dict({"case": "galaxy"})


class TestTaskConfidence:
    def test_mean_of_factors(self):
        task = _task(confidence_factors={"a": 0.8, "b": 0.6, "c": 1.0})
        assert task.confidence == pytest.approx(0.8)

    def test_default_when_empty(self):
        assert _task().confidence == 0.5


class TestTaskLifecycle:
    def test_approve_then_run(self):
        task = _task()
        task.approve()
        assert task.status == TaskStatus.APPROVED
        assert task.feedback.decision == Decision.APPROVED
        task.mark_in_progress()
        assert task.status == TaskStatus.IN_PROGRESS
        task.complete()
        assert task.status == TaskStatus.COMPLETED
        assert task.is_terminal

    def test_reject_records_reason(self):
        task = _task()
        task.reject("not now")
        assert task.status == TaskStatus.REJECTED
        assert task.feedback.reason == "not now"

    def test_terminal_states_are_final(self):
        task = _task()
        task.reject("no")
        task.approve()
        task.complete()
        assert task.status == TaskStatus.REJECTED

        done = _task()
        done.approve()
        done.fail()
        done.complete()
        assert done.status == TaskStatus.FAILED

    def test_only_approved_tasks_start(self):
        task = _task()
        task.mark_in_progress()
        assert task.status == TaskStatus.PROPOSED

    def test_defer_is_not_terminal(self):
        task = _task()
        task.defer()
        assert task.status == TaskStatus.DEFERRED
        assert not task.is_terminal


class TestTaskSerialization:
    def test_json_round_trip(self):
        step = TaskStep(description="Rewrite", allowed_files=["A.swift"])
        step.status = StepStatus.COMPLETED
        step.result = StepResult(diff="+x", warnings=["w"], execution_time=0.1)
        task = _task(
            steps=[step],
            confidence_factors={"rulePrecision": 0.6},
            source_findings=["f1"],
        )
        task.approve()

        restored = Task.from_dict(json.loads(json.dumps(task.to_dict())))

        assert restored.id == task.id
        assert restored.intent == task.intent
        assert restored.scope == task.scope
        assert restored.status == TaskStatus.APPROVED
        assert restored.confidence == pytest.approx(0.6)
        assert restored.steps[0].status == StepStatus.COMPLETED
        assert restored.steps[0].result.warnings == ["w"]
        assert restored.feedback.decision == Decision.APPROVED
        assert restored.created_at == task.created_at
