"""Task generator: findings in, proposed tasks out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from architask.analysis.scanner import ProjectScanner
from architask.core.config import ArchitaskConfig
from architask.core.intents import FixWarning, IntentCategory
from architask.core.models import Finding, Task, TaskStep
from architask.planner.rules import DEFAULT_RULES, TaskGenerationRule

logger = logging.getLogger("architask.planner")

ALL_CATEGORIES = frozenset(IntentCategory)


@dataclass
class TaskGenerationConfig:
    minimum_confidence: float = 0.6
    max_tasks_per_run: int = 10
    enabled_intent_categories: frozenset[IntentCategory] = ALL_CATEGORIES
    require_approval_for_categories: frozenset[IntentCategory] = ALL_CATEGORIES

    @classmethod
    def from_config(cls, config: ArchitaskConfig) -> TaskGenerationConfig:
        p = config.planner
        return cls(
            minimum_confidence=p.minimum_confidence,
            max_tasks_per_run=p.max_tasks_per_run,
            enabled_intent_categories=_categories(p.enabled_categories),
            require_approval_for_categories=_categories(p.require_approval_for),
        )


def _categories(values: list[str] | None) -> frozenset[IntentCategory]:
    if values is None:
        return ALL_CATEGORIES
    return frozenset(IntentCategory(v) for v in values)


class TaskGenerator:
    """Applies the rule table to findings.

    For each finding the rules with a matching finding type are tried in
    table order; the first one that yields a real intent in an enabled
    category and reaches the minimum confidence produces the task, and no
    further rules are tried for that finding.
    """

    def __init__(
        self,
        scanner: ProjectScanner | None = None,
        rules: list[TaskGenerationRule] | None = None,
        config: TaskGenerationConfig | None = None,
    ):
        self.scanner = scanner or ProjectScanner()
        self.rules = list(DEFAULT_RULES if rules is None else rules)
        self.config = config or TaskGenerationConfig()

    def analyze(self, project_path: Path) -> list[Finding]:
        return self.scanner.scan(project_path).findings

    def generate_tasks(self, findings: list[Finding]) -> list[Task]:
        cfg = self.config
        tasks: list[Task] = []

        for finding in findings:
            for rule in self.rules:
                if rule.finding_type != finding.type:
                    continue

                intent = rule.intent_factory(finding)
                if isinstance(intent, FixWarning):
                    continue
                if intent.category not in cfg.enabled_intent_categories:
                    continue

                steps = [
                    TaskStep(
                        description=description,
                        allowed_files=[finding.location.file],
                        expected_diff_type=rule.diff_type_for(index),
                    )
                    for index, description in enumerate(rule.step_template)
                ]
                task = Task(
                    title=intent.description,
                    intent=intent,
                    scope=rule.default_scope(finding),
                    steps=steps,
                    requires_approval=intent.category in cfg.require_approval_for_categories,
                    source_findings=[finding.id],
                    confidence_factors={
                        "rulePrecision": rule.confidence_threshold,
                        "severityWeight": int(finding.severity) / 3.0,
                        "contextCompleteness": 0.5 if not finding.context else 0.9,
                    },
                )

                if task.confidence >= cfg.minimum_confidence:
                    tasks.append(task)
                    break
                logger.debug(
                    "rule %s below confidence for %s (%.2f)", rule.name, finding.location, task.confidence
                )

        return tasks[: cfg.max_tasks_per_run]
