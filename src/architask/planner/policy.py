"""Approval policies: decide which proposed tasks can skip human review.

A policy is an ordered list of rules; the first rule whose condition
matches a task decides, otherwise the policy's default applies.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from architask.core.intents import IntentCategory
from architask.core.models import FileScope, Task, TaskStatus


class PolicyDecision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"
    REQUIRE_HUMAN = "requireHuman"


class PolicyCondition:
    def matches(self, task: Task) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class IntentCategoryIs(PolicyCondition):
    category: IntentCategory

    def matches(self, task: Task) -> bool:
        return task.intent.category == self.category


@dataclass(frozen=True)
class IntentTypeIs(PolicyCondition):
    """Matches when the intent's key contains ``name``."""

    name: str

    def matches(self, task: Task) -> bool:
        return self.name in task.intent.key


@dataclass(frozen=True)
class ScopeTypeIs(PolicyCondition):
    kind: str

    def matches(self, task: Task) -> bool:
        return task.scope.kind == self.kind


@dataclass(frozen=True)
class ConfidenceAbove(PolicyCondition):
    threshold: float

    def matches(self, task: Task) -> bool:
        return task.confidence > self.threshold


@dataclass(frozen=True)
class ConfidenceBelow(PolicyCondition):
    threshold: float

    def matches(self, task: Task) -> bool:
        return task.confidence < self.threshold


@dataclass(frozen=True)
class FilePattern(PolicyCondition):
    """Substring or simple ``*`` prefix/suffix glob on file-scoped tasks."""

    pattern: str

    def matches(self, task: Task) -> bool:
        if not isinstance(task.scope, FileScope):
            return False
        path = task.scope.path
        if self.pattern in path:
            return True
        if self.pattern.startswith("*"):
            return path.endswith(self.pattern[1:])
        if self.pattern.endswith("*"):
            return path.startswith(self.pattern[:-1])
        return path == self.pattern


@dataclass(frozen=True)
class MaxSteps(PolicyCondition):
    maximum: int

    def matches(self, task: Task) -> bool:
        return len(task.steps) <= self.maximum


@dataclass(frozen=True)
class AllOf(PolicyCondition):
    conditions: tuple[PolicyCondition, ...]

    def matches(self, task: Task) -> bool:
        return all(c.matches(task) for c in self.conditions)


@dataclass(frozen=True)
class AnyOf(PolicyCondition):
    conditions: tuple[PolicyCondition, ...]

    def matches(self, task: Task) -> bool:
        return any(c.matches(task) for c in self.conditions)


@dataclass(frozen=True)
class Not(PolicyCondition):
    condition: PolicyCondition

    def matches(self, task: Task) -> bool:
        return not self.condition.matches(task)


@dataclass(frozen=True)
class PolicyRule:
    condition: PolicyCondition
    decision: PolicyDecision
    reason: str | None = None


@dataclass
class ApprovalPolicy:
    name: str
    rules: list[PolicyRule] = field(default_factory=list)
    default_decision: PolicyDecision = PolicyDecision.REQUIRE_HUMAN
    description: str = ""

    def evaluate(self, task: Task) -> PolicyDecision:
        return self.match(task)[0]

    def match(self, task: Task) -> tuple[PolicyDecision, str | None]:
        """Decision plus the reason of the rule that produced it."""
        for rule in self.rules:
            if rule.condition.matches(task):
                return rule.decision, rule.reason
        return self.default_decision, None

    def apply(self, task: Task) -> PolicyDecision:
        """Evaluate and move a proposed task to approved or rejected."""
        decision, reason = self.match(task)
        if task.status != TaskStatus.PROPOSED:
            return decision
        if decision == PolicyDecision.ALLOW:
            task.approve()
        elif decision == PolicyDecision.DENY:
            task.reject(reason or f"Denied by {self.name} policy")
        return decision

    # Presets ---------------------------------------------------------------

    @classmethod
    def conservative(cls) -> ApprovalPolicy:
        return cls(
            name="Conservative",
            description="Only auto-approve documentation and comments",
            rules=[
                PolicyRule(
                    IntentCategoryIs(IntentCategory.DOCUMENTATION),
                    PolicyDecision.ALLOW,
                    "Documentation changes are low-risk",
                ),
                PolicyRule(
                    IntentCategoryIs(IntentCategory.ARCHITECTURE),
                    PolicyDecision.DENY,
                    "Architecture changes require review",
                ),
            ],
        )

    @classmethod
    def moderate(cls) -> ApprovalPolicy:
        return cls(
            name="Moderate",
            description="Auto-approve high-confidence, single-file changes",
            rules=[
                PolicyRule(
                    AllOf((ScopeTypeIs("file"), ConfidenceAbove(0.8), MaxSteps(3))),
                    PolicyDecision.ALLOW,
                    "High-confidence, small scope",
                ),
                PolicyRule(
                    IntentCategoryIs(IntentCategory.ARCHITECTURE),
                    PolicyDecision.DENY,
                    "Architecture changes require review",
                ),
                PolicyRule(
                    ScopeTypeIs("project"),
                    PolicyDecision.DENY,
                    "Project-wide changes require review",
                ),
            ],
        )

    @classmethod
    def permissive(cls) -> ApprovalPolicy:
        return cls(
            name="Permissive",
            description="Auto-approve most changes, deny architecture",
            rules=[
                PolicyRule(
                    IntentCategoryIs(IntentCategory.ARCHITECTURE),
                    PolicyDecision.REQUIRE_HUMAN,
                    "Architecture changes need review",
                ),
                PolicyRule(ConfidenceBelow(0.5), PolicyDecision.REQUIRE_HUMAN, "Low confidence needs review"),
            ],
            default_decision=PolicyDecision.ALLOW,
        )

    @classmethod
    def ci(cls) -> ApprovalPolicy:
        return cls(name="CI", description="Report findings but never auto-approve")

    @classmethod
    def strict(cls) -> ApprovalPolicy:
        return cls(name="Strict", description="Require human approval for everything")

    @classmethod
    def named(cls, name: str) -> ApprovalPolicy:
        presets = {
            "conservative": cls.conservative,
            "moderate": cls.moderate,
            "permissive": cls.permissive,
            "ci": cls.ci,
            "strict": cls.strict,
        }
        if name not in presets:
            raise ValueError(f"Unknown policy: {name!r}")
        return presets[name]()
