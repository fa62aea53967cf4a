"""Task planning: rules, generator and approval policies."""

from architask.planner.generator import TaskGenerationConfig, TaskGenerator
from architask.planner.policy import ApprovalPolicy, PolicyDecision, PolicyRule
from architask.planner.rules import DEFAULT_RULES, TaskGenerationRule

__all__ = [
    "ApprovalPolicy",
    "DEFAULT_RULES",
    "PolicyDecision",
    "PolicyRule",
    "TaskGenerationConfig",
    "TaskGenerationRule",
    "TaskGenerator",
]
