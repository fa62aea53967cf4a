"""architask: static analysis and deterministic refactoring for Swift sources."""

from architask._version import __version__
from architask.analysis.base import AnalyzerPipeline
from architask.analysis.scanner import ProjectScanner
from architask.core.models import Finding, FindingType, Severity, SourceLocation, Task
from architask.planner.generator import TaskGenerator
from architask.transforms.pipeline import TransformPipeline
from architask.transforms.registry import TransformRegistry

__all__ = [
    "__version__",
    "AnalyzerPipeline",
    "Finding",
    "FindingType",
    "ProjectScanner",
    "Severity",
    "SourceLocation",
    "Task",
    "TaskGenerator",
    "TransformPipeline",
    "TransformRegistry",
]
