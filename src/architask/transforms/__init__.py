"""Deterministic source transforms and the pipeline that sequences them."""

from architask.transforms.base import (
    AlreadyHasWrapper,
    MultipleMatches,
    ParseError,
    PropertyNotFound,
    Transform,
    TransformContext,
    TransformError,
    TransformFailed,
    TransformResult,
    UnsupportedIntent,
)
from architask.transforms.dead_code import RemoveDeadCodeTransform
from architask.transforms.extract import ExtractFunctionTransform
from architask.transforms.guard_clause import GuardClauseTransform
from architask.transforms.imports import ImportTransform, RemoveUnusedImportTransform
from architask.transforms.pipeline import (
    ConflictDetector,
    PipelineResult,
    TransformPipeline,
    TransformRecord,
)
from architask.transforms.refactoring import (
    AutomatedRefactoring,
    BatchRefactoringResult,
    RefactoringResult,
)
from architask.transforms.registry import TransformRegistry
from architask.transforms.wrappers import BindingTransform, StateWrapperTransform

__all__ = [
    "AlreadyHasWrapper",
    "AutomatedRefactoring",
    "BatchRefactoringResult",
    "BindingTransform",
    "ConflictDetector",
    "ExtractFunctionTransform",
    "GuardClauseTransform",
    "ImportTransform",
    "MultipleMatches",
    "ParseError",
    "PipelineResult",
    "PropertyNotFound",
    "RefactoringResult",
    "RemoveDeadCodeTransform",
    "RemoveUnusedImportTransform",
    "StateWrapperTransform",
    "Transform",
    "TransformContext",
    "TransformError",
    "TransformFailed",
    "TransformPipeline",
    "TransformRecord",
    "TransformRegistry",
    "TransformResult",
    "UnsupportedIntent",
]
