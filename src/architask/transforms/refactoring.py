"""Canned refactoring sequences built on TransformPipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from architask.core.intents import (
    AddBinding,
    AddStateWrapper,
    ExtractFunction,
    Intent,
    ReduceNesting,
    ReduceParameters,
    RemoveDeadCode,
)
from architask.core.models import Finding, FindingType
from architask.syntax.errors import SyntaxParseError
from architask.transforms.base import TransformContext, TransformError
from architask.transforms.pipeline import TransformPipeline, TransformRecord

logger = logging.getLogger("architask.transforms")

# only intents whose transforms cannot change behavior run in a full pass
SAFE_INTENTS = (AddStateWrapper, AddBinding)


@dataclass
class RefactoringResult:
    name: str
    original_source: str
    transformed_source: str
    applied: list[TransformRecord] = field(default_factory=list)
    skipped_intents: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.applied)

    @property
    def diff(self) -> str:
        return "\n".join(r.diff for r in self.applied)

    @property
    def summary(self) -> str:
        return (
            f"Refactoring: {self.name}\n"
            f"Applied: {len(self.applied)} transform(s)\n"
            f"Skipped: {self.skipped_intents} intent(s)\n"
            f"Warnings: {len(self.warnings)}"
        )


@dataclass
class BatchRefactoringResult:
    file_results: dict[str, RefactoringResult] = field(default_factory=dict)
    total_transforms_applied: int = 0
    total_intents_skipped: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def files_modified(self) -> int:
        return sum(1 for r in self.file_results.values() if r.success)

    @property
    def summary(self) -> str:
        return (
            "Batch Refactoring Complete\n"
            f"Files modified: {self.files_modified}/{len(self.file_results)}\n"
            f"Transforms applied: {self.total_transforms_applied}\n"
            f"Intents skipped: {self.total_intents_skipped}\n"
            f"Warnings: {len(self.warnings)}"
        )


def intent_from_finding(finding: Finding, file_path: str) -> Intent | None:
    """Map a finding to the intent that addresses it, or None."""
    ctx = finding.context
    if finding.type == FindingType.HIGH_COMPLEXITY:
        metric = ctx.get("metric")
        function = ctx.get("function")
        if metric in ("functionLines", "cyclomaticComplexity") and function:
            return ExtractFunction(function=function, file=file_path)
        if metric == "nestingDepth":
            return ReduceNesting(file=file_path, line=finding.location.line)
        if metric == "parameterCount" and function:
            return ReduceParameters(function=function, file=file_path)
        return None
    if finding.type == FindingType.DEAD_CODE:
        if ctx.get("reason") == "unreachable" and ctx.get("terminator") != "guard":
            return RemoveDeadCode(file=file_path)
        return None
    prop = ctx.get("property")
    if finding.type == FindingType.MISSING_STATE_OBJECT and prop and ctx.get("type"):
        return AddStateWrapper(property=prop, type=ctx["type"], file=file_path)
    if finding.type == FindingType.MISSING_BINDING and prop:
        return AddBinding(property=prop, file=file_path)
    return None


class AutomatedRefactoring:
    """Higher-level recipes that turn findings into pipeline runs."""

    def __init__(self, pipeline: TransformPipeline | None = None):
        self.pipeline = pipeline or TransformPipeline.standard()

    @classmethod
    def framework(cls) -> AutomatedRefactoring:
        return cls(TransformPipeline.framework())

    @classmethod
    def general(cls) -> AutomatedRefactoring:
        return cls(TransformPipeline.refactoring())

    def cleanup_complex_function(
        self, function_name: str, source: str, file_path: str
    ) -> RefactoringResult:
        intents: list[Intent] = [
            ExtractFunction(function=function_name, file=file_path),
            # line 0 lets the guard transform pick the first candidate
            ReduceNesting(file=file_path, line=0),
        ]
        return self._execute_sequence("Cleanup Complex Function", intents, source, file_path)

    def fix_view_bindings(
        self, findings: list[Finding], source: str, file_path: str
    ) -> RefactoringResult:
        intents = [
            intent
            for intent in (intent_from_finding(f, file_path) for f in findings)
            if isinstance(intent, SAFE_INTENTS)
        ]
        return self._execute_sequence("Fix View Bindings", intents, source, file_path)

    def cleanup_file(self, source: str, file_path: str) -> RefactoringResult:
        return self._execute_sequence(
            "Cleanup File", [RemoveDeadCode(file=file_path)], source, file_path
        )

    def full_refactoring_pass(
        self, findings: list[Finding], source: str, file_path: str
    ) -> RefactoringResult:
        intents: list[Intent] = []
        for finding in findings:
            intent = intent_from_finding(finding, file_path)
            if intent is not None:
                intents.append(intent)
        safe = [i for i in intents if isinstance(i, SAFE_INTENTS)]
        if len(safe) < len(intents):
            logger.debug("full pass: %d intent(s) left for review", len(intents) - len(safe))
        return self._execute_sequence("Full Refactoring Pass", safe, source, file_path)

    def batch_refactor(
        self, files: list[tuple[str, str, list[Finding]]]
    ) -> BatchRefactoringResult:
        batch = BatchRefactoringResult()
        for path, source, findings in files:
            try:
                result = self.full_refactoring_pass(findings, source, path)
            except (TransformError, SyntaxParseError) as exc:
                batch.warnings.append(f"Failed to refactor {path}: {exc}")
                continue
            batch.file_results[path] = result
            batch.total_transforms_applied += len(result.applied)
            batch.total_intents_skipped += result.skipped_intents
            batch.warnings.extend(result.warnings)
        return batch

    def _execute_sequence(
        self, name: str, intents: list[Intent], source: str, file_path: str
    ) -> RefactoringResult:
        result = self.pipeline.execute(intents, source, TransformContext(file_path))
        logger.debug("%s: applied %d of %d", name, len(result.applied), len(intents))
        return RefactoringResult(
            name=name,
            original_source=source,
            transformed_source=result.transformed_source,
            applied=result.applied,
            skipped_intents=len(intents) - len(result.applied),
            warnings=result.warnings,
        )
