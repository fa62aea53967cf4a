"""Runs a batch of intents over one source text in dependency order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from architask.core.intents import AddBinding, AddStateWrapper, ExtractFunction, Intent
from architask.transforms.base import TransformContext, TransformError
from architask.transforms.dead_code import RemoveDeadCodeTransform
from architask.transforms.extract import ExtractFunctionTransform
from architask.transforms.guard_clause import GuardClauseTransform
from architask.transforms.imports import ImportTransform, RemoveUnusedImportTransform
from architask.transforms.registry import TransformRegistry
from architask.transforms.wrappers import BindingTransform, StateWrapperTransform

logger = logging.getLogger("architask.transforms")

# lower runs earlier; anything unlisted runs last
PRIORITY = {
    "addImport": 0,
    "addStateWrapper": 1,
    "addBinding": 1,
    "extractFunction": 2,
    "reduceNesting": 3,
    "reduceParameters": 3,
    "splitFile": 4,
}
DEFAULT_PRIORITY = 99


def order_by_dependency(intents: list[Intent]) -> list[Intent]:
    """Stable sort by PRIORITY."""
    return sorted(intents, key=lambda intent: PRIORITY.get(intent.key, DEFAULT_PRIORITY))


@dataclass(frozen=True)
class TransformRecord:
    intent: Intent
    transform: str
    lines_changed: int
    diff: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class PipelineResult:
    original_source: str
    transformed_source: str
    applied: list[TransformRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_lines_changed(self) -> int:
        return sum(r.lines_changed for r in self.applied)

    @property
    def combined_diff(self) -> str:
        return "\n".join(r.diff for r in self.applied)

    @property
    def success(self) -> bool:
        return bool(self.applied)


def _wrapped_property(intent: Intent) -> str | None:
    if isinstance(intent, (AddStateWrapper, AddBinding)):
        return intent.property
    return None


class ConflictDetector:
    """Decides whether an intent clashes with one already applied in this run."""

    def detect_conflict(self, intent: Intent, applied: list[TransformRecord]) -> str | None:
        for record in applied:
            if self.intents_conflict(intent, record.intent):
                return f"Already applied similar transform: {record.intent}"
        return None

    @staticmethod
    def intents_conflict(a: Intent, b: Intent) -> bool:
        # one wrapper per property, whichever kind
        prop_a, prop_b = _wrapped_property(a), _wrapped_property(b)
        if prop_a is not None and prop_b is not None:
            return prop_a == prop_b
        if isinstance(a, ExtractFunction) and isinstance(b, ExtractFunction):
            return a.function == b.function
        return False


class TransformPipeline:
    """Applies intents one after another, each on the previous output.

    A missing transform, a conflict or a TransformError skips that intent
    with a warning; the rest of the batch still runs. The history is per
    instance and is not synchronized.
    """

    def __init__(self, registry: TransformRegistry | None = None):
        self.registry = registry or TransformRegistry.default()
        self.conflict_detector = ConflictDetector()
        self._history: list[TransformRecord] = []

    @classmethod
    def standard(cls) -> TransformPipeline:
        return cls(TransformRegistry.default())

    @classmethod
    def framework(cls) -> TransformPipeline:
        return cls(TransformRegistry([StateWrapperTransform(), BindingTransform(), ImportTransform()]))

    @classmethod
    def refactoring(cls) -> TransformPipeline:
        return cls(TransformRegistry([
            GuardClauseTransform(),
            ExtractFunctionTransform(),
            RemoveUnusedImportTransform(),
            RemoveDeadCodeTransform(),
        ]))

    def execute(self, intents: list[Intent], source: str, context: TransformContext) -> PipelineResult:
        current = source
        applied: list[TransformRecord] = []
        warnings: list[str] = []

        for intent in order_by_dependency(intents):
            transform = self.registry.transform_for(intent)
            if transform is None:
                warnings.append(f"No transform found for intent: {intent}")
                continue

            conflict = self.conflict_detector.detect_conflict(intent, applied)
            if conflict:
                logger.debug("skipping %s: %s", intent.key, conflict)
                warnings.append(f"Skipping {intent} due to conflict: {conflict}")
                continue

            try:
                result = transform.apply(current, intent, context)
            except TransformError as exc:
                warnings.append(f"Transform failed for {intent}: {exc}")
                continue

            current = result.transformed_source
            warnings.extend(result.warnings)
            record = TransformRecord(
                intent=intent,
                transform=type(transform).__name__,
                lines_changed=result.lines_changed,
                diff=result.diff,
            )
            applied.append(record)
            self._history.append(record)

        return PipelineResult(
            original_source=source,
            transformed_source=current,
            applied=applied,
            warnings=warnings,
        )

    def undo_last(self) -> TransformRecord | None:
        """Forget the most recent record. The source text is not touched."""
        if not self._history:
            return None
        return self._history.pop()

    @property
    def history(self) -> list[TransformRecord]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
