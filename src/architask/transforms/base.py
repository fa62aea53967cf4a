"""Shared pieces for deterministic transforms: context, result, errors, diffs."""

from __future__ import annotations

import difflib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from architask.core.intents import AddBinding, AddStateWrapper, Intent, ReduceNesting


@dataclass
class TransformContext:
    file_path: str
    property_name: str | None = None
    type_name: str | None = None
    line_number: int | None = None

    @classmethod
    def for_intent(cls, intent: Intent, file_path: str) -> TransformContext:
        if isinstance(intent, AddStateWrapper):
            return cls(file_path, property_name=intent.property, type_name=intent.type)
        if isinstance(intent, AddBinding):
            return cls(file_path, property_name=intent.property)
        if isinstance(intent, ReduceNesting):
            return cls(file_path, line_number=intent.line)
        return cls(file_path)


@dataclass
class TransformResult:
    original_source: str
    transformed_source: str
    diff: str
    lines_changed: int
    warnings: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.original_source != self.transformed_source


class TransformError(Exception):
    """Base for expected, recoverable transform failures."""

    kind = "transformError"


class PropertyNotFound(TransformError):
    kind = "propertyNotFound"

    def __init__(self, property_name: str):
        self.property_name = property_name
        super().__init__(f"Property not found: {property_name}")


class AlreadyHasWrapper(TransformError):
    kind = "alreadyHasWrapper"

    def __init__(self, property_name: str):
        self.property_name = property_name
        super().__init__(f"Property already has a wrapper: {property_name}")


class MultipleMatches(TransformError):
    kind = "multipleMatches"

    def __init__(self, property_name: str, count: int):
        self.property_name = property_name
        self.count = count
        super().__init__(f"Multiple matches for {property_name} ({count})")


class ParseError(TransformError):
    kind = "parseError"


class UnsupportedIntent(TransformError):
    kind = "unsupportedIntent"

    def __init__(self, intent: Intent | str):
        self.intent = intent
        super().__init__(f"Unsupported intent: {intent}")


class TransformFailed(TransformError):
    kind = "transformFailed"


class Transform(ABC):
    """A pure rewrite of source text for one kind of intent."""

    supported_intents: tuple[str, ...] = ()

    @abstractmethod
    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        """Return the rewritten source or raise a TransformError."""
        ...

    def _expect(self, intent: Intent, cls: type) -> None:
        if not isinstance(intent, cls):
            raise UnsupportedIntent(intent)


def single_line_diff(path: str, line_number: int, original: str, modified: str) -> str:
    return (
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
        f"@@ -{line_number},1 +{line_number},1 @@\n"
        f"-{original}\n"
        f"+{modified}"
    )


def unified_diff(path: str, original: str, modified: str, context_lines: int = 3) -> str:
    """Multi-hunk diff for structural rewrites; empty when nothing changed."""
    if original == modified:
        return ""
    diff = difflib.unified_diff(
        original.split("\n"),
        modified.split("\n"),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        n=context_lines,
        lineterm="",
    )
    return "\n".join(diff)


def count_changed_lines(diff: str) -> int:
    changed = 0
    for line in diff.split("\n"):
        if line.startswith(("---", "+++")):
            continue
        if line.startswith(("+", "-")):
            changed += 1
    return changed
