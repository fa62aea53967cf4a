"""Property wrapper insertion: ``@StateObject``/``@ObservedObject`` and ``@Binding``.

Both transforms work line by line with a regex rather than on the syntax
tree so that everything else on the line survives untouched. Exactly one
declaration must match; anything else is an error, never a guess.
"""

from __future__ import annotations

import re

from architask.core.intents import AddBinding, AddStateWrapper, Intent
from architask.transforms.base import (
    AlreadyHasWrapper,
    MultipleMatches,
    PropertyNotFound,
    Transform,
    TransformContext,
    TransformResult,
    single_line_diff,
)

# "@State" also covers "@StateObject", "@Environment" covers "@EnvironmentObject"
WRAPPER_MARKERS = ("@State", "@ObservedObject", "@Binding", "@Environment")


def wrapper_for_type(type_name: str) -> str:
    if type_name.endswith(("ViewModel", "Store")):
        return "@StateObject"
    return "@ObservedObject"


def _find_single_declaration(lines: list[str], pattern: re.Pattern, property_name: str) -> tuple[int, re.Match]:
    """Index and match of the only unwrapped declaration of ``property_name``."""
    mentions = re.compile(rf"\b{re.escape(property_name)}\b")
    matches: list[tuple[int, re.Match]] = []
    for index, line in enumerate(lines):
        if any(marker in line for marker in WRAPPER_MARKERS):
            if mentions.search(line):
                raise AlreadyHasWrapper(property_name)
            continue
        match = pattern.match(line)
        if match:
            matches.append((index, match))

    if not matches:
        raise PropertyNotFound(property_name)
    if len(matches) > 1:
        raise MultipleMatches(property_name, count=len(matches))
    return matches[0]


class StateWrapperTransform(Transform):
    supported_intents = ("addStateWrapper",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        self._expect(intent, AddStateWrapper)
        prop, type_name = intent.property, intent.type
        pattern = re.compile(rf"^(\s*)(var|let)\s+{re.escape(prop)}\s*:\s*{re.escape(type_name)}")

        lines = source.split("\n")
        index, match = _find_single_declaration(lines, pattern, prop)
        original = lines[index]
        indent = match.group(1)
        # keeps "= Foo()" and trailing comments
        trailing = original[match.end():]
        modified = f"{indent}{wrapper_for_type(type_name)} var {prop}: {type_name}{trailing}"

        lines[index] = modified
        return TransformResult(
            original_source=source,
            transformed_source="\n".join(lines),
            diff=single_line_diff(context.file_path, index + 1, original, modified),
            lines_changed=1,
        )


class BindingTransform(Transform):
    """Turns a stored property into ``@Binding var name: Type``.

    A binding cannot have an initializer, so anything after the type is
    dropped except a trailing ``//`` comment.
    """

    supported_intents = ("addBinding",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        self._expect(intent, AddBinding)
        prop = intent.property
        pattern = re.compile(rf"^(\s*)(var|let)\s+({re.escape(prop)})\s*:\s*(\w+)")

        lines = source.split("\n")
        index, match = _find_single_declaration(lines, pattern, prop)
        original = lines[index]
        indent, type_name = match.group(1), match.group(4)
        modified = f"{indent}@Binding var {prop}: {type_name}"
        comment_at = original.find("//")
        if comment_at != -1:
            modified += " " + original[comment_at:]

        lines[index] = modified
        return TransformResult(
            original_source=source,
            transformed_source="\n".join(lines),
            diff=single_line_diff(context.file_path, index + 1, original, modified),
            lines_changed=1,
        )
