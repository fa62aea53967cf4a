"""Import management transforms."""

from __future__ import annotations

import re

from architask.core.intents import AddImport, Intent, RemoveUnusedImport
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.errors import SyntaxParseError
from architask.syntax.parser import parse
from architask.transforms.base import (
    ParseError,
    Transform,
    TransformContext,
    TransformResult,
    UnsupportedIntent,
    unified_diff,
)

IMPORT_LINE_RE = re.compile(
    r"^\s*(?:@\w+(?:\([^)]*\))?\s+)*import\s+"
    r"(?:(?:typealias|struct|class|enum|protocol|let|var|func)\s+)?([\w.]+)"
)

# Modules whose symbols are used without ever naming the module.
IMPLICIT_MODULES = frozenset({"Foundation", "SwiftUI", "UIKit", "AppKit", "Combine"})

_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class ImportTransform(Transform):
    """Adds ``import M`` after the last import at the top of the file."""

    supported_intents = ("addImport",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        module = intent.module if isinstance(intent, AddImport) else context.type_name
        if not module:
            raise UnsupportedIntent("addImport requires a module name")

        lines = source.split("\n")
        for line in lines:
            match = IMPORT_LINE_RE.match(line)
            if match and match.group(1) == module:
                return TransformResult(
                    original_source=source,
                    transformed_source=source,
                    diff=f"// Already imported: {module}",
                    lines_changed=0,
                    warnings=[f"Module '{module}' is already imported"],
                )

        insert_at = 0
        for index, line in enumerate(lines):
            if IMPORT_LINE_RE.match(line):
                insert_at = index + 1
            elif line.strip() and not line.lstrip().startswith("//"):
                break

        statement = f"import {module}"
        lines.insert(insert_at, statement)
        diff = (
            f"--- a/{context.file_path}\n"
            f"+++ b/{context.file_path}\n"
            f"@@ -{insert_at},0 +{insert_at + 1},1 @@\n"
            f"+{statement}"
        )
        return TransformResult(
            original_source=source,
            transformed_source="\n".join(lines),
            diff=diff,
            lines_changed=1,
        )


def used_names(tree: n.Node) -> set[str]:
    """Identifiers, member names, type names and attribute names in ``tree``."""
    names: set[str] = set()
    for node in n.walk(tree):
        if isinstance(node, n.Identifier):
            names.add(node.name)
        elif isinstance(node, n.MemberAccess):
            names.add(node.name)
        elif isinstance(node, n.TypeRef):
            names.update(_WORD_RE.findall(node.text))
        elif isinstance(node, n.Attribute):
            names.add(node.name)
    return names


class RemoveUnusedImportTransform(Transform):
    """Drops imports whose module name never appears as an identifier.

    This is a name heuristic: a module whose symbols are used without
    qualification looks unused, which is why the common implicit modules
    are always kept.
    """

    supported_intents = ("removeUnusedImport",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        self._expect(intent, RemoveUnusedImport)
        try:
            tree = parse(source)
        except SyntaxParseError as exc:
            raise ParseError(str(exc)) from exc

        used = used_names(tree)
        index = LineIndex(source)
        unused = [
            stmt
            for stmt in tree.statements
            if isinstance(stmt, n.ImportDecl)
            and stmt.path not in used
            and stmt.path not in IMPLICIT_MODULES
        ]
        if not unused:
            return TransformResult(
                original_source=source,
                transformed_source=source,
                diff="// No unused imports found",
                lines_changed=0,
            )

        drop: set[int] = set()
        for stmt in unused:
            first = index.line_for(stmt.offset)
            last = index.line_for(max(stmt.end - 1, stmt.offset))
            drop.update(range(first - 1, last))

        lines = source.split("\n")
        transformed = "\n".join(line for i, line in enumerate(lines) if i not in drop)
        return TransformResult(
            original_source=source,
            transformed_source=transformed,
            diff=unified_diff(context.file_path, source, transformed),
            lines_changed=len(unused),
        )
