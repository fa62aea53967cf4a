"""Delete statements that follow a ``return`` or ``throw`` in the same block."""

from __future__ import annotations

from architask.analysis.dead_code import iter_unreachable
from architask.core.intents import Intent, RemoveDeadCode
from architask.syntax import nodes as n
from architask.syntax.errors import SyntaxParseError
from architask.syntax.parser import parse
from architask.transforms.base import (
    ParseError,
    Transform,
    TransformContext,
    TransformFailed,
    TransformResult,
    count_changed_lines,
    unified_diff,
)

# guard is not here: code after a guard is reachable
HARD_TERMINATORS = (n.ReturnStmt, n.ThrowStmt)


class RemoveDeadCodeTransform(Transform):
    supported_intents = ("removeDeadCode",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        self._expect(intent, RemoveDeadCode)
        try:
            tree = parse(source)
        except SyntaxParseError as exc:
            raise ParseError(str(exc)) from exc

        spans = sorted(
            (block.statements[index].end, block.statements[-1].end)
            for block, index in iter_unreachable(tree, HARD_TERMINATORS)
        )
        # drop spans nested in an earlier one
        kept: list[tuple[int, int]] = []
        for start, stop in spans:
            if kept and start < kept[-1][1]:
                continue
            kept.append((start, stop))

        if not kept:
            raise TransformFailed("No unreachable code after a return or throw")

        encoded = source.encode("utf-8")
        for start, stop in reversed(kept):
            encoded = encoded[:start] + encoded[stop:]
        transformed = encoded.decode("utf-8")

        diff = unified_diff(context.file_path, source, transformed)
        return TransformResult(
            original_source=source,
            transformed_source=transformed,
            diff=diff,
            lines_changed=count_changed_lines(diff),
        )
