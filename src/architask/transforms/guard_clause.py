"""Reduce nesting by turning a trailing ``if`` into an early-exit ``guard``.

Only the safe shape is rewritten: an ``if`` without ``else`` that is the
last statement of a Void function (exit with ``return``) or of a loop body
(exit with ``continue``). Because nothing follows the ``if``, running its
body after a guard instead of inside the ``if`` cannot change behavior.
"""

from __future__ import annotations

from dataclasses import dataclass

from architask.core.intents import Intent, ReduceNesting
from architask.core.position import LineIndex
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

LINE_TOLERANCE = 2


@dataclass
class _Candidate:
    stmt: n.IfStmt
    block: n.CodeBlock
    exit: str


def _declared_names(statements: list[n.Node]) -> set[str]:
    names: set[str] = set()
    for stmt in statements:
        if isinstance(stmt, n.VariableDecl):
            names.update(b.name for b in stmt.bindings if b.name)
        elif isinstance(stmt, (n.FunctionDecl, n.TypeDecl)):
            names.add(stmt.name)
    return names


def _condition_names(conditions: list[n.Node]) -> set[str]:
    names: set[str] = set()
    for cond in conditions:
        if isinstance(cond, n.OptionalBinding) and isinstance(cond.pattern, n.Identifier):
            names.add(cond.pattern.name)
    return names


def _exit_blocks(tree: n.Node):
    for node in n.walk(tree):
        if isinstance(node, n.FunctionDecl) and node.body is not None and node.returns_void:
            yield node.body, "return"
        elif isinstance(node, n.InitializerDecl) and node.kind in ("init", "deinit") and node.body is not None:
            yield node.body, "return"
        elif isinstance(node, (n.ForStmt, n.WhileStmt, n.RepeatStmt)):
            yield node.body, "continue"


class GuardClauseTransform(Transform):
    supported_intents = ("reduceNesting",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        self._expect(intent, ReduceNesting)
        target = context.line_number if context.line_number is not None else intent.line
        try:
            tree = parse(source)
        except SyntaxParseError as exc:
            raise ParseError(str(exc)) from exc

        index = LineIndex(source)
        candidate = self._pick(tree, index, target)
        if candidate is None:
            raise TransformFailed(f"No suitable if-statement found at line {target} for guard conversion")

        transformed = self._rewrite(source, index, candidate)
        if transformed is None:
            raise TransformFailed(f"If-statement at line {target} is not laid out for guard conversion")

        diff = unified_diff(context.file_path, source, transformed)
        return TransformResult(
            original_source=source,
            transformed_source=transformed,
            diff=diff,
            lines_changed=count_changed_lines(diff),
        )

    def _pick(self, tree: n.Node, index: LineIndex, target: int) -> _Candidate | None:
        best: tuple[int, int] | None = None
        chosen: _Candidate | None = None
        for block, exit_word in _exit_blocks(tree):
            if not block.statements:
                continue
            last = block.statements[-1]
            if not isinstance(last, n.IfStmt) or last.else_body is not None or not last.body.statements:
                continue
            # line 0 means anywhere in the file
            distance = abs(index.line_for(last.offset) - target) if target > 0 else 0
            if distance > LINE_TOLERANCE:
                continue
            # flattening must not redeclare anything already in the outer block
            outer = _declared_names(block.statements[:-1])
            inner = _declared_names(last.body.statements) | _condition_names(last.conditions)
            if outer & inner:
                continue
            key = (distance, last.offset)
            if best is None or key < best:
                best = key
                chosen = _Candidate(last, block, exit_word)
        return chosen

    def _rewrite(self, source: str, index: LineIndex, candidate: _Candidate) -> str | None:
        stmt = candidate.stmt
        encoded = source.encode("utf-8")
        lines = index.lines

        first = index.line_for(stmt.offset)
        brace_line = index.line_for(stmt.body.offset)
        last = index.line_for(stmt.end - 1)
        if last <= brace_line or lines[last - 1].strip() != "}":
            return None
        # nothing may follow the opening brace on its line
        brace_end = encoded.index(b"{", stmt.body.offset) + 1
        rest_of_line = encoded[brace_end:].split(b"\n", 1)[0]
        if rest_of_line.strip() and not rest_of_line.strip().startswith(b"//"):
            return None

        header = encoded[stmt.offset : stmt.body.offset].decode("utf-8").strip()
        if not header.startswith("if"):
            return None
        conditions = header[2:].strip()

        if_line = lines[first - 1]
        if not if_line.lstrip().startswith("if"):
            return None
        indent = if_line[: len(if_line) - len(if_line.lstrip())]
        body = lines[brace_line : last - 1]
        body_indent = min(
            (line[: len(line) - len(line.lstrip())] for line in body if line.strip()),
            key=len,
            default=indent,
        )
        if not body_indent.startswith(indent):
            return None
        extra = len(body_indent) - len(indent)

        dedented = []
        for line in body:
            if not line.strip():
                dedented.append("")
            elif line[:extra].strip():
                return None
            else:
                dedented.append(line[extra:])

        guard = f"{indent}guard {conditions} else {{ {candidate.exit} }}"
        new_lines = lines[: first - 1] + guard.split("\n") + dedented + lines[last:]
        return "\n".join(new_lines)
