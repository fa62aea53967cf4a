"""Extract the longest straight-line run of a function into a helper."""

from __future__ import annotations

import re

from architask.core.intents import ExtractFunction, Intent
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

MIN_RUN_LENGTH = 3

BOUNDARY_STATEMENTS = (n.ReturnStmt, n.GuardStmt, n.IfStmt, n.ForStmt, n.WhileStmt)
CONTROL_TRANSFER = (n.ReturnStmt, n.BreakStmt, n.ContinueStmt, n.FallthroughStmt, n.ThrowStmt, n.DeferStmt)
ASSIGNMENT_OPERATORS = frozenset({"=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>="})
_GENERIC_NAME_RE = re.compile(r"\s*(?:each\s+)?([A-Za-z_]\w*)")


def _walk_same_scope(node: n.Node):
    """Like ``walk`` but does not descend into closures or nested declarations."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        for child in n.iter_child_nodes(current):
            if isinstance(child, (n.Closure, n.FunctionDecl, n.TypeDecl, n.InitializerDecl)):
                continue
            stack.append(child)


def generic_parameter_names(clause: str) -> list[str]:
    """Names declared by a generic clause such as ``<T: Equatable, each U>``."""
    parts, depth, current = [], 0, ""
    for char in clause.strip()[1:-1]:
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        current += char
    parts.append(current)
    names = []
    for part in parts:
        match = _GENERIC_NAME_RE.match(part)
        if match:
            names.append(match.group(1))
    return names


def _helper_generics(function: n.FunctionDecl, signature: str, body: str) -> tuple[str, str]:
    """Generic clause and where clause for a helper split out of ``function``.

    The clauses are copied when every generic parameter appears in the
    helper's signature and dropped when the extracted code uses none of
    them. Anything in between cannot be expressed and is refused.
    """
    names = generic_parameter_names(function.generic_params) if function.generic_params else []
    in_signature = [name for name in names if re.search(rf"\b{name}\b", signature)]
    if names and in_signature == names:
        where = f" {function.where_clause}" if function.where_clause else ""
        return function.generic_params, where
    if not in_signature and not any(re.search(rf"\b{name}\b", body) for name in names):
        return "", ""
    raise TransformFailed(f"Cannot carry the generic parameters of '{function.name}' into a helper")


def _is_boundary(stmt: n.Node) -> bool:
    if isinstance(stmt, BOUNDARY_STATEMENTS):
        return True
    for node in _walk_same_scope(stmt):
        if isinstance(node, CONTROL_TRANSFER):
            return True
        if isinstance(node, n.TryExpr) and node.kind == "try":
            return True
        if isinstance(node, n.AwaitExpr):
            return True
    return False


def _runs(statements: list[n.Node]) -> list[tuple[int, int]]:
    """``(start, stop)`` index ranges of runs of non-boundary statements."""
    runs = []
    start = None
    for index, stmt in enumerate(statements):
        if _is_boundary(stmt):
            if start is not None:
                runs.append((start, index))
            start = None
        elif start is None:
            start = index
    if start is not None:
        runs.append((start, len(statements)))
    return [r for r in runs if r[1] - r[0] >= MIN_RUN_LENGTH]


def _referenced(nodes: list[n.Node]) -> set[str]:
    names: set[str] = set()
    for stmt in nodes:
        for node in n.walk(stmt):
            if isinstance(node, n.Identifier):
                names.add(node.name)
    return names


def _assigned(nodes: list[n.Node]) -> set[str]:
    names: set[str] = set()
    for stmt in nodes:
        for node in n.walk(stmt):
            if (
                isinstance(node, n.BinaryExpr)
                and node.operator in ASSIGNMENT_OPERATORS
                and isinstance(node.left, n.Identifier)
            ):
                names.add(node.left.name)
            elif isinstance(node, n.PrefixExpr) and node.operator == "&" and isinstance(node.operand, n.Identifier):
                names.add(node.operand.name)
    return names


def _outer_locals(statements: list[n.Node]) -> dict[str, str | None]:
    """Locals declared before the run: name to annotated type, None when unknown
    or when the local is mutable."""
    names: dict[str, str | None] = {}
    for stmt in statements:
        if isinstance(stmt, n.VariableDecl):
            for binding in stmt.bindings:
                if binding.name is None:
                    continue
                known = stmt.binding_kind == "let" and binding.type is not None
                names[binding.name] = binding.type.text if known else None
        elif isinstance(stmt, n.GuardStmt):
            for cond in stmt.conditions:
                if isinstance(cond, n.OptionalBinding) and isinstance(cond.pattern, n.Identifier):
                    names[cond.pattern.name] = None
    return names


class ExtractFunctionTransform(Transform):
    """Moves a run of at least three straight-line statements into a new
    ``private func <name>Helper(...)`` placed right after the function.

    Parameters the run reads are passed as labeled arguments, as are
    ``let`` locals with a type annotation. The transform refuses rather
    than guesses when the run reads a local whose type it cannot name,
    assigns to an outer name, or declares a name used later on.
    """

    supported_intents = ("extractFunction",)

    def apply(self, source: str, intent: Intent, context: TransformContext) -> TransformResult:
        self._expect(intent, ExtractFunction)
        name = intent.function
        try:
            tree = parse(source)
        except SyntaxParseError as exc:
            raise ParseError(str(exc)) from exc

        function = next(
            (node for node in n.walk(tree) if isinstance(node, n.FunctionDecl) and node.name == name),
            None,
        )
        if function is None:
            raise TransformFailed(f"Function '{name}' not found")
        if function.body is None:
            raise TransformFailed(f"Function '{name}' has no body")

        helper_name = f"{name}Helper"
        if any(isinstance(node, n.FunctionDecl) and node.name == helper_name for node in n.walk(tree)):
            raise TransformFailed(f"Function '{helper_name}' already exists")

        statements = function.body.statements
        runs = _runs(statements)
        if not runs:
            raise TransformFailed(f"No suitable block found for extraction in '{name}'")
        start, stop = max(runs, key=lambda r: r[1] - r[0])
        run = statements[start:stop]

        arguments = self._arguments(function, statements, start, stop)
        transformed = self._rewrite(source, function, run, helper_name, arguments)

        diff = unified_diff(context.file_path, source, transformed)
        return TransformResult(
            original_source=source,
            transformed_source=transformed,
            diff=diff,
            lines_changed=count_changed_lines(diff),
        )

    def _arguments(
        self, function: n.FunctionDecl, statements: list[n.Node], start: int, stop: int
    ) -> list[tuple[str, str]]:
        """``(name, type)`` pairs the helper takes, in first-use order."""
        run = statements[start:stop]
        used = _referenced(run)
        declared_in_run = {
            b.name for stmt in run if isinstance(stmt, n.VariableDecl) for b in stmt.bindings if b.name
        }
        if declared_in_run & _referenced(statements[stop:]):
            raise TransformFailed(f"Extracted statements declare names used later in '{function.name}'")

        outer = _outer_locals(statements[:start])
        params = {
            p.name: (f"[{p.type.text}]" if p.variadic else p.type.text)
            for p in function.parameters
            if p.name and p.name != "_" and p.type is not None
        }
        # locals shadow parameters
        for local in outer:
            params.pop(local, None)

        assigned = _assigned(run)
        if assigned & (set(outer) | set(params)):
            raise TransformFailed(f"Extracted statements assign to outer names in '{function.name}'")

        arguments: list[tuple[str, str]] = []
        for stmt in run:
            for node in n.walk(stmt):
                if not isinstance(node, n.Identifier) or node.name not in used:
                    continue
                ident = node.name
                if any(ident == a for a, _ in arguments) or ident in declared_in_run:
                    continue
                if ident in outer:
                    if outer[ident] is None:
                        raise TransformFailed(f"Cannot determine the type of local '{ident}'")
                    arguments.append((ident, outer[ident]))
                elif ident in params:
                    arguments.append((ident, params[ident]))
        return arguments

    def _rewrite(
        self,
        source: str,
        function: n.FunctionDecl,
        run: list[n.Node],
        helper_name: str,
        arguments: list[tuple[str, str]],
    ) -> str:
        index = LineIndex(source)
        lines = index.lines
        encoded = source.encode("utf-8")

        first = index.line_for(run[0].offset)
        last = index.line_for(run[-1].end - 1)
        line_start = encoded.rfind(b"\n", 0, run[0].offset) + 1
        line_end = encoded.find(b"\n", run[-1].end)
        if line_end == -1:
            line_end = len(encoded)
        if encoded[line_start : run[0].offset].strip() or encoded[run[-1].end : line_end].strip(b" \t;"):
            raise TransformFailed(f"Statements in '{function.name}' share lines with other code")

        closing = index.line_for(function.body.end - 1)
        if not lines[closing - 1].strip().startswith("}"):
            raise TransformFailed(f"Closing brace of '{function.name}' shares a line with other code")

        run_indent = lines[first - 1][: len(lines[first - 1]) - len(lines[first - 1].lstrip())]
        func_line = lines[index.line_for(function.offset) - 1]
        func_indent = func_line[: len(func_line) - len(func_line.lstrip())]

        call_args = ", ".join(f"{a}: &{a}" if t.startswith("inout ") else f"{a}: {a}" for a, t in arguments)
        call = f"{run_indent}{helper_name}({call_args})"

        modifiers = ["private"]
        if function.is_static:
            modifiers.append("static")
        if "mutating" in function.modifiers:
            modifiers.append("mutating")
        signature = ", ".join(f"{a}: {t}" for a, t in arguments)
        generic_clause, where = _helper_generics(function, signature, "\n".join(lines[first - 1 : last]))
        helper = [
            "",
            f"{func_indent}{' '.join(modifiers)} func {helper_name}{generic_clause}({signature}){where} {{",
            *lines[first - 1 : last],
            f"{func_indent}}}",
        ]

        new_lines = lines[: first - 1] + [call] + lines[last:closing] + helper + lines[closing:]
        return "\n".join(new_lines)
