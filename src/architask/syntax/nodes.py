"""Syntax tree node classes.

A closed set of dataclasses. Every node carries ``offset``/``end`` UTF-8 byte
positions into the source it was parsed from. Children are discovered
generically from dataclass fields, so ``iter_child_nodes`` and ``walk``
work for every node the way their ``ast`` module namesakes do.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, fields
from typing import Iterator


@dataclass(kw_only=True)
class Node:
    offset: int = 0
    end: int = 0


_CHILD_FIELDS: dict[type, tuple[str, ...]] = {}


def _child_fields(node: Node) -> tuple[str, ...]:
    cls = type(node)
    names = _CHILD_FIELDS.get(cls)
    if names is None:
        names = tuple(f.name for f in fields(cls) if f.name not in ("offset", "end"))
        _CHILD_FIELDS[cls] = names
    return names


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield direct child nodes in source order."""
    for name in _child_fields(node):
        value = getattr(node, name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Depth-first, pre-order traversal including ``node`` itself."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        children = list(iter_child_nodes(current))
        stack.extend(reversed(children))


def walk_breadth_first(node: Node) -> Iterator[Node]:
    todo = deque([node])
    while todo:
        current = todo.popleft()
        todo.extend(iter_child_nodes(current))
        yield current


# ---------------------------------------------------------------------------
# Types and declarations
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class TypeRef(Node):
    """A type annotation, kept as normalized source text."""

    text: str
    implicitly_unwrapped: bool = False

    @property
    def base_text(self) -> str:
        """Type text without a trailing ``!`` or ``?``."""
        if self.text.endswith(("!", "?")):
            return self.text[:-1]
        return self.text


@dataclass(kw_only=True)
class Attribute(Node):
    name: str
    arguments: str = ""


@dataclass(kw_only=True)
class Declaration(Node):
    attributes: list[Attribute] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)

    def has_attribute(self, *names: str) -> bool:
        return any(a.name in names for a in self.attributes)

    @property
    def is_private(self) -> bool:
        return any(m in ("private", "fileprivate") for m in self.modifiers)

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers or "class" in self.modifiers


@dataclass(kw_only=True)
class SourceFile(Node):
    statements: list[Node] = field(default_factory=list)


@dataclass(kw_only=True)
class ImportDecl(Declaration):
    path: str
    kind: str | None = None

    @property
    def module(self) -> str:
        return self.path.split(".")[0]


@dataclass(kw_only=True)
class TypeDecl(Declaration):
    """struct, class, enum, protocol or actor."""

    kind: str
    name: str
    generic_params: str = ""
    inherits: list[TypeRef] = field(default_factory=list)
    members: list[Node] = field(default_factory=list)

    def inherits_from(self, name: str) -> bool:
        return any(t.text == name or t.text.endswith("." + name) for t in self.inherits)


@dataclass(kw_only=True)
class ExtensionDecl(Declaration):
    extended: TypeRef
    inherits: list[TypeRef] = field(default_factory=list)
    members: list[Node] = field(default_factory=list)


@dataclass(kw_only=True)
class Parameter(Node):
    label: str | None
    name: str
    type: TypeRef | None = None
    default: Node | None = None
    variadic: bool = False


@dataclass(kw_only=True)
class CodeBlock(Node):
    statements: list[Node] = field(default_factory=list)


@dataclass(kw_only=True)
class FunctionDecl(Declaration):
    name: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: TypeRef | None = None
    body: CodeBlock | None = None
    generic_params: str = ""
    where_clause: str = ""
    is_operator: bool = False
    is_async: bool = False
    throws: bool = False

    @property
    def returns_void(self) -> bool:
        return self.return_type is None or self.return_type.text in ("Void", "()")


@dataclass(kw_only=True)
class Accessor(Node):
    kind: str
    body: CodeBlock | None = None


@dataclass(kw_only=True)
class InitializerDecl(Declaration):
    """init, deinit or subscript."""

    kind: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: TypeRef | None = None
    body: CodeBlock | None = None
    accessors: list[Accessor] = field(default_factory=list)
    failable: bool = False


@dataclass(kw_only=True)
class PatternBinding(Node):
    pattern: Node
    type: TypeRef | None = None
    initializer: Node | None = None
    accessors: list[Accessor] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        if isinstance(self.pattern, Identifier):
            return self.pattern.name
        return None


@dataclass(kw_only=True)
class VariableDecl(Declaration):
    binding_kind: str
    bindings: list[PatternBinding] = field(default_factory=list)


@dataclass(kw_only=True)
class EnumCaseElement(Node):
    name: str
    associated: list[Parameter] = field(default_factory=list)
    raw_value: Node | None = None


@dataclass(kw_only=True)
class EnumCaseDecl(Declaration):
    elements: list[EnumCaseElement] = field(default_factory=list)


@dataclass(kw_only=True)
class TypeAliasDecl(Declaration):
    """typealias or associatedtype."""

    name: str
    kind: str = "typealias"
    type: TypeRef | None = None


@dataclass(kw_only=True)
class UnknownDecl(Declaration):
    """operator, precedencegroup and other declarations skipped wholesale."""

    keyword: str


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class OptionalBinding(Node):
    """``let x = expr`` inside a condition list."""

    kind: str
    pattern: Node
    type: TypeRef | None = None
    initializer: Node | None = None


@dataclass(kw_only=True)
class CaseCondition(Node):
    """``case pattern = expr`` inside a condition list."""

    pattern: Node
    initializer: Node


@dataclass(kw_only=True)
class IfStmt(Node):
    conditions: list[Node]
    body: CodeBlock
    else_body: CodeBlock | IfStmt | None = None


@dataclass(kw_only=True)
class GuardStmt(Node):
    conditions: list[Node]
    body: CodeBlock


@dataclass(kw_only=True)
class ForStmt(Node):
    pattern: Node
    sequence: Node
    body: CodeBlock
    where_clause: Node | None = None


@dataclass(kw_only=True)
class WhileStmt(Node):
    conditions: list[Node]
    body: CodeBlock


@dataclass(kw_only=True)
class RepeatStmt(Node):
    body: CodeBlock
    condition: Node


@dataclass(kw_only=True)
class SwitchCase(Node):
    patterns: list[Node] = field(default_factory=list)
    where_clause: Node | None = None
    statements: list[Node] = field(default_factory=list)
    is_default: bool = False


@dataclass(kw_only=True)
class SwitchStmt(Node):
    subject: Node
    cases: list[SwitchCase] = field(default_factory=list)


@dataclass(kw_only=True)
class CatchClause(Node):
    body: CodeBlock
    pattern: Node | None = None
    where_clause: Node | None = None


@dataclass(kw_only=True)
class DoStmt(Node):
    body: CodeBlock
    catches: list[CatchClause] = field(default_factory=list)


@dataclass(kw_only=True)
class ReturnStmt(Node):
    value: Node | None = None


@dataclass(kw_only=True)
class ThrowStmt(Node):
    value: Node


@dataclass(kw_only=True)
class BreakStmt(Node):
    label: str | None = None


@dataclass(kw_only=True)
class ContinueStmt(Node):
    label: str | None = None


@dataclass(kw_only=True)
class FallthroughStmt(Node):
    pass


@dataclass(kw_only=True)
class DeferStmt(Node):
    body: CodeBlock


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class Identifier(Node):
    name: str


@dataclass(kw_only=True)
class MemberAccess(Node):
    """``base.name``; ``base`` is None for implicit members like ``.red``."""

    base: Node | None
    name: str


@dataclass(kw_only=True)
class Argument(Node):
    label: str | None
    value: Node


@dataclass(kw_only=True)
class Closure(Node):
    parameters: list[str] = field(default_factory=list)
    signature: str = ""
    body: CodeBlock = field(default_factory=CodeBlock)


@dataclass(kw_only=True)
class Call(Node):
    callee: Node
    arguments: list[Argument] = field(default_factory=list)
    trailing_closures: list[Closure] = field(default_factory=list)

    @property
    def callee_name(self) -> str | None:
        """Simple name of the called function, if it has one."""
        if isinstance(self.callee, Identifier):
            return self.callee.name
        if isinstance(self.callee, MemberAccess):
            return self.callee.name
        return None


@dataclass(kw_only=True)
class SubscriptExpr(Node):
    base: Node
    arguments: list[Argument] = field(default_factory=list)


@dataclass(kw_only=True)
class ForceUnwrap(Node):
    expr: Node


@dataclass(kw_only=True)
class OptionalChain(Node):
    expr: Node


@dataclass(kw_only=True)
class PrefixExpr(Node):
    operator: str
    operand: Node


@dataclass(kw_only=True)
class PostfixExpr(Node):
    operator: str
    operand: Node


@dataclass(kw_only=True)
class BinaryExpr(Node):
    operator: str
    left: Node
    right: Node


@dataclass(kw_only=True)
class TernaryExpr(Node):
    condition: Node
    then: Node
    orelse: Node


@dataclass(kw_only=True)
class CastExpr(Node):
    """``as``, ``as?``, ``as!`` or ``is``; ``expr`` is None in ``case is T`` patterns."""

    operator: str
    expr: Node | None
    type: TypeRef


@dataclass(kw_only=True)
class TryExpr(Node):
    kind: str
    expr: Node

    @property
    def is_forced(self) -> bool:
        return self.kind == "try!"


@dataclass(kw_only=True)
class AwaitExpr(Node):
    expr: Node


@dataclass(kw_only=True)
class BindingPattern(Node):
    """``let x`` / ``var x`` inside a pattern."""

    kind: str
    pattern: Node


@dataclass(kw_only=True)
class Literal(Node):
    kind: str
    value: str


@dataclass(kw_only=True)
class StringLiteral(Node):
    value: str
    interpolations: list[Node] = field(default_factory=list)


@dataclass(kw_only=True)
class ArrayLiteral(Node):
    elements: list[Node] = field(default_factory=list)


@dataclass(kw_only=True)
class DictEntry(Node):
    key: Node
    value: Node


@dataclass(kw_only=True)
class DictLiteral(Node):
    entries: list[DictEntry] = field(default_factory=list)


@dataclass(kw_only=True)
class TupleExpr(Node):
    elements: list[Argument] = field(default_factory=list)


@dataclass(kw_only=True)
class KeyPathExpr(Node):
    text: str


@dataclass(kw_only=True)
class PoundExpr(Node):
    """``#selector(...)``, ``#available(...)``, ``#Preview { }`` and friends."""

    name: str
    arguments: str = ""
    trailing_closures: list[Closure] = field(default_factory=list)


FUNCTION_LIKE = (FunctionDecl, InitializerDecl)
