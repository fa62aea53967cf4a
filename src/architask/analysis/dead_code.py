"""Dead code analyzer.

Reports code after a block terminator, functions with empty bodies, and
private functions or properties whose names are never referenced in the
file. The unused-private check is purely name based: it does not know
about scopes, so a private member shadowed by, or sharing its name with,
another symbol in the same file is treated as used.
"""

from __future__ import annotations

import re
from typing import Iterator

from architask.analysis.base import Analyzer
from architask.core.models import Finding, FindingType, Severity
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.parser import parse

# guard counts: its else branch has to leave the scope
TERMINATORS = (n.ReturnStmt, n.ThrowStmt, n.GuardStmt)
TERMINATOR_NAMES = {n.ReturnStmt: "return", n.ThrowStmt: "throw", n.GuardStmt: "guard"}

_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def iter_unreachable(
    tree: n.Node, terminators: tuple[type, ...] = TERMINATORS
) -> Iterator[tuple[n.CodeBlock, int]]:
    """Yield ``(block, index)`` where ``block.statements[index]`` is the first
    terminator followed by at least one more statement."""
    for node in n.walk(tree):
        if not isinstance(node, n.CodeBlock):
            continue
        for index, statement in enumerate(node.statements[:-1]):
            if isinstance(statement, terminators):
                yield node, index
                break


def referenced_names(tree: n.Node) -> set[str]:
    """Names referenced as expressions. Declared binding names do not count."""
    names: set[str] = set()
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, n.Identifier):
            names.add(node.name)
        elif isinstance(node, n.MemberAccess):
            names.add(node.name)
        elif isinstance(node, n.PoundExpr):
            names.update(_WORD_RE.findall(node.arguments))
        elif isinstance(node, n.KeyPathExpr):
            names.update(_WORD_RE.findall(node.text))
        for child in n.iter_child_nodes(node):
            if isinstance(node, n.PatternBinding) and child is node.pattern:
                continue
            stack.append(child)
    return names


class DeadCodeAnalyzer(Analyzer):
    name = "dead_code"
    supported_finding_types = (FindingType.DEAD_CODE,)
    finding_type = FindingType.DEAD_CODE
    severity = Severity.WARNING

    def analyze(self, path: str, content: str) -> list[Finding]:
        tree = parse(content)
        lines = LineIndex(content)
        findings: list[Finding] = []

        unreachable = {id(block): index for block, index in iter_unreachable(tree)}
        private_functions: dict[str, int] = {}
        private_properties: dict[str, int] = {}

        for node in n.walk(tree):
            if isinstance(node, n.CodeBlock) and id(node) in unreachable:
                index = unreachable[id(node)]
                terminator = node.statements[index]
                after_line = lines.line_for(terminator.offset)
                findings.append(self._make_finding(
                    message=f"Unreachable code after line {after_line}",
                    path=path,
                    line=lines.line_for(node.statements[index + 1].offset),
                    context={
                        "reason": "unreachable",
                        "afterLine": str(after_line),
                        "terminator": TERMINATOR_NAMES[type(terminator)],
                    },
                ))

            elif isinstance(node, n.FunctionDecl):
                line = lines.line_for(node.offset)
                if node.is_private:
                    private_functions[node.name] = line
                if node.body is not None and not node.body.statements:
                    findings.append(self._make_finding(
                        message=f"Function '{node.name}' has an empty body",
                        path=path,
                        line=line,
                        severity=Severity.INFO,
                        context={"reason": "emptyFunction", "function": node.name},
                    ))

            elif isinstance(node, n.VariableDecl) and node.is_private:
                line = lines.line_for(node.offset)
                for binding in node.bindings:
                    if binding.name is not None:
                        private_properties[binding.name] = line

        used = referenced_names(tree)

        for name, line in private_functions.items():
            if name not in used:
                findings.append(self._make_finding(
                    message=f"Private function '{name}' appears to be unused",
                    path=path,
                    line=line,
                    context={"reason": "unusedPrivateFunction", "function": name},
                ))

        for name, line in private_properties.items():
            if name not in used:
                findings.append(self._make_finding(
                    message=f"Private property '{name}' appears to be unused",
                    path=path,
                    line=line,
                    context={"reason": "unusedPrivateProperty", "property": name},
                ))

        return findings
