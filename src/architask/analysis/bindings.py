"""Framework binding analyzer.

Looks at structs conforming to ``View`` and flags stored properties whose
type looks like an observable model but that carry no property wrapper.
"""

from __future__ import annotations

from architask.analysis.base import Analyzer
from architask.core.models import Finding, FindingType, Severity
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.parser import parse

OBSERVABLE_SUFFIXES = ("ViewModel", "Store", "Model")
WRAPPER_ATTRIBUTES = ("State", "Binding", "ObservedObject", "StateObject", "EnvironmentObject", "Environment")


class BindingAnalyzer(Analyzer):
    name = "bindings"
    supported_finding_types = (
        FindingType.MISSING_BINDING,
        FindingType.MISSING_STATE_OBJECT,
        FindingType.MISSING_ENVIRONMENT_OBJECT,
    )
    finding_type = FindingType.MISSING_STATE_OBJECT
    severity = Severity.WARNING

    def analyze(self, path: str, content: str) -> list[Finding]:
        tree = parse(content)
        lines = LineIndex(content)
        findings: list[Finding] = []

        for node in n.walk(tree):
            if isinstance(node, n.TypeDecl) and node.kind == "struct" and node.inherits_from("View"):
                findings.extend(self._check_view(node, path, lines))

        return findings

    def _check_view(self, view: n.TypeDecl, path: str, lines: LineIndex) -> list[Finding]:
        findings = []
        for member in view.members:
            if not isinstance(member, n.VariableDecl) or member.has_attribute(*WRAPPER_ATTRIBUTES):
                continue
            for binding in member.bindings:
                if binding.name is None or binding.type is None:
                    continue
                type_text = binding.type.text
                if not type_text.endswith(OBSERVABLE_SUFFIXES):
                    continue
                findings.append(self._make_finding(
                    message=(
                        f"Property '{binding.name}' of type '{type_text}' in {view.name} "
                        "may need @StateObject or @ObservedObject"
                    ),
                    path=path,
                    line=lines.line_for(member.offset),
                    context={"property": binding.name, "type": type_text, "view": view.name},
                ))
        return findings
