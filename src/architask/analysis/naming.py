"""Naming convention analyzer."""

from __future__ import annotations

from dataclasses import dataclass

from architask.analysis.base import Analyzer
from architask.core.models import Finding, FindingType, Severity
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.parser import parse

BOOLEAN_PREFIXES = ("is", "has", "should", "can", "will", "did", "was", "were", "allows", "needs", "requires")
PROTOCOL_SUFFIXES = ("able", "ible", "ing", "Protocol", "Type", "Delegate", "DataSource")
TYPE_KIND_LABELS = {"struct": "Struct", "class": "Class", "enum": "Enum", "protocol": "Protocol"}


@dataclass
class NamingConfig:
    enforce_type_case: bool = True
    enforce_function_case: bool = True
    enforce_variable_case: bool = True
    enforce_boolean_prefix: bool = True
    enforce_protocol_naming: bool = False
    min_name_length: int = 2
    max_name_length: int = 50

    @classmethod
    def default(cls) -> NamingConfig:
        return cls()

    @classmethod
    def strict(cls) -> NamingConfig:
        return cls(enforce_protocol_naming=True, min_name_length=3, max_name_length=40)


def is_upper_camel_case(name: str) -> bool:
    if not name:
        return False
    if not (name[0].isupper() or name[0] == "_"):
        return False
    return "_" not in name[1:]


def is_lower_camel_case(name: str) -> bool:
    if not name:
        return False
    if not (name[0].islower() or name[0] == "_"):
        return False
    return "_" not in name[1:] or name.startswith("_")


def is_screaming_snake_case(name: str) -> bool:
    return all(ch.isupper() or ch == "_" or ch.isdigit() for ch in name)


def has_boolean_prefix(name: str) -> bool:
    for prefix in BOOLEAN_PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix) and name[len(prefix)].isupper():
            return True
    return False


class NamingAnalyzer(Analyzer):
    """Checks identifier casing per declaration kind.

    Types are UpperCamelCase; functions, variables and enum cases are
    lowerCamelCase (variables may also be SCREAMING_SNAKE_CASE). Booleans
    annotated ``: Bool`` need an is/has/should-style prefix. Protocol naming
    is optional and deliberately loose: anything that does not end in ``ed``
    or ``ly`` passes as a noun.
    """

    name = "naming"
    supported_finding_types = (FindingType.NAMING_VIOLATION,)
    finding_type = FindingType.NAMING_VIOLATION

    def __init__(self, config: NamingConfig | None = None):
        self.config = config or NamingConfig.default()

    def analyze(self, path: str, content: str) -> list[Finding]:
        tree = parse(content)
        lines = LineIndex(content)
        findings: list[Finding] = []

        for node in n.walk(tree):
            if isinstance(node, n.TypeDecl) and node.kind in TYPE_KIND_LABELS:
                line = lines.line_for(node.offset)
                if self.config.enforce_type_case:
                    self._check_type_name(node.name, TYPE_KIND_LABELS[node.kind], path, line, findings)
                if node.kind == "protocol" and self.config.enforce_protocol_naming:
                    self._check_protocol_name(node.name, path, line, findings)

            elif isinstance(node, n.FunctionDecl):
                if self.config.enforce_function_case:
                    self._check_function_name(node, path, lines, findings)

            elif isinstance(node, n.VariableDecl):
                if self.config.enforce_variable_case:
                    line = lines.line_for(node.offset)
                    for binding in node.bindings:
                        if binding.name is not None:
                            self._check_variable_name(binding, path, line, findings)

            elif isinstance(node, n.EnumCaseDecl):
                for element in node.elements:
                    if not is_lower_camel_case(element.name):
                        findings.append(self._make_finding(
                            message=f"Enum case '{element.name}' should be lowerCamelCase",
                            path=path,
                            line=lines.line_for(element.offset),
                            severity=Severity.INFO,
                            context={"kind": "enumCase", "name": element.name, "expected": "lowerCamelCase"},
                        ))

        return findings

    def _check_type_name(self, name: str, kind: str, path: str, line: int, findings: list[Finding]) -> None:
        cfg = self.config
        if len(name) < cfg.min_name_length:
            findings.append(self._make_finding(
                message=f"{kind} name '{name}' is too short (min: {cfg.min_name_length})",
                path=path,
                line=line,
                severity=Severity.INFO,
                context={
                    "kind": kind.lower(),
                    "name": name,
                    "reason": "tooShort",
                    "minLength": str(cfg.min_name_length),
                },
            ))
        if len(name) > cfg.max_name_length:
            findings.append(self._make_finding(
                message=f"{kind} name '{name}' is too long (max: {cfg.max_name_length})",
                path=path,
                line=line,
                severity=Severity.INFO,
                context={
                    "kind": kind.lower(),
                    "name": name,
                    "reason": "tooLong",
                    "maxLength": str(cfg.max_name_length),
                },
            ))
        if not is_upper_camel_case(name):
            findings.append(self._make_finding(
                message=f"{kind} '{name}' should be UpperCamelCase",
                path=path,
                line=line,
                severity=Severity.WARNING,
                context={"kind": kind.lower(), "name": name, "expected": "UpperCamelCase"},
            ))

    def _check_function_name(
        self, node: n.FunctionDecl, path: str, lines: LineIndex, findings: list[Finding]
    ) -> None:
        name = node.name
        # operators
        if node.is_operator or not (name[0].isalpha() or name[0] == "_"):
            return
        if not is_lower_camel_case(name):
            findings.append(self._make_finding(
                message=f"Function '{name}' should be lowerCamelCase",
                path=path,
                line=lines.line_for(node.offset),
                severity=Severity.WARNING,
                context={"kind": "function", "name": name, "expected": "lowerCamelCase"},
            ))

    def _check_variable_name(
        self, binding: n.PatternBinding, path: str, line: int, findings: list[Finding]
    ) -> None:
        name = binding.name or ""
        if name == "_":
            return

        if not is_lower_camel_case(name) and not is_screaming_snake_case(name):
            findings.append(self._make_finding(
                message=f"Variable '{name}' should be lowerCamelCase",
                path=path,
                line=line,
                severity=Severity.INFO,
                context={"kind": "variable", "name": name, "expected": "lowerCamelCase"},
            ))

        if (
            self.config.enforce_boolean_prefix
            and binding.type is not None
            and binding.type.text == "Bool"
            and not has_boolean_prefix(name)
        ):
            findings.append(self._make_finding(
                message=f"Boolean '{name}' should use is/has/should/can prefix",
                path=path,
                line=line,
                severity=Severity.INFO,
                context={
                    "kind": "boolean",
                    "name": name,
                    "suggestion": f"is{name[:1].upper()}{name[1:]}",
                },
            ))

    def _check_protocol_name(self, name: str, path: str, line: int, findings: list[Finding]) -> None:
        has_valid_suffix = name.endswith(PROTOCOL_SUFFIXES)
        looks_like_noun = not name.endswith(("ed", "ly"))
        if has_valid_suffix or looks_like_noun:
            return
        findings.append(self._make_finding(
            message=f"Protocol '{name}' should describe a capability (-able/-ible) or be a noun",
            path=path,
            line=line,
            severity=Severity.INFO,
            context={"kind": "protocol", "name": name, "suggestion": f"{name}able or {name}Protocol"},
        ))
