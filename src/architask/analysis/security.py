"""Security analyzer: crash-prone constructs, hardcoded secrets, unsafe APIs."""

from __future__ import annotations

from dataclasses import dataclass, field

from architask.analysis.base import Analyzer, node_text
from architask.core.models import Finding, FindingType, Severity
from architask.core.position import LineIndex
from architask.syntax import nodes as n
from architask.syntax.parser import parse

DEFAULT_SECRET_PATTERNS = [
    "password",
    "secret",
    "api_key",
    "apikey",
    "token",
    "credential",
    "private_key",
    "privatekey",
    "auth",
]

UNSAFE_APIS = {
    "unsafeBitCast": "Can cause undefined behavior if types don't match",
    "unsafeDowncast": "Can crash if cast fails",
    "withUnsafePointer": "Manual memory management is error-prone",
    "withUnsafeMutablePointer": "Manual memory management is error-prone",
    "withUnsafeBytes": "Can cause memory corruption if misused",
    "assumingMemoryBound": "Assumes memory layout, can cause undefined behavior",
    "bindMemory": "Manual memory binding is dangerous",
    "deallocate": "Manual deallocation can cause use-after-free",
}


@dataclass
class SecurityConfig:
    detect_force_unwrap: bool = True
    detect_force_try: bool = True
    detect_implicit_unwrap: bool = True
    detect_hardcoded_secrets: bool = True
    detect_unsafe_apis: bool = True
    secret_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_SECRET_PATTERNS))


class SecurityAnalyzer(Analyzer):
    """Detects force unwraps, force tries, implicitly unwrapped optionals,
    string-literal secrets and calls to memory-unsafe APIs.

    Each category can be switched off independently through SecurityConfig.
    """

    name = "security"
    supported_finding_types = (FindingType.SECURITY_ISSUE,)
    finding_type = FindingType.SECURITY_ISSUE
    severity = Severity.WARNING

    def __init__(self, config: SecurityConfig | None = None):
        self.config = config or SecurityConfig()

    def analyze(self, path: str, content: str) -> list[Finding]:
        tree = parse(content)
        encoded = content.encode("utf-8")
        lines = LineIndex(content)
        cfg = self.config
        findings: list[Finding] = []

        for node in n.walk(tree):
            if isinstance(node, n.ForceUnwrap) and cfg.detect_force_unwrap:
                findings.append(self._make_finding(
                    message=(
                        "Force unwrap (!) can cause runtime crashes. "
                        "Consider using optional binding or nil coalescing."
                    ),
                    path=path,
                    line=lines.line_for(node.offset),
                    context={"issue": "forceUnwrap", "expression": node_text(encoded, node)},
                ))

            elif isinstance(node, n.TryExpr) and node.is_forced and cfg.detect_force_try:
                findings.append(self._make_finding(
                    message="Force try (try!) can cause runtime crashes. Consider using do-catch or try?.",
                    path=path,
                    line=lines.line_for(node.offset),
                    context={"issue": "forceTry", "expression": node_text(encoded, node)},
                ))

            elif isinstance(node, n.TypeRef) and node.implicitly_unwrapped and cfg.detect_implicit_unwrap:
                wrapped = node.base_text
                findings.append(self._make_finding(
                    message=(
                        f"Implicitly unwrapped optional ({wrapped}!) can cause runtime crashes. "
                        "Consider using regular optional."
                    ),
                    path=path,
                    line=lines.line_for(node.offset),
                    severity=Severity.INFO,
                    context={"issue": "implicitUnwrap", "type": wrapped},
                ))

            elif isinstance(node, n.VariableDecl) and cfg.detect_hardcoded_secrets:
                self._check_secrets(node, path, lines, findings)

            elif isinstance(node, n.Call) and cfg.detect_unsafe_apis:
                self._check_unsafe_call(node, encoded, path, lines, findings)

        return findings

    def _check_secrets(
        self, node: n.VariableDecl, path: str, lines: LineIndex, findings: list[Finding]
    ) -> None:
        for binding in node.bindings:
            name = binding.name
            if name is None or not isinstance(binding.initializer, n.StringLiteral):
                continue
            lowered = name.lower()
            if any(pattern in lowered for pattern in self.config.secret_patterns):
                findings.append(self._make_finding(
                    message=(
                        f"Potential hardcoded secret in '{name}'. "
                        "Use environment variables or secure storage."
                    ),
                    path=path,
                    line=lines.line_for(binding.offset),
                    severity=Severity.ERROR,
                    context={"issue": "hardcodedSecret", "variable": name},
                ))

    def _check_unsafe_call(
        self, node: n.Call, encoded: bytes, path: str, lines: LineIndex, findings: list[Finding]
    ) -> None:
        name = node.callee_name or node_text(encoded, node.callee)
        for api, reason in UNSAFE_APIS.items():
            if api in name:
                findings.append(self._make_finding(
                    message=f"Unsafe API '{api}' detected. {reason}",
                    path=path,
                    line=lines.line_for(node.offset),
                    context={"issue": "unsafeAPI", "api": api, "reason": reason},
                ))
                return
