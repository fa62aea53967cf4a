"""Base analyzer class and the pipeline that runs analyzers over one file."""

from __future__ import annotations

from abc import ABC, abstractmethod

from architask.core.models import Finding, FindingType, Severity, SourceLocation
from architask.syntax.nodes import Node


class Analyzer(ABC):
    """Abstract base class for all analyzers.

    An analyzer takes a file path (used only for labeling) and the source
    text, and returns findings. Analyzers hold configuration only; all
    per-file state lives in the ``analyze`` call.
    """

    name: str = ""
    supported_finding_types: tuple[FindingType, ...] = ()
    finding_type: FindingType = FindingType.NAMING_VIOLATION
    severity: Severity = Severity.WARNING

    @abstractmethod
    def analyze(self, path: str, content: str) -> list[Finding]:
        """Analyze a single file. Raises SyntaxParseError on malformed input."""
        ...

    def _make_finding(
        self,
        message: str,
        path: str,
        line: int,
        context: dict[str, str] | None = None,
        severity: Severity | None = None,
        finding_type: FindingType | None = None,
    ) -> Finding:
        """Helper to create a Finding with this analyzer's defaults."""
        return Finding(
            type=finding_type or self.finding_type,
            location=SourceLocation(file=path, line=line),
            severity=self.severity if severity is None else severity,
            message=message,
            context=context or {},
        )


class AnalyzerPipeline:
    """Runs analyzers in list order and concatenates their findings."""

    def __init__(self, analyzers: list[Analyzer]):
        self.analyzers = list(analyzers)

    def analyze(self, path: str, content: str) -> list[Finding]:
        findings: list[Finding] = []
        for analyzer in self.analyzers:
            findings.extend(analyzer.analyze(path, content))
        return findings

    @property
    def supported_finding_types(self) -> list[FindingType]:
        seen: list[FindingType] = []
        for analyzer in self.analyzers:
            for finding_type in analyzer.supported_finding_types:
                if finding_type not in seen:
                    seen.append(finding_type)
        return seen


def node_text(encoded: bytes, node: Node) -> str:
    """Source text of ``node``, sliced by its UTF-8 byte span."""
    return encoded[node.offset : node.end].decode("utf-8", errors="replace").strip()
