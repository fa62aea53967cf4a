"""Remediation intents: the closed set of actions a task can carry out.

Every intent is a frozen dataclass with a stable ``key`` (its variant tag)
and a ``category``. JSON encoding is ``{"case": key, **fields}``.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar


class IntentCategory(enum.Enum):
    STRUCTURAL = "structural"
    DATA_FLOW = "dataFlow"
    QUALITY = "quality"
    ARCHITECTURE = "architecture"
    DOCUMENTATION = "documentation"


class TestType(enum.Enum):
    __test__ = False

    UNIT = "unit"
    INTEGRATION = "integration"
    SNAPSHOT = "snapshot"
    UI = "ui"


class ArchitecturePattern(enum.Enum):
    MVVM = "mvvm"
    COORDINATOR = "coordinator"
    REPOSITORY = "repository"
    FACTORY = "factory"
    OBSERVER = "observer"


@dataclass(frozen=True)
class Intent:
    """Base class for all intents."""

    key: ClassVar[str] = ""
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    @property
    def description(self) -> str:
        return self.key

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"case": self.key}
        for name, value in asdict(self).items():
            data[name] = value.value if isinstance(value, enum.Enum) else value
        return data

    def __str__(self) -> str:
        return self.description


# Structural


@dataclass(frozen=True)
class WireUI(Intent):
    key: ClassVar[str] = "wireUI"
    category: ClassVar[IntentCategory] = IntentCategory.STRUCTURAL

    source: str
    target: str

    @property
    def description(self) -> str:
        return f"Wire {self.source} to {self.target}"


@dataclass(frozen=True)
class ExtractComponent(Intent):
    key: ClassVar[str] = "extractComponent"
    category: ClassVar[IntentCategory] = IntentCategory.STRUCTURAL

    source: str

    @property
    def description(self) -> str:
        return f"Extract component from {self.source}"


@dataclass(frozen=True)
class InjectDependency(Intent):
    key: ClassVar[str] = "injectDependency"
    category: ClassVar[IntentCategory] = IntentCategory.STRUCTURAL

    type: str
    into: str

    @property
    def description(self) -> str:
        return f"Inject {self.type} into {self.into}"


@dataclass(frozen=True)
class AddImport(Intent):
    key: ClassVar[str] = "addImport"
    category: ClassVar[IntentCategory] = IntentCategory.STRUCTURAL

    module: str
    file: str

    @property
    def description(self) -> str:
        return f"Import {self.module} in {self.file}"


# Data flow


@dataclass(frozen=True)
class AddBinding(Intent):
    key: ClassVar[str] = "addBinding"
    category: ClassVar[IntentCategory] = IntentCategory.DATA_FLOW

    property: str
    file: str

    @property
    def description(self) -> str:
        return f"Add binding '{self.property}' to {self.file}"


@dataclass(frozen=True)
class AddStateWrapper(Intent):
    key: ClassVar[str] = "addStateWrapper"
    category: ClassVar[IntentCategory] = IntentCategory.DATA_FLOW

    property: str
    type: str
    file: str

    @property
    def description(self) -> str:
        return f"Add @StateObject '{self.property}: {self.type}' to {self.file}"


@dataclass(frozen=True)
class CreateViewModel(Intent):
    key: ClassVar[str] = "createViewModel"
    category: ClassVar[IntentCategory] = IntentCategory.DATA_FLOW

    view: str

    @property
    def description(self) -> str:
        return f"Create ViewModel for {self.view}"


@dataclass(frozen=True)
class ConnectToStore(Intent):
    key: ClassVar[str] = "connectToStore"
    category: ClassVar[IntentCategory] = IntentCategory.DATA_FLOW

    view: str
    store: str

    @property
    def description(self) -> str:
        return f"Connect {self.view} to {self.store}"


# Quality


@dataclass(frozen=True)
class AddTest(Intent):
    key: ClassVar[str] = "addTest"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    target: str
    test_type: TestType = TestType.UNIT

    @property
    def description(self) -> str:
        return f"Add {self.test_type.value} test for {self.target}"


@dataclass(frozen=True)
class FixWarning(Intent):
    """Generic fallback; rules return it when a finding is not theirs."""

    key: ClassVar[str] = "fixWarning"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    diagnostic: str
    file: str

    @property
    def description(self) -> str:
        return f"Fix '{self.diagnostic}' in {self.file}"


@dataclass(frozen=True)
class RemoveDeadCode(Intent):
    key: ClassVar[str] = "removeDeadCode"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    file: str

    @property
    def description(self) -> str:
        return f"Remove dead code in {self.file}"


@dataclass(frozen=True)
class RemoveUnusedImport(Intent):
    key: ClassVar[str] = "removeUnusedImport"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    file: str

    @property
    def description(self) -> str:
        return f"Remove unused imports in {self.file}"


@dataclass(frozen=True)
class ExtractFunction(Intent):
    key: ClassVar[str] = "extractFunction"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    function: str
    file: str

    @property
    def description(self) -> str:
        return f"Extract function from '{self.function}' in {self.file}"


@dataclass(frozen=True)
class ReduceNesting(Intent):
    key: ClassVar[str] = "reduceNesting"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    file: str
    line: int

    @property
    def description(self) -> str:
        return f"Reduce nesting depth at line {self.line} in {self.file}"


@dataclass(frozen=True)
class SplitFile(Intent):
    key: ClassVar[str] = "splitFile"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    path: str

    @property
    def description(self) -> str:
        return f"Split large file {self.path}"


@dataclass(frozen=True)
class ReduceParameters(Intent):
    key: ClassVar[str] = "reduceParameters"
    category: ClassVar[IntentCategory] = IntentCategory.QUALITY

    function: str
    file: str

    @property
    def description(self) -> str:
        return f"Reduce parameters in '{self.function}' in {self.file}"


# Architecture


@dataclass(frozen=True)
class EnforceModuleBoundary(Intent):
    key: ClassVar[str] = "enforceModuleBoundary"
    category: ClassVar[IntentCategory] = IntentCategory.ARCHITECTURE

    source: str
    target: str

    @property
    def description(self) -> str:
        return f"Enforce boundary: {self.source} -> {self.target}"


@dataclass(frozen=True)
class ApplyPattern(Intent):
    key: ClassVar[str] = "applyPattern"
    category: ClassVar[IntentCategory] = IntentCategory.ARCHITECTURE

    pattern: ArchitecturePattern
    target: str

    @property
    def description(self) -> str:
        return f"Apply {self.pattern.value} to {self.target}"


@dataclass(frozen=True)
class RefactorToProtocol(Intent):
    key: ClassVar[str] = "refactorToProtocol"
    category: ClassVar[IntentCategory] = IntentCategory.ARCHITECTURE

    concrete: str

    @property
    def description(self) -> str:
        return f"Extract protocol from {self.concrete}"


# Documentation


@dataclass(frozen=True)
class DocumentPublicAPI(Intent):
    key: ClassVar[str] = "documentPublicAPI"
    category: ClassVar[IntentCategory] = IntentCategory.DOCUMENTATION

    file: str

    @property
    def description(self) -> str:
        return f"Document public API in {self.file}"


@dataclass(frozen=True)
class AddInlineComment(Intent):
    key: ClassVar[str] = "addInlineComment"
    category: ClassVar[IntentCategory] = IntentCategory.DOCUMENTATION

    location: str
    reason: str

    @property
    def description(self) -> str:
        return f"Add comment at {self.location}"


INTENT_TYPES: dict[str, type[Intent]] = {
    cls.key: cls
    for cls in (
        WireUI,
        ExtractComponent,
        InjectDependency,
        AddImport,
        AddBinding,
        AddStateWrapper,
        CreateViewModel,
        ConnectToStore,
        AddTest,
        FixWarning,
        RemoveDeadCode,
        RemoveUnusedImport,
        ExtractFunction,
        ReduceNesting,
        SplitFile,
        ReduceParameters,
        EnforceModuleBoundary,
        ApplyPattern,
        RefactorToProtocol,
        DocumentPublicAPI,
        AddInlineComment,
    )
}

_ENUM_FIELDS: dict[str, type[enum.Enum]] = {
    "test_type": TestType,
    "pattern": ArchitecturePattern,
}


def intent_from_dict(data: dict[str, Any]) -> Intent:
    """Decode an intent from its ``{"case": ..., ...}`` form."""
    case = data.get("case")
    cls = INTENT_TYPES.get(case)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"Unknown intent case: {case!r}")

    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in _ENUM_FIELDS:
            value = _ENUM_FIELDS[f.name](value)
        kwargs[f.name] = value
    return cls(**kwargs)
