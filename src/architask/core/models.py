"""Shared data models used across architask modules."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from architask.core.intents import Intent, intent_from_dict


def _new_id() -> str:
    return uuid.uuid4().hex


class Severity(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2
    CRITICAL = 3

    @classmethod
    def parse(cls, value: int | str) -> Severity:
        """Accept either the ordinal or the lowercase name."""
        if isinstance(value, str) and not value.isdigit():
            return cls[value.upper()]
        return cls(int(value))


class FindingType(enum.Enum):
    MISSING_BINDING = "missingBinding"
    UNUSED_DEPENDENCY = "unusedDependency"
    ORPHANED_VIEW = "orphanedView"
    CIRCULAR_REFERENCE = "circularReference"
    UNTESTED = "untested"
    UNDOCUMENTED = "undocumented"
    HIGH_COMPLEXITY = "highComplexity"
    DUPLICATED_LOGIC = "duplicatedLogic"
    DEAD_CODE = "deadCode"
    NAMING_VIOLATION = "namingViolation"
    UNUSED_IMPORT = "unusedImport"
    SECURITY_ISSUE = "securityIssue"
    MODULE_BOUNDARY_VIOLATION = "moduleBoundaryViolation"
    LAYER_VIOLATION = "layerViolation"
    MISSING_ABSTRACTION = "missingAbstraction"
    MISSING_STATE_OBJECT = "missingStateObject"
    MISSING_ENVIRONMENT_OBJECT = "missingEnvironmentObject"
    VIEW_WITHOUT_PREVIEW = "viewWithoutPreview"


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Finding:
    """A single issue detected by an analyzer. Never mutated after creation."""

    type: FindingType
    location: SourceLocation
    severity: Severity
    message: str
    context: dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "location": {
                "file": self.location.file,
                "line": self.location.line,
                "column": self.location.column,
            },
            "severity": int(self.severity),
            "context": dict(self.context),
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Finding:
        loc = data.get("location", {})
        return cls(
            type=FindingType(data["type"]),
            location=SourceLocation(
                file=loc.get("file", ""),
                line=loc.get("line", 0),
                column=loc.get("column", 0),
            ),
            severity=Severity.parse(data.get("severity", 0)),
            message=data.get("message", ""),
            context={str(k): str(v) for k, v in data.get("context", {}).items()},
            id=data.get("id") or _new_id(),
        )


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaskScope:
    """Boundary a task may touch. Use one of the concrete subclasses."""

    kind: ClassVar[str] = ""

    @property
    def allowed_paths(self) -> list[str]:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {"case": self.kind}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> TaskScope:
        case = data.get("case")
        if case == FileScope.kind:
            return FileScope(data["path"])
        if case == ModuleScope.kind:
            return ModuleScope(data["name"])
        if case == FeatureScope.kind:
            return FeatureScope(data["name"])
        if case == ProjectScope.kind:
            return ProjectScope()
        raise ValueError(f"Unknown scope case: {case!r}")


@dataclass(frozen=True)
class FileScope(TaskScope):
    kind: ClassVar[str] = "file"

    path: str

    @property
    def allowed_paths(self) -> list[str]:
        return [self.path]

    def to_dict(self) -> dict[str, Any]:
        return {"case": self.kind, "path": self.path}


@dataclass(frozen=True)
class ModuleScope(TaskScope):
    kind: ClassVar[str] = "module"

    name: str

    @property
    def allowed_paths(self) -> list[str]:
        return [f"Sources/{self.name}/**"]

    def to_dict(self) -> dict[str, Any]:
        return {"case": self.kind, "name": self.name}


@dataclass(frozen=True)
class FeatureScope(TaskScope):
    kind: ClassVar[str] = "feature"

    name: str

    @property
    def allowed_paths(self) -> list[str]:
        return [f"Features/{self.name}/**"]

    def to_dict(self) -> dict[str, Any]:
        return {"case": self.kind, "name": self.name}


@dataclass(frozen=True)
class ProjectScope(TaskScope):
    kind: ClassVar[str] = "project"

    @property
    def allowed_paths(self) -> list[str]:
        return ["**"]


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


class DiffType(enum.Enum):
    ADD_PROPERTY = "addProperty"
    ADD_METHOD = "addMethod"
    ADD_IMPORT = "addImport"
    MODIFY_BODY = "modifyBody"
    ADD_FILE = "addFile"
    DELETE_LINES = "deleteLines"
    RENAME_SYMBOL = "renameSymbol"
    ADD_WRAPPER = "addWrapper"
    ADD_TYPE = "addType"


class StepStatus(enum.Enum):
    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    diff: str
    tests_ran: bool = False
    tests_passed: bool = False
    warnings: list[str] = field(default_factory=list)
    execution_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "diff": self.diff,
            "tests_ran": self.tests_ran,
            "tests_passed": self.tests_passed,
            "warnings": list(self.warnings),
            "execution_time": self.execution_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StepResult:
        return cls(
            diff=data.get("diff", ""),
            tests_ran=data.get("tests_ran", False),
            tests_passed=data.get("tests_passed", False),
            warnings=list(data.get("warnings", [])),
            execution_time=data.get("execution_time", 0.0),
        )


@dataclass
class TaskStep:
    """One atomic, constrained unit of work inside a task."""

    description: str
    allowed_files: list[str] = field(default_factory=list)
    expected_diff_type: DiffType = DiffType.MODIFY_BODY
    id: str = field(default_factory=_new_id)
    status: StepStatus = StepStatus.PENDING
    result: StepResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "allowed_files": list(self.allowed_files),
            "expected_diff_type": self.expected_diff_type.value,
            "status": self.status.value,
            "result": self.result.to_dict() if self.result else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskStep:
        result = data.get("result")
        return cls(
            description=data.get("description", ""),
            allowed_files=list(data.get("allowed_files", [])),
            expected_diff_type=DiffType(data.get("expected_diff_type", "modifyBody")),
            id=data.get("id") or _new_id(),
            status=StepStatus(data.get("status", "pending")),
            result=StepResult.from_dict(result) if result else None,
        )


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskStatus(enum.Enum):
    PROPOSED = "proposed"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    FAILED = "failed"
    DEFERRED = "deferred"


TERMINAL_STATUSES = frozenset({TaskStatus.REJECTED, TaskStatus.COMPLETED, TaskStatus.FAILED})


class Decision(enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    MODIFIED = "modified"
    DEFERRED = "deferred"


@dataclass
class TaskFeedback:
    decision: Decision
    reason: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "decision": self.decision.value,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskFeedback:
        return cls(
            decision=Decision(data["decision"]),
            reason=data.get("reason"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class Task:
    """A proposed unit of work derived from one finding."""

    title: str
    intent: Intent
    scope: TaskScope
    steps: list[TaskStep] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PROPOSED
    requires_approval: bool = True
    confidence_factors: dict[str, float] = field(default_factory=dict)
    source_findings: list[str] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    feedback: TaskFeedback | None = None

    @property
    def confidence(self) -> float:
        """Mean of the confidence factors, 0.5 when there are none."""
        if not self.confidence_factors:
            return 0.5
        return sum(self.confidence_factors.values()) / len(self.confidence_factors)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    # Lifecycle -------------------------------------------------------------

    def approve(self) -> None:
        if self.status != TaskStatus.PROPOSED:
            return
        self.status = TaskStatus.APPROVED
        self.feedback = TaskFeedback(decision=Decision.APPROVED)

    def reject(self, reason: str) -> None:
        if self.status != TaskStatus.PROPOSED:
            return
        self.status = TaskStatus.REJECTED
        self.feedback = TaskFeedback(decision=Decision.REJECTED, reason=reason)

    def defer(self, reason: str | None = None) -> None:
        if self.status != TaskStatus.PROPOSED:
            return
        self.status = TaskStatus.DEFERRED
        self.feedback = TaskFeedback(decision=Decision.DEFERRED, reason=reason)

    def mark_in_progress(self) -> None:
        if self.status != TaskStatus.APPROVED:
            return
        self.status = TaskStatus.IN_PROGRESS

    def complete(self) -> None:
        if self.is_terminal:
            return
        self.status = TaskStatus.COMPLETED

    def fail(self) -> None:
        if self.is_terminal:
            return
        self.status = TaskStatus.FAILED

    # Serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "intent": self.intent.to_dict(),
            "scope": self.scope.to_dict(),
            "steps": [s.to_dict() for s in self.steps],
            "status": self.status.value,
            "requires_approval": self.requires_approval,
            "confidence_factors": dict(self.confidence_factors),
            "source_findings": list(self.source_findings),
            "created_at": self.created_at.isoformat(),
            "feedback": self.feedback.to_dict() if self.feedback else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        feedback = data.get("feedback")
        return cls(
            title=data["title"],
            intent=intent_from_dict(data["intent"]),
            scope=TaskScope.from_dict(data["scope"]),
            steps=[TaskStep.from_dict(s) for s in data.get("steps", [])],
            status=TaskStatus(data.get("status", "proposed")),
            requires_approval=data.get("requires_approval", True),
            confidence_factors={
                k: float(v) for k, v in data.get("confidence_factors", {}).items()
            },
            source_findings=list(data.get("source_findings", [])),
            id=data.get("id") or _new_id(),
            created_at=datetime.fromisoformat(data["created_at"])
            if "created_at" in data
            else datetime.now(),
            feedback=TaskFeedback.from_dict(feedback) if feedback else None,
        )
