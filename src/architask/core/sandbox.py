"""Execution sandbox: limits on what a single step may change."""

from __future__ import annotations

from dataclasses import dataclass, field

from architask.core.models import DiffType, TaskScope, TaskStep


class SandboxViolation(Exception):
    """A diff or path broke the sandbox constraints."""

    kind = "sandboxViolation"


class PathNotAllowed(SandboxViolation):
    kind = "pathNotAllowed"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path not allowed: {path}")


class TooManyChanges(SandboxViolation):
    kind = "tooManyChanges"

    def __init__(self, count: int, maximum: int):
        self.count = count
        self.maximum = maximum
        super().__init__(f"Too many changes: {count} (max: {maximum})")


class ExecutionTimeout(SandboxViolation):
    kind = "timeout"

    def __init__(self) -> None:
        super().__init__("Execution timed out")


class TestsFailed(SandboxViolation):
    __test__ = False
    kind = "testsFailed"

    def __init__(self, tests: list[str]):
        self.tests = tests
        super().__init__(f"Tests failed: {', '.join(tests)}")


class NewFileNotAllowed(SandboxViolation):
    kind = "newFileNotAllowed"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Creating new files not allowed: {path}")


@dataclass
class ExecutionSandbox:
    """Constraints for one step.

    ``timeout`` and ``must_pass_tests`` are a contract for whoever runs the
    step; nothing in this package enforces them.
    """

    allowed_paths: set[str] = field(default_factory=set)
    read_only_paths: set[str] = field(default_factory=set)
    max_lines_changed: int = 50
    timeout: float = 30.0
    must_pass_tests: bool = True
    allow_new_files: bool = False

    @classmethod
    def for_step(cls, step: TaskStep, scope: TaskScope) -> ExecutionSandbox:
        allowed = set(step.allowed_files)
        return cls(
            allowed_paths=allowed,
            read_only_paths=set(scope.allowed_paths) - allowed,
            allow_new_files=step.expected_diff_type == DiffType.ADD_FILE,
        )

    def validate(self, diff: str) -> None:
        """Raise TooManyChanges when the diff touches too many lines."""
        changed = 0
        for line in diff.split("\n"):
            if line.startswith("---") or line.startswith("+++"):
                continue
            if line.startswith("+") or line.startswith("-"):
                changed += 1
        if changed > self.max_lines_changed:
            raise TooManyChanges(changed, self.max_lines_changed)

    def is_path_allowed(self, path: str) -> bool:
        if path in self.allowed_paths:
            return True
        return any(_path_matches(path, pattern) for pattern in self.allowed_paths)

    def check_path(self, path: str, *, exists: bool = True) -> None:
        """Raise when ``path`` may not be written."""
        if not exists and not self.allow_new_files:
            raise NewFileNotAllowed(path)
        if not self.is_path_allowed(path):
            raise PathNotAllowed(path)


def _path_matches(path: str, pattern: str) -> bool:
    if pattern == "**":
        return True
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        return path == prefix or path.startswith(prefix + "/")
    return path == pattern
