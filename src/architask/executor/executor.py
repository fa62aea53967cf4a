"""Executor that only runs deterministic transforms: no heuristics, pure rewriting."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from architask.core.intents import Intent
from architask.core.models import StepResult, StepStatus, Task, TaskStatus
from architask.core.sandbox import ExecutionSandbox, SandboxViolation
from architask.executor.applier import TransformApplier
from architask.transforms.base import (
    TransformContext,
    TransformError,
    TransformResult,
    UnsupportedIntent,
)
from architask.transforms.registry import TransformRegistry

logger = logging.getLogger("architask.executor")


def target_file(task: Task) -> str | None:
    """File a task's intent rewrites: the intent's own file, else the first step's."""
    file = getattr(task.intent, "file", None)
    if file:
        return file
    for step in task.steps:
        if step.allowed_files:
            return step.allowed_files[0]
    return None


class DeterministicExecutor:
    def __init__(
        self,
        registry: TransformRegistry | None = None,
        applier: TransformApplier | None = None,
    ):
        self.registry = registry or TransformRegistry.default()
        self.applier = applier

    def execute_transform(self, intent: Intent, source: str, context: TransformContext) -> TransformResult:
        """Run the transform for ``intent`` on ``source`` without touching disk."""
        transform = self.registry.transform_for(intent)
        if transform is None:
            raise UnsupportedIntent(intent)
        return transform.apply(source, intent, context)

    def validate(self, diff: str, sandbox: ExecutionSandbox) -> None:
        sandbox.validate(diff)

    def execute_transform_on_file(
        self,
        intent: Intent,
        file_path: str,
        sandbox: ExecutionSandbox,
        apply_changes: bool = False,
        project_path: Path | None = None,
    ) -> TransformResult:
        """Transform one file inside ``sandbox``; write it only if ``apply_changes``.

        ``file_path`` is checked against the sandbox as given and read
        relative to ``project_path`` (default: the working directory).
        """
        sandbox.check_path(file_path)

        root = project_path or Path.cwd()
        source = (root / file_path).read_text(encoding="utf-8")
        context = TransformContext.for_intent(intent, file_path)

        result = self.execute_transform(intent, source, context)
        self.validate(result.diff, sandbox)

        if apply_changes and result.has_changes:
            applier = self.applier or TransformApplier(root)
            outcome = applier.apply(file_path, result, description=str(intent))
            if not outcome.success:
                raise TransformError(outcome.message)
        return result

    def execute_task(
        self,
        task: Task,
        project_path: Path,
        max_lines_changed: int = 50,
        apply_changes: bool = False,
    ) -> StepResult:
        """Run an approved task as one transform and record the outcome on it.

        The whole task is a single rewrite, so every step shares its status;
        the result is attached to the last step. Failures mark the task
        failed and are re-raised.
        """
        if task.status != TaskStatus.APPROVED:
            raise TransformError(f"Task is not approved: {task.title} ({task.status.value})")

        file = target_file(task)
        if file is None:
            raise UnsupportedIntent(task.intent)

        allowed: set[str] = set()
        for step in task.steps:
            allowed.update(step.allowed_files)
        sandbox = ExecutionSandbox(allowed_paths=allowed, max_lines_changed=max_lines_changed)

        task.mark_in_progress()
        for step in task.steps:
            step.status = StepStatus.EXECUTING

        started = time.monotonic()
        try:
            result = self.execute_transform_on_file(
                task.intent, file, sandbox, apply_changes=apply_changes, project_path=project_path
            )
        except (TransformError, SandboxViolation, OSError):
            for step in task.steps:
                step.status = StepStatus.FAILED
            task.fail()
            raise

        step_result = StepResult(
            diff=result.diff,
            warnings=list(result.warnings),
            execution_time=time.monotonic() - started,
        )
        for step in task.steps:
            step.status = StepStatus.COMPLETED
        if task.steps:
            task.steps[-1].result = step_result
        task.complete()
        logger.debug("task %s: %d line(s) changed", task.id, result.lines_changed)
        return step_result
