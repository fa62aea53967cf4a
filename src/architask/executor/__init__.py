"""Executing transforms against files on disk, with backups and undo."""

from architask.executor.applier import ApplyResult, TransformApplier
from architask.executor.executor import DeterministicExecutor
from architask.executor.undo import UndoEntry, UndoManager

__all__ = [
    "ApplyResult",
    "DeterministicExecutor",
    "TransformApplier",
    "UndoEntry",
    "UndoManager",
]
