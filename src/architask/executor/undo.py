"""Undo support for changes written by TransformApplier."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from architask.core.config import get_architask_dir
from architask.executor.applier import ApplyResult, read_manifest, write_manifest

logger = logging.getLogger("architask.executor")


@dataclass
class UndoEntry:
    """A change that can be reverted."""

    change_id: str
    file: str
    backup: Path
    description: str
    timestamp: str
    session_dir: Path


class UndoManager:
    """Lists and restores backups, newest session first."""

    def __init__(self, project_path: Path):
        self.project_path = project_path
        self.backup_dir = get_architask_dir(project_path) / "backups"

    def _sessions(self) -> list[Path]:
        if not self.backup_dir.exists():
            return []
        return sorted((d for d in self.backup_dir.iterdir() if d.is_dir()), reverse=True)

    def list_undoable(self) -> list[UndoEntry]:
        entries = []
        for session_dir in self._sessions():
            # later changes to the same file come first
            for entry in reversed(read_manifest(session_dir)):
                entries.append(UndoEntry(
                    change_id=entry["change_id"],
                    file=entry["file"],
                    backup=session_dir / entry["backup"],
                    description=entry.get("description", ""),
                    timestamp=entry["timestamp"],
                    session_dir=session_dir,
                ))
        return entries

    def undo(self, change_id: str) -> ApplyResult:
        """Restore the backup taken before ``change_id`` and drop it from history."""
        for entry in self.list_undoable():
            if entry.change_id != change_id:
                continue
            if not entry.backup.exists():
                return ApplyResult(
                    success=False,
                    message=f"Backup file not found for {change_id}",
                    file=entry.file,
                    change_id=change_id,
                )

            target = Path(entry.file)
            if not target.is_absolute():
                target = self.project_path / target
            target.write_text(entry.backup.read_text(encoding="utf-8"), encoding="utf-8")
            self._forget(entry)
            logger.debug("restored %s from %s", entry.file, entry.backup)

            return ApplyResult(
                success=True,
                message=f"Reverted {change_id}, restored {entry.file}",
                file=entry.file,
                change_id=change_id,
            )

        return ApplyResult(
            success=False,
            message=f"No undo history for {change_id}",
            change_id=change_id,
        )

    def undo_last_session(self) -> list[ApplyResult]:
        """Revert every change from the most recent session, newest first."""
        sessions = self._sessions()
        if not sessions:
            return []
        latest = sessions[0]
        results = []
        for entry in reversed(read_manifest(latest)):
            results.append(self.undo(entry["change_id"]))
        return results

    def _forget(self, entry: UndoEntry) -> None:
        manifest = [e for e in read_manifest(entry.session_dir) if e["change_id"] != entry.change_id]
        entry.backup.unlink(missing_ok=True)
        if manifest:
            write_manifest(entry.session_dir, manifest)
        else:
            shutil.rmtree(entry.session_dir)
