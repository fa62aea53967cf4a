"""Writing transformed sources to disk with backup support."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from architask.core.config import get_architask_dir
from architask.transforms.base import TransformResult, count_changed_lines

logger = logging.getLogger("architask.executor")

MANIFEST_NAME = "manifest.json"


@dataclass
class ApplyResult:
    """Outcome of writing (or restoring) one file."""

    success: bool
    message: str
    file: str | None = None
    change_id: str | None = None
    lines_changed: int = 0


def read_manifest(session_dir: Path) -> list[dict]:
    manifest_file = session_dir / MANIFEST_NAME
    if not manifest_file.exists():
        return []
    return json.loads(manifest_file.read_text())


def write_manifest(session_dir: Path, entries: list[dict]) -> None:
    (session_dir / MANIFEST_NAME).write_text(json.dumps(entries, indent=2))


class TransformApplier:
    """Applies transform results to files, one backup session per instance."""

    def __init__(self, project_path: Path, backup: bool = True):
        self.project_path = project_path
        self.backup = backup
        self.backup_dir = get_architask_dir(project_path) / "backups"
        self.session = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")

    @property
    def session_dir(self) -> Path:
        return self.backup_dir / self.session

    def apply(self, file: str, result: TransformResult, description: str = "") -> ApplyResult:
        """Write ``result`` over ``file`` if the file still holds the original source."""
        file_path = self._resolve_file(file)

        if not file_path.exists():
            return ApplyResult(success=False, message=f"File not found: {file}", file=file)

        content = file_path.read_text(encoding="utf-8")
        if content != result.original_source:
            return ApplyResult(
                success=False,
                message="Source file has changed since it was read. Re-run `architask scan` first.",
                file=file,
            )

        if not result.has_changes:
            return ApplyResult(success=False, message="No changes to apply.", file=file)

        change_id = uuid.uuid4().hex[:8]
        if self.backup:
            self._create_backup(change_id, file, file_path, content, description)

        file_path.write_text(result.transformed_source, encoding="utf-8")
        logger.debug("wrote %s (change %s)", file, change_id)

        return ApplyResult(
            success=True,
            message=description or f"Updated {file}",
            file=file,
            change_id=change_id,
            lines_changed=count_changed_lines(result.diff),
        )

    def _resolve_file(self, file: str) -> Path:
        path = Path(file)
        if path.is_absolute():
            return path
        return self.project_path / path

    def _create_backup(
        self, change_id: str, file: str, file_path: Path, content: str, description: str
    ) -> None:
        session_dir = self.session_dir
        session_dir.mkdir(parents=True, exist_ok=True)

        backup_file = session_dir / f"{file_path.name}.bak"
        counter = 1
        while backup_file.exists():
            backup_file = session_dir / f"{file_path.name}.{counter}.bak"
            counter += 1
        backup_file.write_text(content, encoding="utf-8")

        manifest = read_manifest(session_dir)
        manifest.append({
            "change_id": change_id,
            "file": file,
            "backup": backup_file.name,
            "description": description,
            "timestamp": self.session,
        })
        write_manifest(session_dir, manifest)
