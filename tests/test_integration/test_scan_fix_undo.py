"""End to end: scan -> plan -> fix -> rescan -> undo, through the library API."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from architask.analysis.scanner import ProjectScanner
from architask.core.config import load_config
from architask.core.intents import AddStateWrapper
from architask.core.models import FindingType, TaskStatus
from architask.executor.applier import TransformApplier
from architask.executor.executor import DeterministicExecutor
from architask.executor.undo import UndoManager
from architask.planner.generator import TaskGenerationConfig, TaskGenerator
from architask.planner.policy import ApprovalPolicy, PolicyDecision

FEED = textwrap.dedent("""\
    import SwiftUI

    struct FeedView: View {
        var viewModel: FeedViewModel
        var body: some View {
            List(viewModel.items) { item in
                Text(item.title)
            }
        }
    }
""")


@pytest.fixture
def app_project(tmp_path: Path) -> Path:
    sources = tmp_path / "Sources" / "App"
    sources.mkdir(parents=True)
    (sources / "FeedView.swift").write_text(FEED)
    (tmp_path / "architask.toml").write_text('[scan]\nanalyzers = ["bindings"]\n')
    return tmp_path


class TestScanFixUndo:
    def test_full_cycle(self, app_project):
        config = load_config(app_project)
        scanner = ProjectScanner.from_config(config)

        report = scanner.scan(app_project)
        assert [f.type for f in report.findings] == [FindingType.MISSING_STATE_OBJECT]

        tasks = TaskGenerator(config=TaskGenerationConfig.from_config(config)).generate_tasks(report.findings)
        assert len(tasks) == 1
        task = tasks[0]
        assert task.intent == AddStateWrapper(
            property="viewModel", type="FeedViewModel", file="Sources/App/FeedView.swift"
        )

        assert ApprovalPolicy.permissive().apply(task) == PolicyDecision.ALLOW
        assert task.status == TaskStatus.APPROVED

        executor = DeterministicExecutor(applier=TransformApplier(app_project))
        executor.execute_task(task, app_project, apply_changes=True)
        assert task.status == TaskStatus.COMPLETED

        fixed = (app_project / "Sources/App/FeedView.swift").read_text()
        assert "    @StateObject var viewModel: FeedViewModel" in fixed
        assert scanner.scan(app_project).findings == []

        results = UndoManager(app_project).undo_last_session()
        assert [r.success for r in results] == [True]
        assert (app_project / "Sources/App/FeedView.swift").read_text() == FEED
        assert len(scanner.scan(app_project).findings) == 1
