"""Tests for the transform pipeline and conflict detection."""

from __future__ import annotations

import textwrap

from architask.core.intents import (
    AddBinding,
    AddImport,
    AddStateWrapper,
    ExtractFunction,
    ReduceNesting,
    ReduceParameters,
    RemoveDeadCode,
)
from architask.transforms.base import TransformContext
from architask.transforms.pipeline import ConflictDetector, TransformPipeline, order_by_dependency

FILE = "Views/Feed.swift"

VIEW = textwrap.dedent("""\
    import SwiftUI

    struct FeedView: View {
        var viewModel: FeedViewModel
        var body: some View { Text("feed") }
    }
""")

WRAP = AddStateWrapper(property="viewModel", type="FeedViewModel", file=FILE)


class TestOrdering:
    def test_dependency_order_is_stable(self):
        nesting = ReduceNesting(file=FILE, line=3)
        dead = RemoveDeadCode(file=FILE)
        imp = AddImport(module="Combine", file=FILE)
        binding = AddBinding(property="a", file=FILE)
        extract = ExtractFunction(function="f", file=FILE)
        ordered = order_by_dependency([dead, nesting, WRAP, extract, binding, imp])
        assert ordered == [imp, WRAP, binding, extract, nesting, dead]


class TestConflictDetector:
    def test_wrappers_on_same_property_conflict_both_ways(self):
        binding = AddBinding(property="viewModel", file=FILE)
        assert ConflictDetector.intents_conflict(WRAP, binding)
        assert ConflictDetector.intents_conflict(binding, WRAP)

    def test_different_properties_do_not_conflict(self):
        assert not ConflictDetector.intents_conflict(WRAP, AddBinding(property="store", file=FILE))

    def test_extracting_the_same_function_twice(self):
        a = ExtractFunction(function="load", file=FILE)
        assert ConflictDetector.intents_conflict(a, ExtractFunction(function="load", file=FILE))
        assert not ConflictDetector.intents_conflict(a, ExtractFunction(function="save", file=FILE))
        assert not ConflictDetector.intents_conflict(a, ReduceNesting(file=FILE, line=1))


class TestTransformPipeline:
    def test_applies_in_sequence(self):
        pipeline = TransformPipeline()
        result = pipeline.execute([WRAP, AddImport(module="Combine", file=FILE)], VIEW, TransformContext(FILE))

        assert [r.transform for r in result.applied] == ["ImportTransform", "StateWrapperTransform"]
        assert result.transformed_source.startswith("import SwiftUI\nimport Combine\n")
        assert "    @StateObject var viewModel: FeedViewModel" in result.transformed_source
        assert result.total_lines_changed == 2
        assert result.success
        assert result.warnings == []

    def test_conflicting_intent_is_skipped(self):
        binding = AddBinding(property="viewModel", file=FILE)
        result = TransformPipeline().execute([WRAP, binding], VIEW, TransformContext(FILE))

        assert len(result.applied) == 1
        assert result.warnings == [
            f"Skipping {binding} due to conflict: Already applied similar transform: {WRAP}"
        ]

    def test_missing_transform_warns(self):
        intent = ReduceParameters(function="load", file=FILE)
        result = TransformPipeline().execute([intent], VIEW, TransformContext(FILE))
        assert result.warnings == [f"No transform found for intent: {intent}"]
        assert not result.success
        assert result.transformed_source == VIEW

    def test_failed_transform_warns_and_continues(self):
        missing = AddStateWrapper(property="store", type="AppStore", file=FILE)
        result = TransformPipeline().execute([missing, WRAP], VIEW, TransformContext(FILE))
        assert result.warnings == [f"Transform failed for {missing}: Property not found: store"]
        assert len(result.applied) == 1

    def test_transform_warnings_are_collected(self):
        result = TransformPipeline().execute(
            [AddImport(module="SwiftUI", file=FILE)], VIEW, TransformContext(FILE)
        )
        assert result.warnings == ["Module 'SwiftUI' is already imported"]

    def test_framework_pipeline_has_no_refactorings(self):
        intent = ReduceNesting(file=FILE, line=1)
        result = TransformPipeline.framework().execute([intent], VIEW, TransformContext(FILE))
        assert result.warnings == [f"No transform found for intent: {intent}"]

    def test_history(self):
        pipeline = TransformPipeline()
        pipeline.execute([WRAP], VIEW, TransformContext(FILE))
        assert len(pipeline.history) == 1

        record = pipeline.undo_last()
        assert record.intent == WRAP
        assert pipeline.history == []
        assert pipeline.undo_last() is None

        pipeline.execute([WRAP], VIEW, TransformContext(FILE))
        pipeline.clear_history()
        assert pipeline.history == []
