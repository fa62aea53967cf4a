"""Tests for the property wrapper transforms."""

from __future__ import annotations

import textwrap

import pytest

from architask.core.intents import AddBinding, AddStateWrapper
from architask.transforms.base import (
    AlreadyHasWrapper,
    MultipleMatches,
    PropertyNotFound,
    TransformContext,
    UnsupportedIntent,
)
from architask.transforms.wrappers import BindingTransform, StateWrapperTransform, wrapper_for_type

FILE = "Views/Feed.swift"

VIEW = textwrap.dedent("""\
    struct FeedView: View {
        var viewModel: FeedViewModel = FeedViewModel() // shared
        var body: some View { Text("feed") }
    }
""")


def _state(source: str, prop: str = "viewModel", type_name: str = "FeedViewModel"):
    intent = AddStateWrapper(property=prop, type=type_name, file=FILE)
    return StateWrapperTransform().apply(source, intent, TransformContext.for_intent(intent, FILE))


class TestStateWrapperTransform:
    def test_adds_wrapper_and_keeps_rest_of_line(self):
        result = _state(VIEW)

        expected_line = "    @StateObject var viewModel: FeedViewModel = FeedViewModel() // shared"
        assert result.transformed_source.split("\n")[1] == expected_line
        assert result.lines_changed == 1
        assert result.has_changes
        assert result.diff == (
            f"--- a/{FILE}\n"
            f"+++ b/{FILE}\n"
            "@@ -2,1 +2,1 @@\n"
            "-    var viewModel: FeedViewModel = FeedViewModel() // shared\n"
            f"+{expected_line}"
        )

    def test_other_lines_untouched(self):
        result = _state(VIEW)
        before, after = VIEW.split("\n"), result.transformed_source.split("\n")
        assert [a for i, a in enumerate(after) if i != 1] == [b for i, b in enumerate(before) if i != 1]

    def test_observed_object_for_plain_models(self):
        source = "struct S: View {\n    let settings: SettingsModel\n}\n"
        result = _state(source, "settings", "SettingsModel")
        assert "    @ObservedObject var settings: SettingsModel" in result.transformed_source

    def test_already_wrapped(self):
        source = "struct S: View {\n    @ObservedObject var viewModel: FeedViewModel\n}\n"
        with pytest.raises(AlreadyHasWrapper):
            _state(source)

    def test_property_not_found(self):
        with pytest.raises(PropertyNotFound) as exc_info:
            _state(VIEW, prop="store", type_name="AppStore")
        assert exc_info.value.kind == "propertyNotFound"

    def test_multiple_matches(self):
        source = textwrap.dedent("""\
            struct A: View {
                var model: AppModel
            }
            struct B: View {
                var model: AppModel
            }
        """)
        with pytest.raises(MultipleMatches) as exc_info:
            _state(source, "model", "AppModel")
        assert exc_info.value.count == 2

    def test_wrong_intent(self):
        with pytest.raises(UnsupportedIntent):
            StateWrapperTransform().apply(VIEW, AddBinding(property="x", file=FILE), TransformContext(FILE))


class TestBindingTransform:
    def _apply(self, source: str, prop: str):
        intent = AddBinding(property=prop, file=FILE)
        return BindingTransform().apply(source, intent, TransformContext.for_intent(intent, FILE))

    def test_drops_initializer_keeps_comment(self):
        source = 'struct Row: View {\n    let title: String = "x" // label\n}\n'
        result = self._apply(source, "title")
        assert result.transformed_source.split("\n")[1] == "    @Binding var title: String // label"

    def test_plain_declaration(self):
        result = self._apply("struct Row: View {\n    var isOn: Bool\n}\n", "isOn")
        assert result.transformed_source == "struct Row: View {\n    @Binding var isOn: Bool\n}\n"

    def test_existing_binding(self):
        with pytest.raises(AlreadyHasWrapper):
            self._apply("struct Row: View {\n    @Binding var isOn: Bool\n}\n", "isOn")


def test_wrapper_for_type():
    assert wrapper_for_type("CartStore") == "@StateObject"
    assert wrapper_for_type("FeedViewModel") == "@StateObject"
    assert wrapper_for_type("Session") == "@ObservedObject"
