"""Tests for the import transforms."""

from __future__ import annotations

import pytest

from architask.core.intents import AddImport, RemoveUnusedImport
from architask.transforms.base import ParseError, TransformContext
from architask.transforms.imports import ImportTransform, RemoveUnusedImportTransform, used_names
from architask.syntax import parse

FILE = "App/Main.swift"


def _add(source: str, module: str):
    return ImportTransform().apply(source, AddImport(module=module, file=FILE), TransformContext(FILE))


def _remove(source: str):
    return RemoveUnusedImportTransform().apply(source, RemoveUnusedImport(file=FILE), TransformContext(FILE))


class TestImportTransform:
    def test_inserts_after_last_import(self):
        result = _add("import Foundation\nimport SwiftUI\n\nstruct A { }\n", "Combine")
        assert result.transformed_source == "import Foundation\nimport SwiftUI\nimport Combine\n\nstruct A { }\n"
        assert result.diff.endswith("@@ -2,0 +3,1 @@\n+import Combine")
        assert result.lines_changed == 1

    def test_inserts_at_top_without_imports(self):
        result = _add("struct A { }\n", "Combine")
        assert result.transformed_source == "import Combine\nstruct A { }\n"

    def test_already_imported_is_a_no_op(self):
        source = "@testable import Combine\n\nlet a = 1\n"
        result = _add(source, "Combine")
        assert not result.has_changes
        assert result.lines_changed == 0
        assert result.warnings == ["Module 'Combine' is already imported"]


class TestRemoveUnusedImportTransform:
    def test_removes_unreferenced_module(self):
        source = "import Foundation\nimport Alamofire\nimport Kingfisher\n\nlet x = Alamofire.request()\n"
        result = _remove(source)
        assert result.transformed_source == "import Foundation\nimport Alamofire\n\nlet x = Alamofire.request()\n"
        assert result.lines_changed == 1
        assert "-import Kingfisher" in result.diff

    def test_nothing_to_remove(self):
        result = _remove("import SwiftUI\n\nstruct A { }\n")
        assert not result.has_changes
        assert result.diff == "// No unused imports found"

    def test_attribute_names_count_as_use(self):
        source = "import Observation\n\n@Observation\nclass Model { }\n"
        assert not _remove(source).has_changes

    def test_parse_error(self):
        with pytest.raises(ParseError):
            _remove("import Foundation\nstruct {\n")

    def test_used_names(self):
        tree = parse("var v: Dictionary<Key, Value> = make()\n")
        assert {"Dictionary", "Key", "Value", "make"} <= used_names(tree)
