"""Tests for intent encoding."""

from __future__ import annotations

import pytest

from architask.core.intents import (
    INTENT_TYPES,
    AddStateWrapper,
    AddTest,
    ApplyPattern,
    ArchitecturePattern,
    IntentCategory,
    ReduceNesting,
    TestType,
    intent_from_dict,
)


class TestIntentEncoding:
    def test_to_dict_uses_case_tag(self):
        intent = AddStateWrapper(property="model", type="ViewModel", file="A.swift")
        assert intent.to_dict() == {
            "case": "addStateWrapper",
            "property": "model",
            "type": "ViewModel",
            "file": "A.swift",
        }

    def test_enum_fields_encode_as_values(self):
        intent = ApplyPattern(pattern=ArchitecturePattern.MVVM, target="Feed")
        assert intent.to_dict()["pattern"] == "mvvm"
        assert intent_from_dict(intent.to_dict()) == intent

    def test_decode_applies_defaults(self):
        intent = intent_from_dict({"case": "addTest", "target": "Cart"})
        assert intent == AddTest(target="Cart", test_type=TestType.UNIT)

    def test_every_registered_key_is_unique(self):
        assert len(INTENT_TYPES) == 21
        assert all(cls.key == key for key, cls in INTENT_TYPES.items())

    def test_unknown_case_raises(self):
        with pytest.raises(ValueError, match="Unknown intent case"):
            intent_from_dict({"case": "teleport"})


class TestIntentProperties:
    def test_categories(self):
        assert ReduceNesting(file="a", line=1).category == IntentCategory.QUALITY
        assert AddStateWrapper(property="p", type="T", file="f").category == IntentCategory.DATA_FLOW

    def test_description_and_str(self):
        intent = ReduceNesting(file="A.swift", line=12)
        assert str(intent) == "Reduce nesting depth at line 12 in A.swift"

    def test_intents_are_hashable_values(self):
        a = ReduceNesting(file="A.swift", line=3)
        b = ReduceNesting(file="A.swift", line=3)
        assert a == b
        assert len({a, b}) == 1
