"""Tests for the dead code analyzer."""

from __future__ import annotations

import textwrap

from architask.analysis.dead_code import DeadCodeAnalyzer, iter_unreachable, referenced_names
from architask.core.models import FindingType
from architask.syntax import parse


def _analyze(source: str):
    return DeadCodeAnalyzer().analyze("A.swift", textwrap.dedent(source))


class TestUnreachable:
    def test_single_finding_after_return(self):
        findings = _analyze("""\
            func value() -> Int {
                return 1
                print("never")
                print("still never")
            }
        """)
        assert len(findings) == 1
        finding = findings[0]
        assert finding.type == FindingType.DEAD_CODE
        assert finding.location.line == 3
        assert finding.context == {"reason": "unreachable", "afterLine": "2", "terminator": "return"}
        assert finding.message == "Unreachable code after line 2"

    def test_throw_is_a_terminator(self):
        findings = _analyze("""\
            func fail() throws {
                throw MyError.bad
                cleanup()
            }
        """)
        assert [f.context["terminator"] for f in findings] == ["throw"]

    def test_guard_is_treated_as_terminator(self):
        findings = _analyze("""\
            func check(x: Int?) {
                guard let x = x else { return }
                use(x)
            }
        """)
        assert [f.location.line for f in findings] == [3]
        assert findings[0].context["terminator"] == "guard"

    def test_return_last_is_fine(self):
        assert _analyze("func f() -> Int {\n    work()\n    return 1\n}\n") == []

    def test_nested_blocks_are_checked(self):
        tree = parse(textwrap.dedent("""\
            func f() {
                if a {
                    return
                    b()
                }
                c()
            }
        """))
        assert [index for _, index in iter_unreachable(tree)] == [0]


class TestEmptyAndUnused:
    def test_empty_function(self):
        findings = _analyze("func placeholder() { }\n")
        assert [f.context["reason"] for f in findings] == ["emptyFunction"]

    def test_unused_private_members(self):
        findings = _analyze("""\
            struct Store {
                private var cache = 0
                private func helper() -> Int { 1 }
                func run() -> Int { 2 }
            }
        """)
        reasons = sorted(f.context["reason"] for f in findings)
        assert reasons == ["unusedPrivateFunction", "unusedPrivateProperty"]

    def test_used_private_members(self):
        findings = _analyze("""\
            struct Store {
                private var cache = 0
                private func helper() -> Int { cache }
                func run() -> Int { self.helper() }
            }
        """)
        assert findings == []

    def test_selector_counts_as_use(self):
        findings = _analyze("""\
            class Button {
                private func tapped() { print("tap") }
                func wire() { target(#selector(tapped)) }
            }
        """)
        assert findings == []

    def test_declared_names_are_not_references(self):
        tree = parse("let unused = 1\nprint(other)\n")
        names = referenced_names(tree)
        assert "other" in names
        assert "unused" not in names
