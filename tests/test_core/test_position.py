"""Tests for byte offset to line resolution."""

from __future__ import annotations

from architask.core.position import LineIndex, resolve_line


class TestResolveLine:
    def test_first_and_later_lines(self):
        lines = "ab\ncd\nef".split("\n")
        assert resolve_line(0, lines) == 1
        assert resolve_line(2, lines) == 1
        assert resolve_line(3, lines) == 2
        assert resolve_line(6, lines) == 3

    def test_offset_past_end_is_last_line(self):
        assert resolve_line(100, ["a", "b"]) == 2

    def test_empty_source(self):
        assert resolve_line(0, [""]) == 1
        assert resolve_line(5, []) == 1

    def test_counts_bytes_not_characters(self):
        # "é" is two bytes: line 1 spans bytes 0-5 including its newline
        lines = ["héé", "x"]
        assert resolve_line(4, lines) == 1
        assert resolve_line(5, lines) == 1
        assert resolve_line(6, lines) == 2


class TestLineIndex:
    def test_line_for_and_count(self):
        index = LineIndex("one\ntwo\n")
        assert index.line_for(4) == 2
        assert index.line_count() == 3
