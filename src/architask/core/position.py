"""Byte offset to line number resolution.

Syntax nodes carry UTF-8 byte offsets; findings are reported by 1-based
line. Both helpers here count bytes, not characters, so that a line holding
multi-byte characters still maps offsets onto the right line.
"""

from __future__ import annotations


def resolve_line(offset: int, lines: list[str]) -> int:
    """Return the 1-based line containing the byte ``offset``.

    Falls back to the last line when the offset is past the end.
    """
    total = 0
    for index, line in enumerate(lines):
        total += len(line.encode("utf-8")) + 1
        if total > offset:
            return index + 1
    return max(len(lines), 1)


class LineIndex:
    """Line lookup for one source text, split once."""

    def __init__(self, source: str):
        self.lines = source.split("\n")

    def line_for(self, offset: int) -> int:
        return resolve_line(offset, self.lines)

    def line_count(self) -> int:
        return len(self.lines)
