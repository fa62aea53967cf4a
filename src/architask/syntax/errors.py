"""Errors raised while turning source text into a syntax tree."""

from __future__ import annotations


class SyntaxParseError(Exception):
    """The source could not be tokenized or parsed."""

    def __init__(self, message: str, offset: int, line: int):
        self.message = message
        self.offset = offset
        self.line = line
        super().__init__(f"{message} (line {line})")
