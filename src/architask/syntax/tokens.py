"""Lexer for Swift source text.

Tokens record both character indices (for slicing the source) and UTF-8
byte offsets (what syntax nodes and findings are positioned by), plus the
whitespace flags the parser needs to tell ``x!`` from ``!x`` from ``a ! b``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from architask.core.position import resolve_line
from architask.syntax.errors import SyntaxParseError


class TokenKind(enum.Enum):
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    OPERATOR = "operator"
    PUNCT = "punct"
    ATTRIBUTE = "attribute"
    POUND = "pound"
    EOF = "eof"


KEYWORDS = frozenset({
    "associatedtype", "class", "deinit", "enum", "extension", "func", "import",
    "init", "let", "operator", "precedencegroup", "protocol", "struct",
    "subscript", "typealias", "var", "break", "case", "catch", "continue",
    "default", "defer", "do", "else", "fallthrough", "for", "guard", "if", "in",
    "repeat", "return", "switch", "throw", "where", "while", "as", "is", "try",
    "await", "false", "true", "nil", "self", "Self", "super", "throws",
    "rethrows", "inout", "_",
})

PUNCTUATION = frozenset("(){}[],:;@\\")

OPERATOR_CHARS = frozenset("/=-+!*%<>&|^~?")


@dataclass
class Token:
    kind: TokenKind
    text: str
    start: int
    stop: int
    offset: int
    end: int
    space_before: bool = False
    newline_before: bool = False
    interpolations: list[tuple[int, int]] = field(default_factory=list)

    def is_op(self, *texts: str) -> bool:
        return self.kind == TokenKind.OPERATOR and self.text in texts

    def is_punct(self, *texts: str) -> bool:
        return self.kind == TokenKind.PUNCT and self.text in texts

    def is_keyword(self, *texts: str) -> bool:
        return self.kind == TokenKind.KEYWORD and self.text in texts

    def is_word(self, *texts: str) -> bool:
        """Identifier or keyword with one of the given spellings."""
        return self.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) and self.text in texts


class Lexer:
    """Tokenizes a source text, or a slice of it, keeping full-text byte offsets."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.stop = len(source)
        self._byte_starts: list[int] | None = None
        if not source.isascii():
            starts = [0]
            total = 0
            for ch in source:
                total += len(ch.encode("utf-8"))
                starts.append(total)
            self._byte_starts = starts

    def byte_offset(self, index: int) -> int:
        if self._byte_starts is None:
            return index
        return self._byte_starts[index]

    def _error(self, message: str, index: int) -> SyntaxParseError:
        offset = self.byte_offset(index)
        return SyntaxParseError(message, offset, resolve_line(offset, self.source.split("\n")))

    def tokenize(self, start: int = 0, stop: int | None = None) -> list[Token]:
        self.pos = start
        self.stop = len(self.source) if stop is None else stop
        tokens: list[Token] = []
        src = self.source
        space = True
        newline = self.pos == 0

        while True:
            space_seen, newline_seen = self._skip_trivia()
            space = space or space_seen
            newline = newline or newline_seen
            if self.pos >= self.stop:
                break

            begin = self.pos
            ch = src[begin]
            interpolations: list[tuple[int, int]] = []

            if ch.isalpha() or ch == "_" or ord(ch) > 127:
                kind, text = self._lex_word()
            elif ch == "`":
                close = src.find("`", begin + 1, self.stop)
                if close == -1:
                    raise self._error("Unterminated escaped identifier", begin)
                self.pos = close + 1
                kind, text = TokenKind.IDENTIFIER, src[begin + 1 : close]
            elif ch == "$":
                self.pos += 1
                while self.pos < self.stop and (src[self.pos].isalnum() or src[self.pos] == "_"):
                    self.pos += 1
                kind, text = TokenKind.IDENTIFIER, src[begin : self.pos]
            elif ch.isdigit():
                kind, text = self._lex_number()
            elif ch == '"' or (ch == "#" and self._raw_string_ahead()):
                interpolations = self._lex_string()
                kind, text = TokenKind.STRING, src[begin : self.pos]
            elif ch == "#":
                self.pos += 1
                while self.pos < self.stop and (src[self.pos].isalnum() or src[self.pos] == "_"):
                    self.pos += 1
                kind, text = TokenKind.POUND, src[begin : self.pos]
            elif ch == "@" and begin + 1 < self.stop and (src[begin + 1].isalpha() or src[begin + 1] == "_"):
                self.pos += 1
                self._lex_word()
                kind, text = TokenKind.ATTRIBUTE, src[begin : self.pos]
            elif ch == ".":
                kind, text = self._lex_dot()
            elif ch in OPERATOR_CHARS:
                while self.pos < self.stop and src[self.pos] in OPERATOR_CHARS:
                    # `/*` and `//` inside an operator run start a comment
                    if src[self.pos] == "/" and src[self.pos + 1 : self.pos + 2] in ("/", "*") and self.pos > begin:
                        break
                    self.pos += 1
                kind, text = TokenKind.OPERATOR, src[begin : self.pos]
            elif ch in PUNCTUATION:
                self.pos += 1
                kind, text = TokenKind.PUNCT, ch
            else:
                raise self._error(f"Unexpected character {ch!r}", begin)

            tokens.append(Token(
                kind=kind,
                text=text,
                start=begin,
                stop=self.pos,
                offset=self.byte_offset(begin),
                end=self.byte_offset(self.pos),
                space_before=space,
                newline_before=newline,
                interpolations=interpolations,
            ))
            space = False
            newline = False

        end = self.byte_offset(self.stop)
        tokens.append(Token(TokenKind.EOF, "", self.stop, self.stop, end, end, True, True))
        return tokens

    # -- trivia -------------------------------------------------------------

    def _skip_trivia(self) -> tuple[bool, bool]:
        src = self.source
        space = False
        newline = False
        while self.pos < self.stop:
            ch = src[self.pos]
            if ch == "\n":
                space = newline = True
                self.pos += 1
            elif ch in " \t\r\f\v":
                space = True
                self.pos += 1
            elif src.startswith("//", self.pos):
                end = src.find("\n", self.pos, self.stop)
                self.pos = self.stop if end == -1 else end
                space = True
            elif src.startswith("/*", self.pos):
                depth = 0
                i = self.pos
                while i < self.stop:
                    if src.startswith("/*", i):
                        depth += 1
                        i += 2
                    elif src.startswith("*/", i):
                        depth -= 1
                        i += 2
                        if depth == 0:
                            break
                    else:
                        if src[i] == "\n":
                            newline = True
                        i += 1
                if depth != 0:
                    raise self._error("Unterminated block comment", self.pos)
                self.pos = i
                space = True
            elif ch == "#" and src.startswith("#!", self.pos) and self.pos == 0:
                end = src.find("\n", self.pos, self.stop)
                self.pos = self.stop if end == -1 else end
            else:
                break
        return space, newline

    # -- words and numbers --------------------------------------------------

    def _lex_word(self) -> tuple[TokenKind, str]:
        src = self.source
        begin = self.pos
        while self.pos < self.stop:
            ch = src[self.pos]
            if ch.isalnum() or ch == "_" or ord(ch) > 127:
                self.pos += 1
            else:
                break
        text = src[begin : self.pos]
        return (TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENTIFIER), text

    def _lex_number(self) -> tuple[TokenKind, str]:
        src = self.source
        begin = self.pos
        kind = TokenKind.INTEGER
        if src.startswith(("0x", "0o", "0b"), begin):
            self.pos += 2
            while self.pos < self.stop and (src[self.pos].isalnum() or src[self.pos] in "_."):
                if src[self.pos] == "." and not (self.pos + 1 < self.stop and src[self.pos + 1].isalnum()):
                    break
                self.pos += 1
            return kind, src[begin : self.pos]

        while self.pos < self.stop and (src[self.pos].isdigit() or src[self.pos] == "_"):
            self.pos += 1
        if (
            self.pos + 1 < self.stop
            and src[self.pos] == "."
            and src[self.pos + 1].isdigit()
        ):
            kind = TokenKind.FLOAT
            self.pos += 1
            while self.pos < self.stop and (src[self.pos].isdigit() or src[self.pos] == "_"):
                self.pos += 1
        if self.pos < self.stop and src[self.pos] in "eE":
            look = self.pos + 1
            if look < self.stop and src[look] in "+-":
                look += 1
            if look < self.stop and src[look].isdigit():
                kind = TokenKind.FLOAT
                self.pos = look
                while self.pos < self.stop and (src[self.pos].isdigit() or src[self.pos] == "_"):
                    self.pos += 1
        return kind, src[begin : self.pos]

    def _lex_dot(self) -> tuple[TokenKind, str]:
        src = self.source
        begin = self.pos
        if src.startswith("...", begin) or src.startswith("..<", begin):
            self.pos += 3
            return TokenKind.OPERATOR, src[begin : self.pos]
        self.pos += 1
        return TokenKind.PUNCT, "."

    # -- strings ------------------------------------------------------------

    def _raw_string_ahead(self) -> bool:
        i = self.pos
        while i < self.stop and self.source[i] == "#":
            i += 1
        return i < self.stop and self.source[i] == '"'

    def _lex_string(self) -> list[tuple[int, int]]:
        """Consume a string literal and return its interpolation ranges."""
        src = self.source
        begin = self.pos
        hashes = 0
        while src[self.pos] == "#":
            hashes += 1
            self.pos += 1
        multiline = src.startswith('"""', self.pos)
        quote = '"""' if multiline else '"'
        self.pos += len(quote)
        closing = quote + "#" * hashes
        escape = "\\" + "#" * hashes
        interpolations: list[tuple[int, int]] = []

        while True:
            if self.pos >= self.stop:
                raise self._error("Unterminated string literal", begin)
            ch = src[self.pos]
            if src.startswith(closing, self.pos):
                self.pos += len(closing)
                return interpolations
            if ch == "\n" and not multiline:
                raise self._error("Unterminated string literal", begin)
            if src.startswith(escape, self.pos):
                self.pos += len(escape)
                if self.pos < self.stop and src[self.pos] == "(":
                    inner_start = self.pos + 1
                    self.pos = self._skip_interpolation(inner_start)
                    interpolations.append((inner_start, self.pos - 1))
                else:
                    self.pos += 1
                continue
            self.pos += 1

    def _skip_interpolation(self, index: int) -> int:
        """Return the index just past the ``)`` closing an interpolation."""
        src = self.source
        depth = 1
        i = index
        while i < self.stop:
            ch = src[i]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return i + 1
            elif ch == '"':
                saved = self.pos
                self.pos = i
                self._lex_string()
                i = self.pos
                self.pos = saved
                continue
            i += 1
        raise self._error("Unterminated string interpolation", index)


def tokenize(source: str, start: int = 0, stop: int | None = None) -> list[Token]:
    return Lexer(source).tokenize(start, stop)
