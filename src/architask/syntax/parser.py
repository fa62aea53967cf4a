"""Recursive-descent parser producing ``architask.syntax.nodes`` trees.

Covers the part of Swift the analyzers and transforms look at:
declarations, control flow, closures, optionals, ``try``/``await`` and
property wrappers. Constructs it does not model (operator and
precedencegroup declarations, ``#if`` conditions) are skipped over rather
than guessed at. Anything it cannot make sense of raises
``SyntaxParseError``.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Callable

from architask.core.position import resolve_line
from architask.syntax import nodes as n
from architask.syntax.errors import SyntaxParseError
from architask.syntax.tokens import Lexer, Token, TokenKind

ASSIGNMENT = 1
TERNARY = 2
DISJUNCTION = 3
CONJUNCTION = 4
COMPARISON = 5
NIL_COALESCING = 6
CASTING = 7
RANGE = 8
ADDITION = 9
MULTIPLICATION = 10
SHIFT = 11

PRECEDENCE = {
    "||": DISJUNCTION,
    "&&": CONJUNCTION,
    "==": COMPARISON, "!=": COMPARISON, "<": COMPARISON, ">": COMPARISON,
    "<=": COMPARISON, ">=": COMPARISON, "===": COMPARISON, "!==": COMPARISON,
    "~=": COMPARISON,
    "??": NIL_COALESCING,
    "...": RANGE, "..<": RANGE,
    "+": ADDITION, "-": ADDITION, "&+": ADDITION, "&-": ADDITION, "|": ADDITION, "^": ADDITION,
    "*": MULTIPLICATION, "/": MULTIPLICATION, "%": MULTIPLICATION, "&*": MULTIPLICATION,
    "&": MULTIPLICATION,
    "<<": SHIFT, ">>": SHIFT, "&<<": SHIFT, "&>>": SHIFT,
}

ASSIGNMENT_OPERATORS = frozenset({
    "=", "+=", "-=", "*=", "/=", "%=", "<<=", ">>=", "&=", "|=", "^=", "??=",
})

RIGHT_ASSOCIATIVE = ASSIGNMENT_OPERATORS | {"??"}

ACCESS_MODIFIERS = frozenset({"private", "fileprivate", "internal", "public", "open", "package"})

MODIFIERS = ACCESS_MODIFIERS | {
    "static", "final", "override", "mutating", "nonmutating", "lazy", "weak",
    "unowned", "required", "convenience", "dynamic", "optional", "indirect",
    "nonisolated", "prefix", "postfix", "infix", "distributed",
}

# modifiers only when directly before `let`/`var`, as in `async let x = f()`
BINDING_MODIFIERS = frozenset({"async"})

DECL_KEYWORDS = frozenset({
    "import", "struct", "class", "enum", "protocol", "extension", "func", "init",
    "deinit", "subscript", "var", "let", "typealias", "associatedtype",
    "operator", "precedencegroup", "case",
})

TYPE_KINDS = ("struct", "class", "enum", "protocol", "actor")

ACCESSOR_WORDS = frozenset({"get", "set", "willSet", "didSet", "_read", "_modify", "init"})

DIRECTIVES = frozenset({"#if", "#elseif", "#else", "#endif"})

CLOSURE_SIGNATURE_WORDS = frozenset({
    "_", "inout", "throws", "rethrows", "self", "Self", "async", "weak", "unowned", "some", "any",
})

_WHITESPACE = re.compile(r"\s+")


def _is_binding_modifier(token: Token, following: Token) -> bool:
    return (
        token.kind == TokenKind.IDENTIFIER
        and token.text in BINDING_MODIFIERS
        and following.is_keyword("let", "var")
        and not following.newline_before
    )


def parse(source: str) -> n.SourceFile:
    """Parse a whole source file."""
    return Parser(source).parse_file()


class Parser:
    def __init__(self, source: str, tokens: list[Token] | None = None, lexer: Lexer | None = None):
        self.source = source
        self.lexer = lexer or Lexer(source)
        self.tokens = tokens if tokens is not None else self.lexer.tokenize()
        self.pos = 0
        self._no_trailing_closure = False

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def tok(self) -> Token:
        return self.tokens[self.pos]

    @property
    def prev(self) -> Token:
        return self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]

    def peek(self, distance: int = 1) -> Token:
        return self.at(self.pos + distance)

    def at(self, index: int) -> Token:
        return self.tokens[min(index, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != TokenKind.EOF:
            self.pos += 1
        return token

    def error(self, message: str, token: Token | None = None) -> SyntaxParseError:
        token = token or self.tok
        shown = token.text or "end of file"
        line = resolve_line(token.offset, self.source.split("\n"))
        return SyntaxParseError(f"{message}, found {shown!r}", token.offset, line)

    def expect_punct(self, text: str) -> Token:
        if not self.tok.is_punct(text):
            raise self.error(f"Expected {text!r}")
        return self.advance()

    def expect_word(self, text: str) -> Token:
        if not self.tok.is_word(text):
            raise self.error(f"Expected {text!r}")
        return self.advance()

    def expect_name(self) -> Token:
        if self.tok.kind not in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
            raise self.error("Expected a name")
        return self.advance()

    def _finish(self, node: n.Node, start: Token) -> n.Node:
        node.offset = start.offset
        node.end = max(self.prev.end, start.end)
        return node

    def _text(self, start: Token, stop: Token) -> str:
        return self.source[start.start : stop.stop]

    def _skip_balanced(self) -> str:
        """Consume a bracketed group starting at the current token; return its inner text."""
        opener = self.advance()
        close = {"(": ")", "[": "]", "{": "}"}[opener.text]
        depth = 1
        while depth:
            token = self.tok
            if token.kind == TokenKind.EOF:
                raise self.error(f"Expected {close!r}", token)
            if token.is_punct(opener.text):
                depth += 1
            elif token.is_punct(close):
                depth -= 1
            self.advance()
        return self.source[opener.stop : self.prev.start]

    def _balanced_end(self, index: int) -> int:
        """Index just past the group opened at ``index``, without consuming."""
        opener = self.tokens[index].text
        close = {"(": ")", "[": "]", "{": "}"}[opener]
        depth = 0
        i = index
        while i < len(self.tokens) - 1:
            token = self.tokens[i]
            if token.is_punct(opener):
                depth += 1
            elif token.is_punct(close):
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return i

    def _split_token(self, index: int, at: int) -> None:
        """Split an operator token, e.g. ``>?`` into ``>`` and ``?``."""
        token = self.tokens[index]
        head = replace(token, text=token.text[:at], stop=token.start + at, end=token.offset + at)
        tail = replace(
            token,
            text=token.text[at:],
            start=token.start + at,
            offset=token.offset + at,
            space_before=False,
            newline_before=False,
        )
        self.tokens[index : index + 1] = [head, tail]

    def _at_statement_end(self) -> bool:
        token = self.tok
        return (
            token.kind == TokenKind.EOF
            or token.newline_before
            or token.is_punct(";", "}", ")")
        )

    # ------------------------------------------------------------------
    # Files, statement lists and blocks
    # ------------------------------------------------------------------

    def parse_file(self) -> n.SourceFile:
        statements = self._parse_statement_list()
        if self.tok.kind != TokenKind.EOF:
            raise self.error("Unexpected token at top level")
        return n.SourceFile(statements=statements, offset=0, end=self.tok.end)

    def _parse_statement_list(self, stop: Callable[[Token], bool] | None = None) -> list[n.Node]:
        statements: list[n.Node] = []
        while True:
            while self.tok.is_punct(";"):
                self.advance()
            token = self.tok
            if token.kind == TokenKind.EOF or token.is_punct("}"):
                break
            if stop is not None and stop(token):
                break
            if self._skip_directive():
                continue
            statements.append(self._parse_statement())
            following = self.tok
            if not (following.kind == TokenKind.EOF or following.newline_before or following.is_punct(";", "}")):
                raise self.error("Consecutive statements on a line must be separated by ';'")
        return statements

    def _skip_directive(self) -> bool:
        token = self.tok
        if token.kind != TokenKind.POUND or token.text not in DIRECTIVES:
            return False
        self.advance()
        if token.text in ("#if", "#elseif"):
            while self.tok.kind != TokenKind.EOF and not self.tok.newline_before:
                self.advance()
        return True

    def _parse_code_block(self) -> n.CodeBlock:
        start = self.expect_punct("{")
        saved = self._no_trailing_closure
        self._no_trailing_closure = False
        statements = self._parse_statement_list()
        self._no_trailing_closure = saved
        self.expect_punct("}")
        return self._finish(n.CodeBlock(statements=statements), start)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> n.Node:
        token = self.tok

        if (
            token.kind == TokenKind.IDENTIFIER
            and self.peek().is_punct(":")
            and self.peek(2).is_keyword("for", "while", "repeat", "switch", "if", "do")
        ):
            self.advance()
            self.advance()
            token = self.tok

        if self._at_declaration():
            return self._parse_declaration()

        if token.kind == TokenKind.KEYWORD:
            handler = {
                "if": self._parse_if,
                "guard": self._parse_guard,
                "for": self._parse_for,
                "while": self._parse_while,
                "repeat": self._parse_repeat,
                "switch": self._parse_switch,
                "do": self._parse_do,
                "return": self._parse_return,
                "throw": self._parse_throw,
                "break": self._parse_break,
                "continue": self._parse_continue,
                "fallthrough": self._parse_fallthrough,
                "defer": self._parse_defer,
            }.get(token.text)
            if handler is not None:
                return handler()

        return self.parse_expression()

    def _parse_condition_list(self) -> list[n.Node]:
        saved = self._no_trailing_closure
        self._no_trailing_closure = True
        conditions: list[n.Node] = []
        while True:
            start = self.tok
            if start.is_keyword("let", "var"):
                kind = self.advance().text
                pattern = self._parse_primary()
                type_ref = None
                initializer = None
                if self.tok.is_punct(":"):
                    self.advance()
                    type_ref = self.parse_type()
                if self.tok.is_op("="):
                    self.advance()
                    initializer = self.parse_expression()
                conditions.append(self._finish(
                    n.OptionalBinding(kind=kind, pattern=pattern, type=type_ref, initializer=initializer),
                    start,
                ))
            elif start.is_keyword("case"):
                self.advance()
                pattern = self._parse_binary(TERNARY)
                if not self.tok.is_op("="):
                    raise self.error("Expected '=' in case condition")
                self.advance()
                initializer = self.parse_expression()
                conditions.append(self._finish(n.CaseCondition(pattern=pattern, initializer=initializer), start))
            else:
                conditions.append(self.parse_expression())
            if self.tok.is_punct(","):
                self.advance()
                continue
            break
        self._no_trailing_closure = saved
        return conditions

    def _parse_if(self) -> n.IfStmt:
        start = self.expect_word("if")
        conditions = self._parse_condition_list()
        body = self._parse_code_block()
        else_body: n.CodeBlock | n.IfStmt | None = None
        if self.tok.is_keyword("else"):
            self.advance()
            if self.tok.is_keyword("if"):
                else_body = self._parse_if()
            else:
                else_body = self._parse_code_block()
        return self._finish(n.IfStmt(conditions=conditions, body=body, else_body=else_body), start)

    def _parse_guard(self) -> n.GuardStmt:
        start = self.expect_word("guard")
        conditions = self._parse_condition_list()
        self.expect_word("else")
        body = self._parse_code_block()
        return self._finish(n.GuardStmt(conditions=conditions, body=body), start)

    def _parse_for(self) -> n.ForStmt:
        start = self.expect_word("for")
        saved = self._no_trailing_closure
        self._no_trailing_closure = True
        while self.tok.is_word("case", "try", "await"):
            self.advance()
        pattern = self._parse_binary(TERNARY)
        if self.tok.is_punct(":"):
            self.advance()
            self.parse_type()
        self.expect_word("in")
        sequence = self.parse_expression()
        where_clause = None
        if self.tok.is_keyword("where"):
            self.advance()
            where_clause = self.parse_expression()
        self._no_trailing_closure = saved
        body = self._parse_code_block()
        return self._finish(
            n.ForStmt(pattern=pattern, sequence=sequence, body=body, where_clause=where_clause),
            start,
        )

    def _parse_while(self) -> n.WhileStmt:
        start = self.expect_word("while")
        conditions = self._parse_condition_list()
        body = self._parse_code_block()
        return self._finish(n.WhileStmt(conditions=conditions, body=body), start)

    def _parse_repeat(self) -> n.RepeatStmt:
        start = self.expect_word("repeat")
        body = self._parse_code_block()
        self.expect_word("while")
        condition = self.parse_expression()
        return self._finish(n.RepeatStmt(body=body, condition=condition), start)

    def _parse_switch(self) -> n.SwitchStmt:
        start = self.expect_word("switch")
        saved = self._no_trailing_closure
        self._no_trailing_closure = True
        subject = self.parse_expression()
        self._no_trailing_closure = False
        self.expect_punct("{")
        cases: list[n.SwitchCase] = []
        while not self.tok.is_punct("}"):
            if self.tok.kind == TokenKind.EOF:
                raise self.error("Expected '}' to close switch")
            if self._skip_directive():
                continue
            cases.append(self._parse_switch_case())
        self.expect_punct("}")
        self._no_trailing_closure = saved
        return self._finish(n.SwitchStmt(subject=subject, cases=cases), start)

    def _parse_switch_case(self) -> n.SwitchCase:
        start = self.tok
        while self.tok.kind == TokenKind.ATTRIBUTE:
            self.advance()
        patterns: list[n.Node] = []
        where_clause = None
        is_default = False
        if self.tok.is_keyword("default"):
            self.advance()
            is_default = True
        elif self.tok.is_keyword("case"):
            self.advance()
            saved = self._no_trailing_closure
            self._no_trailing_closure = True
            while True:
                patterns.append(self._parse_binary(TERNARY))
                if self.tok.is_punct(","):
                    self.advance()
                    continue
                break
            if self.tok.is_keyword("where"):
                self.advance()
                where_clause = self.parse_expression()
            self._no_trailing_closure = saved
        else:
            raise self.error("Expected 'case' or 'default'")
        self.expect_punct(":")
        statements = self._parse_statement_list(stop=_ends_switch_case)
        return self._finish(
            n.SwitchCase(
                patterns=patterns,
                where_clause=where_clause,
                statements=statements,
                is_default=is_default,
            ),
            start,
        )

    def _parse_do(self) -> n.DoStmt:
        start = self.expect_word("do")
        if self.tok.is_keyword("throws"):
            self.advance()
            if self.tok.is_punct("("):
                self._skip_balanced()
        body = self._parse_code_block()
        catches: list[n.CatchClause] = []
        while self.tok.is_keyword("catch"):
            catch_start = self.advance()
            pattern = None
            where_clause = None
            saved = self._no_trailing_closure
            self._no_trailing_closure = True
            if not self.tok.is_punct("{"):
                pattern = self._parse_binary(TERNARY)
            if self.tok.is_keyword("where"):
                self.advance()
                where_clause = self.parse_expression()
            self._no_trailing_closure = saved
            catch_body = self._parse_code_block()
            catches.append(self._finish(
                n.CatchClause(body=catch_body, pattern=pattern, where_clause=where_clause),
                catch_start,
            ))
        return self._finish(n.DoStmt(body=body, catches=catches), start)

    def _parse_return(self) -> n.ReturnStmt:
        start = self.advance()
        value = None
        if not self._at_statement_end() and not _ends_switch_case(self.tok):
            value = self.parse_expression()
        return self._finish(n.ReturnStmt(value=value), start)

    def _parse_throw(self) -> n.ThrowStmt:
        start = self.advance()
        return self._finish(n.ThrowStmt(value=self.parse_expression()), start)

    def _parse_break(self) -> n.BreakStmt:
        start = self.advance()
        label = None
        if self.tok.kind == TokenKind.IDENTIFIER and not self.tok.newline_before:
            label = self.advance().text
        return self._finish(n.BreakStmt(label=label), start)

    def _parse_continue(self) -> n.ContinueStmt:
        start = self.advance()
        label = None
        if self.tok.kind == TokenKind.IDENTIFIER and not self.tok.newline_before:
            label = self.advance().text
        return self._finish(n.ContinueStmt(label=label), start)

    def _parse_fallthrough(self) -> n.FallthroughStmt:
        start = self.advance()
        return self._finish(n.FallthroughStmt(), start)

    def _parse_defer(self) -> n.DeferStmt:
        start = self.advance()
        return self._finish(n.DeferStmt(body=self._parse_code_block()), start)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _at_declaration(self) -> bool:
        at = self.at
        i = self.pos
        while at(i).kind == TokenKind.ATTRIBUTE:
            i += 1
            if at(i).is_punct("(") and not at(i).space_before:
                i = self._balanced_end(i)
        while True:
            token = at(i)
            if token.is_keyword("class") and (
                at(i + 1).is_word(*DECL_KEYWORDS) or at(i + 1).is_word(*MODIFIERS)
            ):
                i += 1
                continue
            if token.kind == TokenKind.IDENTIFIER and token.text in MODIFIERS:
                if (
                    at(i + 1).is_punct("(")
                    and at(i + 2).kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
                    and at(i + 3).is_punct(")")
                ):
                    i += 4
                else:
                    i += 1
                continue
            if _is_binding_modifier(token, at(i + 1)):
                i += 1
                continue
            break
        token = at(i)
        if token.kind == TokenKind.KEYWORD and token.text in DECL_KEYWORDS:
            return True
        return (
            token.kind == TokenKind.IDENTIFIER
            and token.text in ("actor", "macro")
            and at(i + 1).kind == TokenKind.IDENTIFIER
        )

    def _parse_attributes(self) -> list[n.Attribute]:
        attributes: list[n.Attribute] = []
        while self.tok.kind == TokenKind.ATTRIBUTE:
            start = self.advance()
            arguments = ""
            if self.tok.is_punct("(") and not self.tok.space_before:
                arguments = self._skip_balanced()
            attributes.append(self._finish(n.Attribute(name=start.text[1:], arguments=arguments), start))
        return attributes

    def _parse_modifiers(self) -> list[str]:
        modifiers: list[str] = []
        while True:
            token = self.tok
            if token.is_keyword("class") and (
                self.peek().is_word(*DECL_KEYWORDS) or self.peek().is_word(*MODIFIERS)
            ):
                modifiers.append(self.advance().text)
                continue
            if token.kind == TokenKind.IDENTIFIER and token.text in MODIFIERS:
                text = self.advance().text
                if self.tok.is_punct("(") and self.peek(2).is_punct(")"):
                    self.advance()
                    text += f"({self.advance().text})"
                    self.advance()
                modifiers.append(text)
                continue
            if _is_binding_modifier(token, self.peek()):
                modifiers.append(self.advance().text)
                continue
            return modifiers

    def _parse_declaration(self) -> n.Node:
        start = self.tok
        attributes = self._parse_attributes()
        modifiers = self._parse_modifiers()
        token = self.tok
        word = token.text

        if word == "import":
            node = self._parse_import()
        elif word in TYPE_KINDS:
            node = self._parse_type_decl()
        elif word == "extension":
            node = self._parse_extension()
        elif word == "func":
            node = self._parse_function()
        elif word in ("init", "deinit", "subscript"):
            node = self._parse_initializer()
        elif word in ("var", "let"):
            node = self._parse_variable()
        elif word == "case":
            node = self._parse_enum_case()
        elif word in ("typealias", "associatedtype"):
            node = self._parse_typealias()
        elif word in ("operator", "precedencegroup", "macro"):
            node = self._parse_unknown_decl()
        else:
            raise self.error("Expected a declaration")

        node.attributes = attributes
        node.modifiers = modifiers
        return self._finish(node, start)

    def _parse_import(self) -> n.ImportDecl:
        self.advance()
        kind = None
        if self.tok.is_word("struct", "class", "enum", "protocol", "typealias", "func", "var", "let") and (
            self.peek().kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
        ) and not self.peek().newline_before:
            kind = self.advance().text
        parts = [self.expect_name().text]
        while self.tok.is_punct(".") and not self.tok.newline_before:
            self.advance()
            parts.append(self.expect_name().text)
        return n.ImportDecl(path=".".join(parts), kind=kind)

    def _parse_generic_clause(self) -> str:
        if not (self.tok.kind == TokenKind.OPERATOR and self.tok.text.startswith("<")):
            return ""
        start = self.tok
        self._consume_angle_group()
        return self._text(start, self.prev)

    def _parse_inheritance(self) -> list[n.TypeRef]:
        inherits: list[n.TypeRef] = []
        if self.tok.is_punct(":"):
            self.advance()
            while True:
                inherits.append(self.parse_type())
                if self.tok.is_punct(","):
                    self.advance()
                    continue
                break
        return inherits

    def _parse_where_clause(self) -> str:
        """Consume a generic `where` clause; return its text, `where` included."""
        if not self.tok.is_keyword("where"):
            return ""
        start = self.advance()
        while True:
            token = self.tok
            if token.kind == TokenKind.EOF or token.is_punct("{", "}", ";"):
                return self._text(start, self.prev)
            previous = self.prev
            if token.newline_before and not (
                previous.is_punct(",", ":") or previous.kind == TokenKind.OPERATOR
            ):
                return self._text(start, self.prev)
            self.advance()

    def _parse_member_block(self) -> list[n.Node]:
        self.expect_punct("{")
        saved = self._no_trailing_closure
        self._no_trailing_closure = False
        members = self._parse_statement_list()
        self._no_trailing_closure = saved
        self.expect_punct("}")
        return members

    def _parse_type_decl(self) -> n.TypeDecl:
        kind = self.advance().text
        name = self.expect_name().text
        generic_params = self._parse_generic_clause()
        inherits = self._parse_inheritance()
        self._parse_where_clause()
        members = self._parse_member_block()
        return n.TypeDecl(
            kind=kind,
            name=name,
            generic_params=generic_params,
            inherits=inherits,
            members=members,
        )

    def _parse_extension(self) -> n.ExtensionDecl:
        self.advance()
        extended = self.parse_type()
        inherits = self._parse_inheritance()
        self._parse_where_clause()
        members = self._parse_member_block()
        return n.ExtensionDecl(extended=extended, inherits=inherits, members=members)

    def _parse_effects(self) -> tuple[bool, bool]:
        is_async = throws = False
        while self.tok.is_word("async", "throws", "rethrows", "reasync"):
            word = self.advance().text
            if word in ("async", "reasync"):
                is_async = True
            else:
                throws = True
                if word == "throws" and self.tok.is_punct("(") and not self.tok.space_before:
                    self._skip_balanced()
        return is_async, throws

    def _parse_function(self) -> n.FunctionDecl:
        self.advance()
        name_token = self.tok
        is_operator = False
        if name_token.kind == TokenKind.OPERATOR:
            is_operator = True
            self.advance()
        elif name_token.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
            self.advance()
        else:
            raise self.error("Expected function name")
        generic_params = "" if is_operator else self._parse_generic_clause()
        parameters = self._parse_parameter_clause()
        is_async, throws = self._parse_effects()
        return_type = None
        if self.tok.is_op("->"):
            self.advance()
            return_type = self.parse_type()
        where_clause = self._parse_where_clause()
        body = self._parse_code_block() if self.tok.is_punct("{") else None
        return n.FunctionDecl(
            name=name_token.text,
            parameters=parameters,
            return_type=return_type,
            body=body,
            generic_params=generic_params,
            where_clause=where_clause,
            is_operator=is_operator,
            is_async=is_async,
            throws=throws,
        )

    def _parse_initializer(self) -> n.InitializerDecl:
        kind = self.advance().text
        failable = False
        if kind == "init" and self.tok.kind == TokenKind.OPERATOR and self.tok.text in ("?", "!"):
            self.advance()
            failable = True
        if kind == "deinit":
            return n.InitializerDecl(kind=kind, body=self._parse_code_block())

        self._parse_generic_clause()
        parameters = self._parse_parameter_clause()
        self._parse_effects()
        return_type = None
        if self.tok.is_op("->"):
            self.advance()
            return_type = self.parse_type()
        self._parse_where_clause()

        body = None
        accessors: list[n.Accessor] = []
        if self.tok.is_punct("{"):
            if kind == "subscript":
                accessors = self._parse_accessor_block()
            else:
                body = self._parse_code_block()
        return n.InitializerDecl(
            kind=kind,
            parameters=parameters,
            return_type=return_type,
            body=body,
            accessors=accessors,
            failable=failable,
        )

    def _parse_parameter_clause(self, allow_unnamed: bool = False) -> list[n.Parameter]:
        self.expect_punct("(")
        saved = self._no_trailing_closure
        self._no_trailing_closure = False
        parameters: list[n.Parameter] = []
        while not self.tok.is_punct(")"):
            parameters.append(self._parse_parameter(allow_unnamed))
            if self.tok.is_punct(","):
                self.advance()
                continue
            break
        self.expect_punct(")")
        self._no_trailing_closure = saved
        return parameters

    def _parse_parameter(self, allow_unnamed: bool) -> n.Parameter:
        start = self.tok
        self._parse_attributes()
        first = self.tok
        second = self.peek()
        is_name = first.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
        label: str | None
        if is_name and second.is_punct(":"):
            self.advance()
            label = name = first.text
        elif is_name and second.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) and self.peek(2).is_punct(":"):
            self.advance()
            self.advance()
            label = None if first.text == "_" else first.text
            name = second.text
        elif allow_unnamed:
            type_ref = self.parse_type()
            default = None
            if self.tok.is_op("="):
                self.advance()
                default = self.parse_expression()
            return self._finish(n.Parameter(label=None, name="", type=type_ref, default=default), start)
        else:
            raise self.error("Expected parameter name")

        self.expect_punct(":")
        type_ref = self.parse_type()
        variadic = False
        if self.tok.is_op("..."):
            self.advance()
            variadic = True
        default = None
        if self.tok.is_op("="):
            self.advance()
            default = self.parse_expression()
        return self._finish(
            n.Parameter(label=label, name=name, type=type_ref, default=default, variadic=variadic),
            start,
        )

    def _accessor_block_ahead(self) -> bool:
        """Whether the ``{`` at the current token opens get/set/willSet/didSet accessors."""
        at = self.at
        i = self.pos + 1
        while at(i).kind == TokenKind.ATTRIBUTE:
            i += 1
        while at(i).is_word("mutating", "nonmutating"):
            i += 1
        token = at(i)
        if not token.is_word(*ACCESSOR_WORDS):
            return False
        following = at(i + 1)
        if following.is_punct("{", "}") or following.is_word("async", "throws"):
            return True
        if following.is_word(*ACCESSOR_WORDS) and following.newline_before:
            return True
        return (
            token.text in ("set", "willSet", "didSet")
            and following.is_punct("(")
            and at(i + 3).is_punct(")")
            and at(i + 4).is_punct("{")
        )

    def _parse_accessor_block(self) -> list[n.Accessor]:
        if not self._accessor_block_ahead():
            body = self._parse_code_block()
            return [n.Accessor(kind="get", body=body, offset=body.offset, end=body.end)]

        self.expect_punct("{")
        accessors: list[n.Accessor] = []
        while not self.tok.is_punct("}"):
            start = self.tok
            self._parse_attributes()
            while self.tok.is_word("mutating", "nonmutating"):
                self.advance()
            if not self.tok.is_word(*ACCESSOR_WORDS):
                raise self.error("Expected accessor")
            kind = self.advance().text
            if self.tok.is_punct("("):
                self._skip_balanced()
            self._parse_effects()
            body = self._parse_code_block() if self.tok.is_punct("{") else None
            accessors.append(self._finish(n.Accessor(kind=kind, body=body), start))
            while self.tok.is_punct(";"):
                self.advance()
        self.expect_punct("}")
        return accessors

    def _parse_variable(self) -> n.VariableDecl:
        binding_kind = self.advance().text
        bindings: list[n.PatternBinding] = []
        while True:
            start = self.tok
            pattern = self._parse_primary()
            type_ref = None
            initializer = None
            accessors: list[n.Accessor] = []
            if self.tok.is_punct(":"):
                self.advance()
                type_ref = self.parse_type()
            if self.tok.is_op("="):
                self.advance()
                initializer = self.parse_expression()
            if self.tok.is_punct("{") and (
                initializer is None or self._accessor_block_ahead()
            ):
                accessors = self._parse_accessor_block()
            bindings.append(self._finish(
                n.PatternBinding(
                    pattern=pattern,
                    type=type_ref,
                    initializer=initializer,
                    accessors=accessors,
                ),
                start,
            ))
            if self.tok.is_punct(","):
                self.advance()
                continue
            break
        return n.VariableDecl(binding_kind=binding_kind, bindings=bindings)

    def _parse_enum_case(self) -> n.EnumCaseDecl:
        self.advance()
        elements: list[n.EnumCaseElement] = []
        while True:
            start = self.expect_name()
            associated: list[n.Parameter] = []
            raw_value = None
            if self.tok.is_punct("("):
                associated = self._parse_parameter_clause(allow_unnamed=True)
            if self.tok.is_op("="):
                self.advance()
                raw_value = self.parse_expression()
            elements.append(self._finish(
                n.EnumCaseElement(name=start.text, associated=associated, raw_value=raw_value),
                start,
            ))
            if self.tok.is_punct(","):
                self.advance()
                continue
            break
        return n.EnumCaseDecl(elements=elements)

    def _parse_typealias(self) -> n.TypeAliasDecl:
        kind = self.advance().text
        name = self.expect_name().text
        self._parse_generic_clause()
        self._parse_inheritance()
        type_ref = None
        if self.tok.is_op("="):
            self.advance()
            type_ref = self.parse_type()
        self._parse_where_clause()
        return n.TypeAliasDecl(name=name, kind=kind, type=type_ref)

    def _parse_unknown_decl(self) -> n.UnknownDecl:
        keyword = self.advance().text
        while self.tok.kind != TokenKind.EOF and not self.tok.newline_before:
            if self.tok.is_punct("{", "(", "["):
                self._skip_balanced()
            elif self.tok.is_punct("}"):
                break
            else:
                self.advance()
        return n.UnknownDecl(keyword=keyword)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def parse_type(self) -> n.TypeRef:
        start = self.tok
        self._parse_type_inner()
        text = _WHITESPACE.sub(" ", self._text(start, self.prev)).strip()
        node = n.TypeRef(text=text, implicitly_unwrapped=text.endswith("!"))
        return self._finish(node, start)

    def _parse_type_inner(self) -> None:
        while self.tok.kind == TokenKind.ATTRIBUTE:
            self.advance()
            if self.tok.is_punct("(") and not self.tok.space_before:
                self._skip_balanced()
        while self.tok.is_word("inout", "some", "any", "borrowing", "consuming", "sending", "isolated"):
            self.advance()

        parenthesized = self.tok.is_punct("(")
        self._parse_type_primary()

        while True:
            token = self.tok
            if (
                token.kind == TokenKind.OPERATOR
                and not token.space_before
                and set(token.text) <= {"?", "!"}
            ):
                self.advance()
            elif token.is_punct(".") and self.peek().kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
                self.advance()
                self.advance()
                if self.tok.kind == TokenKind.OPERATOR and self.tok.text.startswith("<") and not self.tok.space_before:
                    self._consume_angle_group()
            elif token.is_op("&"):
                self.advance()
                self._parse_type_primary()
            else:
                break

        if parenthesized:
            while self.tok.is_word("async", "throws", "rethrows"):
                word = self.advance().text
                if word == "throws" and self.tok.is_punct("(") and not self.tok.space_before:
                    self._skip_balanced()
        if self.tok.is_op("->"):
            self.advance()
            self._parse_type_inner()

    def _parse_type_primary(self) -> None:
        token = self.tok
        if token.is_punct("(", "["):
            self._skip_balanced()
            return
        if token.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) and not token.is_keyword("in", "where", "else"):
            self.advance()
            if self.tok.kind == TokenKind.OPERATOR and self.tok.text.startswith("<") and not self.tok.space_before:
                self._consume_angle_group()
            while self.tok.is_punct(".") and self.peek().kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
                self.advance()
                self.advance()
                if self.tok.kind == TokenKind.OPERATOR and self.tok.text.startswith("<") and not self.tok.space_before:
                    self._consume_angle_group()
            return
        raise self.error("Expected a type")

    def _consume_angle_group(self) -> None:
        """Consume ``<...>``, splitting tokens like ``>>`` or ``>?`` at the close."""
        depth = 0
        while True:
            token = self.tok
            if token.kind == TokenKind.EOF:
                raise self.error("Expected '>'")
            if token.kind == TokenKind.OPERATOR and token.text != "->":
                for index, char in enumerate(token.text):
                    if char == "<":
                        depth += 1
                    elif char == ">":
                        depth -= 1
                        if depth == 0:
                            if index + 1 < len(token.text):
                                self._split_token(self.pos, index + 1)
                            self.advance()
                            return
            self.advance()

    def _generic_arguments_ahead(self) -> bool:
        """Whether ``<`` at the current token opens generic arguments in an expression."""
        if not self.tok.is_op("<"):
            return False
        depth = 0
        i = self.pos
        tokens = self.tokens
        while i < len(tokens) - 1:
            token = tokens[i]
            if token.kind == TokenKind.OPERATOR:
                if token.text == "->":
                    i += 1
                    continue
                if set(token.text) - {"<", ">", "?", "!"}:
                    return False
                depth += token.text.count("<") - token.text.count(">")
                if depth <= 0:
                    following = tokens[i + 1]
                    return (
                        following.is_punct("(", ".", ")", "]", ",", ";", "}", ":")
                        or following.newline_before
                        or following.kind == TokenKind.EOF
                    )
            elif token.kind in (TokenKind.IDENTIFIER, TokenKind.ATTRIBUTE):
                pass
            elif token.kind == TokenKind.KEYWORD and token.text in ("Self", "inout", "throws", "_"):
                pass
            elif token.is_punct(".", ",", ":", "[", "]", "(", ")"):
                pass
            else:
                return False
            i += 1
        return False

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self) -> n.Node:
        return self._parse_binary(ASSIGNMENT)

    def _is_binary_operator(self, index: int) -> bool:
        token = self.tokens[index]
        before = self.tokens[index - 1] if index > 0 else None
        after = self.tokens[index + 1]
        left_bound = not (
            token.space_before
            or before is None
            or before.is_punct("(", "[", "{", ",", ";", ":")
        )
        right_bound = not (
            after.space_before
            or after.kind == TokenKind.EOF
            or after.is_punct(")", "]", "}", ",", ";", ":", ".")
        )
        return left_bound == right_bound

    def _parse_binary(self, min_prec: int) -> n.Node:
        start = self.tok
        left = self._parse_prefix()
        while True:
            token = self.tok
            if token.is_keyword("as", "is"):
                if CASTING < min_prec:
                    break
                operator = self.advance().text
                if operator == "as" and self.tok.kind == TokenKind.OPERATOR and self.tok.text in ("?", "!") and not self.tok.space_before:
                    operator += self.advance().text
                type_ref = self.parse_type()
                left = self._finish(n.CastExpr(operator=operator, expr=left, type=type_ref), start)
                continue

            if token.kind != TokenKind.OPERATOR or not self._is_binary_operator(self.pos):
                break

            if token.text == "?":
                if TERNARY < min_prec:
                    break
                self.advance()
                then = self._parse_binary(TERNARY)
                self.expect_punct(":")
                orelse = self._parse_binary(TERNARY)
                left = self._finish(n.TernaryExpr(condition=left, then=then, orelse=orelse), start)
                continue

            if token.text in ASSIGNMENT_OPERATORS:
                prec = ASSIGNMENT
            else:
                prec = PRECEDENCE.get(token.text, ADDITION)
            if prec < min_prec:
                break
            self.advance()
            right = self._parse_binary(prec if token.text in RIGHT_ASSOCIATIVE else prec + 1)
            left = self._finish(n.BinaryExpr(operator=token.text, left=left, right=right), start)
        return left

    def _parse_prefix(self) -> n.Node:
        token = self.tok
        if token.is_keyword("try"):
            self.advance()
            kind = "try"
            if self.tok.kind == TokenKind.OPERATOR and self.tok.text[0] in "!?" and not self.tok.space_before:
                if len(self.tok.text) > 1:
                    self._split_token(self.pos, 1)
                kind += self.advance().text
            expr = self._parse_binary(TERNARY)
            return self._finish(n.TryExpr(kind=kind, expr=expr), token)
        if token.is_keyword("await"):
            self.advance()
            expr = self._parse_binary(TERNARY)
            return self._finish(n.AwaitExpr(expr=expr), token)
        if token.kind == TokenKind.OPERATOR:
            if self.peek().is_punct(")", ","):
                self.advance()
                return self._finish(n.Identifier(name=token.text), token)
            self.advance()
            operand = self._parse_prefix()
            return self._finish(n.PrefixExpr(operator=token.text, operand=operand), token)
        return self._parse_postfix(self._parse_primary(), token)

    def _parse_postfix(self, expr: n.Node, start: Token) -> n.Node:
        while True:
            token = self.tok
            if token.is_punct("."):
                self.advance()
                name = self.tok
                if name.kind not in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.INTEGER, TokenKind.FLOAT):
                    raise self.error("Expected member name")
                self.advance()
                expr = self._finish(n.MemberAccess(base=expr, name=name.text), start)
                continue

            if token.is_punct("(") and not token.newline_before:
                arguments = self._parse_argument_list(")")
                expr = self._finish(n.Call(callee=expr, arguments=arguments), start)
                continue

            if token.is_punct("[") and not token.newline_before:
                arguments = self._parse_argument_list("]")
                expr = self._finish(n.SubscriptExpr(base=expr, arguments=arguments), start)
                continue

            if token.kind == TokenKind.OPERATOR and not token.space_before:
                if token.text[0] in "!?" and (len(token.text) == 1 or not self._is_binary_operator(self.pos)):
                    if len(token.text) > 1:
                        self._split_token(self.pos, 1)
                    marker = self.advance().text
                    if marker == "!":
                        expr = self._finish(n.ForceUnwrap(expr=expr), start)
                    else:
                        expr = self._finish(n.OptionalChain(expr=expr), start)
                    continue
                if token.text.startswith("<") and self._generic_arguments_ahead():
                    self._consume_angle_group()
                    continue
                if not self._is_binary_operator(self.pos):
                    nxt = self.peek()
                    # left-bound only means postfix
                    if nxt.space_before or nxt.kind == TokenKind.EOF or nxt.is_punct(")", "]", "}", ",", ";", ":", "."):
                        self.advance()
                        expr = self._finish(n.PostfixExpr(operator=token.text, operand=expr), start)
                        continue

            if (
                token.is_punct("{")
                and not token.newline_before
                and not self._no_trailing_closure
                and not self._accessor_block_ahead()
                and isinstance(expr, (n.Identifier, n.MemberAccess, n.Call, n.OptionalChain, n.ForceUnwrap, n.PoundExpr))
            ):
                closures = [self._parse_closure()]
                while (
                    self.tok.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
                    and not self.tok.newline_before
                    and self.peek().is_punct(":")
                    and self.peek(2).is_punct("{")
                ):
                    self.advance()
                    self.advance()
                    closures.append(self._parse_closure())
                if isinstance(expr, (n.Call, n.PoundExpr)) and not expr.trailing_closures:
                    expr.trailing_closures = closures
                    expr = self._finish(expr, start)
                else:
                    expr = self._finish(n.Call(callee=expr, trailing_closures=closures), start)
                continue
            break
        return expr

    def _parse_argument_list(self, close: str) -> list[n.Argument]:
        self.advance()
        saved = self._no_trailing_closure
        self._no_trailing_closure = False
        arguments: list[n.Argument] = []
        while not self.tok.is_punct(close):
            start = self.tok
            label = None
            if start.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) and self.peek().is_punct(":"):
                label = start.text
                self.advance()
                self.advance()
            if label is not None and self.tok.is_punct(",", close):
                value: n.Node = self._finish(n.Identifier(name=""), start)
            else:
                value = self.parse_expression()
            arguments.append(self._finish(n.Argument(label=label, value=value), start))
            if self.tok.is_punct(","):
                self.advance()
                continue
            break
        self.expect_punct(close)
        self._no_trailing_closure = saved
        return arguments

    def _parse_primary(self) -> n.Node:
        token = self.tok
        kind = token.kind

        if kind == TokenKind.IDENTIFIER or token.is_keyword("self", "Self", "super", "_", "init"):
            self.advance()
            return self._finish(n.Identifier(name=token.text), token)

        if kind in (TokenKind.INTEGER, TokenKind.FLOAT):
            self.advance()
            literal_kind = "int" if kind == TokenKind.INTEGER else "float"
            return self._finish(n.Literal(kind=literal_kind, value=token.text), token)

        if token.is_keyword("true", "false"):
            self.advance()
            return self._finish(n.Literal(kind="bool", value=token.text), token)

        if token.is_keyword("nil"):
            self.advance()
            return self._finish(n.Literal(kind="nil", value="nil"), token)

        if kind == TokenKind.STRING:
            return self._parse_string()

        if token.is_punct("("):
            arguments = self._parse_argument_list(")")
            if len(arguments) == 1 and arguments[0].label is None:
                return arguments[0].value
            return self._finish(n.TupleExpr(elements=arguments), token)

        if token.is_punct("["):
            return self._parse_collection()

        if token.is_punct("{"):
            return self._parse_closure()

        if token.is_punct("."):
            self.advance()
            name = self.expect_name()
            return self._finish(n.MemberAccess(base=None, name=name.text), token)

        if token.is_punct("\\"):
            return self._parse_key_path()

        if kind == TokenKind.POUND:
            return self._parse_pound()

        if token.is_keyword("let", "var"):
            self.advance()
            pattern = self._parse_prefix()
            return self._finish(n.BindingPattern(kind=token.text, pattern=pattern), token)

        if token.is_keyword("is"):
            self.advance()
            type_ref = self.parse_type()
            return self._finish(n.CastExpr(operator="is", expr=None, type=type_ref), token)

        if token.is_keyword("if"):
            return self._parse_if()

        if token.is_keyword("switch"):
            return self._parse_switch()

        raise self.error("Expected an expression")

    def _parse_string(self) -> n.StringLiteral:
        token = self.advance()
        text = token.text
        hashes = len(text) - len(text.lstrip("#"))
        quote = 3 if text[hashes:].startswith('"""') else 1
        value = text[hashes + quote : len(text) - hashes - quote]
        interpolations: list[n.Node] = []
        for begin, stop in token.interpolations:
            sub = Parser(self.source, tokens=self.lexer.tokenize(begin, stop), lexer=self.lexer)
            interpolations.extend(sub._parse_interpolation())
        return self._finish(n.StringLiteral(value=value, interpolations=interpolations), token)

    def _parse_interpolation(self) -> list[n.Node]:
        values: list[n.Node] = []
        while self.tok.kind != TokenKind.EOF:
            if self.tok.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) and self.peek().is_punct(":"):
                self.advance()
                self.advance()
            values.append(self.parse_expression())
            if self.tok.is_punct(","):
                self.advance()
                continue
            break
        if self.tok.kind != TokenKind.EOF:
            raise self.error("Unexpected token in string interpolation")
        return values

    def _parse_collection(self) -> n.Node:
        start = self.advance()
        saved = self._no_trailing_closure
        self._no_trailing_closure = False
        try:
            if self.tok.is_punct(":") and self.peek().is_punct("]"):
                self.advance()
                self.advance()
                return self._finish(n.DictLiteral(), start)
            if self.tok.is_punct("]"):
                self.advance()
                return self._finish(n.ArrayLiteral(), start)

            first = self.parse_expression()
            if self.tok.is_punct(":"):
                entries: list[n.DictEntry] = []
                key = first
                while True:
                    self.expect_punct(":")
                    value = self.parse_expression()
                    entry = n.DictEntry(key=key, value=value, offset=key.offset, end=value.end)
                    entries.append(entry)
                    if self.tok.is_punct(","):
                        self.advance()
                        if self.tok.is_punct("]"):
                            break
                        key = self.parse_expression()
                        continue
                    break
                self.expect_punct("]")
                return self._finish(n.DictLiteral(entries=entries), start)

            elements = [first]
            while self.tok.is_punct(","):
                self.advance()
                if self.tok.is_punct("]"):
                    break
                elements.append(self.parse_expression())
            self.expect_punct("]")
            return self._finish(n.ArrayLiteral(elements=elements), start)
        finally:
            self._no_trailing_closure = saved

    def _closure_signature_end(self) -> int | None:
        """Index of the ``in`` ending a closure signature, if there is one."""
        tokens = self.tokens
        i = self.pos + 1
        if tokens[i].is_punct("["):
            i = self._balanced_end(i)
        depth = 0
        while i < len(tokens) - 1:
            token = tokens[i]
            if token.is_keyword("in"):
                return i if depth == 0 else None
            if token.is_punct("(", "["):
                depth += 1
            elif token.is_punct(")", "]"):
                depth -= 1
                if depth < 0:
                    return None
            elif token.kind == TokenKind.IDENTIFIER or token.kind == TokenKind.ATTRIBUTE:
                pass
            elif token.kind == TokenKind.KEYWORD and token.text in CLOSURE_SIGNATURE_WORDS:
                pass
            elif token.is_punct(",", ":", "."):
                pass
            elif token.kind == TokenKind.OPERATOR and token.text in ("->", "?", "!", "...", "&", "<", ">"):
                pass
            else:
                return None
            i += 1
        return None

    def _parse_closure(self) -> n.Closure:
        start = self.tok
        signature_end = self._closure_signature_end()
        self.advance()
        parameters: list[str] = []
        signature = ""
        if signature_end is not None:
            begin = self.pos
            if self.tokens[begin].is_punct("["):
                begin = self._balanced_end(begin)
            for i in range(begin, signature_end):
                token = self.tokens[i]
                previous = self.tokens[i - 1]
                following = self.tokens[i + 1]
                if (
                    (token.kind == TokenKind.IDENTIFIER or token.is_keyword("_"))
                    and not previous.is_punct(":")
                    and not previous.is_op("->")
                    and (following.is_punct(",", ")", ":") or following.is_keyword("in"))
                ):
                    parameters.append(token.text)
            if signature_end > self.pos:
                signature = _WHITESPACE.sub(" ", self._text(self.tok, self.tokens[signature_end - 1])).strip()
            self.pos = signature_end + 1

        saved = self._no_trailing_closure
        self._no_trailing_closure = False
        body_start = self.tok
        statements = self._parse_statement_list()
        self._no_trailing_closure = saved
        self.expect_punct("}")
        body = n.CodeBlock(statements=statements, offset=body_start.offset, end=self.prev.offset)
        return self._finish(n.Closure(parameters=parameters, signature=signature, body=body), start)

    def _parse_key_path(self) -> n.KeyPathExpr:
        start = self.advance()
        if self.tok.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) and not self.tok.space_before:
            self.advance()
            if self.tok.kind == TokenKind.OPERATOR and self.tok.text.startswith("<") and self._generic_arguments_ahead():
                self._consume_angle_group()
        while True:
            token = self.tok
            if token.space_before:
                break
            if token.is_punct(".") and self.peek().kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.INTEGER):
                self.advance()
                self.advance()
            elif token.kind == TokenKind.OPERATOR and token.text in ("?", "!"):
                self.advance()
            elif token.is_punct("["):
                self._skip_balanced()
            else:
                break
        return self._finish(n.KeyPathExpr(text=self._text(start, self.prev)), start)

    def _parse_pound(self) -> n.PoundExpr:
        start = self.advance()
        arguments = ""
        if self.tok.is_punct("(") and not self.tok.newline_before:
            arguments = self._skip_balanced()
        node = n.PoundExpr(name=start.text[1:], arguments=arguments)
        return self._finish(node, start)


def _ends_switch_case(token: Token) -> bool:
    return (
        token.is_keyword("case", "default")
        or (token.kind == TokenKind.ATTRIBUTE and token.text == "@unknown")
    )
