"""Swift syntax trees: lexer, parser and node classes."""

from architask.syntax.errors import SyntaxParseError
from architask.syntax.nodes import iter_child_nodes, walk, walk_breadth_first
from architask.syntax.parser import Parser, parse
from architask.syntax.tokens import Lexer, Token, TokenKind, tokenize

__all__ = [
    "Lexer",
    "Parser",
    "SyntaxParseError",
    "Token",
    "TokenKind",
    "iter_child_nodes",
    "parse",
    "tokenize",
    "walk",
    "walk_breadth_first",
]
