"""Token kinds and token representation for the egg lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from egg.source import Span


class TokenKind(Enum):
    # Types
    BOOL = auto()
    INT = auto()
    VOID = auto()

    # Keywords
    TRUE = auto()
    FALSE = auto()
    STRUCT = auto()
    CIN = auto()
    COUT = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    REPEAT = auto()
    RETURN = auto()

    # Literals
    INT_LIT = auto()
    STRING_LIT = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Punctuation
    LCURLY = auto()
    RCURLY = auto()
    LPAREN = auto()
    RPAREN = auto()
    SEMICOLON = auto()
    COMMA = auto()
    DOT = auto()

    # Stream operators
    WRITE = auto()  # <<
    READ = auto()   # >>

    # Operators
    PLUS_PLUS = auto()
    MINUS_MINUS = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    BANG = auto()
    AND = auto()
    OR = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    LESS = auto()
    GREATER = auto()
    LESS_EQUAL = auto()
    GREATER_EQUAL = auto()
    ASSIGN = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span


KEYWORDS: dict[str, TokenKind] = {
    "bool": TokenKind.BOOL,
    "int": TokenKind.INT,
    "void": TokenKind.VOID,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "struct": TokenKind.STRUCT,
    "cin": TokenKind.CIN,
    "cout": TokenKind.COUT,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "repeat": TokenKind.REPEAT,
    "return": TokenKind.RETURN,
}

# Two-character operators are matched before their one-character prefixes.
TWO_CHAR_OPERATORS: dict[str, TokenKind] = {
    "<<": TokenKind.WRITE,
    ">>": TokenKind.READ,
    "++": TokenKind.PLUS_PLUS,
    "--": TokenKind.MINUS_MINUS,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_EQUAL,
    ">=": TokenKind.GREATER_EQUAL,
}

ONE_CHAR_OPERATORS: dict[str, TokenKind] = {
    "{": TokenKind.LCURLY,
    "}": TokenKind.RCURLY,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "!": TokenKind.BANG,
    "<": TokenKind.LESS,
    ">": TokenKind.GREATER,
    "=": TokenKind.ASSIGN,
}
