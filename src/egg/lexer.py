"""Lexer for the egg language.

Produces a stream of tokens from source text. Lexical problems are
collected as diagnostics; the offending text is skipped so that a single
run reports every bad literal and illegal character.
"""

from __future__ import annotations

import string

from egg.errors import CompileError, Diagnostic, Severity, make_diagnostic
from egg.source import Span
from egg.tokens import (
    KEYWORDS,
    ONE_CHAR_OPERATORS,
    TWO_CHAR_OPERATORS,
    Token,
    TokenKind,
)

INT_MAX = 2147483647
_DIGITS = frozenset("0123456789")
_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = _IDENT_START | _DIGITS

# Characters that may follow a backslash inside a string literal.
_VALID_ESCAPES = frozenset("nt'\"?\\")


class Lexer:
    """Tokenizes egg source code."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in " \t\r\n":
                self._advance()
            elif ch == "#" or (ch == "/" and self._peek(1) == "/"):
                self._skip_line_comment()
            elif ch == '"':
                self._lex_string()
            elif ch in _DIGITS:
                self._lex_number()
            elif ch in _IDENT_START:
                self._lex_identifier()
            else:
                self._lex_operator_or_punct()

        self._emit(TokenKind.EOF, "", self.line, self.col)

        if any(d.severity == Severity.ERROR for d in self.diagnostics):
            raise CompileError(self.diagnostics)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = max(start_col, self.col - 1)
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        tok = Token(kind, value, span)
        self.tokens.append(tok)
        return tok

    def _error(self, message: str, line: int, col: int) -> None:
        span = Span(self.filename, line, col, line, col)
        self.diagnostics.append(make_diagnostic(Severity.ERROR, "E100", message, span))

    def _warning(self, message: str, line: int, col: int) -> None:
        span = Span(self.filename, line, col, line, col)
        self.diagnostics.append(make_diagnostic(Severity.WARNING, "W100", message, span))

    # ── Comments ─────────────────────────────────────────────────

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != "\n":
            self._advance()

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> None:
        start_line = self.line
        start_col = self.col
        text = [self._advance()]  # opening "
        bad_escape = False

        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == "\n":
                break
            if ch == '"':
                text.append(self._advance())
                if bad_escape:
                    self._error(
                        "string literal with bad escaped character ignored",
                        start_line, start_col,
                    )
                else:
                    self._emit(TokenKind.STRING_LIT, "".join(text), start_line, start_col)
                return
            if ch == "\\":
                text.append(self._advance())
                nxt = self._peek()
                if nxt == "\n" or self.pos >= len(self.source):
                    bad_escape = True
                    break
                if nxt not in _VALID_ESCAPES:
                    bad_escape = True
                text.append(self._advance())
            else:
                text.append(self._advance())

        # Reached end of line or end of input without a closing quote.
        if bad_escape:
            self._error(
                "unterminated string literal with bad escaped character ignored",
                start_line, start_col,
            )
        else:
            self._error("unterminated string literal ignored", start_line, start_col)

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self) -> None:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and self.source[self.pos] in _DIGITS:
            text.append(self._advance())

        # Anything longer than INT_MAX is too large without converting.
        digits = "".join(text).lstrip("0") or "0"
        if len(digits) > len(str(INT_MAX)) or int(digits) > INT_MAX:
            self._warning("integer literal too large; using max value", start_line, start_col)
            digits = str(INT_MAX)
        self._emit(TokenKind.INT_LIT, digits, start_line, start_col)

    # ── Identifiers and Keywords ─────────────────────────────────

    def _lex_identifier(self) -> None:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and self.source[self.pos] in _IDENT_CHARS:
            text.append(self._advance())
        word = "".join(text)
        self._emit(KEYWORDS.get(word, TokenKind.IDENTIFIER), word, start_line, start_col)

    # ── Operators and Punctuation ────────────────────────────────

    def _lex_operator_or_punct(self) -> None:
        start_line = self.line
        start_col = self.col

        two = self.source[self.pos:self.pos + 2]
        if two in TWO_CHAR_OPERATORS:
            self._advance()
            self._advance()
            self._emit(TWO_CHAR_OPERATORS[two], two, start_line, start_col)
            return

        ch = self._advance()
        kind = ONE_CHAR_OPERATORS.get(ch)
        if kind is None:
            self._error(f"ignoring illegal character: {ch}", start_line, start_col)
            return
        self._emit(kind, ch, start_line, start_col)
