"""Pygments lexer for the egg language."""

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class EggLexer(RegexLexer):
    """Pygments lexer for egg source files."""

    name = "Egg"
    aliases = ["egg"]
    filenames = ["*.egg"]
    mimetypes = ["text/x-egg"]

    tokens = {
        "root": [
            (r"\s+", Text),
            # Line comments (// ... or # ...)
            (r"//.*$", Comment.Single),
            (r"#.*$", Comment.Single),
            (r'"', String, "string"),
            (r"[0-9]+", Number.Integer),
            (
                words(
                    ("if", "else", "while", "repeat", "return", "cin", "cout"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword,
            ),
            (r"\bstruct\b", Keyword.Declaration),
            (r"\b(true|false)\b", Keyword.Constant),
            (words(("int", "bool", "void"), prefix=r"\b", suffix=r"\b"), Keyword.Type),
            # Function names at a call or definition site
            (r"[A-Za-z_][A-Za-z0-9_]*(?=\s*\()", Name.Function),
            (r"[A-Za-z_][A-Za-z0-9_]*", Name),
            # Operators (multi-char before single-char)
            (r"<<|>>|\+\+|--|==|!=|<=|>=|&&|\|\|", Operator),
            (r"[+\-*/!<>=.]", Operator),
            (r"[(),;{}]", Punctuation),
        ],
        # String state: valid escapes are highlighted, a newline ends the literal
        "string": [
            (r"\\[nt'\"?\\]", String.Escape),
            (r'[^"\\\n]+', String),
            (r"\\.", String),
            (r'"', String, "#pop"),
            (r"\n", Text, "#pop"),
        ],
    }


def highlight_source(text: str) -> str:
    """Return ``text`` with ANSI colors for a terminal."""
    return highlight(text, EggLexer(), TerminalFormatter())
