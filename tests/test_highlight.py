"""Tests for the pygments egg lexer."""

from __future__ import annotations

from pygments.token import Comment, Keyword, Name, Number, Operator, String

from egg.highlight import EggLexer, highlight_source


def tokens(source: str) -> list[tuple]:
    return [(tok, text) for tok, text in EggLexer().get_tokens(source) if text.strip()]


class TestEggLexer:
    def test_metadata(self):
        assert "egg" in EggLexer.aliases
        assert "*.egg" in EggLexer.filenames

    def test_types_and_keywords(self):
        result = tokens("int x; struct P p; while (true) { }")
        assert (Keyword.Type, "int") in result
        assert (Keyword.Declaration, "struct") in result
        assert (Keyword, "while") in result
        assert (Keyword.Constant, "true") in result
        assert (Name, "x") in result

    def test_function_names(self):
        result = tokens("void main() { add(1, 2); }")
        assert (Name.Function, "main") in result
        assert (Name.Function, "add") in result
        assert (Number.Integer, "1") in result

    def test_comments(self):
        result = tokens("x; // note\n# other\n")
        assert (Comment.Single, "// note") in result
        assert (Comment.Single, "# other") in result

    def test_stream_operators(self):
        result = tokens("cin >> x; cout << x;")
        assert (Operator, ">>") in result
        assert (Operator, "<<") in result

    def test_string_escapes(self):
        result = tokens(r'cout << "a\n";')
        assert (String.Escape, r"\n") in result

    def test_highlight_source_adds_ansi(self):
        assert "\x1b[" in highlight_source("int x;\n")

    def test_no_arrow_operator(self):
        result = tokens("a->b;")
        assert (Operator, "->") not in result
        assert (Operator, "-") in result
        assert (Operator, ">") in result
