"""Shared test helpers for the egg test suite."""

from __future__ import annotations

from egg.analyzer import NameAnalyzer
from egg.ast_nodes import Program
from egg.errors import Diagnostic
from egg.lexer import Lexer
from egg.parser import Parser


def parse(source: str) -> Program:
    """Lex and parse source without analysis."""
    tokens = Lexer(source, "<test>").lex()
    return Parser(tokens, "<test>").parse()


def analyze(source: str) -> tuple[Program, list[Diagnostic]]:
    """Parse and analyze source, return (program, diagnostics)."""
    program = parse(source)
    analyzer = NameAnalyzer()
    analyzer.analyze(program)
    return program, analyzer.diagnostics


def check(source: str) -> Program:
    """Parse and analyze source, asserting no errors. Returns the program."""
    program, diagnostics = analyze(source)
    errors = [d for d in diagnostics if d.severity.value == "error"]
    assert not errors, f"Unexpected errors: {[f'{d.code}: {d.message}' for d in errors]}"
    return program


def check_fails(source: str, error_code: str) -> list[Diagnostic]:
    """Parse and analyze source, asserting the given error code appears."""
    _, diagnostics = analyze(source)
    matching = [d for d in diagnostics if d.code == error_code]
    assert matching, (
        f"Expected error {error_code} but got: "
        f"{[f'{d.code}: {d.message}' for d in diagnostics] or 'no diagnostics'}"
    )
    return matching
