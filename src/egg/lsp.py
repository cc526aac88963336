"""egg Language Server: pygls-based LSP for .egg files.

Provides diagnostics, hover over resolved names, document symbols, and
formatting via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from egg import __version__
from egg.analyzer import NameAnalyzer
from egg.ast_nodes import (
    FnDecl,
    Identifier,
    Program,
    StructDecl,
    VarDecl,
    collect_identifiers,
)
from egg.errors import CompileError, Diagnostic, InternalError, Severity
from egg.lexer import Lexer
from egg.parser import Parser
from egg.source import Span
from egg.unparser import Unparser

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed egg Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def _compile_diag(d: Diagnostic) -> lsp.Diagnostic:
    """Convert an egg Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="egg",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


def _internal_diag(phase: str, error: InternalError) -> lsp.Diagnostic:
    return lsp.Diagnostic(
        range=lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0)),
        severity=lsp.DiagnosticSeverity.Error, source="egg",
        message=f"[internal] {phase} error: {error}",
    )


def _contains(span: Span, line: int, character: int) -> bool:
    """True if the 0-indexed LSP position falls inside a single-line span."""
    if span.start_line != span.end_line or span.start_line - 1 != line:
        return False
    return span.start_col - 1 <= character <= span.end_col


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    program: Program | None = None
    identifiers: list[Identifier] = field(default_factory=list)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "egg-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Run Lexer -> Parser -> NameAnalyzer, cache results, return state."""
    ds = DocumentState(source=source)
    diags: list[lsp.Diagnostic] = []
    filename = uri

    lexer = Lexer(source, filename)
    try:
        tokens = lexer.lex()
        program = Parser(tokens, filename).parse()
    except CompileError as e:
        seen = set(map(id, e.diagnostics))
        diags.extend(_compile_diag(d) for d in lexer.diagnostics if id(d) not in seen)
        diags.extend(_compile_diag(d) for d in e.diagnostics)
        ds.diagnostics = diags
        _state[uri] = ds
        return ds
    except InternalError as e:
        diags.append(_internal_diag("parser", e))
        ds.diagnostics = diags
        _state[uri] = ds
        return ds

    diags.extend(_compile_diag(d) for d in lexer.diagnostics)
    ds.program = program
    ds.identifiers = collect_identifiers(program)

    try:
        analyzer = NameAnalyzer()
        analyzer.analyze(program)
        diags.extend(_compile_diag(d) for d in analyzer.diagnostics)
    except InternalError as e:
        diags.append(_internal_diag("analyzer", e))

    ds.diagnostics = diags
    _state[uri] = ds
    return ds


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: take last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


def hover_text(ds: DocumentState, line: int, character: int) -> str | None:
    """Markdown describing the resolved name at a 0-indexed position."""
    for ident in ds.identifiers:
        if ident.symbol is not None and _contains(ident.span, line, character):
            kind = ident.symbol.kind.name.lower().replace("_", " ")
            return f"**{kind}** `{ident.name}` : `{ident.symbol}`"
    return None


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    content = hover_text(ds, params.position.line, params.position.character)
    if content is None:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=content,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.program is None:
        return []

    symbols: list[lsp.DocumentSymbol] = []
    for decl in ds.program.declarations:
        sym = _decl_to_symbol(decl)
        if sym is not None:
            symbols.append(sym)
    return symbols


def _decl_to_symbol(decl: object) -> lsp.DocumentSymbol | None:
    """Convert a top-level declaration to an LSP DocumentSymbol."""
    if isinstance(decl, FnDecl):
        params_str = ", ".join(f"{p.type_node} {p.name.name}" for p in decl.params)
        return lsp.DocumentSymbol(
            name=decl.name.name,
            kind=lsp.SymbolKind.Function,
            range=span_to_range(decl.span),
            selection_range=span_to_range(decl.name.span),
            detail=f"({params_str}) -> {decl.return_type}",
        )
    if isinstance(decl, StructDecl):
        children = [_decl_to_symbol(f) for f in decl.fields]
        return lsp.DocumentSymbol(
            name=decl.name.name,
            kind=lsp.SymbolKind.Struct,
            range=span_to_range(decl.span),
            selection_range=span_to_range(decl.name.span),
            children=[c for c in children if c is not None] or None,
        )
    if isinstance(decl, VarDecl):
        return lsp.DocumentSymbol(
            name=decl.name.name,
            kind=lsp.SymbolKind.Variable,
            range=span_to_range(decl.span),
            selection_range=span_to_range(decl.name.span),
            detail=str(decl.type_node),
        )
    return None



def document_end(source: str) -> lsp.Position:
    """Position just past the last character of *source*."""
    last_break = source.rfind("\n")
    return lsp.Position(source.count("\n"), len(source) - last_break - 1)


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.program is None:
        return None

    formatted = Unparser(annotate=False, indent=params.options.tab_size).unparse(ds.program)
    if formatted == ds.source:
        return None

    # Replace entire document
    return [lsp.TextEdit(
        range=lsp.Range(start=lsp.Position(0, 0), end=document_end(ds.source)),
        new_text=formatted,
    )]


def main() -> None:
    """Start the egg language server on stdio."""
    server.start_io()
