"""Parser for the egg language.

Transforms a token stream into an AST using recursive descent for
declarations and statements and a Pratt parser for expressions.
"""

from __future__ import annotations

from egg.ast_nodes import (
    NOT_STRUCT,
    AssignExpr,
    AssignStmt,
    BinaryExpr,
    BoolType,
    CallExpr,
    CallStmt,
    Declaration,
    Expr,
    FalseLit,
    FieldAccess,
    FnBody,
    FnDecl,
    Identifier,
    IfElseStmt,
    IfStmt,
    IntLit,
    IntType,
    Param,
    PostDecStmt,
    PostIncStmt,
    Program,
    ReadStmt,
    RepeatStmt,
    ReturnStmt,
    Stmt,
    StringLit,
    StructDecl,
    StructType,
    TrueLit,
    TypeNode,
    UnaryExpr,
    VarDecl,
    VoidType,
    WhileStmt,
    WriteStmt,
)
from egg.errors import CompileError, Diagnostic, Severity, make_diagnostic
from egg.source import Span
from egg.tokens import Token, TokenKind

# ── Binding powers for Pratt parser ─────────────────────────────

# (left_bp, right_bp) for infix operators
_INFIX_BP: dict[TokenKind, tuple[int, int]] = {
    TokenKind.ASSIGN: (1, 1),
    TokenKind.OR: (3, 4),
    TokenKind.AND: (5, 6),
    TokenKind.EQUAL: (7, 8),
    TokenKind.NOT_EQUAL: (7, 8),
    TokenKind.LESS: (7, 8),
    TokenKind.GREATER: (7, 8),
    TokenKind.LESS_EQUAL: (7, 8),
    TokenKind.GREATER_EQUAL: (7, 8),
    TokenKind.PLUS: (11, 12),
    TokenKind.MINUS: (11, 12),
    TokenKind.STAR: (13, 14),
    TokenKind.SLASH: (13, 14),
}

_PREFIX_BP = 15  # right bp for unary ! and -

_COMPARISONS = frozenset({
    TokenKind.EQUAL, TokenKind.NOT_EQUAL,
    TokenKind.LESS, TokenKind.GREATER,
    TokenKind.LESS_EQUAL, TokenKind.GREATER_EQUAL,
})

_PRIMITIVE_TYPES = frozenset({TokenKind.INT, TokenKind.BOOL, TokenKind.VOID})
_DECL_START = _PRIMITIVE_TYPES | {TokenKind.STRUCT}


class Parser:
    """Parses a list of tokens into an egg Program."""

    def __init__(self, tokens: list[Token], filename: str = "<stdin>") -> None:
        self.tokens = tokens
        self.pos = 0
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []

    # ── Token access ─────────────────────────────────────────────

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # EOF

    def _peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def _at(self, kind: TokenKind) -> bool:
        return self._current().kind == kind

    def _at_any(self, kinds: frozenset[TokenKind]) -> bool:
        return self._current().kind in kinds

    def _advance(self) -> Token:
        tok = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _expect(self, kind: TokenKind) -> Token:
        if self._current().kind == kind:
            return self._advance()
        tok = self._current()
        self._error(f"expected {kind.name}, got {tok.kind.name} ({tok.value!r})", tok.span)
        raise _ParseError

    def _error(self, message: str, span: Span) -> None:
        self.diagnostics.append(make_diagnostic(Severity.ERROR, "E200", message, span))

    def _span(self, start: Span, end: Span) -> Span:
        """Build a Span from a start span to an end span."""
        return Span(
            self.filename,
            start.start_line, start.start_col,
            end.end_line, end.end_col,
        )

    def _previous_span(self) -> Span:
        return self.tokens[self.pos - 1].span if self.pos > 0 else self._current().span

    def _synchronize(self, *, top_level: bool) -> None:
        """Skip to the end of the broken declaration or statement.

        Stops after a ``;`` at the starting nesting depth. A ``}`` closing
        the enclosing block is left for the block parser, except at the top
        level where there is no block to close it.
        """
        depth = 0
        while not self._at(TokenKind.EOF):
            kind = self._current().kind
            if kind == TokenKind.LCURLY:
                depth += 1
            elif kind == TokenKind.RCURLY:
                if depth == 0:
                    if top_level:
                        self._advance()
                    return
                depth -= 1
                if depth == 0 and top_level:
                    self._advance()
                    if self._at(TokenKind.SEMICOLON):
                        self._advance()
                    return
            elif kind == TokenKind.SEMICOLON and depth == 0:
                self._advance()
                return
            self._advance()

    # ── Top-level parsing ────────────────────────────────────────

    def parse(self) -> Program:
        """Parse the entire token stream into a Program."""
        declarations: list[Declaration] = []

        while not self._at(TokenKind.EOF):
            try:
                declarations.append(self._parse_declaration())
            except _ParseError:
                self._synchronize(top_level=True)

        end = self._current().span
        span = Span(self.filename, 1, 1, end.end_line, end.end_col)
        if self.diagnostics:
            raise CompileError(self.diagnostics)
        return Program(declarations=declarations, span=span)

    def _parse_declaration(self) -> Declaration:
        """Parse a single top-level declaration."""
        tok = self._current()

        if tok.kind == TokenKind.STRUCT:
            if self._peek(2).kind == TokenKind.LCURLY:
                return self._parse_struct_decl()
            return self._parse_var_decl()

        if tok.kind in _PRIMITIVE_TYPES:
            if self._peek(2).kind == TokenKind.LPAREN:
                return self._parse_fn_decl()
            return self._parse_var_decl()

        self._error(f"unexpected token at top level: {tok.kind.name} ({tok.value!r})", tok.span)
        raise _ParseError

    # ── Declarations ─────────────────────────────────────────────

    def _parse_identifier(self) -> Identifier:
        tok = self._expect(TokenKind.IDENTIFIER)
        return Identifier(tok.value, tok.span)

    def _parse_type(self) -> TypeNode:
        tok = self._current()
        if tok.kind == TokenKind.INT:
            self._advance()
            return IntType(tok.span)
        if tok.kind == TokenKind.BOOL:
            self._advance()
            return BoolType(tok.span)
        if tok.kind == TokenKind.VOID:
            self._advance()
            return VoidType(tok.span)
        self._error(f"expected a type, got {tok.kind.name} ({tok.value!r})", tok.span)
        raise _ParseError

    def _parse_var_decl(self) -> VarDecl:
        start = self._current().span
        if self._at(TokenKind.STRUCT):
            self._advance()
            type_id = self._parse_identifier()
            type_node: TypeNode = StructType(type_id, self._span(start, type_id.span))
            size = 0
        else:
            type_node = self._parse_type()
            size = NOT_STRUCT
        name = self._parse_identifier()
        end = self._expect(TokenKind.SEMICOLON).span
        return VarDecl(type_node, name, size, self._span(start, end))

    def _parse_var_decls(self) -> list[VarDecl]:
        decls: list[VarDecl] = []
        while self._at_any(_DECL_START):
            decls.append(self._parse_var_decl())
        return decls

    def _parse_struct_decl(self) -> StructDecl:
        start = self._expect(TokenKind.STRUCT).span
        name = self._parse_identifier()
        self._expect(TokenKind.LCURLY)
        if not self._at_any(_DECL_START):
            self._error(
                f"struct '{name.name}' must declare at least one field",
                self._current().span,
            )
        fields = self._parse_var_decls()
        self._expect(TokenKind.RCURLY)
        end = self._expect(TokenKind.SEMICOLON).span
        return StructDecl(name, fields, self._span(start, end))

    def _parse_fn_decl(self) -> FnDecl:
        start = self._current().span
        return_type = self._parse_type()
        name = self._parse_identifier()
        params = self._parse_param_list()
        body_start = self._current().span
        decls, stmts = self._parse_block()
        body = FnBody(decls, stmts, self._span(body_start, self._previous_span()))
        return FnDecl(return_type, name, params, body, self._span(start, body.span))

    def _parse_param_list(self) -> list[Param]:
        self._expect(TokenKind.LPAREN)
        params: list[Param] = []
        if not self._at(TokenKind.RPAREN):
            params.append(self._parse_param())
            while self._at(TokenKind.COMMA):
                self._advance()
                params.append(self._parse_param())
        self._expect(TokenKind.RPAREN)
        return params

    def _parse_param(self) -> Param:
        type_node = self._parse_type()
        name = self._parse_identifier()
        return Param(type_node, name, self._span(type_node.span, name.span))

    # ── Blocks and statements ────────────────────────────────────

    def _parse_block(self) -> tuple[list[VarDecl], list[Stmt]]:
        """Parse ``{ varDecl* stmt* }``, recovering from errors per item."""
        self._expect(TokenKind.LCURLY)
        decls: list[VarDecl] = []
        stmts: list[Stmt] = []

        while self._at_any(_DECL_START):
            try:
                decls.append(self._parse_var_decl())
            except _ParseError:
                self._synchronize(top_level=False)

        while not self._at(TokenKind.RCURLY) and not self._at(TokenKind.EOF):
            try:
                stmts.append(self._parse_statement())
            except _ParseError:
                self._synchronize(top_level=False)

        self._expect(TokenKind.RCURLY)
        return decls, stmts

    def _parse_statement(self) -> Stmt:
        tok = self._current()

        if tok.kind == TokenKind.CIN:
            self._advance()
            self._expect(TokenKind.READ)
            target = self._parse_loc()
            end = self._expect(TokenKind.SEMICOLON).span
            return ReadStmt(target, self._span(tok.span, end))

        if tok.kind == TokenKind.COUT:
            self._advance()
            self._expect(TokenKind.WRITE)
            value = self._parse_expression(0)
            end = self._expect(TokenKind.SEMICOLON).span
            return WriteStmt(value, self._span(tok.span, end))

        if tok.kind == TokenKind.IF:
            return self._parse_if()

        if tok.kind in (TokenKind.WHILE, TokenKind.REPEAT):
            self._advance()
            condition = self._parse_condition()
            decls, stmts = self._parse_block()
            span = self._span(tok.span, self._previous_span())
            if tok.kind == TokenKind.WHILE:
                return WhileStmt(condition, decls, stmts, span)
            return RepeatStmt(condition, decls, stmts, span)

        if tok.kind == TokenKind.RETURN:
            self._advance()
            value = None
            if not self._at(TokenKind.SEMICOLON):
                value = self._parse_expression(0)
            end = self._expect(TokenKind.SEMICOLON).span
            return ReturnStmt(value, self._span(tok.span, end))

        if tok.kind == TokenKind.IDENTIFIER:
            return self._parse_identifier_statement()

        if tok.kind in _DECL_START:
            self._error("declarations must come before statements in a block", tok.span)
            raise _ParseError

        self._error(f"unexpected token in statement: {tok.kind.name} ({tok.value!r})", tok.span)
        raise _ParseError

    def _parse_identifier_statement(self) -> Stmt:
        """Parse a call, assignment, ``++`` or ``--`` statement."""
        start = self._current().span
        if self._peek(1).kind == TokenKind.LPAREN:
            call = self._parse_call()
            end = self._expect(TokenKind.SEMICOLON).span
            return CallStmt(call, self._span(start, end))

        target = self._parse_loc()
        tok = self._current()
        if tok.kind == TokenKind.PLUS_PLUS:
            self._advance()
            end = self._expect(TokenKind.SEMICOLON).span
            return PostIncStmt(target, self._span(start, end))
        if tok.kind == TokenKind.MINUS_MINUS:
            self._advance()
            end = self._expect(TokenKind.SEMICOLON).span
            return PostDecStmt(target, self._span(start, end))
        if tok.kind == TokenKind.ASSIGN:
            self._advance()
            value = self._parse_expression(0)
            assign = AssignExpr(target, value, self._span(start, value.span))
            end = self._expect(TokenKind.SEMICOLON).span
            return AssignStmt(assign, self._span(start, end))

        self._error(
            f"expected '=', '++' or '--' after location, got {tok.kind.name} ({tok.value!r})",
            tok.span,
        )
        raise _ParseError

    def _parse_if(self) -> Stmt:
        start = self._expect(TokenKind.IF).span
        condition = self._parse_condition()
        then_decls, then_stmts = self._parse_block()
        if not self._at(TokenKind.ELSE):
            return IfStmt(
                condition, then_decls, then_stmts,
                self._span(start, self._previous_span()),
            )
        self._advance()
        else_decls, else_stmts = self._parse_block()
        return IfElseStmt(
            condition, then_decls, then_stmts, else_decls, else_stmts,
            self._span(start, self._previous_span()),
        )

    def _parse_condition(self) -> Expr:
        self._expect(TokenKind.LPAREN)
        condition = self._parse_expression(0)
        self._expect(TokenKind.RPAREN)
        return condition

    # ── Expressions ──────────────────────────────────────────────

    def _parse_loc(self) -> Identifier | FieldAccess:
        """Parse ``ID ('.' ID)*``."""
        loc: Identifier | FieldAccess = self._parse_identifier()
        while self._at(TokenKind.DOT):
            self._advance()
            member = self._parse_identifier()
            loc = FieldAccess(loc, member, self._span(loc.span, member.span))
        return loc

    def _parse_call(self) -> CallExpr:
        """Parse a function call: name(args)."""
        callee = self._parse_identifier()
        self._expect(TokenKind.LPAREN)
        args: list[Expr] = []
        if not self._at(TokenKind.RPAREN):
            args.append(self._parse_expression(0))
            while self._at(TokenKind.COMMA):
                self._advance()
                args.append(self._parse_expression(0))
        end = self._expect(TokenKind.RPAREN).span
        return CallExpr(callee, args, self._span(callee.span, end))

    def _parse_expression(self, min_bp: int) -> Expr:
        """Parse an expression using Pratt parsing with binding powers."""
        left = self._parse_prefix()
        after_comparison = False

        while True:
            tok = self._current()
            if tok.kind not in _INFIX_BP:
                break
            left_bp, right_bp = _INFIX_BP[tok.kind]
            if left_bp < min_bp:
                break

            if tok.kind in _COMPARISONS and after_comparison:
                self._error("comparison operators cannot be chained", tok.span)
                raise _ParseError

            op_tok = self._advance()
            right = self._parse_expression(right_bp)

            if op_tok.kind == TokenKind.ASSIGN:
                if not isinstance(left, (Identifier, FieldAccess)):
                    self._error("invalid assignment target", op_tok.span)
                    raise _ParseError
                left = AssignExpr(left, right, self._span(left.span, right.span))
                after_comparison = False
            else:
                left = BinaryExpr(
                    left, op_tok.value, right,
                    self._span(left.span, right.span),
                )
                after_comparison = op_tok.kind in _COMPARISONS

        return left

    def _parse_prefix(self) -> Expr:
        """Parse a prefix expression (term or unary operator)."""
        tok = self._current()

        if tok.kind in (TokenKind.BANG, TokenKind.MINUS):
            self._advance()
            operand = self._parse_expression(_PREFIX_BP)
            return UnaryExpr(tok.value, operand, self._span(tok.span, operand.span))

        if tok.kind == TokenKind.INT_LIT:
            self._advance()
            return IntLit(int(tok.value), tok.span)

        if tok.kind == TokenKind.STRING_LIT:
            self._advance()
            return StringLit(tok.value, tok.span)

        if tok.kind == TokenKind.TRUE:
            self._advance()
            return TrueLit(tok.span)

        if tok.kind == TokenKind.FALSE:
            self._advance()
            return FalseLit(tok.span)

        if tok.kind == TokenKind.LPAREN:
            self._advance()
            expr = self._parse_expression(0)
            self._expect(TokenKind.RPAREN)
            return expr

        if tok.kind == TokenKind.IDENTIFIER:
            if self._peek(1).kind == TokenKind.LPAREN:
                return self._parse_call()
            return self._parse_loc()

        self._error(f"unexpected token in expression: {tok.kind.name} ({tok.value!r})", tok.span)
        raise _ParseError


class _ParseError(Exception):
    """Internal exception for parser error recovery."""
