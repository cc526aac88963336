"""Tests for the egg parser."""

from __future__ import annotations

import pytest

from egg.ast_nodes import (
    NOT_STRUCT,
    AssignExpr,
    AssignStmt,
    BinaryExpr,
    BoolType,
    CallExpr,
    CallStmt,
    FieldAccess,
    FnDecl,
    Identifier,
    IfElseStmt,
    IfStmt,
    IntLit,
    IntType,
    PostDecStmt,
    PostIncStmt,
    ReadStmt,
    RepeatStmt,
    ReturnStmt,
    StringLit,
    StructDecl,
    StructType,
    TrueLit,
    UnaryExpr,
    VarDecl,
    VoidType,
    WhileStmt,
    WriteStmt,
)
from egg.errors import CompileError
from tests.helpers import parse


def body_of(source: str) -> list:
    """Parse ``void f() { <source> }`` and return its statements."""
    program = parse(f"void f() {{ {source} }}")
    return program.declarations[0].body.statements


def expr_of(source: str):
    """Parse ``cout << <source>;`` inside a function and return the expression."""
    stmt = body_of(f"cout << {source};")[0]
    assert isinstance(stmt, WriteStmt)
    return stmt.value


def parse_errors(source: str) -> list[str]:
    with pytest.raises(CompileError) as exc_info:
        parse(source)
    return [d.message for d in exc_info.value.diagnostics]


class TestDeclarations:
    def test_empty_program(self):
        assert parse("").declarations == []

    def test_global_variable(self):
        decl = parse("int x;").declarations[0]
        assert isinstance(decl, VarDecl)
        assert isinstance(decl.type_node, IntType)
        assert decl.name.name == "x"
        assert decl.size == NOT_STRUCT

    def test_struct_variable(self):
        decl = parse("struct Point p;").declarations[0]
        assert isinstance(decl, VarDecl)
        assert isinstance(decl.type_node, StructType)
        assert decl.type_node.name.name == "Point"
        assert decl.name.name == "p"
        assert decl.size == 0

    def test_struct_declaration(self):
        decl = parse("struct Point { int x; bool y; };").declarations[0]
        assert isinstance(decl, StructDecl)
        assert decl.name.name == "Point"
        assert [f.name.name for f in decl.fields] == ["x", "y"]
        assert isinstance(decl.fields[1].type_node, BoolType)

    def test_empty_struct_rejected(self):
        errors = parse_errors("struct S { };")
        assert errors == ["struct 'S' must declare at least one field"]

    def test_function(self):
        decl = parse("int add(int a, bool b) { int c; return a; }").declarations[0]
        assert isinstance(decl, FnDecl)
        assert isinstance(decl.return_type, IntType)
        assert decl.name.name == "add"
        assert [p.name.name for p in decl.params] == ["a", "b"]
        assert [d.name.name for d in decl.body.declarations] == ["c"]
        assert isinstance(decl.body.statements[0], ReturnStmt)

    def test_void_function_no_params(self):
        decl = parse("void main() { }").declarations[0]
        assert isinstance(decl.return_type, VoidType)
        assert decl.params == []
        assert decl.body.statements == []

    def test_void_variable_parses(self):
        decl = parse("void v;").declarations[0]
        assert isinstance(decl.type_node, VoidType)

    def test_struct_parameter_rejected(self):
        assert parse_errors("void f(struct P p) { }")

    def test_declaration_order_kept(self):
        names = [d.name.name for d in parse("int a; bool b; void c() {} int d;").declarations]
        assert names == ["a", "b", "c", "d"]


class TestStatements:
    def test_assign(self):
        stmt = body_of("x = 1;")[0]
        assert isinstance(stmt, AssignStmt)
        assert isinstance(stmt.assign.target, Identifier)
        assert isinstance(stmt.assign.value, IntLit)

    def test_increment_decrement(self):
        inc, dec = body_of("x++; y--;")
        assert isinstance(inc, PostIncStmt)
        assert isinstance(dec, PostDecStmt)

    def test_read_write(self):
        read, write = body_of('cin >> p.x; cout << "hi";')
        assert isinstance(read, ReadStmt)
        assert isinstance(read.target, FieldAccess)
        assert isinstance(write, WriteStmt)
        assert isinstance(write.value, StringLit)

    def test_if(self):
        stmt = body_of("if (x) { int y; y = 1; }")[0]
        assert isinstance(stmt, IfStmt)
        assert [d.name.name for d in stmt.declarations] == ["y"]
        assert len(stmt.statements) == 1

    def test_if_else(self):
        stmt = body_of("if (x) { a = 1; } else { int b; }")[0]
        assert isinstance(stmt, IfElseStmt)
        assert len(stmt.then_statements) == 1
        assert [d.name.name for d in stmt.else_declarations] == ["b"]

    def test_while_and_repeat(self):
        loop, rep = body_of("while (true) { } repeat (n) { n--; }")
        assert isinstance(loop, WhileStmt)
        assert isinstance(loop.condition, TrueLit)
        assert isinstance(rep, RepeatStmt)
        assert isinstance(rep.statements[0], PostDecStmt)

    def test_call_statement(self):
        stmt = body_of("f(1, x);")[0]
        assert isinstance(stmt, CallStmt)
        assert stmt.call.callee.name == "f"
        assert len(stmt.call.args) == 2

    def test_return_forms(self):
        bare, valued = body_of("return; return x + 1;")
        assert bare.value is None
        assert isinstance(valued.value, BinaryExpr)

    def test_declaration_after_statement_rejected(self):
        errors = parse_errors("void f() { x = 1; int y; }")
        assert errors == ["declarations must come before statements in a block"]


class TestExpressions:
    def test_precedence(self):
        e = expr_of("1 + 2 * 3")
        assert isinstance(e, BinaryExpr) and e.op == "+"
        assert isinstance(e.right, BinaryExpr) and e.right.op == "*"

    def test_left_associative(self):
        e = expr_of("a - b - c")
        assert e.op == "-"
        assert isinstance(e.left, BinaryExpr)
        assert e.right.name == "c"

    def test_logical_precedence(self):
        e = expr_of("a || b && c")
        assert e.op == "||"
        assert e.right.op == "&&"

    def test_comparison_below_arithmetic(self):
        e = expr_of("a + 1 < b * 2")
        assert e.op == "<"
        assert e.left.op == "+"
        assert e.right.op == "*"

    def test_comparisons_do_not_chain(self):
        errors = parse_errors("void f() { cout << a < b < c; }")
        assert errors == ["comparison operators cannot be chained"]

    def test_parenthesized_comparison_chains(self):
        e = expr_of("(a < b) == c")
        assert e.op == "=="
        assert e.left.op == "<"

    def test_unary(self):
        e = expr_of("-a * !b")
        assert e.op == "*"
        assert isinstance(e.left, UnaryExpr) and e.left.op == "-"
        assert isinstance(e.right, UnaryExpr) and e.right.op == "!"

    def test_unary_binds_tighter_than_comparison(self):
        e = expr_of("!a == b")
        assert e.op == "=="
        assert isinstance(e.left, UnaryExpr)

    def test_nested_assignment_right_associative(self):
        stmt = body_of("a = b = 3;")[0]
        inner = stmt.assign.value
        assert isinstance(inner, AssignExpr)
        assert inner.target.name == "b"

    def test_assignment_in_expression(self):
        e = expr_of("x = 1")
        assert isinstance(e, AssignExpr)

    def test_invalid_assignment_target(self):
        errors = parse_errors("void f() { cout << a + b = 3; }")
        assert errors == ["invalid assignment target"]

    def test_field_chain(self):
        e = expr_of("a.b.c")
        assert isinstance(e, FieldAccess)
        assert e.field.name == "c"
        assert isinstance(e.loc, FieldAccess)
        assert e.loc.field.name == "b"
        assert isinstance(e.loc.loc, Identifier)

    def test_call_expression(self):
        e = expr_of("f(g(1), x.y)")
        assert isinstance(e, CallExpr)
        assert isinstance(e.args[0], CallExpr)
        assert isinstance(e.args[1], FieldAccess)

    def test_literals(self):
        e = expr_of('"s" + 7')
        assert isinstance(e.left, StringLit)
        assert e.right.value == 7


class TestRecovery:
    def test_multiple_errors_reported(self):
        errors = parse_errors("void f() { x = ; y = ; }")
        assert len(errors) == 2

    def test_recovers_at_top_level(self):
        errors = parse_errors("int ; int y; bool ;")
        assert len(errors) == 2

    def test_error_code(self):
        with pytest.raises(CompileError) as exc_info:
            parse("int x")
        assert exc_info.value.diagnostics[0].code == "E200"

    def test_bad_top_level_token(self):
        errors = parse_errors("x = 1;")
        assert errors[0].startswith("unexpected token at top level")

    def test_missing_closing_brace(self):
        assert parse_errors("void f() { x = 1;")
