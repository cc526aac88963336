"""AST-walking pretty-printer for egg programs.

Prints a Program back as egg source. After name analysis has run, every
bound identifier in a use position can be annotated with the display form
of its symbol, e.g. ``x(int)`` or ``f(int, bool -> void)``.

Comments are discarded by the lexer and are not reproduced.
"""

from __future__ import annotations

from egg.ast_nodes import (
    AssignExpr,
    AssignStmt,
    BinaryExpr,
    CallExpr,
    CallStmt,
    Expr,
    FalseLit,
    FieldAccess,
    FnDecl,
    Identifier,
    IfElseStmt,
    IfStmt,
    IntLit,
    Program,
    PostDecStmt,
    PostIncStmt,
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
    WhileStmt,
    WriteStmt,
)
from egg.errors import InternalError


class Unparser:
    """Format a parsed egg Program back to source text."""

    def __init__(self, annotate: bool = True, indent: int = 4) -> None:
        self.annotate = annotate
        self.indent = indent

    # ── Public API ─────────────────────────────────────────────

    def unparse(self, program: Program) -> str:
        parts: list[str] = []
        for decl in program.declarations:
            if isinstance(decl, FnDecl):
                parts.append(self._unparse_fn_decl(decl) + "\n")
            elif isinstance(decl, StructDecl):
                parts.append(self._unparse_struct_decl(decl) + "\n")
            elif isinstance(decl, VarDecl):
                parts.append(self._unparse_var_decl(decl))
            else:
                raise InternalError(f"unexpected top-level node: {type(decl).__name__}")
        if not parts:
            return ""
        return "\n".join(parts) + "\n"

    # ── Declarations ───────────────────────────────────────────

    def _unparse_type(self, type_node: TypeNode) -> str:
        if isinstance(type_node, StructType):
            return f"struct {self._use(type_node.name)}"
        return str(type_node)

    def _unparse_var_decl(self, vd: VarDecl) -> str:
        return f"{self._unparse_type(vd.type_node)} {vd.name.name};"

    def _unparse_fn_decl(self, fd: FnDecl) -> str:
        params = ", ".join(f"{p.type_node} {p.name.name}" for p in fd.params)
        lines = [f"{fd.return_type} {fd.name.name}({params}) {{"]
        lines.extend(self._unparse_block(fd.body.declarations, fd.body.statements))
        lines.append("}")
        return "\n".join(lines)

    def _unparse_struct_decl(self, sd: StructDecl) -> str:
        lines = [f"struct {sd.name.name} {{"]
        for field_decl in sd.fields:
            lines.append(self._indented(self._unparse_var_decl(field_decl)))
        lines.append("};")
        return "\n".join(lines)

    def _unparse_block(self, decls: list[VarDecl], stmts: list[Stmt]) -> list[str]:
        lines = [self._indented(self._unparse_var_decl(vd)) for vd in decls]
        for stmt in stmts:
            lines.append(self._indented(self._unparse_stmt(stmt)))
        return lines

    # ── Statements ─────────────────────────────────────────────

    def _unparse_stmt(self, stmt: Stmt) -> str:
        if isinstance(stmt, AssignStmt):
            assign = stmt.assign
            return f"{self._unparse_expr(assign.target)} = {self._unparse_expr(assign.value)};"
        if isinstance(stmt, PostIncStmt):
            return f"{self._unparse_expr(stmt.target)}++;"
        if isinstance(stmt, PostDecStmt):
            return f"{self._unparse_expr(stmt.target)}--;"
        if isinstance(stmt, ReadStmt):
            return f"cin >> {self._unparse_expr(stmt.target)};"
        if isinstance(stmt, WriteStmt):
            return f"cout << {self._unparse_expr(stmt.value)};"
        if isinstance(stmt, IfStmt):
            return self._unparse_loop_like("if", stmt.condition, stmt.declarations, stmt.statements)
        if isinstance(stmt, IfElseStmt):
            lines = [f"if ({self._unparse_expr(stmt.condition)}) {{"]
            lines.extend(self._unparse_block(stmt.then_declarations, stmt.then_statements))
            lines.append("}")
            lines.append("else {")
            lines.extend(self._unparse_block(stmt.else_declarations, stmt.else_statements))
            lines.append("}")
            return "\n".join(lines)
        if isinstance(stmt, WhileStmt):
            return self._unparse_loop_like(
                "while", stmt.condition, stmt.declarations, stmt.statements,
            )
        if isinstance(stmt, RepeatStmt):
            return self._unparse_loop_like(
                "repeat", stmt.condition, stmt.declarations, stmt.statements,
            )
        if isinstance(stmt, CallStmt):
            return f"{self._unparse_expr(stmt.call)};"
        if isinstance(stmt, ReturnStmt):
            if stmt.value is None:
                return "return;"
            return f"return {self._unparse_expr(stmt.value)};"
        raise InternalError(f"unexpected statement node: {type(stmt).__name__}")

    def _unparse_loop_like(
        self, keyword: str, condition: Expr, decls: list[VarDecl], stmts: list[Stmt],
    ) -> str:
        lines = [f"{keyword} ({self._unparse_expr(condition)}) {{"]
        lines.extend(self._unparse_block(decls, stmts))
        lines.append("}")
        return "\n".join(lines)

    # ── Expressions ────────────────────────────────────────────

    def _unparse_expr(self, expr: Expr) -> str:
        if isinstance(expr, IntLit):
            return str(expr.value)
        if isinstance(expr, StringLit):
            return expr.value
        if isinstance(expr, TrueLit):
            return "true"
        if isinstance(expr, FalseLit):
            return "false"
        if isinstance(expr, Identifier):
            return self._use(expr)
        if isinstance(expr, FieldAccess):
            return f"{self._unparse_expr(expr.loc)}.{expr.field.name}"
        if isinstance(expr, AssignExpr):
            # Only nested assignments reach here; statements print their own.
            return f"({self._unparse_expr(expr.target)} = {self._unparse_expr(expr.value)})"
        if isinstance(expr, CallExpr):
            args = ", ".join(self._unparse_expr(a) for a in expr.args)
            return f"{self._use(expr.callee)}({args})"
        if isinstance(expr, UnaryExpr):
            return f"({expr.op}{self._unparse_expr(expr.operand)})"
        if isinstance(expr, BinaryExpr):
            left = self._unparse_expr(expr.left)
            right = self._unparse_expr(expr.right)
            return f"({left} {expr.op} {right})"
        raise InternalError(f"unexpected expression node: {type(expr).__name__}")

    # ── Helpers ────────────────────────────────────────────────

    def _use(self, ident: Identifier) -> str:
        if self.annotate and ident.symbol is not None:
            return f"{ident.name}({ident.symbol})"
        return ident.name

    def _indented(self, text: str) -> str:
        prefix = " " * self.indent
        return "\n".join(prefix + line if line else line for line in text.splitlines())


def unparse(program: Program, *, annotate: bool = True, indent: int = 4) -> str:
    """Convenience wrapper around ``Unparser(...).unparse(program)``."""
    return Unparser(annotate=annotate, indent=indent).unparse(program)
