"""Name analysis for the egg language.

Walks a parsed Program once, depth first, maintaining a SymbolTable of
nested lexical scopes. Every declaration is entered into the innermost
scope, every use of a name is resolved against the enclosing scopes, and
field-access chains are followed through the private field tables of
struct definitions.

User errors are collected in ``NameAnalyzer.diagnostics`` and analysis
continues past them. Violations of the analyzer's own invariants raise
``InternalError`` and are never caught here.
"""

from __future__ import annotations

from egg.ast_nodes import (
    AssignExpr,
    AssignStmt,
    BinaryExpr,
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
    UnaryExpr,
    VarDecl,
    VoidType,
    WhileStmt,
    WriteStmt,
)
from egg.errors import Diagnostic, InternalError, Severity, make_diagnostic
from egg.source import Span
from egg.symbols import (
    FunctionSymbol,
    StructDefinitionSymbol,
    StructInstanceSymbol,
    Symbol,
    SymbolTable,
    VariableSymbol,
)

MULTIPLY_DECLARED = "multiply declared identifier"
UNDECLARED = "undeclared identifier"
VOID_VARIABLE = "non-function declared void"
BAD_STRUCT_TYPE = "invalid name of struct type"
DOT_ACCESS_NON_STRUCT = "dot-access of non-struct type"
BAD_FIELD_NAME = "invalid struct field name"

_CODES = {
    MULTIPLY_DECLARED: "E301",
    UNDECLARED: "E302",
    VOID_VARIABLE: "E303",
    BAD_STRUCT_TYPE: "E304",
    DOT_ACCESS_NON_STRUCT: "E305",
    BAD_FIELD_NAME: "E306",
}


class NameAnalyzer:
    """Resolves every name in a Program and reports scoping errors."""

    def __init__(self) -> None:
        self.table = SymbolTable()
        self.diagnostics: list[Diagnostic] = []

    # ── Public API ──────────────────────────────────────────────

    def analyze(self, program: Program) -> list[Diagnostic]:
        """Analyze a whole program. Raises nothing for user errors."""
        self._analyze_decls(program.declarations, self.table)
        return self.diagnostics

    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    # ── Diagnostic sink ─────────────────────────────────────────

    def _fatal(self, message: str, span: Span) -> None:
        self.diagnostics.append(
            make_diagnostic(Severity.ERROR, _CODES[message], message, span)
        )

    # ── Declarations ────────────────────────────────────────────

    def _analyze_decls(
        self,
        decls: list[Declaration],
        table: SymbolTable,
        global_table: SymbolTable | None = None,
    ) -> None:
        if global_table is None:
            global_table = table
        for decl in decls:
            match decl:
                case VarDecl():
                    self._analyze_var_decl(decl, table, global_table)
                case FnDecl():
                    self._analyze_fn_decl(decl, table)
                case StructDecl():
                    self._analyze_struct_decl(decl, table)
                case Param():
                    self._analyze_param(decl, table)
                case _:
                    raise InternalError(f"unexpected declaration node: {type(decl).__name__}")

    def _analyze_var_decl(
        self, vd: VarDecl, table: SymbolTable, global_table: SymbolTable
    ) -> Symbol | None:
        """Declare a variable or struct field.

        ``global_table`` resolves the struct type of a struct-typed
        declaration. For fields it is the table enclosing the struct being
        built, so a struct can never name itself as a field type.
        """
        bad = False

        if isinstance(vd.type_node, VoidType):
            self._fatal(VOID_VARIABLE, vd.name.span)
            bad = True

        definition: StructDefinitionSymbol | None = None
        if isinstance(vd.type_node, StructType):
            type_id = vd.type_node.name
            found = global_table.lookup_global(type_id.name)
            if isinstance(found, StructDefinitionSymbol):
                type_id.bind(found)
                definition = found
            else:
                self._fatal(BAD_STRUCT_TYPE, type_id.span)
                bad = True

        if table.lookup_local(vd.name.name) is not None:
            self._fatal(MULTIPLY_DECLARED, vd.name.span)
            bad = True

        if bad:
            return None

        sym: Symbol
        if definition is not None:
            sym = StructInstanceSymbol(vd.type_node.name)
        else:
            sym = VariableSymbol(str(vd.type_node))
        table.add_declaration(vd.name.name, sym)
        vd.name.bind(sym)
        return sym

    def _analyze_param(self, param: Param, table: SymbolTable) -> Symbol | None:
        bad = False
        if isinstance(param.type_node, VoidType):
            self._fatal(VOID_VARIABLE, param.name.span)
            bad = True
        if table.lookup_local(param.name.name) is not None:
            self._fatal(MULTIPLY_DECLARED, param.name.span)
            bad = True
        if bad:
            return None

        sym = VariableSymbol(str(param.type_node))
        table.add_declaration(param.name.name, sym)
        param.name.bind(sym)
        return sym

    def _analyze_fn_decl(self, fd: FnDecl, table: SymbolTable) -> None:
        fn_sym: FunctionSymbol | None = None
        if table.lookup_local(fd.name.name) is not None:
            self._fatal(MULTIPLY_DECLARED, fd.name.span)
        else:
            fn_sym = FunctionSymbol(str(fd.return_type))
            # Declared before the body so recursive calls resolve.
            table.add_declaration(fd.name.name, fn_sym)
            fd.name.bind(fn_sym)

        # Parameters and locals share one scope.
        table.push_scope()
        param_types: list[str] = []
        for param in fd.params:
            sym = self._analyze_param(param, table)
            if sym is not None:
                param_types.append(sym.type_name)
        if fn_sym is not None:
            fn_sym.add_params(param_types)
        self._analyze_body(fd.body, table)
        table.pop_scope()

    def _analyze_body(self, body: FnBody, table: SymbolTable) -> None:
        self._analyze_decls(body.declarations, table)
        self._analyze_stmts(body.statements, table)

    def _analyze_struct_decl(self, sd: StructDecl, table: SymbolTable) -> None:
        duplicate = table.lookup_local(sd.name.name) is not None
        if duplicate:
            self._fatal(MULTIPLY_DECLARED, sd.name.span)

        fields = SymbolTable()
        self._analyze_decls(sd.fields, fields, table)

        if not duplicate:
            sym = StructDefinitionSymbol(fields)
            table.add_declaration(sd.name.name, sym)
            sd.name.bind(sym)

    # ── Statements ──────────────────────────────────────────────

    def _analyze_stmts(self, stmts: list[Stmt], table: SymbolTable) -> None:
        for stmt in stmts:
            self._analyze_stmt(stmt, table)

    def _analyze_block(
        self, decls: list[VarDecl], stmts: list[Stmt], table: SymbolTable
    ) -> None:
        table.push_scope()
        self._analyze_decls(decls, table)
        self._analyze_stmts(stmts, table)
        table.pop_scope()

    def _analyze_stmt(self, stmt: Stmt, table: SymbolTable) -> None:
        match stmt:
            case AssignStmt(assign=assign):
                self._analyze_expr(assign, table)
            case PostIncStmt(target=target) | PostDecStmt(target=target) | ReadStmt(target=target):
                self._analyze_expr(target, table)
            case WriteStmt(value=value):
                self._analyze_expr(value, table)
            case IfStmt() | WhileStmt() | RepeatStmt():
                self._analyze_expr(stmt.condition, table)
                self._analyze_block(stmt.declarations, stmt.statements, table)
            case IfElseStmt():
                self._analyze_expr(stmt.condition, table)
                self._analyze_block(stmt.then_declarations, stmt.then_statements, table)
                self._analyze_block(stmt.else_declarations, stmt.else_statements, table)
            case CallStmt(call=call):
                self._analyze_expr(call, table)
            case ReturnStmt(value=value):
                if value is not None:
                    self._analyze_expr(value, table)
            case _:
                raise InternalError(f"unexpected statement node: {type(stmt).__name__}")

    # ── Expressions ─────────────────────────────────────────────

    def _analyze_expr(self, expr: Expr, table: SymbolTable) -> None:
        match expr:
            case IntLit() | StringLit() | TrueLit() | FalseLit():
                pass
            case Identifier():
                self._resolve_identifier(expr, table)
            case FieldAccess():
                self._analyze_field_access(expr, table)
            case AssignExpr(target=target, value=value):
                self._analyze_expr(target, table)
                self._analyze_expr(value, table)
            case CallExpr(callee=callee, args=args):
                self._resolve_identifier(callee, table)
                for arg in args:
                    self._analyze_expr(arg, table)
            case UnaryExpr(operand=operand):
                self._analyze_expr(operand, table)
            case BinaryExpr(left=left, right=right):
                self._analyze_expr(left, table)
                self._analyze_expr(right, table)
            case _:
                raise InternalError(f"unexpected expression node: {type(expr).__name__}")

    def _resolve_identifier(self, ident: Identifier, table: SymbolTable) -> None:
        sym = table.lookup_global(ident.name)
        if sym is None:
            self._fatal(UNDECLARED, ident.span)
            return
        ident.bind(sym)

    def _analyze_field_access(self, fa: FieldAccess, table: SymbolTable) -> None:
        """Resolve ``loc.field`` through the struct type that ``loc`` denotes.

        The prefix is analyzed first, then its shape decides which field
        table to search. A prefix that already failed marks this node
        errored without a further diagnostic.
        """
        self._analyze_expr(fa.loc, table)

        fields = self._field_table_of(fa)
        if fields is None:
            fa.mark_errored()
            return

        found = fields.lookup_global(fa.field.name)
        if found is None:
            self._fatal(BAD_FIELD_NAME, fa.field.span)
            fa.mark_errored()
            return

        fa.field.bind(found)
        if isinstance(found, StructInstanceSymbol):
            fa.bind(found.definition)

    def _field_table_of(self, fa: FieldAccess) -> SymbolTable | None:
        """Return the field table ``fa.loc`` navigates into, or None on error."""
        loc = fa.loc
        match loc:
            case Identifier():
                sym = loc.symbol
                if sym is None:
                    return None
                if not isinstance(sym, StructInstanceSymbol):
                    self._fatal(DOT_ACCESS_NON_STRUCT, loc.span)
                    return None
                return sym.definition.fields
            case FieldAccess():
                if loc.errored:
                    return None
                if loc.symbol is None:
                    self._fatal(DOT_ACCESS_NON_STRUCT, loc.field.span)
                    return None
                return loc.symbol.fields
            case _:
                raise InternalError(f"unexpected field access prefix: {type(loc).__name__}")


def analyze_program(program: Program) -> list[Diagnostic]:
    """Run name analysis over ``program`` with a fresh one-scope table."""
    return NameAnalyzer().analyze(program)
