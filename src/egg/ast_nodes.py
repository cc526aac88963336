"""AST node definitions for the egg language.

Nodes are immutable once the parser builds them. The exceptions are
``Identifier`` and ``FieldAccess``, which each carry a write-once cache of
the Symbol that name analysis resolved them to.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import TYPE_CHECKING, Union

from egg.errors import InternalError
from egg.source import Span

if TYPE_CHECKING:
    from egg.symbols import StructDefinitionSymbol, Symbol

# Size marker for variable declarations that are not struct-typed.
NOT_STRUCT = -1


# ── Identifiers ──────────────────────────────────────────────────


@dataclass(eq=False)
class Identifier:
    name: str
    span: Span
    _symbol: Symbol | None = field(default=None, init=False, repr=False)

    @property
    def symbol(self) -> Symbol | None:
        return self._symbol

    def bind(self, symbol: Symbol) -> None:
        """Cache the resolved symbol. May be called at most once."""
        if self._symbol is not None:
            raise InternalError(f"identifier '{self.name}' at {self.span} is already bound")
        self._symbol = symbol


# ── Types ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IntType:
    span: Span

    def __str__(self) -> str:
        return "int"


@dataclass(frozen=True)
class BoolType:
    span: Span

    def __str__(self) -> str:
        return "bool"


@dataclass(frozen=True)
class VoidType:
    span: Span

    def __str__(self) -> str:
        return "void"


@dataclass(frozen=True)
class StructType:
    name: Identifier
    span: Span

    def __str__(self) -> str:
        return self.name.name


TypeNode = Union[IntType, BoolType, VoidType, StructType]


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class IntLit:
    value: int
    span: Span


@dataclass(frozen=True)
class StringLit:
    value: str  # raw text, quotes and escapes included
    span: Span


@dataclass(frozen=True)
class TrueLit:
    span: Span


@dataclass(frozen=True)
class FalseLit:
    span: Span


@dataclass(eq=False)
class FieldAccess:
    """``loc.field``; ``loc`` is an Identifier or another FieldAccess."""

    loc: Expr
    field: Identifier
    span: Span
    _symbol: StructDefinitionSymbol | None = field(default=None, init=False, repr=False)
    _errored: bool = field(default=False, init=False, repr=False)

    @property
    def symbol(self) -> StructDefinitionSymbol | None:
        """The struct definition of the accessed field, if it is struct-typed."""
        return self._symbol

    @property
    def errored(self) -> bool:
        return self._errored

    def bind(self, symbol: StructDefinitionSymbol) -> None:
        if self._symbol is not None:
            raise InternalError(f"field access at {self.span} is already bound")
        self._symbol = symbol

    def mark_errored(self) -> None:
        self._errored = True


@dataclass(frozen=True)
class AssignExpr:
    target: Expr
    value: Expr
    span: Span


@dataclass(frozen=True)
class CallExpr:
    callee: Identifier
    args: list[Expr]
    span: Span


@dataclass(frozen=True)
class UnaryExpr:
    op: str  # "-" or "!"
    operand: Expr
    span: Span


@dataclass(frozen=True)
class BinaryExpr:
    left: Expr
    op: str
    right: Expr
    span: Span


Expr = Union[
    IntLit, StringLit, TrueLit, FalseLit,
    Identifier, FieldAccess, AssignExpr, CallExpr,
    UnaryExpr, BinaryExpr,
]

UNARY_OPS = frozenset({"-", "!"})
BINARY_OPS = frozenset({
    "+", "-", "*", "/", "&&", "||",
    "==", "!=", "<", ">", "<=", ">=",
})


# ── Declarations ─────────────────────────────────────────────────


@dataclass(frozen=True)
class VarDecl:
    type_node: TypeNode
    name: Identifier
    size: int
    span: Span


@dataclass(frozen=True)
class Param:
    type_node: TypeNode
    name: Identifier
    span: Span


@dataclass(frozen=True)
class FnBody:
    declarations: list[VarDecl]
    statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class FnDecl:
    return_type: TypeNode
    name: Identifier
    params: list[Param]
    body: FnBody
    span: Span


@dataclass(frozen=True)
class StructDecl:
    name: Identifier
    fields: list[VarDecl]
    span: Span


Declaration = Union[VarDecl, FnDecl, Param, StructDecl]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AssignStmt:
    assign: AssignExpr
    span: Span


@dataclass(frozen=True)
class PostIncStmt:
    target: Expr
    span: Span


@dataclass(frozen=True)
class PostDecStmt:
    target: Expr
    span: Span


@dataclass(frozen=True)
class ReadStmt:
    target: Expr
    span: Span


@dataclass(frozen=True)
class WriteStmt:
    value: Expr
    span: Span


@dataclass(frozen=True)
class IfStmt:
    condition: Expr
    declarations: list[VarDecl]
    statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class IfElseStmt:
    condition: Expr
    then_declarations: list[VarDecl]
    then_statements: list[Stmt]
    else_declarations: list[VarDecl]
    else_statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class WhileStmt:
    condition: Expr
    declarations: list[VarDecl]
    statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class RepeatStmt:
    condition: Expr
    declarations: list[VarDecl]
    statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class CallStmt:
    call: CallExpr
    span: Span


@dataclass(frozen=True)
class ReturnStmt:
    value: Expr | None
    span: Span


Stmt = Union[
    AssignStmt, PostIncStmt, PostDecStmt, ReadStmt, WriteStmt,
    IfStmt, IfElseStmt, WhileStmt, RepeatStmt, CallStmt, ReturnStmt,
]


# ── Program ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Program:
    declarations: list[Declaration]
    span: Span


def collect_identifiers(node: object) -> list[Identifier]:
    """Every Identifier reachable from ``node``, in source order."""
    found: list[Identifier] = []
    _walk(node, found)
    return found


def _walk(node: object, found: list[Identifier]) -> None:
    if isinstance(node, Identifier):
        found.append(node)
        return
    if isinstance(node, list):
        for item in node:
            _walk(item, found)
        return
    if not is_dataclass(node):
        return
    for f in fields(node):
        # Private fields hold analysis caches, not children.
        if f.name == "span" or f.name.startswith("_"):
            continue
        _walk(getattr(node, f.name), found)
