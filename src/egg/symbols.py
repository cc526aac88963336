"""Symbols and the scoped symbol table used by egg name analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Union

from egg.errors import InternalError

if TYPE_CHECKING:
    from egg.ast_nodes import Identifier


class SymbolTableError(InternalError):
    """Misuse of a SymbolTable by the analyzer."""


class EmptyScopeStackError(SymbolTableError):
    def __init__(self) -> None:
        super().__init__("symbol table has no scopes")


class DuplicateDeclarationError(SymbolTableError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"'{name}' is already declared in the current scope")


class SymbolKind(Enum):
    VARIABLE = auto()
    FUNCTION = auto()
    STRUCT_DEFINITION = auto()
    STRUCT_INSTANCE = auto()


@dataclass(frozen=True, eq=False)
class VariableSymbol:
    """A variable or parameter of primitive type."""

    type_name: str

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.VARIABLE

    def __str__(self) -> str:
        return self.type_name


@dataclass(eq=False)
class FunctionSymbol:
    """A function. Parameter types are filled in once, after the formals are walked."""

    return_type: str
    _param_types: tuple[str, ...] = field(default=(), init=False)
    _params_set: bool = field(default=False, init=False, repr=False)

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.FUNCTION

    @property
    def type_name(self) -> str:
        return "function"

    @property
    def param_types(self) -> tuple[str, ...]:
        return self._param_types

    def add_params(self, param_types: list[str]) -> None:
        if self._params_set:
            raise InternalError("function parameter types were already recorded")
        self._param_types = tuple(param_types)
        self._params_set = True

    def __str__(self) -> str:
        params = ", ".join(self._param_types) or "void"
        return f"{params} -> {self.return_type}"


@dataclass(frozen=True, eq=False)
class StructDefinitionSymbol:
    """A struct type. Owns the field table built while analyzing its body."""

    fields: SymbolTable

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.STRUCT_DEFINITION

    @property
    def type_name(self) -> str:
        return "struct"

    def __str__(self) -> str:
        return "struct"


@dataclass(frozen=True, eq=False)
class StructInstanceSymbol:
    """A variable of struct type.

    ``struct_type`` is the type-position identifier from the declaration;
    it was bound to the StructDefinitionSymbol when the variable was declared.
    """

    struct_type: Identifier

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.STRUCT_INSTANCE

    @property
    def type_name(self) -> str:
        return self.struct_type.name

    @property
    def definition(self) -> StructDefinitionSymbol:
        sym = self.struct_type.symbol
        if not isinstance(sym, StructDefinitionSymbol):
            raise InternalError(
                f"struct type '{self.struct_type.name}' of an instance is unresolved"
            )
        return sym

    def __str__(self) -> str:
        return self.type_name


Symbol = Union[VariableSymbol, FunctionSymbol, StructDefinitionSymbol, StructInstanceSymbol]


class SymbolTable:
    """A stack of scopes mapping names to symbols.

    A new table starts with exactly one scope. Declarations always go into
    the innermost scope; ``lookup_global`` searches from the innermost scope
    outward so inner declarations shadow outer ones.
    """

    def __init__(self) -> None:
        self._scopes: list[dict[str, Symbol]] = [{}]

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def add_declaration(self, name: str, symbol: Symbol) -> None:
        if not self._scopes:
            raise EmptyScopeStackError()
        current = self._scopes[-1]
        if name in current:
            raise DuplicateDeclarationError(name)
        current[name] = symbol

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        if not self._scopes:
            raise EmptyScopeStackError()
        self._scopes.pop()

    def lookup_local(self, name: str) -> Symbol | None:
        """Look up a name in the innermost scope only."""
        if not self._scopes:
            raise EmptyScopeStackError()
        return self._scopes[-1].get(name)

    def lookup_global(self, name: str) -> Symbol | None:
        """Look up a name in every scope, innermost first."""
        if not self._scopes:
            raise EmptyScopeStackError()
        for scope in reversed(self._scopes):
            sym = scope.get(name)
            if sym is not None:
                return sym
        return None
