from __future__ import annotations
import itertools
from dataclasses import dataclass, field
from typing import List, Optional, Any

from .lexer import Token

_node_ids = itertools.count(1)


def _next_id() -> int:
    return next(_node_ids)


# ---------- Expressions ----------
@dataclass(frozen=True, eq=False)
class Expr:
    # Stable key for the resolver's side table.
    node_id: int = field(default_factory=_next_id, init=False, repr=False)


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: Any = None


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr = None


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token = None
    right: Expr = None


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr = None
    operator: Token = None
    right: Expr = None


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    left: Expr = None
    operator: Token = None
    right: Expr = None


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token = None


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token = None
    value: Expr = None


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr = None
    paren: Token = None
    arguments: List[Expr] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class Get(Expr):
    object: Expr = None
    name: Token = None


@dataclass(frozen=True, eq=False)
class Set(Expr):
    object: Expr = None
    name: Token = None
    value: Expr = None


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token = None


@dataclass(frozen=True, eq=False)
class Super(Expr):
    keyword: Token = None
    method: Token = None


# ---------- Statements ----------
class Stmt: ...


@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr = None


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr = None


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token = None
    initializer: Optional[Expr] = None


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: List[Stmt] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr = None
    then_branch: Stmt = None
    else_branch: Optional[Stmt] = None


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr = None
    body: Stmt = None


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token = None
    params: List[Token] = field(default_factory=list)
    body: List[Stmt] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token = None
    value: Optional[Expr] = None


@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token = None
    superclass: Optional[Variable] = None
    methods: List[Function] = field(default_factory=list)
