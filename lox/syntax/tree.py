"""Abstract syntax tree for Lox. Expr and Stmt are closed sets of variants: every node kind is a frozen dataclass
subclassing one of the two bases, and consumers (see runtime/interpreter.py, syntax/printer.py) dispatch on the node's
class. Adding a node kind means adding a variant here and an entry in each consumer's dispatch table.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from lox.syntax.tokens import Token


class Expr:
    """Superclass of all expression nodes."""


@dataclass(frozen=True)
class Literal(Expr):
    value: object


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    """Short-circuiting "and"/"or". Kept apart from Binary because the right operand is evaluated lazily."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr


class Stmt:
    """Superclass of all statement nodes."""


@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr] = None


@dataclass(frozen=True)
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    body: Stmt
